"""Per-option token cost of the rendered output."""

from __future__ import annotations

from typing import Iterable, Sequence

from scn_analyzer.formatter import format_project
from scn_analyzer.models import SourceFile
from scn_analyzer.tokens import count_tokens
from scn_options.catalog import ALL_OPTION_KEYS
from scn_options.models import OptionState
from scn_options.state import is_selected, set_one


def cost_impact(
    source_files: Sequence[SourceFile],
    options: OptionState,
    keys: Iterable[str] = ALL_OPTION_KEYS,
) -> dict[str, int]:
    """Tokens each option accounts for under the current options.

    The value for a key is ``tokens(current) - tokens(current with the key
    flipped)``: positive for an enabled option that adds output, negative for
    a disabled option whose absence saves output. Pure; safe to call
    repeatedly.
    """
    baseline = count_tokens(format_project(source_files, options))
    table: dict[str, int] = {}
    for key in keys:
        flipped = set_one(options, key, not is_selected(options, key))
        table[key] = baseline - count_tokens(format_project(source_files, flipped))
    return table

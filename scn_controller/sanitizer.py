"""Make analyzer output safe to send across the process boundary."""

from __future__ import annotations

import dataclasses
import pickle
from typing import Any, Iterable

from scn_analyzer.models import LanguageHandle, SourceFile

NON_TRANSFERABLE_LANGUAGE_FIELDS = ("parser", "loaded_language")


def sanitize_language(language: LanguageHandle | None) -> LanguageHandle | None:
    """Shallow copy of a language handle with its runtime objects removed.

    The handle passed in is the analyzer's shared singleton; it is copied and
    never modified.
    """
    if language is None:
        return None
    return dataclasses.replace(
        language, **{name: None for name in NON_TRANSFERABLE_LANGUAGE_FIELDS}
    )


def sanitize_source_file(source: SourceFile) -> SourceFile:
    return dataclasses.replace(
        source,
        ast=None,
        language=sanitize_language(source.language),
        symbols=list(source.symbols),
        imports=list(source.imports),
        outgoing=list(source.outgoing),
        incoming=list(source.incoming),
    )


def sanitize_result(source_files: Iterable[SourceFile]) -> list[SourceFile]:
    """Return transferable copies: no parse tree, stripped language handle."""
    return [sanitize_source_file(source) for source in source_files]


def is_transferable(value: Any) -> bool:
    try:
        pickle.dumps(value)
    except Exception:
        return False
    return True

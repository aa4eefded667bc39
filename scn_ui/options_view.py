"""Rich rendering of the options panel rows."""

from __future__ import annotations

from typing import Sequence

from rich.text import Text
from rich.tree import Tree

from scn_options.impact import format_impact
from scn_options.viewmodel import OptionRow


def checkbox(row: OptionRow) -> str:
    if row.indeterminate:
        return "[-]"
    return "[x]" if row.checked else "[ ]"


def row_text(row: OptionRow) -> Text:
    text = Text()
    text.append(checkbox(row) + " ", style="cyan" if row.checked else "dim")
    text.append(row.label, style="bold" if row.is_group else "")
    impact = format_impact(row.impact)
    if impact:
        value = row.impact or 0
        text.append(f"  {impact}", style="green" if value > 0 else "red" if value < 0 else "dim")
    return text


def build_options_tree(rows: Sequence[OptionRow], title: str = "Output Options") -> Tree:
    """Nest flat view-model rows back into a rich Tree by depth."""
    root = Tree(Text(title, style="bold"))
    stack: list[Tree] = [root]
    for row in rows:
        del stack[row.depth + 1:]
        node = stack[-1].add(row_text(row))
        if row.is_group:
            stack.append(node)
    return root

"""Plain-text rendering of an analysis result under a set of options."""

from __future__ import annotations

from typing import Sequence

from scn_analyzer.models import CodeSymbol, SourceFile
from scn_options.models import OptionState

KIND_ICONS: dict[str, str] = {
    "class": "◇",
    "interface": "{}",
    "function": "~",
    "method": "~",
    "constructor": "~",
    "variable": "@",
    "property": "@",
    "enum": "☰",
    "enum_member": "@",
    "type_alias": "=:",
    "module": "◎",
    "react_component": "◇",
    "styled_component": "~",
    "jsx_element": "⛶",
    "css_class": "¶",
    "css_id": "¶",
    "css_tag": "¶",
    "css_at_rule": "¶",
    "css_variable": "¶",
    "go_package": "◎",
    "rust_struct": "◇",
    "rust_trait": "{}",
    "rust_impl": "+",
}

_CALLABLE_KINDS = frozenset({"function", "method", "constructor", "react_component"})


def is_symbol_visible(symbol: CodeSymbol, options: OptionState) -> bool:
    if options.flag("showOnlyExports") and not symbol.is_exported:
        return False
    return options.filter_visible(symbol.kind)


def symbol_stats(source_files: Sequence[SourceFile], options: OptionState) -> tuple[int, int]:
    """Return (total, visible) symbol counts."""
    total = 0
    visible = 0
    for source in source_files:
        for symbol in source.symbols:
            total += 1
            if is_symbol_visible(symbol, options):
                visible += 1
    return total, visible


def _file_ref(target: SourceFile, options: OptionState) -> str:
    return f"({target.id})" if options.flag("showFileIds") else target.path


def _file_line(source: SourceFile, by_id: dict[int, SourceFile], options: OptionState) -> str:
    parts: list[str] = []
    if options.flag("showFilePrefix"):
        parts.append("§")
    if options.flag("showFileIds"):
        parts.append(f"({source.id})")
    parts.append(source.path)
    if options.flag("showOutgoing") and source.outgoing:
        refs = ", ".join(_file_ref(by_id[i], options) for i in source.outgoing if i in by_id)
        parts.append(f"-> {refs}")
    if options.flag("showIncoming") and source.incoming:
        refs = ", ".join(_file_ref(by_id[i], options) for i in source.incoming if i in by_id)
        parts.append(f"<- {refs}")
    return " ".join(parts)


def _symbol_line(symbol: CodeSymbol, options: OptionState, indent: int, qualified: bool) -> str:
    parts: list[str] = []
    if options.flag("showExportedIndicator") and symbol.is_exported:
        parts.append("+")
    elif options.flag("showPrivateIndicator") and symbol.is_private:
        parts.append("-")
    if options.flag("showIcons"):
        parts.append(KIND_ICONS.get(symbol.kind, "?"))
    if options.flag("showSymbolIds"):
        parts.append(f"({symbol.id})")
    if options.flag("showModifiers") and symbol.modifiers:
        parts.append(" ".join(symbol.modifiers))
    name = symbol.name
    if qualified and symbol.parent:
        name = f"{symbol.parent}.{name}"
    if symbol.kind in _CALLABLE_KINDS:
        name += "()"
    parts.append(name)
    if options.flag("showTags") and symbol.tags:
        parts.append(f"[{', '.join(symbol.tags)}]")
    return " " * indent + " ".join(parts)


def _render_symbols(source: SourceFile, options: OptionState) -> list[str]:
    visible = [s for s in source.symbols if is_symbol_visible(s, options)]
    if not options.flag("groupMembers"):
        return [_symbol_line(s, options, 2, qualified=True) for s in visible]

    visible_parents = {s.name for s in visible if s.parent is None}
    lines: list[str] = []
    for symbol in visible:
        if symbol.parent is None:
            lines.append(_symbol_line(symbol, options, 2, qualified=False))
            for member in visible:
                if member.parent == symbol.name:
                    lines.append(_symbol_line(member, options, 4, qualified=False))
        elif symbol.parent not in visible_parents:
            lines.append(_symbol_line(symbol, options, 2, qualified=True))
    return lines


def format_project(source_files: Sequence[SourceFile], options: OptionState) -> str:
    """Render every file with its visible symbols, one file block per file."""
    by_id = {source.id: source for source in source_files}
    blocks: list[str] = []
    for source in sorted(source_files, key=lambda s: s.id):
        lines = [_file_line(source, by_id, options)]
        lines.extend(_render_symbols(source, options))
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)

"""Default option forest and labels for the rendered output."""

from __future__ import annotations

from scn_options.tree import OptionGroup, forest_keys, group, is_filter_key, to_filter_key

SYMBOL_KIND_LABELS: dict[str, str] = {
    # TS/JS
    "class": "Classes",
    "interface": "Interfaces",
    "function": "Functions",
    "method": "Methods",
    "constructor": "Constructors",
    "variable": "Variables",
    "property": "Properties",
    "enum": "Enums",
    "enum_member": "Enum Members",
    "type_alias": "Type Aliases",
    "module": "Modules",
    # React
    "react_component": "React Components",
    "styled_component": "Styled Components",
    "jsx_element": "JSX Elements",
    # CSS
    "css_class": "CSS Classes",
    "css_id": "CSS IDs",
    "css_tag": "CSS Tags",
    "css_at_rule": "CSS At-Rules",
    "css_variable": "CSS Variables",
    # Go
    "go_package": "Go Packages",
    # Rust
    "rust_struct": "Rust Structs",
    "rust_trait": "Rust Traits",
    "rust_impl": "Rust Impls",
}

TS_DECLARATION_KINDS = ("class", "interface", "function", "variable", "enum", "type_alias", "module")
TS_MEMBER_KINDS = ("method", "constructor", "property", "enum_member")
REACT_KINDS = ("react_component", "styled_component", "jsx_element")
CSS_KINDS = ("css_class", "css_id", "css_tag", "css_at_rule", "css_variable")
GO_KINDS = ("go_package",)
RUST_KINDS = ("rust_struct", "rust_trait", "rust_impl")


def _filters(kinds: tuple[str, ...]) -> list[str]:
    return [to_filter_key(kind) for kind in kinds]


SYMBOL_VISIBILITY = group(
    "Symbol Visibility",
    group(
        "TypeScript/JavaScript",
        group("Declarations", *_filters(TS_DECLARATION_KINDS)),
        group("Members", *_filters(TS_MEMBER_KINDS)),
    ),
    group("React", *_filters(REACT_KINDS)),
    group("CSS", *_filters(CSS_KINDS)),
    group(
        "Other Languages",
        group("Go", *_filters(GO_KINDS)),
        group("Rust", *_filters(RUST_KINDS)),
    ),
)

OPTION_TREE: tuple[OptionGroup, ...] = (
    group(
        "Display Elements",
        "showIcons",
        group("Indicators", "showExportedIndicator", "showPrivateIndicator"),
        "showModifiers",
        "showTags",
        group("Identifiers", "showFilePrefix", "showFileIds", "showSymbolIds"),
    ),
    group("Relationships", "showOutgoing", "showIncoming"),
    group("Structure", "groupMembers", "showOnlyExports"),
    SYMBOL_VISIBILITY,
)

OPTION_LABELS: dict[str, str] = {
    **SYMBOL_KIND_LABELS,
    "showIcons": "Icons",
    "showExportedIndicator": "Exported (+)",
    "showPrivateIndicator": "Private (-)",
    "showModifiers": "Modifiers",
    "showTags": "Tags",
    "showSymbolIds": "Symbol IDs",
    "showFilePrefix": "File Prefix (§)",
    "showFileIds": "File IDs",
    "showOutgoing": "Outgoing",
    "showIncoming": "Incoming",
    "groupMembers": "Group Members",
    "showOnlyExports": "Show Only Exports",
}

DEFAULT_EXPANDED_GROUPS = frozenset(
    {
        "Display Elements",
        "Indicators",
        "Relationships",
        "Structure",
        "TypeScript/JavaScript",
        "React",
        "Identifiers",
    }
)

ALL_OPTION_KEYS: tuple[str, ...] = tuple(forest_keys(OPTION_TREE))
FLAG_KEYS: tuple[str, ...] = tuple(k for k in ALL_OPTION_KEYS if not is_filter_key(k))
FILTER_KEYS: tuple[str, ...] = tuple(k for k in ALL_OPTION_KEYS if is_filter_key(k))

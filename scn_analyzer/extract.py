"""Symbol and import extraction from tree-sitter syntax trees.

Declarations are read from the top level of each file; members are read from
class, interface, enum, trait and impl bodies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from scn_analyzer.models import CodeSymbol

Node = Any

_JSX_NODES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})
_JSX_TAG_NODES = frozenset({"jsx_opening_element", "jsx_self_closing_element"})
_FUNCTION_VALUES = frozenset({"arrow_function", "function_expression", "function"})
_CALLABLE_MEMBERS = frozenset({"method_definition", "method_signature", "abstract_method_signature"})
_FIELD_MEMBERS = frozenset({"public_field_definition", "field_definition", "property_signature"})
_MODIFIER_TOKENS = frozenset({"static", "readonly", "async", "abstract", "declare"})


@dataclass
class _Draft:
    name: str
    kind: str
    line: int
    is_exported: bool = False
    modifiers: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    parent: Optional[str] = None


@dataclass
class _Scan:
    drafts: list[_Draft] = field(default_factory=list)

    def add(self, draft: _Draft) -> None:
        if any(d.name == draft.name and d.kind == draft.kind and d.parent == draft.parent for d in self.drafts):
            return
        self.drafts.append(draft)


def _text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8")


def _line(node: Node) -> int:
    return node.start_point[0] + 1


def _walk(node: Optional[Node]) -> Iterator[Node]:
    """Pre-order traversal, so nodes come out in source order."""
    if node is None:
        return
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _has_token(node: Node, *types: str) -> bool:
    return any(child.type in types for child in node.children)


def _first_named(node: Node, *types: str) -> Optional[Node]:
    return next((child for child in node.named_children if child.type in types), None)


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] in "'\"`" and text[-1] == text[0]:
        return text[1:-1]
    return text


def _contains_jsx(node: Optional[Node]) -> bool:
    return any(n.type in _JSX_NODES for n in _walk(node))


def _is_styled(value: Optional[Node]) -> bool:
    if value is None or value.type != "call_expression":
        return False
    node = value
    while node is not None and node.type in ("call_expression", "member_expression"):
        if node.type == "call_expression":
            node = node.child_by_field_name("function")
        else:
            node = node.child_by_field_name("object")
    return node is not None and node.type == "identifier" and _text(node) == "styled"


# TypeScript / JavaScript


def _extract_ts(root: Node, jsx: bool) -> list[_Draft]:
    scan = _Scan()
    exported_names: set[str] = set()
    for statement in root.named_children:
        _ts_statement(statement, jsx, scan, exported_names)

    for draft in scan.drafts:
        if draft.parent is None and draft.name in exported_names:
            draft.is_exported = True

    if jsx:
        for node in _walk(root):
            if node.type not in _JSX_TAG_NODES:
                continue
            tag = _text(node.child_by_field_name("name"))
            if tag[:1].isupper():
                scan.add(_Draft(name=f"<{tag}>", kind="jsx_element", line=_line(node)))
    return scan.drafts


def _ts_statement(node: Node, jsx: bool, scan: _Scan, exported_names: set[str]) -> None:
    if node.type == "export_statement":
        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            _ts_declaration(declaration, jsx, scan, exported=True, default=_has_token(node, "default"))
            return
        value = node.child_by_field_name("value")
        if value is not None and value.type == "identifier":
            exported_names.add(_text(value))
        for clause in node.named_children:
            if clause.type != "export_clause":
                continue
            for specifier in clause.named_children:
                if specifier.type == "export_specifier":
                    exported_names.add(_text(specifier.child_by_field_name("name")))
        return
    if node.type == "expression_statement":
        for child in node.named_children:
            if child.type in ("internal_module", "module"):
                _ts_declaration(child, jsx, scan)
        return
    _ts_declaration(node, jsx, scan)


def _ts_declaration(
    node: Node,
    jsx: bool,
    scan: _Scan,
    exported: bool = False,
    default: bool = False,
) -> None:
    kind = node.type
    default_tags = ("default",) if default else ()

    if kind == "ambient_declaration":
        for child in node.named_children:
            _ts_declaration(child, jsx, scan, exported)
        return

    if kind in ("lexical_declaration", "variable_declaration"):
        _ts_variables(node, jsx, scan, exported)
        return

    name_node = node.child_by_field_name("name")
    if name_node is None:
        return
    name = _text(name_node)
    line = _line(node)

    if kind in ("class_declaration", "abstract_class_declaration", "class"):
        modifiers = ("abstract",) if kind == "abstract_class_declaration" else ()
        draft = _Draft(name, "class", line, exported, modifiers=modifiers, tags=default_tags)
        scan.add(draft)
        _ts_members(node.child_by_field_name("body"), draft, scan)
    elif kind == "interface_declaration":
        draft = _Draft(name, "interface", line, exported, tags=default_tags)
        scan.add(draft)
        _ts_members(node.child_by_field_name("body"), draft, scan)
    elif kind == "enum_declaration":
        tags = ("const",) if _has_token(node, "const") else ()
        scan.add(_Draft(name, "enum", line, exported, tags=tags))
        body = node.child_by_field_name("body")
        for member in body.named_children if body is not None else ():
            if member.type == "enum_assignment":
                member_name = _text(member.child_by_field_name("name"))
            elif member.type in ("property_identifier", "string"):
                member_name = _unquote(_text(member))
            else:
                continue
            scan.add(_Draft(member_name, "enum_member", _line(member), exported, parent=name))
    elif kind == "type_alias_declaration":
        scan.add(_Draft(name, "type_alias", line, exported))
    elif kind in ("internal_module", "module"):
        scan.add(_Draft(name, "module", line, exported))
    elif kind in ("function_declaration", "generator_function_declaration", "function_signature"):
        symbol_kind = "function"
        if jsx and name[:1].isupper() and _contains_jsx(node.child_by_field_name("body")):
            symbol_kind = "react_component"
        tags = default_tags + (("generator",) if kind == "generator_function_declaration" else ())
        modifiers = ("async",) if _has_token(node, "async") else ()
        scan.add(_Draft(name, symbol_kind, line, exported, modifiers=modifiers, tags=tags))


def _ts_variables(node: Node, jsx: bool, scan: _Scan, exported: bool) -> None:
    keyword = next((c.type for c in node.children if c.type in ("const", "let", "var")), "var")
    for declarator in node.named_children:
        if declarator.type != "variable_declarator":
            continue
        name_node = declarator.child_by_field_name("name")
        if name_node is None or name_node.type != "identifier":
            continue
        name = _text(name_node)
        value = declarator.child_by_field_name("value")
        if _is_styled(value):
            scan.add(_Draft(name, "styled_component", _line(node), exported))
            continue
        kind = "variable"
        if jsx and name[:1].isupper() and value is not None and value.type in _FUNCTION_VALUES and _contains_jsx(value):
            kind = "react_component"
        scan.add(_Draft(name, kind, _line(node), exported, tags=(keyword,)))


def _member_modifiers(member: Node) -> tuple[str, ...]:
    modifiers: list[str] = []
    for child in member.children:
        if child.type == "accessibility_modifier":
            modifiers.append(_text(child))
        elif child.type == "override_modifier":
            modifiers.append("override")
        elif child.type in _MODIFIER_TOKENS:
            modifiers.append(child.type)
    return tuple(modifiers)


def _ts_members(body: Optional[Node], container: _Draft, scan: _Scan) -> None:
    if body is None:
        return
    for member in body.named_children:
        if member.type in _CALLABLE_MEMBERS:
            is_callable = True
        elif member.type in _FIELD_MEMBERS:
            is_callable = False
        else:
            continue
        name_node = member.child_by_field_name("name") or member.child_by_field_name("property")
        if name_node is None:
            continue
        name = _text(name_node)
        modifiers = _member_modifiers(member)
        if is_callable and name == "constructor":
            kind = "constructor"
        elif is_callable:
            kind = "method"
        else:
            kind = "property"
        is_private = "private" in modifiers or name.startswith("#")
        scan.add(
            _Draft(
                name,
                kind,
                _line(member),
                container.is_exported and not is_private,
                modifiers=modifiers,
                tags=("optional",) if _has_token(member, "?") else (),
                parent=container.name,
            )
        )


# CSS


def _extract_css(root: Node) -> list[_Draft]:
    scan = _Scan()
    _css_block(root, scan)
    return scan.drafts


def _css_block(node: Node, scan: _Scan) -> None:
    for child in node.named_children:
        kind = child.type
        if kind == "rule_set":
            _css_selectors(_first_named(child, "selectors"), scan)
            block = _first_named(child, "block")
            if block is not None:
                _css_block(block, scan)
        elif kind == "declaration":
            prop = _text(_first_named(child, "property_name"))
            if prop.startswith("--"):
                scan.add(_Draft(prop, "css_variable", _line(child), True))
        elif kind == "at_rule" or kind.endswith("_statement"):
            keyword = _text(child.children[0]) if child.children else ""
            if keyword.startswith("@"):
                scan.add(_Draft(keyword, "css_at_rule", _line(child), True))
            _css_block(child, scan)
        elif kind == "block":
            _css_block(child, scan)


def _css_selectors(selectors: Optional[Node], scan: _Scan) -> None:
    for node in _walk(selectors):
        if node.type == "tag_name":
            scan.add(_Draft(_text(node), "css_tag", _line(node), True))
        elif node.type == "class_selector":
            class_name = _first_named(node, "class_name")
            if class_name is not None:
                scan.add(_Draft(f".{_text(class_name)}", "css_class", _line(node), True))
        elif node.type == "id_selector":
            ident = _first_named(node, "id_name")
            if ident is not None:
                scan.add(_Draft(f"#{_text(ident)}", "css_id", _line(node), True))


# Go


def _extract_go(root: Node) -> list[_Draft]:
    scan = _Scan()
    for child in root.named_children:
        kind = child.type
        if kind == "package_clause":
            package = _first_named(child, "package_identifier")
            if package is not None:
                scan.add(_Draft(_text(package), "go_package", _line(child), True))
        elif kind in ("function_declaration", "method_declaration"):
            name = _text(child.child_by_field_name("name"))
            symbol_kind = "method" if kind == "method_declaration" else "function"
            scan.add(_Draft(name, symbol_kind, _line(child), name[:1].isupper()))
        elif kind == "type_declaration":
            for spec in child.named_children:
                if spec.type != "type_spec":
                    continue
                type_node = spec.child_by_field_name("type")
                symbol_kind = {"struct_type": "class", "interface_type": "interface"}.get(
                    type_node.type if type_node is not None else ""
                )
                if symbol_kind is None:
                    continue
                name = _text(spec.child_by_field_name("name"))
                scan.add(_Draft(name, symbol_kind, _line(spec), name[:1].isupper()))
    return scan.drafts


# Rust


def _rust_type_name(node: Optional[Node]) -> str:
    if node is not None and node.type == "generic_type":
        node = node.child_by_field_name("type")
    return _text(node)


def _extract_rust(root: Node) -> list[_Draft]:
    scan = _Scan()
    kinds = {
        "struct_item": "rust_struct",
        "trait_item": "rust_trait",
        "enum_item": "enum",
        "function_item": "function",
    }
    for child in root.named_children:
        is_pub = _has_token(child, "visibility_modifier")
        if child.type == "impl_item":
            trait = child.child_by_field_name("trait")
            target = _rust_type_name(child.child_by_field_name("type"))
            name = f"{_rust_type_name(trait)} for {target}" if trait is not None else target
            scan.add(_Draft(name, "rust_impl", _line(child), True))
            _rust_methods(child.child_by_field_name("body"), name, False, scan)
        elif child.type in kinds:
            name = _text(child.child_by_field_name("name"))
            scan.add(_Draft(name, kinds[child.type], _line(child), is_pub))
            if child.type == "trait_item":
                _rust_methods(child.child_by_field_name("body"), name, True, scan)
    return scan.drafts


def _rust_methods(body: Optional[Node], parent: str, in_trait: bool, scan: _Scan) -> None:
    if body is None:
        return
    for item in body.named_children:
        if item.type not in ("function_item", "function_signature_item"):
            continue
        exported = in_trait or _has_token(item, "visibility_modifier")
        scan.add(_Draft(_text(item.child_by_field_name("name")), "method", _line(item), exported, parent=parent))


def extract_symbols(file_id: int, language: str, tree: Any) -> list[CodeSymbol]:
    root = tree.root_node
    if language in ("typescript", "tsx", "javascript"):
        drafts = _extract_ts(root, jsx=language != "typescript")
    elif language == "css":
        drafts = _extract_css(root)
    elif language == "go":
        drafts = _extract_go(root)
    elif language == "rust":
        drafts = _extract_rust(root)
    else:
        drafts = []
    return [
        CodeSymbol(
            id=f"{file_id}.{position}",
            name=draft.name,
            kind=draft.kind,
            line=draft.line,
            is_exported=draft.is_exported,
            modifiers=draft.modifiers,
            tags=draft.tags,
            parent=draft.parent,
        )
        for position, draft in enumerate(drafts, start=1)
    ]


def _module_specifiers(language: str, root: Node) -> Iterator[str]:
    for node in _walk(root):
        if language == "css":
            if node.type == "import_statement":
                value = next((n for n in _walk(node) if n.type == "string_value"), None)
                if value is not None:
                    yield _unquote(_text(value))
            continue
        if node.type in ("import_statement", "export_statement", "import_require_clause"):
            source = node.child_by_field_name("source")
            if source is not None:
                yield _unquote(_text(source))
        elif node.type == "call_expression":
            function = node.child_by_field_name("function")
            arguments = node.child_by_field_name("arguments")
            if function is None or arguments is None:
                continue
            if function.type == "import" or (function.type == "identifier" and _text(function) == "require"):
                first = _first_named(arguments, "string")
                if first is not None:
                    yield _unquote(_text(first))


def extract_imports(language: str, tree: Any) -> list[str]:
    """Module specifiers imported by the file, in source order, deduplicated."""
    if language not in ("typescript", "tsx", "javascript", "css"):
        return []
    ordered: list[str] = []
    for spec in _module_specifiers(language, tree.root_node):
        if spec and spec not in ordered:
            ordered.append(spec)
    return ordered

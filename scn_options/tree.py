"""Read-only option tree: groups and leaves plus traversal helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping, Sequence, Union

from scn_common.errors import ConfigurationError

FILTER_PREFIX = "filter:"


@dataclass(frozen=True)
class OptionLeaf:
    """A node backed by one addressable option key."""

    key: str

    @property
    def is_filter(self) -> bool:
        return is_filter_key(self.key)


@dataclass(frozen=True)
class OptionGroup:
    """A named node whose checked state is derived from its children."""

    name: str
    children: tuple["OptionNode", ...] = field(default_factory=tuple)


OptionNode = Union[OptionLeaf, OptionGroup]
Forest = Sequence[OptionNode]


def is_filter_key(key: str) -> bool:
    return key.startswith(FILTER_PREFIX)


def filter_kind(key: str) -> str:
    """Return the symbol kind of a ``filter:<kind>`` key."""
    if not is_filter_key(key):
        raise ValueError(f"Not a filter key: {key!r}")
    return key[len(FILTER_PREFIX):]


def to_filter_key(kind: str) -> str:
    return f"{FILTER_PREFIX}{kind}"


def leaf(key: str) -> OptionLeaf:
    return OptionLeaf(key)


def group(name: str, *children: "OptionNode | str") -> OptionGroup:
    """Build a group; plain strings become leaves."""
    return OptionGroup(
        name=name,
        children=tuple(OptionLeaf(c) if isinstance(c, str) else c for c in children),
    )


def iter_nodes(forest: Forest) -> Iterator[OptionNode]:
    """Pre-order walk over every node of the forest."""
    for node in forest:
        yield node
        if isinstance(node, OptionGroup):
            yield from iter_nodes(node.children)


def all_keys(node: OptionNode) -> list[str]:
    """Pre-order flattening of the leaf keys under ``node``."""
    if isinstance(node, OptionLeaf):
        return [node.key]
    keys: list[str] = []
    for child in node.children:
        keys.extend(all_keys(child))
    return keys


def forest_keys(forest: Forest) -> list[str]:
    keys: list[str] = []
    for node in forest:
        keys.extend(all_keys(node))
    return keys


def all_group_names(forest: Forest) -> list[str]:
    return [node.name for node in iter_nodes(forest) if isinstance(node, OptionGroup)]


def find_group(forest: Forest, name: str) -> OptionGroup | None:
    for node in iter_nodes(forest):
        if isinstance(node, OptionGroup) and node.name == name:
            return node
    return None


def validate_forest(forest: Forest) -> None:
    """Raise ConfigurationError on duplicate leaf keys or group names."""
    seen_keys: set[str] = set()
    seen_groups: set[str] = set()
    for node in iter_nodes(forest):
        if isinstance(node, OptionLeaf):
            if node.key in seen_keys:
                raise ConfigurationError(
                    f"Duplicate option key {node.key!r}", context={"key": node.key}
                )
            seen_keys.add(node.key)
        else:
            if node.name in seen_groups:
                raise ConfigurationError(
                    f"Duplicate group name {node.name!r}", context={"group": node.name}
                )
            seen_groups.add(node.name)


def label_for(key: str, labels: Mapping[str, str]) -> str:
    """Human-readable label of a key; filter keys resolve by symbol kind."""
    lookup = filter_kind(key) if is_filter_key(key) else key
    return labels.get(lookup, lookup)


def filter_forest(
    forest: Forest, query: str, labels: Mapping[str, str]
) -> Sequence[OptionNode]:
    """Return the part of ``forest`` matching ``query``.

    A group whose name matches is kept whole. Any other group keeps only its
    matching descendants and disappears when none match. Leaves match on their
    label. Matching is a case-insensitive substring test; a blank query
    returns ``forest`` itself.
    """
    if not query.strip():
        return forest
    needle = query.lower()

    def _filter(node: OptionNode) -> OptionNode | None:
        if isinstance(node, OptionLeaf):
            return node if needle in label_for(node.key, labels).lower() else None
        if needle in node.name.lower():
            return node
        children = tuple(
            kept for kept in (_filter(child) for child in node.children) if kept is not None
        )
        if children:
            return OptionGroup(name=node.name, children=children)
        return None

    return [kept for kept in (_filter(node) for node in forest) if kept is not None]

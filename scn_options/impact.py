"""Token-cost annotation of option tree nodes."""

from __future__ import annotations

from typing import Mapping

from scn_options.tree import Forest, OptionGroup, OptionLeaf, OptionNode, all_keys, iter_nodes

CostTable = Mapping[str, int]


def leaf_impact(cost_table: CostTable | None, key: str) -> int | None:
    if cost_table is None:
        return None
    return cost_table.get(key)


def aggregate_impact(cost_table: CostTable, node: OptionNode) -> int:
    """Sum of the costs of every key under ``node``; missing keys count as 0."""
    return sum(cost_table.get(key, 0) for key in all_keys(node))


def format_impact(value: int | None) -> str:
    if value is None:
        return ""
    return f"+{value}" if value > 0 else str(value)


class ImpactAnnotator:
    """Per-render projection of a cost table onto option nodes.

    Build a new annotator whenever the cost table changes; group totals are
    cached per group node (a filtered group is a different node) for the
    lifetime of this instance only.
    """

    def __init__(self, cost_table: CostTable | None) -> None:
        self._cost_table = dict(cost_table) if cost_table is not None else None
        self._group_cache: dict[OptionGroup, int] = {}

    @property
    def available(self) -> bool:
        return self._cost_table is not None

    def for_node(self, node: OptionNode) -> int | None:
        if self._cost_table is None:
            return None
        if isinstance(node, OptionLeaf):
            return self._cost_table.get(node.key)
        cached = self._group_cache.get(node)
        if cached is None:
            cached = aggregate_impact(self._cost_table, node)
            self._group_cache[node] = cached
        return cached

    def annotate(self, forest: Forest) -> dict[str, int]:
        """Map every group name and costed leaf key in ``forest`` to its impact."""
        if self._cost_table is None:
            return {}
        annotations: dict[str, int] = {}
        for node in iter_nodes(forest):
            value = self.for_node(node)
            if value is None:
                continue
            label = node.name if isinstance(node, OptionGroup) else node.key
            annotations[label] = value
        return annotations

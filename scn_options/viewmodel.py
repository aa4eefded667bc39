"""Headless view model for the options panel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Sequence

from scn_options import state as ops
from scn_options.catalog import DEFAULT_EXPANDED_GROUPS, OPTION_LABELS
from scn_options.impact import CostTable, ImpactAnnotator
from scn_options.store import OptionStore
from scn_options.tree import (
    OptionGroup,
    OptionLeaf,
    OptionNode,
    all_group_names,
    all_keys,
    filter_forest,
    label_for,
)


@dataclass(frozen=True)
class OptionRow:
    """One visible line of the options panel."""

    depth: int
    ident: str
    label: str
    is_group: bool
    checked: bool
    indeterminate: bool = False
    expanded: bool = False
    impact: int | None = None


class OptionsViewModel:
    """Search, expansion and check-state logic of the options panel.

    Expansion state lives here and not in the option store: it never affects
    analysis or cost computation.
    """

    def __init__(
        self,
        store: OptionStore,
        labels: Mapping[str, str] = OPTION_LABELS,
        expanded: Iterable[str] = DEFAULT_EXPANDED_GROUPS,
    ) -> None:
        self._store = store
        self._labels = labels
        self._expanded: set[str] = set(expanded)
        self._search = ""
        self._annotator = ImpactAnnotator(None)

    @property
    def store(self) -> OptionStore:
        return self._store

    @property
    def search(self) -> str:
        return self._search

    @search.setter
    def search(self, query: str) -> None:
        self._search = query
        if query.strip():
            self._expanded = set(all_group_names(self.visible_forest()))

    @property
    def expanded_groups(self) -> frozenset[str]:
        return frozenset(self._expanded)

    def set_cost_table(self, cost_table: CostTable | None) -> None:
        self._annotator = ImpactAnnotator(cost_table)

    def visible_forest(self) -> Sequence[OptionNode]:
        return filter_forest(self._store.forest, self._search, self._labels)

    def toggle_group(self, name: str) -> None:
        if name in self._expanded:
            self._expanded.discard(name)
        else:
            self._expanded.add(name)

    def expand_all(self) -> None:
        self._expanded = set(all_group_names(self.visible_forest()))

    def collapse_all(self) -> None:
        self._expanded = set()

    def are_all_expanded(self) -> bool:
        names = all_group_names(self.visible_forest())
        return bool(names) and all(name in self._expanded for name in names)

    def are_all_selected(self) -> bool:
        return ops.are_all_selected(self._store.snapshot(), self._store.forest)

    def toggle_select_all(self) -> None:
        if self.are_all_selected():
            self._store.deselect_all()
        else:
            self._store.select_all()

    def toggle_option(self, key: str) -> None:
        self._store.set_one(key, not self._store.is_selected(key))

    def set_group(self, node: OptionGroup, checked: bool) -> None:
        self._store.set_many(all_keys(node), checked)

    def rows(self) -> list[OptionRow]:
        """Flatten the visible forest, descending only into expanded groups."""
        current = self._store.snapshot()
        rows: list[OptionRow] = []

        def _walk(node: OptionNode, depth: int) -> None:
            if isinstance(node, OptionLeaf):
                rows.append(
                    OptionRow(
                        depth=depth,
                        ident=node.key,
                        label=label_for(node.key, self._labels),
                        is_group=False,
                        checked=ops.is_selected(current, node.key),
                        impact=self._annotator.for_node(node),
                    )
                )
                return
            expanded = node.name in self._expanded
            rows.append(
                OptionRow(
                    depth=depth,
                    ident=node.name,
                    label=node.name,
                    is_group=True,
                    checked=ops.all_checked(current, node),
                    indeterminate=ops.is_indeterminate(current, node),
                    expanded=expanded,
                    impact=self._annotator.for_node(node),
                )
            )
            if expanded:
                for child in node.children:
                    _walk(child, depth + 1)

        for node in self.visible_forest():
            _walk(node, 0)
        return rows

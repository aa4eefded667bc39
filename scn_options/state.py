"""Pure operations over OptionState.

Every edit returns a new state; a group's checked value is always derived
from its leaves.
"""

from __future__ import annotations

from typing import Iterable

from scn_options.models import OptionState, PresetName
from scn_options.presets import get_preset
from scn_options.tree import Forest, OptionNode, all_keys, filter_kind, forest_keys, is_filter_key


def is_selected(state: OptionState, key: str) -> bool:
    if is_filter_key(key):
        return state.filter_visible(filter_kind(key))
    return state.flag(key)


def set_many(state: OptionState, keys: Iterable[str], value: bool) -> OptionState:
    """Assign ``value`` to every key in one new state and clear the preset."""
    flags = dict(state.flags)
    filters = dict(state.display_filters)
    for key in keys:
        if is_filter_key(key):
            filters[filter_kind(key)] = value
        else:
            flags[key] = value
    return OptionState(flags=flags, display_filters=filters, preset=None)


def set_one(state: OptionState, key: str, value: bool) -> OptionState:
    return set_many(state, (key,), value)


def apply_preset(name: PresetName | str) -> OptionState:
    return get_preset(name)


def matches_preset(state: OptionState, name: PresetName | str) -> bool:
    """Compare effective values against a preset expansion."""
    expected = get_preset(name)
    keys = set(expected.flags) | set(state.flags)
    if any(state.flag(key) != expected.flag(key) for key in keys):
        return False
    kinds = set(expected.display_filters) | set(state.display_filters)
    return all(state.filter_visible(kind) == expected.filter_visible(kind) for kind in kinds)


def all_checked(state: OptionState, node: OptionNode) -> bool:
    return all(is_selected(state, key) for key in all_keys(node))


def is_indeterminate(state: OptionState, node: OptionNode) -> bool:
    """True when some, but not all, leaves under ``node`` are selected."""
    values = [is_selected(state, key) for key in all_keys(node)]
    return any(values) and not all(values)


def are_all_selected(state: OptionState, forest: Forest) -> bool:
    keys = forest_keys(forest)
    if not keys:
        return False
    return all(is_selected(state, key) for key in keys)


def select_all(state: OptionState, forest: Forest) -> OptionState:
    return set_many(state, forest_keys(forest), True)


def deselect_all(state: OptionState, forest: Forest) -> OptionState:
    return set_many(state, forest_keys(forest), False)

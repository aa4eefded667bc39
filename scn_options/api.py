"""Public API surface for scn_options."""

from scn_options.catalog import (
    ALL_OPTION_KEYS,
    DEFAULT_EXPANDED_GROUPS,
    OPTION_LABELS,
    OPTION_TREE,
    SYMBOL_KIND_LABELS,
)
from scn_options.impact import CostTable, ImpactAnnotator, aggregate_impact, format_impact, leaf_impact
from scn_options.models import OptionState, PresetName
from scn_options.presets import PRESET_NAMES, get_preset, load_presets
from scn_options.state import (
    all_checked,
    apply_preset,
    are_all_selected,
    deselect_all,
    is_indeterminate,
    is_selected,
    matches_preset,
    select_all,
    set_many,
    set_one,
)
from scn_options.store import OptionStore
from scn_options.tree import (
    OptionGroup,
    OptionLeaf,
    OptionNode,
    all_group_names,
    all_keys,
    filter_forest,
    label_for,
    to_filter_key,
)
from scn_options.viewmodel import OptionRow, OptionsViewModel

__all__ = [
    "ALL_OPTION_KEYS",
    "CostTable",
    "DEFAULT_EXPANDED_GROUPS",
    "ImpactAnnotator",
    "OPTION_LABELS",
    "OPTION_TREE",
    "OptionGroup",
    "OptionLeaf",
    "OptionNode",
    "OptionRow",
    "OptionState",
    "OptionStore",
    "OptionsViewModel",
    "PRESET_NAMES",
    "PresetName",
    "SYMBOL_KIND_LABELS",
    "aggregate_impact",
    "all_checked",
    "all_group_names",
    "all_keys",
    "apply_preset",
    "are_all_selected",
    "deselect_all",
    "filter_forest",
    "format_impact",
    "get_preset",
    "is_indeterminate",
    "is_selected",
    "label_for",
    "leaf_impact",
    "load_presets",
    "matches_preset",
    "select_all",
    "set_many",
    "set_one",
    "to_filter_key",
]

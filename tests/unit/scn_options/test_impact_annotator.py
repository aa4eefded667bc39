import pytest

from scn_options.catalog import OPTION_TREE
from scn_options.impact import ImpactAnnotator, aggregate_impact, format_impact, leaf_impact
from scn_options.tree import OptionLeaf, filter_forest, find_group, group


pytestmark = pytest.mark.unit_options


def test_no_cost_table_means_no_annotation():
    annotator = ImpactAnnotator(None)
    assert not annotator.available
    assert annotator.for_node(OptionLeaf("showIcons")) is None
    assert annotator.for_node(OPTION_TREE[0]) is None
    assert annotator.annotate(OPTION_TREE) == {}
    assert leaf_impact(None, "showIcons") is None


def test_group_impact_is_sum_of_leaves_with_missing_as_zero():
    node = group("G", "a", group("H", "b", "c"))
    table = {"a": 5, "b": -2}
    assert aggregate_impact(table, node) == 3
    annotator = ImpactAnnotator(table)
    assert annotator.for_node(node) == 3
    assert annotator.for_node(OptionLeaf("c")) is None


def test_annotate_covers_groups_and_costed_leaves():
    table = {"showOutgoing": 12, "showIncoming": 4}
    annotations = ImpactAnnotator(table).annotate(OPTION_TREE)
    assert annotations["Relationships"] == 16
    assert annotations["showOutgoing"] == 12
    assert annotations["Display Elements"] == 0
    assert "showIcons" not in annotations


def test_filtered_group_total_reflects_remaining_children():
    table = {"showOutgoing": 12, "showIncoming": 4}
    annotator = ImpactAnnotator(table)
    full = find_group(OPTION_TREE, "Relationships")
    assert annotator.for_node(full) == 16

    filtered = filter_forest(OPTION_TREE, "outgoing", {"showOutgoing": "Outgoing", "showIncoming": "Incoming"})
    partial = find_group(filtered, "Relationships")
    assert annotator.for_node(partial) == 12


def test_annotator_copies_cost_table():
    table = {"showIcons": 3}
    annotator = ImpactAnnotator(table)
    table["showIcons"] = 99
    assert annotator.for_node(OptionLeaf("showIcons")) == 3


@pytest.mark.parametrize("value, expected", [(None, ""), (5, "+5"), (0, "0"), (-7, "-7")])
def test_format_impact(value, expected):
    assert format_impact(value) == expected

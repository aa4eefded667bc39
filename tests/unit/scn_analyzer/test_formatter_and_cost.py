import pytest

from scn_analyzer.formatter import format_project, symbol_stats
from scn_analyzer.impact import cost_impact
from scn_analyzer.models import FileContent
from scn_analyzer.project import analyze_project
from scn_analyzer.samples import DEFAULT_FILES
from scn_analyzer.tokens import count_tokens
from scn_options.catalog import ALL_OPTION_KEYS
from scn_options.models import OptionState
from scn_options.state import apply_preset, set_one


pytestmark = pytest.mark.unit_analyzer


@pytest.fixture
def linked(parser_ready):
    files = [
        FileContent(path="a.ts", content="import { b } from './b';\nexport function a() { return b(); }\n"),
        FileContent(path="b.ts", content="export function b() { return 1; }\n"),
    ]
    return analyze_project(files).source_files


def test_default_preset_rendering(linked):
    output = format_project(linked, apply_preset("default"))
    assert output == "§ (1) a.ts -> (2)\n  + ~ a()\n\n§ (2) b.ts <- (1)\n  + ~ b()"


def test_flags_remove_their_output(linked):
    state = apply_preset("default")
    for key in ("showIcons", "showExportedIndicator", "showFileIds", "showFilePrefix"):
        state = set_one(state, key, False)
    output = format_project(linked, state)
    assert output == "a.ts -> b.ts\n  a()\n\nb.ts <- a.ts\n  b()"


def test_display_filters_hide_symbols(linked):
    state = set_one(apply_preset("default"), "filter:function", False)
    assert "a()" not in format_project(linked, state)
    assert symbol_stats(linked, state) == (2, 0)


def test_show_only_exports_and_group_members(parser_ready):
    analysis = analyze_project(DEFAULT_FILES)
    state = apply_preset("default")
    grouped = format_project(analysis.source_files, state)
    assert "\n    + ~ static create()" in grouped

    flat = format_project(analysis.source_files, set_one(state, "groupMembers", False))
    assert "Formatter.create()" in flat

    exported_only = set_one(state, "showOnlyExports", True)
    total, visible = symbol_stats(analysis.source_files, exported_only)
    assert visible < total
    assert "API_BASE" not in format_project(analysis.source_files, exported_only)


def test_cost_of_enabled_option_is_positive(linked):
    state = apply_preset("default")
    table = cost_impact(linked, state)
    assert set(table) == set(ALL_OPTION_KEYS)
    assert table["showOutgoing"] == count_tokens("-> (2)")
    assert table["showIncoming"] > 0


def test_cost_of_disabled_option_is_not_positive(linked):
    state = set_one(apply_preset("default"), "showOutgoing", False)
    table = cost_impact(linked, state)
    assert table["showOutgoing"] <= 0
    assert table["showOutgoing"] == -count_tokens("-> (2)")


def test_cost_impact_is_pure(linked):
    state = apply_preset("default")
    first = cost_impact(linked, state)
    second = cost_impact(linked, state)
    assert first == second
    assert state == apply_preset("default")


def test_count_tokens():
    assert count_tokens("") == 0
    assert count_tokens("foo(bar, 1)") == 6
    assert count_tokens("  \n ") == 0


def test_empty_options_render_everything(linked):
    output = format_project(linked, OptionState())
    assert "(1.1)" in output

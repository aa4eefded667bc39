"""Integration tests running the analyzer in a real isolated context process."""

from __future__ import annotations

import asyncio
import json

import pytest
from typer.testing import CliRunner

from scn_common.config.settings import WorkbenchSettings
from scn_common.errors import AnalysisCancelled, AnalyzerError, BusyError, InitializationError
from scn_controller.controller import JobController
from scn_options.presets import get_preset
from scn_options.state import set_one
from scn_ui.cli import app

pytestmark = [pytest.mark.inter_generic, pytest.mark.slow]

SETTINGS = WorkbenchSettings(init_timeout_seconds=60.0)

LINKED_FILES = json.dumps(
    [
        {"path": "a.ts", "content": "import { b } from './b';\nexport function a() { return b(); }\n"},
        {"path": "b.ts", "content": "export function b() { return 1; }\n"},
    ]
)


def _run(coro):
    return asyncio.run(coro)


def test_linked_files_and_outgoing_cost() -> None:
    async def scenario():
        async with JobController(SETTINGS) as controller:
            progress = []
            first = await controller.run(LINKED_FILES, on_progress=progress.append)
            hidden = set_one(get_preset("default"), "showOutgoing", False)
            second = await controller.run(LINKED_FILES, options=hidden)
            return first, second, progress

    first, second, progress = _run(scenario())
    by_path = {source.path: source for source in first.result}
    assert set(by_path) == {"a.ts", "b.ts"}
    assert by_path["a.ts"].outgoing == [by_path["b.ts"].id]
    assert by_path["b.ts"].incoming == [by_path["a.ts"].id]
    assert all(source.ast is None for source in first.result)
    assert all(source.language.parser is None for source in first.result)
    assert first.cost_table["showOutgoing"] > 0
    assert second.cost_table["showOutgoing"] <= 0
    assert progress[-1].percentage == 100


def test_include_and_exclude_globs_select_files() -> None:
    files = json.dumps(
        [
            {"path": "a.ts", "content": "export const a = 1;\n"},
            {"path": "a.spec.ts", "content": "export const t = 1;\n"},
        ]
    )

    async def scenario():
        async with JobController(SETTINGS) as controller:
            return await controller.run(files, include="**/*.ts", exclude=["**/*.spec.ts"])

    outcome = _run(scenario())
    assert [source.path for source in outcome.result] == ["a.ts"]


def test_back_to_back_runs_reject_the_second() -> None:
    async def scenario():
        async with JobController(SETTINGS) as controller:
            return await asyncio.gather(
                controller.run(LINKED_FILES), controller.run(LINKED_FILES), return_exceptions=True
            )

    first, second = _run(scenario())
    assert len(first.result) == 2
    assert isinstance(second, BusyError)


def test_cancel_stops_a_slow_job_and_next_job_runs() -> None:
    async def scenario():
        controller = JobController(SETTINGS, backend="tests.helpers.slow_analyzer:SlowAnalyzer")
        await controller.initialize()
        started = asyncio.Event()
        try:
            task = asyncio.ensure_future(
                controller.run(LINKED_FILES, on_progress=lambda event: started.set())
            )
            await asyncio.wait_for(started.wait(), 30)
            controller.cancel()
            with pytest.raises(AnalysisCancelled):
                await task
            assert controller.is_initialized
            assert controller.active_job_id is None
        finally:
            await controller.teardown()

    _run(scenario())


def test_context_crash_fails_the_job() -> None:
    async def scenario():
        controller = JobController(SETTINGS, backend="tests.helpers.slow_analyzer:CrashingAnalyzer")
        await controller.initialize()
        try:
            with pytest.raises(AnalyzerError, match="exited unexpectedly"):
                await controller.run(LINKED_FILES)
            assert not controller.is_initialized
        finally:
            await controller.teardown()

    _run(scenario())


def test_backend_initialize_failure_is_reported() -> None:
    async def scenario():
        controller = JobController(SETTINGS, backend="tests.helpers.slow_analyzer:BrokenInitAnalyzer")
        try:
            await controller.initialize()
        finally:
            await controller.teardown()

    with pytest.raises(InitializationError, match="grammar assets are corrupt"):
        _run(scenario())


def test_cli_analyzes_the_demo_project() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["analyze", "--demo", "--preset", "compact"])
    assert result.exit_code == 0, result.output
    assert "src/main.tsx" in result.output
    assert "Summary" in result.output

"""
Command-line interface for scn-workbench.

Inspect the output options and presets, and run an analysis job in the
isolated analyzer context.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from scn_analyzer.samples import default_files_json
from scn_common.config.settings import WorkbenchSettings
from scn_common.errors import SCNError
from scn_common.log_schema import LogLevel
from scn_common.logging import configure_logging
from scn_controller.backend import DEFAULT_BACKEND
from scn_controller.controller import AnalysisOutcome, JobController
from scn_controller.session import AnalysisSession
from scn_options.presets import load_presets
from scn_options.state import apply_preset, set_one
from scn_options.store import OptionStore
from scn_options.viewmodel import OptionsViewModel
from scn_ui.log_view import render_logs
from scn_ui.options_view import build_options_tree
from scn_ui.presenters import Presenter, build_presets_table, build_summary_table
from scn_ui.profile import RunProfile, load_profile, parse_overrides

console = Console()
presenter = Presenter(console)

app = typer.Typer(help="Configure and run source code analysis.", no_args_is_help=True)


@app.callback()
def entry(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Global entry point."""
    configure_logging(debug=debug)


def make_session(settings: WorkbenchSettings, backend: str) -> AnalysisSession:
    return AnalysisSession(JobController(settings, backend=backend))


async def _run_session(
    session: AnalysisSession,
    files_input: str,
    store: OptionStore,
    include: list[str],
    exclude: list[str],
    timeout: Optional[float],
) -> Optional[AnalysisOutcome]:
    try:
        if not await session.start():
            return None
        task = asyncio.ensure_future(
            session.analyze(files_input, store.snapshot, include=include, exclude=exclude)
        )
        if timeout is None:
            return await task
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout)
        except asyncio.TimeoutError:
            session.stop()
            return await task
    finally:
        await session.close()


@app.command("options")
def show_options(
    search: str = typer.Option("", "--search", "-s", help="Filter options by label."),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Preset to display."),
    expand_all: bool = typer.Option(False, "--expand-all", help="Expand every group."),
) -> None:
    """Show the option tree with check state."""
    try:
        store = OptionStore(apply_preset(preset) if preset else None)
    except SCNError as exc:
        presenter.error(str(exc))
        raise typer.Exit(1)
    view = OptionsViewModel(store)
    view.search = search
    if expand_all:
        view.expand_all()
    rows = view.rows()
    if not rows:
        presenter.warning(f"No options match {search!r}.")
        return
    console.print(build_options_tree(rows))


@app.command("presets")
def show_presets() -> None:
    """List the available presets."""
    presenter.table(build_presets_table(load_presets()))


@app.command("analyze")
def analyze(
    files_json: Optional[Path] = typer.Argument(
        None, help="JSON file with an array of {path, content} objects."
    ),
    demo: bool = typer.Option(False, "--demo", help="Analyze the bundled sample project."),
    include: List[str] = typer.Option([], "--include", "-i", help="Glob of files to include."),
    exclude: List[str] = typer.Option([], "--exclude", "-x", help="Glob of files to exclude."),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Base preset."),
    overrides: List[str] = typer.Option([], "--set", help="Option override, e.g. showIcons=false."),
    profile: Optional[Path] = typer.Option(None, "--profile", help="YAML run profile."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the output to a file."),
    show_logs: bool = typer.Option(False, "--show-logs", help="Print analyzer logs."),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Analyzer log level."),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Cancel after N seconds."),
    backend: str = typer.Option(DEFAULT_BACKEND, "--backend", hidden=True),
) -> None:
    """Analyze files in the isolated analyzer context and print the output."""
    if demo == (files_json is not None):
        presenter.error("Pass either FILES_JSON or --demo.")
        raise typer.Exit(1)

    try:
        files_input = default_files_json() if demo else files_json.read_text(encoding="utf-8")
        run_profile = load_profile(profile) if profile else RunProfile()
        state = run_profile.build_state(preset)
        for key, value in parse_overrides(overrides).items():
            state = set_one(state, key, value)
        settings = WorkbenchSettings.from_env()
        if log_level:
            settings = settings.model_copy(update={"log_level": LogLevel.parse(log_level)})
    except (OSError, ValueError, SCNError) as exc:
        presenter.error(str(exc))
        raise typer.Exit(1)

    store = OptionStore(state)
    session = make_session(settings, backend)
    outcome = asyncio.run(
        _run_session(
            session,
            files_input,
            store,
            list(include) or run_profile.include,
            list(exclude) or run_profile.exclude,
            timeout,
        )
    )

    if outcome is None:
        console.print(render_logs(session.logs))
        presenter.error("Analysis did not complete.")
        raise typer.Exit(1)

    current = store.snapshot()
    rendered = session.render(current)
    if output:
        output.write_text(rendered, encoding="utf-8")
        presenter.success(f"Output written to {output}")
    else:
        console.print(rendered, markup=False, highlight=False)

    presenter.table(build_summary_table(session.summary(files_input, current)))
    view = OptionsViewModel(store)
    view.set_cost_table(outcome.cost_table)
    console.print(build_options_tree(view.rows(), title="Output Options (token impact)"))
    if show_logs:
        presenter.panel(render_logs(session.logs), title="Logs")


def main() -> None:
    """Console script entrypoint (Typer app)."""
    app()


if __name__ == "__main__":
    main()

"""Console presenters for the scn CLI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from scn_controller.session import SessionSummary
from scn_options.models import OptionState, PresetName

_LEVEL_TEMPLATES = {
    "info": "[blue]ℹ[/blue] {message}",
    "warning": "[yellow]⚠ {message}[/yellow]",
    "error": "[red]✖ {message}[/red]",
    "success": "[green]✔ {message}[/green]",
}


@dataclass
class TableModel:
    title: str
    columns: list[str]
    rows: list[list[str]]


class Presenter:
    """Writes status lines, panels and tables to a rich console."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def _emit(self, level: str, message: str) -> None:
        self.console.print(_LEVEL_TEMPLATES[level].format(message=message))

    def info(self, message: str) -> None:
        self._emit("info", message)

    def warning(self, message: str) -> None:
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def success(self, message: str) -> None:
        self._emit("success", message)

    def panel(self, renderable: object, title: str | None = None) -> None:
        self.console.print(Panel(renderable, title=title, border_style="cyan"))

    def table(self, model: TableModel) -> None:
        table = Table(title=model.title, show_lines=False, header_style="bold cyan")
        for column in model.columns:
            table.add_column(column)
        for row in model.rows:
            table.add_row(*row)
        self.console.print(table)


def build_presets_table(presets: Mapping[PresetName, OptionState]) -> TableModel:
    rows = []
    for name, state in presets.items():
        enabled = [key for key, value in state.flags.items() if value]
        visible_kinds = [key for key, value in state.display_filters.items() if value]
        rows.append([name.value, str(len(enabled)), str(len(visible_kinds)), ", ".join(enabled)])
    return TableModel(
        title="Presets",
        columns=["Preset", "Options on", "Kinds shown", "Enabled options"],
        rows=rows,
    )


def build_summary_table(summary: SessionSummary) -> TableModel:
    if summary.reduction_percent is None:
        reduction = "n/a"
    else:
        arrow = "▼" if summary.reduction_percent >= 0 else "▲"
        reduction = f"{arrow} {abs(summary.reduction_percent):.0f}%"
    elapsed = "n/a" if summary.elapsed_time is None else f"{summary.elapsed_time / 1000:.2f}s"
    return TableModel(
        title="Summary",
        columns=["Metric", "Value"],
        rows=[
            ["Files", str(summary.files)],
            ["Symbols", f"{summary.visible_symbols} / {summary.total_symbols}"],
            ["Input tokens", f"{summary.input_tokens:,}"],
            ["Output tokens", f"{summary.output_tokens:,}"],
            ["Reduction", reduction],
            ["Analysis time", elapsed],
        ],
    )


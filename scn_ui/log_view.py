"""Log filtering and formatting for the analysis log panel."""

from __future__ import annotations

from typing import Iterable, Sequence

from rich.text import Text

from scn_common.log_schema import LOG_LEVELS, LogEvent, LogLevel

LEVEL_STYLES = {
    LogLevel.ERROR: "red",
    LogLevel.WARN: "yellow",
    LogLevel.INFO: "blue",
    LogLevel.DEBUG: "dim",
}


def filter_logs(logs: Iterable[LogEvent], visible_levels: Iterable[LogLevel | str] = LOG_LEVELS) -> list[LogEvent]:
    levels = {LogLevel.parse(level) for level in visible_levels}
    return [log for log in logs if log.level in levels]


def format_log_line(event: LogEvent) -> str:
    """``HH:MM:SS [LEVEL] message`` in local time."""
    timestamp = event.timestamp.astimezone().strftime("%H:%M:%S")
    return f"{timestamp} [{event.level.value.upper()}] {event.message}"


def format_logs(logs: Iterable[LogEvent], visible_levels: Iterable[LogLevel | str] = LOG_LEVELS) -> str:
    return "\n".join(format_log_line(log) for log in filter_logs(logs, visible_levels))


def render_logs(logs: Sequence[LogEvent], visible_levels: Iterable[LogLevel | str] = LOG_LEVELS) -> Text:
    shown = filter_logs(logs, visible_levels)
    if not shown:
        message = "No logs yet." if not logs else "No logs match the current filter."
        return Text(message, style="dim")
    text = Text()
    for index, log in enumerate(shown):
        if index:
            text.append("\n")
        text.append(format_log_line(log), style=LEVEL_STYLES[log.level])
    return text

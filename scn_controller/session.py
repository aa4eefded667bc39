"""Stateful wrapper around JobController for interactive front ends."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from scn_analyzer.formatter import format_project, symbol_stats
from scn_analyzer.models import SourceFile
from scn_analyzer.tokens import count_tokens
from scn_common.errors import AnalysisCancelled, BusyError, NotReadyError, SCNError
from scn_common.log_schema import LogEvent, LogLevel, ProgressEvent
from scn_controller.controller import AnalysisOutcome, GlobInput, JobController, OptionsSource
from scn_options.models import OptionState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionSummary:
    files: int
    total_symbols: int
    visible_symbols: int
    input_tokens: int
    output_tokens: int
    reduction_percent: Optional[float]
    elapsed_time: Optional[float]


def reduction_percent(input_tokens: int, output_tokens: int) -> Optional[float]:
    """Token reduction from input to output; None when the input is empty."""
    if input_tokens <= 0:
        return None
    return (input_tokens - output_tokens) / input_tokens * 100


class AnalysisSession:
    """
    Owns a controller and the observable state of the latest run.

    Front ends call ``analyze`` and read ``logs``, ``progress`` and ``result``
    instead of handling controller errors themselves.
    """

    def __init__(self, controller: Optional[JobController] = None) -> None:
        self.controller = controller or JobController()
        self.logs: list[LogEvent] = []
        self.progress: Optional[ProgressEvent] = None
        self.result: Optional[list[SourceFile]] = None
        self.elapsed_time: Optional[float] = None
        self.cost_table: Optional[dict[str, int]] = None
        self.last_error: Optional[SCNError] = None
        self.is_loading = False

    @property
    def is_initialized(self) -> bool:
        return self.controller.is_initialized

    def add_log(self, level: LogLevel | str, message: str) -> None:
        self.logs.append(LogEvent.create(level, message))

    def _on_log(self, event: LogEvent) -> None:
        self.logs.append(event)

    def _on_progress(self, event: ProgressEvent) -> None:
        self.progress = event

    def reset(self) -> None:
        self.result = None
        self.elapsed_time = None
        self.progress = None
        self.cost_table = None
        self.last_error = None
        self.logs = []

    async def start(self) -> bool:
        """Initialize the controller; failures are recorded as log entries."""
        try:
            await self.controller.initialize()
        except SCNError as exc:
            self.last_error = exc
            self.add_log(LogLevel.ERROR, f"Worker failed to initialize: {exc}")
            return False
        self.add_log(LogLevel.INFO, "Analysis worker ready.")
        return True

    async def analyze(
        self,
        files_input: str,
        options: OptionsSource = None,
        *,
        include: GlobInput = None,
        exclude: GlobInput = None,
    ) -> Optional[AnalysisOutcome]:
        """Run one job; returns None when it did not complete."""
        if not self.is_initialized:
            self.add_log(LogLevel.WARN, "Analysis worker not ready.")
            return None
        if self.is_loading:
            return None

        self.is_loading = True
        self.reset()
        try:
            outcome = await self.controller.run(
                files_input,
                include=include,
                exclude=exclude,
                options=options,
                on_progress=self._on_progress,
                on_log=self._on_log,
            )
        except AnalysisCancelled as exc:
            self.last_error = exc
            self.add_log(LogLevel.INFO, "Analysis canceled by user.")
            return None
        except (NotReadyError, BusyError) as exc:
            self.last_error = exc
            self.add_log(LogLevel.WARN, str(exc))
            return None
        except SCNError as exc:
            self.last_error = exc
            logger.debug("Analysis failed: %s", exc.to_dict())
            self.add_log(LogLevel.ERROR, f"Analysis error: {exc}")
            return None
        finally:
            self.is_loading = False
            self.progress = None

        self.result = outcome.result
        self.elapsed_time = outcome.elapsed_time
        self.cost_table = outcome.cost_table
        return outcome

    def stop(self) -> None:
        if self.is_loading:
            self.controller.cancel()

    async def close(self) -> None:
        await self.controller.teardown()

    def render(self, options: OptionState) -> str:
        """Formatted output of the latest result, or an empty string."""
        if self.result is None:
            return ""
        return format_project(self.result, options)

    def summary(self, files_input: str, options: OptionState) -> SessionSummary:
        output = self.render(options)
        input_tokens = count_tokens(files_input)
        output_tokens = count_tokens(output)
        total, visible = symbol_stats(self.result or [], options)
        return SessionSummary(
            files=len(self.result or []),
            total_symbols=total,
            visible_symbols=visible,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            reduction_percent=reduction_percent(input_tokens, output_tokens),
            elapsed_time=self.elapsed_time,
        )

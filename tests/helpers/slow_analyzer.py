"""Analyzer backends with controllable timing and failures.

They are loaded by reference inside the isolated context, so each one is a
plain class importable as ``tests.helpers.slow_analyzer:<Name>``.
"""

from __future__ import annotations

import os
import time

from scn_common.errors import AnalysisCancelled
from scn_common.log_schema import ProgressEvent
from scn_controller.backend import ReferenceAnalyzer


class SlowAnalyzer(ReferenceAnalyzer):
    """Reports progress, then polls the stop signal for up to ``max_wait`` seconds."""

    max_wait = 10.0
    poll = 0.01

    def analyze(self, files_input, *, include, exclude, on_progress, signal):
        on_progress(ProgressEvent(percentage=1, message="Waiting..."))
        deadline = time.monotonic() + self.max_wait
        while time.monotonic() < deadline:
            if signal.should_stop():
                raise AnalysisCancelled("Analysis cancelled")
            time.sleep(self.poll)
        return super().analyze(
            files_input, include=include, exclude=exclude, on_progress=on_progress, signal=signal
        )


class CrashingAnalyzer(ReferenceAnalyzer):
    """Kills the context process in the middle of a job."""

    def analyze(self, files_input, *, include, exclude, on_progress, signal):
        on_progress(ProgressEvent(percentage=1, message="About to crash"))
        os._exit(3)


class BrokenInitAnalyzer(ReferenceAnalyzer):
    def initialize(self, asset_base_location):
        raise RuntimeError("grammar assets are corrupt")


class RecordingAnalyzer(ReferenceAnalyzer):
    """Keeps every result handed to ``cost_impact``."""

    cost_inputs: list = []

    def cost_impact(self, source_files, options):
        RecordingAnalyzer.cost_inputs.append(list(source_files))
        return super().cost_impact(source_files, options)

"""Public API surface for scn_controller."""

from scn_controller.backend import DEFAULT_BACKEND, AnalyzerBackend, ReferenceAnalyzer, load_backend
from scn_controller.channel import ProcessChannel
from scn_controller.controller import AnalysisOutcome, JobController
from scn_controller.job_state import JobState, JobStateMachine
from scn_controller.sanitizer import is_transferable, sanitize_result
from scn_controller.session import AnalysisSession, SessionSummary
from scn_controller.stop_token import CancellationToken

__all__ = [
    "AnalysisOutcome",
    "AnalysisSession",
    "AnalyzerBackend",
    "CancellationToken",
    "DEFAULT_BACKEND",
    "JobController",
    "JobState",
    "JobStateMachine",
    "ProcessChannel",
    "ReferenceAnalyzer",
    "SessionSummary",
    "is_transferable",
    "load_backend",
    "sanitize_result",
]

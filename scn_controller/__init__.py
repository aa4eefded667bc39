"""Single-flight analysis job controller and its isolated worker context."""

from scn_controller.controller import AnalysisOutcome, JobController
from scn_controller.session import AnalysisSession

__all__ = ["AnalysisOutcome", "AnalysisSession", "JobController"]

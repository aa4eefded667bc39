"""Public API surface for scn_common."""

from scn_common.config.settings import WorkbenchSettings
from scn_common.errors import (
    AnalysisCancelled,
    AnalyzerError,
    BusyError,
    ConfigurationError,
    InitializationError,
    InvalidInputError,
    NotReadyError,
    SCNError,
    error_from_payload,
    error_to_payload,
)
from scn_common.log_schema import LOG_LEVELS, LogEvent, LogLevel, ProgressEvent
from scn_common.logging import configure_logging

__all__ = [
    "AnalysisCancelled",
    "AnalyzerError",
    "BusyError",
    "ConfigurationError",
    "InitializationError",
    "InvalidInputError",
    "LOG_LEVELS",
    "LogEvent",
    "LogLevel",
    "NotReadyError",
    "ProgressEvent",
    "SCNError",
    "WorkbenchSettings",
    "configure_logging",
    "error_from_payload",
    "error_to_payload",
]

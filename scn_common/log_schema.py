"""Progress and log event schema streamed from an analysis job."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LogLevel(str, Enum):
    """Analyzer log levels, most severe first."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"

    @classmethod
    def parse(cls, value: "str | LogLevel") -> "LogLevel":
        if isinstance(value, LogLevel):
            return value
        normalized = value.strip().lower()
        if normalized == "warning":
            normalized = "warn"
        return cls(normalized)

    @classmethod
    def from_logging_level(cls, levelno: int) -> "LogLevel":
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG

    def to_logging_level(self) -> int:
        return _LOGGING_LEVELS[self]


_LOGGING_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}

LOG_LEVELS: tuple[LogLevel, ...] = tuple(LogLevel)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class LogEvent(BaseModel):
    """One log line emitted by the analyzer for a job."""

    model_config = ConfigDict(frozen=True)

    level: LogLevel
    message: str
    timestamp: datetime = Field(default_factory=_now)

    @classmethod
    def from_log_record(cls, record: logging.LogRecord) -> "LogEvent":
        """Build an event from a stdlib LogRecord."""
        return cls(
            level=LogLevel.from_logging_level(record.levelno),
            message=record.getMessage(),
            timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc),
        )

    @classmethod
    def create(cls, level: "LogLevel | str", message: str) -> "LogEvent":
        return cls(level=LogLevel.parse(level), message=message)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class ProgressEvent(BaseModel):
    """Progress report for a running job."""

    model_config = ConfigDict(frozen=True)

    percentage: float = Field(ge=0, le=100)
    message: str = ""

"""Messages exchanged with the isolated analysis context.

Every message is pickled onto a multiprocessing queue. Job-scoped messages
carry the ``job_id`` they belong to so the host can drop anything that
arrives for a job that is no longer active.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from scn_analyzer.models import SourceFile
from scn_common.errors import SCNError
from scn_common.log_schema import LogEvent, LogLevel, ProgressEvent
from scn_options.models import OptionState


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)


# Host -> context


class InitializeRequest(_Message):
    kind: Literal["initialize"] = "initialize"
    asset_base_location: Optional[str] = None


class AnalyzeRequest(_Message):
    kind: Literal["analyze"] = "analyze"
    job_id: int
    files_input: str
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    log_level: LogLevel = LogLevel.DEBUG


class CostImpactRequest(_Message):
    kind: Literal["cost_impact"] = "cost_impact"
    job_id: int
    options: OptionState


class CancelRequest(_Message):
    kind: Literal["cancel"] = "cancel"
    job_id: int


class ShutdownRequest(_Message):
    kind: Literal["shutdown"] = "shutdown"


Request = Union[InitializeRequest, AnalyzeRequest, CostImpactRequest, CancelRequest, ShutdownRequest]


# Context -> host


class Ack(_Message):
    kind: Literal["ack"] = "ack"
    request: str


class ProgressMessage(_Message):
    kind: Literal["progress"] = "progress"
    job_id: int
    event: ProgressEvent


class LogMessage(_Message):
    kind: Literal["log"] = "log"
    job_id: int
    event: LogEvent


class ResultMessage(_Message):
    kind: Literal["result"] = "result"
    job_id: int
    source_files: list[SourceFile]
    elapsed_time_ms: float


class CostTableMessage(_Message):
    kind: Literal["cost_table"] = "cost_table"
    job_id: int
    cost_table: dict[str, int]


class ErrorMessage(_Message):
    """Failure report; ``job_id`` is None for initialization failures."""

    kind: Literal["error"] = "error"
    job_id: Optional[int] = None
    error_type: str
    message: str
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_exception(cls, job_id: Optional[int], exc: BaseException) -> "ErrorMessage":
        if isinstance(exc, SCNError):
            return cls(job_id=job_id, error_type=exc.error_type, message=str(exc), context=exc.context)
        return cls(
            job_id=job_id,
            error_type=type(exc).__name__,
            message=f"{type(exc).__name__}: {exc}",
        )


class CancelledMessage(_Message):
    kind: Literal["cancelled"] = "cancelled"
    job_id: int


class ContextExited(_Message):
    """Synthesized on the host when the context process dies unexpectedly."""

    kind: Literal["exited"] = "exited"
    exitcode: Optional[int] = None


Response = Union[
    Ack,
    ProgressMessage,
    LogMessage,
    ResultMessage,
    CostTableMessage,
    ErrorMessage,
    CancelledMessage,
    ContextExited,
]

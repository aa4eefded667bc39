"""Single-flight, cancellable analysis job controller.

The controller lives on the caller's asyncio loop. The analyzer runs in an
isolated context process; responses are read by the channel's reader thread
and handed to the loop with ``call_soon_threadsafe`` so every event is
processed on the loop, in arrival order.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Union

from scn_analyzer.models import SourceFile
from scn_common.config import parse_lines
from scn_common.config.settings import WorkbenchSettings
from scn_common.errors import (
    AnalysisCancelled,
    AnalyzerError,
    BusyError,
    InitializationError,
    NotReadyError,
    SCNError,
    error_from_payload,
)
from scn_common.log_schema import LogEvent, ProgressEvent
from scn_controller.backend import DEFAULT_BACKEND
from scn_controller.channel import ProcessChannel
from scn_controller.job_state import JobState, JobStateMachine, StateCallback
from scn_controller.messages import (
    Ack,
    AnalyzeRequest,
    CancelledMessage,
    CancelRequest,
    ContextExited,
    CostImpactRequest,
    CostTableMessage,
    ErrorMessage,
    InitializeRequest,
    LogMessage,
    ProgressMessage,
    ResultMessage,
)
from scn_controller.stop_token import CancellationToken
from scn_options.models import OptionState
from scn_options.presets import get_preset

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
LogCallback = Callable[[LogEvent], None]
OptionsSource = Union[OptionState, Callable[[], OptionState], None]
GlobInput = Union[str, Iterable[str], None]


@dataclass(frozen=True)
class AnalysisOutcome:
    """Sanitized result of one job plus the token cost of each option."""

    result: list[SourceFile]
    elapsed_time: float
    cost_table: dict[str, int]


@dataclass
class _Job:
    job_id: int
    token: CancellationToken
    on_progress: Optional[ProgressCallback] = None
    on_log: Optional[LogCallback] = None
    waiter: Optional[asyncio.Future] = None
    failure: Optional[SCNError] = None
    cancelled: bool = field(default=False)

    def expect(self, loop: asyncio.AbstractEventLoop) -> asyncio.Future:
        if self.failure is not None:
            raise self.failure
        self.waiter = loop.create_future()
        return self.waiter

    def resolve(self, value: Any) -> None:
        if self.waiter is not None and not self.waiter.done():
            self.waiter.set_result(value)

    def fail(self, error: SCNError) -> None:
        if self.failure is None:
            self.failure = error
        if self.waiter is not None and not self.waiter.done():
            self.waiter.set_exception(error)


def _normalize_globs(value: GlobInput) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return parse_lines(value)
    return [item.strip() for item in value if item and item.strip()]


def _resolve_options(options: OptionsSource) -> OptionState:
    if options is None:
        return get_preset("default")
    if isinstance(options, OptionState):
        return options
    return options()


class JobController:
    """Runs one analysis job at a time against an isolated analyzer context."""

    def __init__(
        self,
        settings: Optional[WorkbenchSettings] = None,
        *,
        backend: str = DEFAULT_BACKEND,
        channel_factory: Optional[Callable[[], Any]] = None,
        on_state_change: Optional[StateCallback] = None,
    ) -> None:
        self._settings = settings or WorkbenchSettings()
        self._backend = backend
        self._channel_factory = channel_factory or (
            lambda: ProcessChannel(backend, self._settings.start_method)
        )
        self._channel: Any = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._init_task: Optional[asyncio.Task] = None
        self._init_waiter: Optional[asyncio.Future] = None
        self._initialized = False
        self._job_ids = itertools.count(1)
        self._active: Optional[_Job] = None
        self._state = JobStateMachine()
        if on_state_change is not None:
            self._state.register_callback(on_state_change)

    @property
    def settings(self) -> WorkbenchSettings:
        return self._settings

    @property
    def state(self) -> JobState:
        return self._state.state

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def is_running(self) -> bool:
        return self._active is not None

    @property
    def active_job_id(self) -> Optional[int]:
        return self._active.job_id if self._active else None

    async def __aenter__(self) -> "JobController":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.teardown()

    async def initialize(self) -> None:
        """Start the isolated context and load the analyzer; idempotent."""
        if self._initialized:
            return
        if self._init_task is None:
            self._init_task = asyncio.ensure_future(self._initialize())
            self._init_task.add_done_callback(self._clear_init_task)
        await asyncio.shield(self._init_task)

    def _clear_init_task(self, _task: asyncio.Task) -> None:
        self._init_task = None

    async def _initialize(self) -> None:
        loop = asyncio.get_running_loop()
        self._loop = loop
        if self._channel is not None:
            await self._close_channel()
        channel = self._channel_factory()
        self._init_waiter = loop.create_future()
        start_future = loop.run_in_executor(None, channel.start, self._on_message)
        try:
            await asyncio.shield(start_future)
            self._channel = channel
            channel.send(InitializeRequest(asset_base_location=self._settings.asset_base_location))
            await asyncio.wait_for(self._init_waiter, timeout=self._settings.init_timeout_seconds)
        except asyncio.CancelledError:
            # the executor cannot abandon a start in flight; close what it opens
            if not start_future.done():
                await asyncio.wait([start_future])
            self._channel = channel
            await self._close_channel()
            raise
        except Exception as exc:
            self._channel = channel
            await self._close_channel()
            if isinstance(exc, InitializationError):
                logger.error("Analysis context failed to initialize: %s", exc)
                raise
            if isinstance(exc, asyncio.TimeoutError):
                message = (
                    f"Analyzer did not initialize within {self._settings.init_timeout_seconds}s"
                )
            else:
                message = f"Failed to start analysis context: {exc}"
            logger.error(message)
            raise InitializationError(message, context={"backend": self._backend}, cause=exc) from exc
        finally:
            self._init_waiter = None
        self._initialized = True
        logger.info("Analysis context ready")

    async def run(
        self,
        files_input: str,
        *,
        include: GlobInput = None,
        exclude: GlobInput = None,
        options: OptionsSource = None,
        on_progress: Optional[ProgressCallback] = None,
        on_log: Optional[LogCallback] = None,
    ) -> AnalysisOutcome:
        """Analyze ``files_input`` (a JSON array of ``{path, content}``)."""
        if not self._initialized or self._channel is None:
            raise NotReadyError("Analysis context is not initialized")
        if self._active is not None:
            raise BusyError(
                "An analysis job is already running",
                context={"job_id": self._active.job_id},
            )
        loop = asyncio.get_running_loop()
        job_id = next(self._job_ids)
        job = _Job(
            job_id=job_id,
            token=CancellationToken(on_stop=lambda: self._send_cancel(job_id)),
            on_progress=on_progress,
            on_log=on_log,
        )
        self._active = job
        self._state.reset()
        self._state.transition(JobState.RUNNING, f"job {job_id}")
        final_state = JobState.FAILED
        reason: Optional[str] = None
        try:
            waiter = job.expect(loop)
            self._channel.send(
                AnalyzeRequest(
                    job_id=job_id,
                    files_input=files_input,
                    include=_normalize_globs(include),
                    exclude=_normalize_globs(exclude),
                    log_level=self._settings.log_level,
                )
            )
            source_files, elapsed_time = await waiter
            waiter = job.expect(loop)
            self._channel.send(CostImpactRequest(job_id=job_id, options=_resolve_options(options)))
            cost_table = await waiter
            if job.failure is not None:
                raise job.failure
            final_state = JobState.COMPLETED
            return AnalysisOutcome(result=source_files, elapsed_time=elapsed_time, cost_table=cost_table)
        except AnalysisCancelled as exc:
            final_state = JobState.CANCELLED
            reason = str(exc)
            raise
        except asyncio.CancelledError:
            self.cancel()
            final_state = JobState.CANCELLED
            reason = "caller cancelled"
            raise
        except Exception as exc:
            reason = str(exc)
            raise
        finally:
            if self._active is job:
                self._active = None
            self._state.transition(final_state, reason)
            self._state.reset()

    def cancel(self) -> None:
        """Cancel the running job, if any; its pending run raises AnalysisCancelled."""
        job = self._active
        if job is None or job.cancelled:
            return
        job.cancelled = True
        job.token.request_stop()
        job.fail(AnalysisCancelled("Analysis cancelled", context={"job_id": job.job_id}))
        logger.info("Cancellation requested for job %s", job.job_id)

    async def teardown(self) -> None:
        """Cancel any running job and stop the isolated context."""
        self.cancel()
        if self._init_task is not None:
            self._init_task.cancel()
            try:
                await self._init_task
            except (asyncio.CancelledError, SCNError):
                logger.debug("Initialization aborted by teardown")
        self._initialized = False
        await self._close_channel()

    async def _close_channel(self) -> None:
        channel, self._channel = self._channel, None
        if channel is None:
            return
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, channel.close, self._settings.shutdown_timeout_seconds)

    def _send_cancel(self, job_id: int) -> None:
        if self._channel is None:
            return
        try:
            self._channel.send(CancelRequest(job_id=job_id))
        except (RuntimeError, ValueError, OSError) as exc:
            logger.debug("Could not deliver cancel for job %s: %s", job_id, exc)

    def _on_message(self, message: Any) -> None:
        """Reader-thread entry: hop onto the controller loop."""
        loop = self._loop
        if loop is None or loop.is_closed():
            logger.debug("Dropping %s, controller loop is gone", type(message).__name__)
            return
        try:
            loop.call_soon_threadsafe(self._dispatch, message)
        except RuntimeError:
            logger.debug("Dropping %s, controller loop is closed", type(message).__name__)

    def _dispatch(self, message: Any) -> None:
        if isinstance(message, Ack):
            if self._init_waiter is not None and not self._init_waiter.done():
                self._init_waiter.set_result(None)
            return
        if isinstance(message, ContextExited):
            self._handle_context_exit(message)
            return
        if isinstance(message, ErrorMessage) and message.job_id is None:
            error = error_from_payload(message.error_type, message.message, message.context)
            if self._init_waiter is not None and not self._init_waiter.done():
                self._init_waiter.set_exception(
                    error
                    if isinstance(error, InitializationError)
                    else InitializationError(str(error), context=error.context)
                )
            else:
                logger.error("Analysis context error: %s", error)
            return

        job = self._active
        job_id = getattr(message, "job_id", None)
        if job is None or job.cancelled or job_id != job.job_id:
            logger.debug("Dropping %s for inactive job %s", type(message).__name__, job_id)
            return

        if isinstance(message, ProgressMessage):
            self._notify(job.on_progress, message.event)
        elif isinstance(message, LogMessage):
            self._notify(job.on_log, message.event)
        elif isinstance(message, ResultMessage):
            job.resolve((message.source_files, message.elapsed_time_ms))
        elif isinstance(message, CostTableMessage):
            job.resolve(dict(message.cost_table))
        elif isinstance(message, CancelledMessage):
            job.fail(AnalysisCancelled("Analysis cancelled", context={"job_id": job.job_id}))
        elif isinstance(message, ErrorMessage):
            job.fail(error_from_payload(message.error_type, message.message, message.context))
        else:
            logger.warning("Unexpected message from analysis context: %r", message)

    def _handle_context_exit(self, message: ContextExited) -> None:
        self._initialized = False
        error = AnalyzerError(
            "Analysis context exited unexpectedly",
            context={"exitcode": message.exitcode},
        )
        if self._init_waiter is not None and not self._init_waiter.done():
            self._init_waiter.set_exception(InitializationError(str(error), context=error.context))
        if self._active is not None:
            self._active.fail(error)

    @staticmethod
    def _notify(callback: Optional[Callable[[Any], None]], event: Any) -> None:
        if callback is None:
            return
        try:
            callback(event)
        except Exception:
            logger.exception("Job event callback failed")

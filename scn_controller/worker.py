"""Entry point and request loop of the isolated analysis context.

The main thread of the context process reads requests. Analysis and cost
requests run on a single background thread, so jobs are serialized inside the
context while cancel requests are still handled immediately.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from scn_analyzer.models import SourceFile
from scn_common.errors import AnalysisCancelled, AnalyzerError, InitializationError
from scn_common.log_schema import LogEvent, LogLevel, ProgressEvent
from scn_controller.backend import AnalyzerBackend, load_backend
from scn_controller.messages import (
    Ack,
    AnalyzeRequest,
    CancelledMessage,
    CancelRequest,
    CostImpactRequest,
    CostTableMessage,
    ErrorMessage,
    InitializeRequest,
    LogMessage,
    ProgressMessage,
    ResultMessage,
    ShutdownRequest,
)
from scn_controller.sanitizer import is_transferable, sanitize_result
from scn_controller.stop_token import CancellationToken

logger = logging.getLogger(__name__)


class JobLogHandler(logging.Handler):
    """Forward records emitted on the analysis thread as LogMessages."""

    def __init__(self, emit_message: Any, job_id: int, level: LogLevel) -> None:
        super().__init__(level=level.to_logging_level())
        self._emit_message = emit_message
        self._job_id = job_id
        self._thread_id = threading.get_ident()

    def emit(self, record: logging.LogRecord) -> None:
        if record.thread != self._thread_id:
            return
        try:
            self._emit_message(LogMessage(job_id=self._job_id, event=LogEvent.from_log_record(record)))
        except Exception:
            self.handleError(record)


class AnalysisContext:
    """State owned by the isolated context: backend, tokens, last raw result."""

    def __init__(self, responses: Any, backend_ref: str) -> None:
        self._responses = responses
        self._backend_ref = backend_ref
        self._backend: Optional[AnalyzerBackend] = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="scn-analysis")
        self._tokens: dict[int, CancellationToken] = {}
        self._tokens_lock = threading.Lock()
        self._last_result: Optional[tuple[int, list[SourceFile]]] = None

    def emit(self, message: Any) -> None:
        self._responses.put(message)

    def handle(self, request: Any) -> bool:
        """Process one request; returns False when the loop should exit."""
        if isinstance(request, ShutdownRequest):
            return False
        if isinstance(request, InitializeRequest):
            self._initialize(request)
        elif isinstance(request, AnalyzeRequest):
            token = CancellationToken()
            with self._tokens_lock:
                self._tokens[request.job_id] = token
            self._executor.submit(self._analyze, request, token)
        elif isinstance(request, CostImpactRequest):
            self._executor.submit(self._cost_impact, request)
        elif isinstance(request, CancelRequest):
            with self._tokens_lock:
                token = self._tokens.get(request.job_id)
            if token is not None:
                token.request_stop()
        else:
            logger.warning("Ignoring unknown request %r", request)
        return True

    def close(self) -> None:
        with self._tokens_lock:
            tokens = list(self._tokens.values())
        for token in tokens:
            token.request_stop()
        self._executor.shutdown(wait=True, cancel_futures=True)

    def _initialize(self, request: InitializeRequest) -> None:
        try:
            if self._backend is None:
                self._backend = load_backend(self._backend_ref)
            self._backend.initialize(request.asset_base_location)
        except Exception as exc:
            logger.exception("Analyzer initialization failed")
            self.emit(
                ErrorMessage(
                    job_id=None,
                    error_type=InitializationError.__name__,
                    message=str(exc),
                    context={"original_type": type(exc).__name__},
                )
            )
            return
        self.emit(Ack(request="initialize"))

    def _analyze(self, request: AnalyzeRequest, token: CancellationToken) -> None:
        job_id = request.job_id
        handler = JobLogHandler(self.emit, job_id, request.log_level)
        root = logging.getLogger()
        root.addHandler(handler)
        previous_level = root.level
        root.setLevel(min(previous_level or logging.WARNING, handler.level))
        try:
            token.raise_if_stopped()
            if self._backend is None:
                raise AnalyzerError("Analyzer is not initialized")

            def _on_progress(event: ProgressEvent) -> None:
                if not token.should_stop():
                    self.emit(ProgressMessage(job_id=job_id, event=event))

            analysis = self._backend.analyze(
                request.files_input,
                include=request.include,
                exclude=request.exclude,
                on_progress=_on_progress,
                signal=token,
            )
            token.raise_if_stopped()
            clean = sanitize_result(analysis.source_files)
            message = ResultMessage(
                job_id=job_id,
                source_files=clean,
                elapsed_time_ms=analysis.elapsed_time_ms,
            )
            if not is_transferable(message):
                raise AnalyzerError("Sanitized result is not transferable", context={"job_id": job_id})
            self._last_result = (job_id, clean)
            self.emit(message)
        except AnalysisCancelled:
            logger.info("Job %s cancelled", job_id)
            self.emit(CancelledMessage(job_id=job_id))
        except Exception as exc:
            logger.error("Job %s failed: %s", job_id, exc)
            self.emit(ErrorMessage.from_exception(job_id, exc))
        finally:
            root.removeHandler(handler)
            root.setLevel(previous_level)
            with self._tokens_lock:
                self._tokens.pop(job_id, None)

    def _cost_impact(self, request: CostImpactRequest) -> None:
        job_id = request.job_id
        try:
            if self._last_result is None or self._last_result[0] != job_id:
                raise AnalyzerError(
                    f"No analysis result available for job {job_id}", context={"job_id": job_id}
                )
            if self._backend is None:
                raise AnalyzerError("Analyzer is not initialized")
            table = self._backend.cost_impact(self._last_result[1], request.options)
            self.emit(CostTableMessage(job_id=job_id, cost_table=dict(table)))
        except Exception as exc:
            logger.error("Cost computation for job %s failed: %s", job_id, exc)
            self.emit(ErrorMessage.from_exception(job_id, exc))


def run_context(requests: Any, responses: Any, backend_ref: str) -> None:
    """Process entry point: serve requests until shutdown or queue closure."""
    context = AnalysisContext(responses, backend_ref)
    try:
        while True:
            try:
                request = requests.get()
            except (EOFError, OSError):
                break
            if not context.handle(request):
                break
    finally:
        context.close()

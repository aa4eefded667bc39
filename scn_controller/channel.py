"""Process-backed message channel to the isolated analysis context."""

from __future__ import annotations

import logging
import multiprocessing
import queue
import threading
from typing import Any, Callable, Optional

from scn_controller.messages import ContextExited, ShutdownRequest
from scn_controller.worker import run_context

logger = logging.getLogger(__name__)

MessageHandler = Callable[[Any], None]

_POLL_INTERVAL = 0.1
_STOP_READER = "__scn_stop_reader__"


class ProcessChannel:
    """Owns the context process, its two queues and the response reader thread.

    Messages read from the context are passed to ``on_message`` on the reader
    thread in arrival order. When the process dies without being asked to,
    a ContextExited message is delivered instead.
    """

    def __init__(self, backend: str, start_method: str = "spawn") -> None:
        self._backend = backend
        self._ctx = multiprocessing.get_context(start_method)
        self._process: Optional[multiprocessing.process.BaseProcess] = None
        self._requests: Any = None
        self._responses: Any = None
        self._reader: Optional[threading.Thread] = None
        self._closing = threading.Event()

    @property
    def is_alive(self) -> bool:
        return self._process is not None and self._process.is_alive()

    def start(self, on_message: MessageHandler) -> None:
        """Start the context process and the reader thread."""
        if self._process is not None:
            raise RuntimeError("Channel already started")
        self._closing.clear()
        self._requests = self._ctx.Queue()
        self._responses = self._ctx.Queue()
        self._process = self._ctx.Process(
            target=run_context,
            args=(self._requests, self._responses, self._backend),
            name="scn-analysis-context",
            daemon=True,
        )
        self._process.start()
        logger.debug("Analysis context started (pid=%s)", self._process.pid)
        self._reader = threading.Thread(
            target=self._read_loop,
            args=(on_message,),
            name="scn-response-reader",
            daemon=True,
        )
        self._reader.start()

    def send(self, message: Any) -> None:
        if self._requests is None or self._closing.is_set():
            raise RuntimeError("Channel is not open")
        self._requests.put(message)

    def close(self, timeout: float = 2.0) -> None:
        """Ask the context to exit, then join, terminate or kill it."""
        if self._process is None:
            return
        self._closing.set()
        process = self._process
        try:
            self._requests.put(ShutdownRequest())
        except (ValueError, OSError):
            logger.debug("Request queue already closed")
        process.join(timeout=timeout)
        if process.is_alive():
            logger.warning("Analysis context did not exit in time, terminating")
            process.terminate()
            process.join(timeout=1)
            if process.is_alive():
                process.kill()
                process.join(timeout=1)
        try:
            self._responses.put(_STOP_READER)
        except (ValueError, OSError):
            logger.debug("Response queue already closed")
        if self._reader is not None and self._reader is not threading.current_thread():
            self._reader.join(timeout=timeout)
        for q in (self._requests, self._responses):
            q.close()
            q.cancel_join_thread()
        self._process = None
        self._reader = None
        self._requests = None
        self._responses = None
        logger.debug("Analysis context stopped (exitcode=%s)", process.exitcode)

    def _read_loop(self, on_message: MessageHandler) -> None:
        responses = self._responses
        process = self._process
        assert responses is not None and process is not None
        while True:
            try:
                message = responses.get(timeout=_POLL_INTERVAL)
            except queue.Empty:
                if self._closing.is_set():
                    return
                if not process.is_alive():
                    logger.error("Analysis context exited unexpectedly (exitcode=%s)", process.exitcode)
                    self._deliver(on_message, ContextExited(exitcode=process.exitcode))
                    return
                continue
            except (EOFError, OSError, ValueError):
                if not self._closing.is_set():
                    self._deliver(on_message, ContextExited(exitcode=process.exitcode))
                return
            if isinstance(message, str) and message == _STOP_READER:
                return
            self._deliver(on_message, message)

    @staticmethod
    def _deliver(on_message: MessageHandler, message: Any) -> None:
        try:
            on_message(message)
        except Exception:
            logger.exception("Response handler failed for %s", type(message).__name__)

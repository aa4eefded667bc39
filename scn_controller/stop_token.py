"""Cooperative cancellation token for one analysis job."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from scn_common.errors import AnalysisCancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """
    Lightweight cooperative stop flag.

    One token belongs to exactly one job. Long-running work calls
    ``should_stop()`` between units of work and abandons the job when True.
    """

    def __init__(self, on_stop: Optional[Callable[[], None]] = None) -> None:
        self._on_stop = on_stop
        self._event = threading.Event()
        self._lock = threading.Lock()

    def request_stop(self) -> None:
        """Mark the token as stopped and trigger the callback once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
        if self._on_stop:
            try:
                self._on_stop()
            except Exception:
                logger.exception("Cancellation callback failed")

    def should_stop(self) -> bool:
        return self._event.is_set()

    def raise_if_stopped(self) -> None:
        if self._event.is_set():
            raise AnalysisCancelled("Analysis cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Block until stop is requested or ``timeout`` elapses."""
        return self._event.wait(timeout)

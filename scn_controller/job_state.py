"""Analysis job state machine primitives."""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class JobState(str, Enum):
    """Lifecycle of the single analysis job slot."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


_TERMINAL_STATES = {
    JobState.COMPLETED,
    JobState.CANCELLED,
    JobState.FAILED,
}


_ALLOWED_TRANSITIONS = {
    JobState.IDLE: {JobState.RUNNING},
    JobState.RUNNING: {JobState.COMPLETED, JobState.CANCELLED, JobState.FAILED},
    JobState.COMPLETED: {JobState.IDLE},
    JobState.CANCELLED: {JobState.IDLE},
    JobState.FAILED: {JobState.IDLE},
}


StateCallback = Callable[[JobState, Optional[str]], None]


class JobStateMachine:
    """Thread-safe job state tracker."""

    def __init__(self) -> None:
        self._state = JobState.IDLE
        self._lock = threading.RLock()
        self._reason: Optional[str] = None
        self._callbacks: list[StateCallback] = []

    @property
    def state(self) -> JobState:
        with self._lock:
            return self._state

    @property
    def reason(self) -> Optional[str]:
        with self._lock:
            return self._reason

    def is_terminal(self) -> bool:
        with self._lock:
            return self._state in _TERMINAL_STATES

    def is_running(self) -> bool:
        with self._lock:
            return self._state == JobState.RUNNING

    def register_callback(self, callback: StateCallback) -> None:
        """Register a callback invoked on every transition."""
        self._callbacks.append(callback)

    def transition(self, new_state: JobState, reason: Optional[str] = None) -> JobState:
        """Attempt a state transition; raise ValueError if invalid."""
        with self._lock:
            allowed = _ALLOWED_TRANSITIONS.get(self._state, set())
            if new_state not in allowed:
                raise ValueError(f"Invalid transition {self._state} -> {new_state}")
            self._state = new_state
            self._reason = reason
            for cb in list(self._callbacks):
                try:
                    cb(self._state, self._reason)
                except Exception:
                    logger.exception("Job state callback failed")
            return self._state

    def reset(self) -> None:
        """Return to IDLE from a terminal state; no-op when already idle."""
        with self._lock:
            if self._state == JobState.IDLE:
                return
        self.transition(JobState.IDLE)

    def snapshot(self) -> tuple[JobState, Optional[str]]:
        with self._lock:
            return self._state, self._reason

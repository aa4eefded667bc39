"""Thread-safe single-writer holder of the current OptionState."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable

from scn_options import state as ops
from scn_options.catalog import OPTION_TREE
from scn_options.models import OptionState, PresetName
from scn_options.tree import Forest

logger = logging.getLogger(__name__)

StateListener = Callable[[OptionState], None]


class OptionStore:
    """Owns the configuration edited by the options UI.

    Each update computes a complete new state and swaps it in under the lock,
    then notifies listeners once. Readers calling ``snapshot()`` therefore see
    either the state before a bulk edit or the state after it.
    """

    def __init__(
        self,
        initial: OptionState | None = None,
        forest: Forest = OPTION_TREE,
    ) -> None:
        self._state = initial if initial is not None else ops.apply_preset(PresetName.DEFAULT)
        self._forest = forest
        self._lock = threading.RLock()
        self._listeners: list[StateListener] = []

    @property
    def forest(self) -> Forest:
        return self._forest

    def snapshot(self) -> OptionState:
        with self._lock:
            return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def update(self, fn: Callable[[OptionState], OptionState]) -> OptionState:
        """Apply ``fn`` to the current state atomically."""
        with self._lock:
            new_state = fn(self._state)
            self._state = new_state
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(new_state)
            except Exception:
                logger.exception("Option state listener failed")
        return new_state

    def replace(self, new_state: OptionState) -> OptionState:
        return self.update(lambda _current: new_state)

    def is_selected(self, key: str) -> bool:
        return ops.is_selected(self.snapshot(), key)

    def set_one(self, key: str, value: bool) -> OptionState:
        return self.update(lambda current: ops.set_one(current, key, value))

    def set_many(self, keys: Iterable[str], value: bool) -> OptionState:
        frozen_keys = tuple(keys)
        return self.update(lambda current: ops.set_many(current, frozen_keys, value))

    def apply_preset(self, name: PresetName | str) -> OptionState:
        return self.replace(ops.apply_preset(name))

    def select_all(self) -> OptionState:
        return self.update(lambda current: ops.select_all(current, self._forest))

    def deselect_all(self) -> OptionState:
        return self.update(lambda current: ops.deselect_all(current, self._forest))

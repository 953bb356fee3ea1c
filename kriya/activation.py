"""Single vs. double activation disambiguation for edges.

A single activation cycles an edge's style and a double activation deletes
it, but both arrive from the same control. A single activation is therefore
deferred for a short window; a second activation on the same target inside
that window cancels it and runs the double action instead.
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Dict, Optional, Protocol

from PySide6.QtCore import QObject, QTimer

from .constants import EDGE_ACTIVATION_INTERVAL_MS


class ScheduledCall(Protocol):
    """Handle of a deferred callback."""

    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Runs a callback once after a delay, unless cancelled."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        ...


class _TimerCall:
    def __init__(self, timer: QTimer) -> None:
        self._timer = timer
        self._cancelled = False

    def cancel(self) -> None:
        if self._cancelled:
            return
        self._cancelled = True
        self._timer.stop()
        self._timer.deleteLater()


class QtScheduler(QObject):
    """Scheduler backed by single-shot ``QTimer`` objects parented to itself."""

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        timer = QTimer(self)
        timer.setSingleShot(True)
        timer.timeout.connect(callback)
        timer.timeout.connect(timer.deleteLater)
        timer.start(delay_ms)
        return _TimerCall(timer)


class ActivationDisambiguator:
    """Coalesce activations per target into a single or a double action."""

    def __init__(
        self,
        scheduler: Scheduler,
        on_single: Callable[[str], object],
        on_double: Callable[[str], object],
        interval_ms: int = EDGE_ACTIVATION_INTERVAL_MS,
    ) -> None:
        self._scheduler = scheduler
        self._on_single = on_single
        self._on_double = on_double
        self._interval_ms = interval_ms
        self._pending: Dict[str, ScheduledCall] = {}

    def is_pending(self, target_id: str) -> bool:
        return target_id in self._pending

    def activate(self, target_id: str) -> None:
        """Schedule the single action, restarting any window already open for the target."""
        self._cancel(target_id)
        self._pending[target_id] = self._scheduler.schedule(
            self._interval_ms, partial(self._fire, target_id)
        )

    def activate_twice(self, target_id: str) -> None:
        """Drop the pending single action for the target and run the double action now."""
        self._cancel(target_id)
        self._on_double(target_id)

    def cancel_all(self) -> None:
        for target_id in list(self._pending):
            self._cancel(target_id)

    def _cancel(self, target_id: str) -> None:
        call: Optional[ScheduledCall] = self._pending.pop(target_id, None)
        if call is not None:
            call.cancel()

    def _fire(self, target_id: str) -> None:
        if self._pending.pop(target_id, None) is None:
            return
        self._on_single(target_id)

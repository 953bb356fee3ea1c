"""Shared pytest fixtures for Qt application lifecycle and Kriya collaborators."""

import os
import sys
from typing import Any, Callable, Dict, List, Optional

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PySide6.QtCore import QCoreApplication
from PySide6.QtGui import QGuiApplication


class ManualCall:
    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler driven by an explicit clock so activation windows are deterministic."""

    def __init__(self) -> None:
        self.now_ms = 0
        self.calls: List[ManualCall] = []

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> ManualCall:
        call = ManualCall(self.now_ms + delay_ms, callback)
        self.calls.append(call)
        return call

    @property
    def pending(self) -> List[ManualCall]:
        return [call for call in self.calls if not call.cancelled and not call.fired]

    def advance(self, ms: int) -> None:
        self.now_ms += ms
        due = sorted(
            (call for call in self.pending if call.due_ms <= self.now_ms),
            key=lambda call: call.due_ms,
        )
        for call in due:
            if call.cancelled:
                continue
            call.fired = True
            call.callback()


class MemoryStore:
    """In-memory snapshot store recording every save."""

    def __init__(self, snapshot: Optional[Dict[str, Any]] = None) -> None:
        self.snapshot = snapshot
        self.saves: List[Dict[str, Any]] = []

    def save(self, snapshot: Dict[str, Any]) -> None:
        self.snapshot = snapshot
        self.saves.append(snapshot)

    def load(self) -> Optional[Dict[str, Any]]:
        return self.snapshot


@pytest.fixture(scope="session")
def app():
    """Provide a single QGuiApplication for all tests."""
    instance = QGuiApplication.instance()
    if instance is None:
        instance = QGuiApplication(sys.argv)

    yield instance

    QCoreApplication.processEvents()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def store():
    return MemoryStore()

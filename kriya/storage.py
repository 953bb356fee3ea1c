"""Snapshot persistence and JSON file import/export."""

from __future__ import annotations

import json
import os
import re
from typing import Any, Dict, Optional, Protocol

from PySide6.QtCore import QSettings, QUrl

from .constants import (
    DEFAULT_EXPORT_NAME,
    SETTINGS_APPLICATION,
    SETTINGS_ORGANIZATION,
    STORAGE_KEY,
)


SETTINGS_FILE_ENV = "KRIYA_SETTINGS_FILE"


class SnapshotStore(Protocol):
    """Opaque key-value store holding the latest chart snapshot."""

    def save(self, snapshot: Dict[str, Any]) -> None:
        ...

    def load(self) -> Optional[Dict[str, Any]]:
        ...


def create_settings() -> QSettings:
    """Return the settings backend, honouring ``KRIYA_SETTINGS_FILE``."""
    settings_file = os.environ.get(SETTINGS_FILE_ENV)
    if settings_file:
        return QSettings(settings_file, QSettings.IniFormat)
    return QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)


class SettingsStore:
    """Keep the snapshot as a JSON string under a single ``QSettings`` key."""

    def __init__(self, settings: Optional[QSettings] = None, key: str = STORAGE_KEY) -> None:
        self._settings = settings if settings is not None else create_settings()
        self._key = key

    def save(self, snapshot: Dict[str, Any]) -> None:
        self._settings.setValue(self._key, json.dumps(snapshot, ensure_ascii=False))
        self._settings.sync()  # Ensure settings are written to disk

    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored snapshot, or None when nothing was saved yet.

        Raises:
            json.JSONDecodeError: If the stored value is not valid JSON.
        """
        raw = self._settings.value(self._key, "", type=str)
        if not raw:
            return None
        return json.loads(raw)


def normalize_file_path(file_path: str) -> str:
    """Convert file URLs into local paths, including Windows file URLs."""
    if file_path.startswith("file:"):
        url = QUrl(file_path)
        if url.isLocalFile():
            file_path = url.toLocalFile()
        else:
            file_path = url.path()
    if os.name == "nt" and file_path.startswith("/") and len(file_path) > 2 and file_path[2] == ":":
        file_path = file_path[1:]
    return file_path


def suggested_file_name(title: str) -> str:
    """Derive an export file name such as ``my-flowchart.json`` from a chart title."""
    slug = title.strip().lower()
    slug = re.sub(r"[^a-z0-9\-_\s]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = slug[:50] or DEFAULT_EXPORT_NAME
    return f"{slug}.json"


def write_flowchart_file(file_path: str, snapshot: Dict[str, Any]) -> str:
    """Write a snapshot as indented JSON and return the path actually used.

    A ``.json`` extension is appended when the path has none.
    """
    file_path = normalize_file_path(file_path)
    if not os.path.splitext(file_path)[1]:
        file_path += ".json"
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(snapshot, f, ensure_ascii=False, indent=2)
    return file_path


def read_flowchart_file(file_path: str) -> Any:
    """Parse a JSON file; shape validation is left to ``Flowchart.from_dict``."""
    file_path = normalize_file_path(file_path)
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)

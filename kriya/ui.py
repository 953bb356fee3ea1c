"""UI creation functions for Kriya."""

from __future__ import annotations

import os
import sys

from PySide6.QtQml import QQmlApplicationEngine

from .model import FlowModel
from .qml import KRIYA_QML
from .storage import SettingsStore, normalize_file_path


def create_kriya_window(flow_model: FlowModel) -> QQmlApplicationEngine:
    """Create and return a QQmlApplicationEngine hosting the Kriya canvas."""
    engine = QQmlApplicationEngine()
    engine.rootContext().setContextProperty("flowModel", flow_model)
    engine.loadData(KRIYA_QML.encode("utf-8"))
    return engine


def main() -> int:
    """Main entry point for the Kriya editor."""
    from PySide6.QtWidgets import QApplication

    smoke_mode = "--smoke" in sys.argv or os.environ.get("KRIYA_SMOKE") == "1"

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)

    flow_model = FlowModel(store=SettingsStore())
    flow_model.restore()

    engine = create_kriya_window(flow_model)
    if not engine.rootObjects():
        return 1

    if smoke_mode:
        return 0

    # Import file from command line argument if provided
    args = [arg for arg in sys.argv[1:] if not arg.startswith("--")]
    if args:
        file_path = normalize_file_path(args[0])
        if os.path.exists(file_path):
            flow_model.importChart(file_path)

    return app.exec()

"""Kriya flowchart editor built with PySide6 and QML.

Tasks and distractions are placed on a canvas, linked with directed edges
and persisted after every change. The state engine lives in plain Python
(:mod:`kriya.flowchart`, :mod:`kriya.interaction`, :mod:`kriya.geometry`,
:mod:`kriya.activation`); :class:`FlowModel` exposes it to QML.
"""

from .activation import ActivationDisambiguator, QtScheduler
from .constants import DISTRACTION_COLORS, EDGE_ACTIVATION_INTERVAL_MS, STATUS_COLORS
from .flowchart import Flowchart, FlowchartFormatError
from .geometry import EdgeAnchors, Rect, resolve_edge_anchors
from .interaction import InteractionState, LinkRequest
from .model import FlowModel
from .qml import KRIYA_QML
from .storage import SettingsStore
from .types import (
    DistractionNode,
    EdgeStyle,
    FlowEdge,
    NodeType,
    TaskNode,
    TaskStatus,
)
from .ui import create_kriya_window, main

__all__ = [
    "ActivationDisambiguator",
    "DISTRACTION_COLORS",
    "DistractionNode",
    "EDGE_ACTIVATION_INTERVAL_MS",
    "EdgeAnchors",
    "EdgeStyle",
    "FlowEdge",
    "FlowModel",
    "Flowchart",
    "FlowchartFormatError",
    "InteractionState",
    "KRIYA_QML",
    "LinkRequest",
    "QtScheduler",
    "Rect",
    "STATUS_COLORS",
    "SettingsStore",
    "TaskNode",
    "TaskStatus",
    "create_kriya_window",
    "main",
    "resolve_edge_anchors",
]

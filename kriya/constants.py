"""Constants and presets for Kriya flowcharts."""

from typing import Dict, Tuple

from .types import EdgeStyle, NodeType, TaskStatus


STORAGE_KEY = "kriya-flowchart"
SETTINGS_ORGANIZATION = "Kriya"
SETTINGS_APPLICATION = "Kriya"

DEFAULT_CHART_TITLE = "My Flowchart"
UNTITLED = "Untitled"
DEFAULT_EXPORT_NAME = "flowchart"

NODE_PRESETS: Dict[NodeType, Dict[str, str]] = {
    NodeType.TASK: {
        "id_prefix": "n",
        "title": "New Task",
    },
    NodeType.DISTRACTION: {
        "id_prefix": "n",
        "title": "Distr.",
    },
}
EDGE_ID_PREFIX = "e"

STATUS_CYCLE: Tuple[TaskStatus, ...] = (
    TaskStatus.TODO,
    TaskStatus.IN_PROGRESS,
    TaskStatus.DONE,
)

EDGE_STYLE_CYCLE: Tuple[EdgeStyle, ...] = (
    EdgeStyle.NORMAL,
    EdgeStyle.DOTTED,
    EdgeStyle.REVERSED,
)

STATUS_COLORS: Dict[TaskStatus, str] = {
    TaskStatus.TODO: "#e74c3c",
    TaskStatus.IN_PROGRESS: "#f1c40f",
    TaskStatus.DONE: "#2ecc71",
}

DISTRACTION_COLORS: Tuple[str, ...] = (
    "#333333",
    "#3498db",
    "#c0392b",
    "#e75c12",
    "#2ecc71",
    "#e9c40f",
    "#f0f0f0",
    "#9b59b6",
)
DISTRACTION_TYPE_COUNT = len(DISTRACTION_COLORS)

# Window in which a second edge activation turns a style cycle into a delete.
EDGE_ACTIVATION_INTERVAL_MS = 250

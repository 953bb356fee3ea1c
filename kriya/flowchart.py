"""Flowchart aggregate and its snapshot codec.

A :class:`Flowchart` owns the ordered node and edge collections of one
diagram. It is plain Python so the state machines and the serialization
contract can be exercised without a running Qt application; the Qt model in
:mod:`kriya.model` wraps it for the rendering surface.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .constants import (
    DEFAULT_CHART_TITLE,
    DISTRACTION_TYPE_COUNT,
    EDGE_STYLE_CYCLE,
    NODE_PRESETS,
    STATUS_CYCLE,
    UNTITLED,
)
from .types import (
    DistractionNode,
    EdgeStyle,
    FlowEdge,
    Node,
    NodeType,
    TaskNode,
    TaskStatus,
    next_in_cycle,
)


class FlowchartFormatError(ValueError):
    """Raised when a snapshot does not have the flowchart shape."""


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Return ``moment`` (default: now) as an ISO-8601 UTC string with a ``Z`` suffix."""
    if moment is None:
        moment = datetime.now(timezone.utc)
    elif moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


# --- State machines ---------------------------------------------------------
def advance_task_status(node: TaskNode, now: Optional[datetime] = None) -> TaskStatus:
    """Move a task one step along todo -> in-progress -> done -> todo.

    Entering ``done`` stamps ``completed_time``; every other state clears it.
    """
    node.status = next_in_cycle(STATUS_CYCLE, node.status)
    if node.status is TaskStatus.DONE:
        node.completed_time = format_timestamp(now)
    else:
        node.completed_time = None
    return node.status


def advance_distraction_type(node: DistractionNode) -> int:
    node.distraction_type = (node.distraction_type + 1) % DISTRACTION_TYPE_COUNT
    return node.distraction_type


def next_edge_style(style: EdgeStyle) -> EdgeStyle:
    return next_in_cycle(EDGE_STYLE_CYCLE, style)


class Flowchart:
    """Ordered nodes and edges of a single diagram.

    Node order is insertion order and doubles as z-order on the canvas.
    Mutators return ``False`` when the referenced id is unknown so callers
    can skip persisting and repainting.
    """

    def __init__(
        self,
        title: str = DEFAULT_CHART_TITLE,
        nodes: Optional[List[Node]] = None,
        edges: Optional[List[FlowEdge]] = None,
    ) -> None:
        self.title = title
        self.nodes: List[Node] = list(nodes or [])
        self.edges: List[FlowEdge] = list(edges or [])

    # --- Queries ------------------------------------------------------------
    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[FlowEdge]:
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def node_row(self, node_id: str) -> int:
        for row, node in enumerate(self.nodes):
            if node.id == node_id:
                return row
        return -1

    def edges_touching(self, node_id: str) -> List[FlowEdge]:
        return [edge for edge in self.edges if node_id in (edge.source_id, edge.target_id)]

    # --- Structure ----------------------------------------------------------
    def add_node(self, node_id: str, node_type: NodeType, title: str = "") -> Node:
        """Append a node at the origin with the defaults of its variant."""
        label = title if title and title.strip() else NODE_PRESETS[node_type]["title"]
        node: Node
        if node_type is NodeType.TASK:
            node = TaskNode(id=node_id, title=label)
        else:
            node = DistractionNode(id=node_id, title=label)
        self.nodes.append(node)
        return node

    def add_edge(self, edge_id: str, source_id: str, target_id: str) -> FlowEdge:
        """Append an edge.

        Endpoints are not checked here: the linking gesture only offers ids of
        nodes that are currently on the canvas.
        """
        edge = FlowEdge(id=edge_id, source_id=source_id, target_id=target_id)
        self.edges.append(edge)
        return edge

    def delete_node(self, node_id: str) -> bool:
        """Remove a node together with every edge that references it."""
        row = self.node_row(node_id)
        if row < 0:
            return False
        self.nodes.pop(row)
        self.edges = [
            edge for edge in self.edges if edge.source_id != node_id and edge.target_id != node_id
        ]
        return True

    def delete_edge(self, edge_id: str) -> bool:
        for idx, edge in enumerate(self.edges):
            if edge.id == edge_id:
                self.edges.pop(idx)
                return True
        return False

    # --- Field edits --------------------------------------------------------
    def set_title(self, text: str) -> None:
        self.title = text.strip() or UNTITLED

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        node.x = float(x)
        node.y = float(y)
        return True

    def set_node_title(self, node_id: str, text: str) -> bool:
        node = self.get_node(node_id)
        if node is None:
            return False
        node.title = text.strip() or UNTITLED
        return True

    def set_task_details(self, node_id: str, xp: int, deadline: str) -> bool:
        node = self.get_node(node_id)
        if not isinstance(node, TaskNode):
            return False
        node.xp = max(0, int(xp))
        node.deadline = deadline.strip()
        return True

    def advance_status(self, node_id: str, now: Optional[datetime] = None) -> bool:
        node = self.get_node(node_id)
        if not isinstance(node, TaskNode):
            return False
        advance_task_status(node, now)
        return True

    def advance_distraction_type(self, node_id: str) -> bool:
        node = self.get_node(node_id)
        if not isinstance(node, DistractionNode):
            return False
        advance_distraction_type(node)
        return True

    def cycle_edge_style(self, edge_id: str) -> bool:
        edge = self.get_edge(edge_id)
        if edge is None:
            return False
        edge.style = next_edge_style(edge.style)
        return True

    # --- Serialization ------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """Serialize the chart to the persisted/exported JSON shape.

        Returns:
            Dictionary with ``title``, ``nodes`` and ``edges``. Each node only
            carries the fields of its own variant.
        """
        return {
            "title": self.title,
            "nodes": [node_to_dict(node) for node in self.nodes],
            "edges": [edge_to_dict(edge) for edge in self.edges],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Flowchart":
        """Build a chart from a snapshot produced by :meth:`to_dict`.

        Args:
            data: Parsed JSON snapshot.

        Returns:
            A new chart; node and edge order is preserved. Edges whose source
            or target is not among the loaded nodes are dropped.

        Raises:
            FlowchartFormatError: If the snapshot is structurally invalid.
        """
        if not isinstance(data, dict):
            raise FlowchartFormatError("Flowchart snapshot must be a JSON object")

        title = data.get("title")
        if title is None:
            title = DEFAULT_CHART_TITLE
        elif not isinstance(title, str):
            raise FlowchartFormatError("Flowchart title must be a string")

        nodes_data = data.get("nodes", [])
        edges_data = data.get("edges", [])
        if not isinstance(nodes_data, list):
            raise FlowchartFormatError("Flowchart 'nodes' must be a list")
        if not isinstance(edges_data, list):
            raise FlowchartFormatError("Flowchart 'edges' must be a list")

        nodes: List[Node] = []
        node_ids = set()
        for node_data in nodes_data:
            node = node_from_dict(node_data)
            if node.id in node_ids:
                raise FlowchartFormatError(f"Duplicate node id: {node.id!r}")
            node_ids.add(node.id)
            nodes.append(node)

        edges: List[FlowEdge] = []
        edge_ids = set()
        for edge_data in edges_data:
            edge = edge_from_dict(edge_data)
            if edge.id in edge_ids:
                raise FlowchartFormatError(f"Duplicate edge id: {edge.id!r}")
            edge_ids.add(edge.id)
            if edge.source_id not in node_ids or edge.target_id not in node_ids:
                continue
            edges.append(edge)

        return cls(title=title, nodes=nodes, edges=edges)


def node_to_dict(node: Node) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": node.id,
        "type": node.node_type.value,
        "x": node.x,
        "y": node.y,
        "title": node.title,
    }
    if isinstance(node, TaskNode):
        data["status"] = node.status.value
        data["xp"] = node.xp
        data["deadline"] = node.deadline
        data["completedTime"] = node.completed_time
    else:
        data["distractionType"] = node.distraction_type
    return data


def edge_to_dict(edge: FlowEdge) -> Dict[str, Any]:
    return {
        "id": edge.id,
        "sourceId": edge.source_id,
        "targetId": edge.target_id,
        "style": edge.style.value,
    }


def node_from_dict(data: Any) -> Node:
    """Parse one node object, dispatching on its ``type`` tag."""
    if not isinstance(data, dict):
        raise FlowchartFormatError("Node entries must be JSON objects")

    node_id = _required_id(data, "id", "Node")
    try:
        node_type = NodeType(data.get("type"))
    except ValueError as exc:
        raise FlowchartFormatError(f"Unknown node type: {data.get('type')!r}") from exc

    x = _number(data.get("x", 0.0), "x")
    y = _number(data.get("y", 0.0), "y")
    title = _optional_str(data.get("title"), "title")

    if node_type is NodeType.TASK:
        node = TaskNode(
            id=node_id,
            x=x,
            y=y,
            title=title,
            xp=_count(data.get("xp", 0), "xp"),
            deadline=_optional_str(data.get("deadline"), "deadline"),
            completed_time=_nullable_str(data.get("completedTime"), "completedTime"),
        )
        # Snapshots written before tasks had a lifecycle carry no status;
        # they load as todo, which never has a completion time.
        status_value = data.get("status")
        if not status_value:
            node.status = TaskStatus.TODO
            node.completed_time = None
            return node
        try:
            node.status = TaskStatus(status_value)
        except ValueError as exc:
            raise FlowchartFormatError(f"Unknown task status: {status_value!r}") from exc
        if (node.completed_time is not None) != (node.status is TaskStatus.DONE):
            raise FlowchartFormatError(
                f"Task {node_id!r}: completedTime must be set exactly when status is 'done'"
            )
        return node

    distraction_value = data.get("distractionType")
    distraction_type = 0 if distraction_value is None else _count(distraction_value, "distractionType")
    if distraction_type >= DISTRACTION_TYPE_COUNT:
        raise FlowchartFormatError(f"distractionType out of range: {distraction_type}")
    return DistractionNode(id=node_id, x=x, y=y, title=title, distraction_type=distraction_type)


def edge_from_dict(data: Any) -> FlowEdge:
    if not isinstance(data, dict):
        raise FlowchartFormatError("Edge entries must be JSON objects")

    style_value = data.get("style") or EdgeStyle.NORMAL.value
    try:
        style = EdgeStyle(style_value)
    except ValueError as exc:
        raise FlowchartFormatError(f"Unknown edge style: {style_value!r}") from exc

    return FlowEdge(
        id=_required_id(data, "id", "Edge"),
        source_id=_required_id(data, "sourceId", "Edge"),
        target_id=_required_id(data, "targetId", "Edge"),
        style=style,
    )


# --- Field validation helpers -----------------------------------------------
def _required_id(data: Dict[str, Any], key: str, kind: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise FlowchartFormatError(f"{kind} is missing '{key}'")
    return value


def _number(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FlowchartFormatError(f"'{key}' must be a number, got {value!r}")
    return float(value)


def _count(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FlowchartFormatError(f"'{key}' must be an integer, got {value!r}")
    if isinstance(value, float) and not value.is_integer():
        raise FlowchartFormatError(f"'{key}' must be an integer, got {value!r}")
    if value < 0:
        raise FlowchartFormatError(f"'{key}' must not be negative, got {value!r}")
    return int(value)


def _optional_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise FlowchartFormatError(f"'{key}' must be a string, got {value!r}")
    return value


def _nullable_str(value: Any, key: str) -> Optional[str]:
    if value is None:
        return None
    return _optional_str(value, key)

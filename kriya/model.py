"""Core FlowModel class for Kriya.

This module provides the Qt model exposing flowchart nodes and edges to the
QML canvas, and the gesture handlers the canvas calls into. Every successful
mutation writes the full snapshot to the store and asks the canvas to
repaint nodes and edges.
"""

from __future__ import annotations

import re
from datetime import datetime
from itertools import count
from typing import Any, Callable, Dict, List, Optional

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    Property,
    Qt,
    Signal,
    Slot,
)

from .activation import ActivationDisambiguator, QtScheduler, Scheduler
from .constants import DISTRACTION_COLORS, EDGE_ID_PREFIX, NODE_PRESETS, STATUS_COLORS
from .flowchart import Flowchart, edge_to_dict
from .geometry import Rect, resolve_edge_anchors
from .interaction import InteractionState
from .storage import (
    SnapshotStore,
    read_flowchart_file,
    suggested_file_name,
    write_flowchart_file,
)
from .types import DistractionNode, EdgeStyle, FlowEdge, Node, NodeType, TaskNode

_ID_SUFFIX_RE = re.compile(r"[A-Za-z_]*(\d+)")


class FlowModel(QAbstractListModel):
    """Qt model exposing flowchart nodes to QML."""

    IdRole = Qt.UserRole + 1
    TypeRole = Qt.UserRole + 2
    XRole = Qt.UserRole + 3
    YRole = Qt.UserRole + 4
    TitleRole = Qt.UserRole + 5
    StatusRole = Qt.UserRole + 6
    StatusColorRole = Qt.UserRole + 7
    XpRole = Qt.UserRole + 8
    DeadlineRole = Qt.UserRole + 9
    CompletedTimeRole = Qt.UserRole + 10
    DistractionTypeRole = Qt.UserRole + 11
    DistractionColorRole = Qt.UserRole + 12
    SelectedRole = Qt.UserRole + 13
    LinkSourceRole = Qt.UserRole + 14
    VisibleRole = Qt.UserRole + 15

    nodesChanged = Signal()
    edgesChanged = Signal()
    titleChanged = Signal()
    selectionChanged = Signal()
    viewOptionsChanged = Signal()
    exportCompleted = Signal(str)  # Emitted with file path after a successful export
    importCompleted = Signal(str)  # Emitted with file path after a successful import
    errorOccurred = Signal(str)  # Emitted with a user-facing message on failure

    def __init__(
        self,
        store: Optional[SnapshotStore] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__()
        self._chart = Flowchart()
        self._interaction = InteractionState()
        self._store = store
        self._clock = clock
        self._id_source = count(1)
        self._show_distractions = True
        self._show_details = True
        if scheduler is None:
            scheduler = QtScheduler(self)
        self._edge_activation = ActivationDisambiguator(
            scheduler,
            on_single=self.cycleEdgeStyle,
            on_double=self.deleteEdge,
        )

    # --- Internal helpers ---------------------------------------------------
    def _next_id(self, prefix: str) -> str:
        return f"{prefix}{next(self._id_source)}"

    def _resume_ids(self) -> None:
        """Restart id generation above every numeric suffix in the chart."""
        highest = 0
        ids = [node.id for node in self._chart.nodes] + [edge.id for edge in self._chart.edges]
        for item_id in ids:
            match = _ID_SUFFIX_RE.fullmatch(item_id)
            if match:
                highest = max(highest, int(match.group(1)))
        self._id_source = count(highest + 1)

    def _is_visible(self, node: Node) -> bool:
        return self._show_distractions or node.node_type is not NodeType.DISTRACTION

    def _node_changed(self, node_id: str, roles: List[int]) -> None:
        row = self._chart.node_row(node_id)
        if row < 0:
            return
        index = self.index(row, 0)
        self.dataChanged.emit(index, index, roles)

    def _set_interaction(self, state: InteractionState) -> None:
        previous = self._interaction
        if state == previous:
            return
        self._interaction = state
        touched = {
            previous.selected_id,
            previous.link_start_id,
            state.selected_id,
            state.link_start_id,
        }
        for node_id in touched:
            if node_id:
                self._node_changed(node_id, [self.SelectedRole, self.LinkSourceRole])
        self.selectionChanged.emit()

    def _request_render(self) -> None:
        self.nodesChanged.emit()
        self.edgesChanged.emit()

    def _persist(self) -> None:
        if self._store is not None:
            self._store.save(self._chart.to_dict())

    def _commit(self) -> None:
        self._persist()
        self._request_render()

    def _replace_chart(self, chart: Flowchart) -> None:
        self._edge_activation.cancel_all()
        self.beginResetModel()
        self._chart = chart
        self._interaction = InteractionState()
        self.endResetModel()
        self._resume_ids()
        self.titleChanged.emit()
        self.selectionChanged.emit()

    def _report_error(self, message: str) -> None:
        self.errorOccurred.emit(message)
        print(message)

    # --- Qt model overrides -------------------------------------------------
    def rowCount(self, parent: QModelIndex | None = QModelIndex()) -> int:  # type: ignore[override]
        return len(self._chart.nodes)

    def data(self, index: QModelIndex, role: int = Qt.DisplayRole):  # type: ignore[override]
        if not index.isValid() or not (0 <= index.row() < len(self._chart.nodes)):
            return None

        node = self._chart.nodes[index.row()]
        is_task = isinstance(node, TaskNode)
        if role == self.IdRole:
            return node.id
        if role == self.TypeRole:
            return node.node_type.value
        if role == self.XRole:
            return node.x
        if role == self.YRole:
            return node.y
        if role in (self.TitleRole, Qt.DisplayRole):
            return node.title
        if role == self.StatusRole:
            return node.status.value if is_task else ""
        if role == self.StatusColorRole:
            return STATUS_COLORS[node.status] if is_task else ""
        if role == self.XpRole:
            return node.xp if is_task else 0
        if role == self.DeadlineRole:
            return node.deadline if is_task else ""
        if role == self.CompletedTimeRole:
            return (node.completed_time or "") if is_task else ""
        if role == self.DistractionTypeRole:
            return node.distraction_type if isinstance(node, DistractionNode) else -1
        if role == self.DistractionColorRole:
            if isinstance(node, DistractionNode):
                return DISTRACTION_COLORS[node.distraction_type]
            return ""
        if role == self.SelectedRole:
            return node.id == self._interaction.selected_id
        if role == self.LinkSourceRole:
            return node.id == self._interaction.link_start_id
        if role == self.VisibleRole:
            return self._is_visible(node)
        return None

    def roleNames(self) -> Dict[int, bytes]:  # type: ignore[override]
        return {
            self.IdRole: b"nodeId",
            self.TypeRole: b"nodeType",
            self.XRole: b"x",
            self.YRole: b"y",
            self.TitleRole: b"title",
            self.StatusRole: b"status",
            self.StatusColorRole: b"statusColor",
            self.XpRole: b"xp",
            self.DeadlineRole: b"deadline",
            self.CompletedTimeRole: b"completedTime",
            self.DistractionTypeRole: b"distractionType",
            self.DistractionColorRole: b"distractionColor",
            self.SelectedRole: b"selected",
            self.LinkSourceRole: b"linkSource",
            self.VisibleRole: b"nodeVisible",
        }

    # --- Properties exposed to QML -----------------------------------------
    @Property(list, notify=edgesChanged)
    def edges(self) -> List[Dict[str, str]]:
        """Edges the canvas should paint: both endpoints present and visible."""
        visible_ids = {node.id for node in self._chart.nodes if self._is_visible(node)}
        return [
            edge_to_dict(edge)
            for edge in self._chart.edges
            if edge.source_id in visible_ids and edge.target_id in visible_ids
        ]

    @Property(int, notify=nodesChanged)
    def count(self) -> int:
        return len(self._chart.nodes)

    @Property(str, notify=titleChanged)
    def title(self) -> str:
        return self._chart.title

    @Property(str, notify=selectionChanged)
    def selectedNodeId(self) -> str:
        return self._interaction.selected_id or ""

    @Property(str, notify=selectionChanged)
    def linkStartId(self) -> str:
        return self._interaction.link_start_id or ""

    @Property(bool, notify=viewOptionsChanged)
    def showDistractions(self) -> bool:
        return self._show_distractions

    @Property(bool, notify=viewOptionsChanged)
    def showDetails(self) -> bool:
        return self._show_details

    # --- Python accessors ---------------------------------------------------
    @property
    def flowchart(self) -> Flowchart:
        return self._chart

    @property
    def interaction(self) -> InteractionState:
        return self._interaction

    def getNode(self, node_id: str) -> Optional[Node]:
        return self._chart.get_node(node_id)

    def getEdge(self, edge_id: str) -> Optional[FlowEdge]:
        return self._chart.get_edge(edge_id)

    def isEdgeActivationPending(self, edge_id: str) -> bool:
        return self._edge_activation.is_pending(edge_id)

    # --- Node management ----------------------------------------------------
    @Slot(str, str, result=str)
    def addNode(self, node_type: str, title: str = "") -> str:
        try:
            kind = NodeType(node_type.upper())
        except ValueError:
            return ""
        node_id = self._next_id(NODE_PRESETS[kind]["id_prefix"])
        row = len(self._chart.nodes)
        self.beginInsertRows(QModelIndex(), row, row)
        self._chart.add_node(node_id, kind, title)
        self.endInsertRows()
        self._commit()
        return node_id

    @Slot(result=str)
    def addTask(self) -> str:
        return self.addNode(NodeType.TASK.value, "")

    @Slot(result=str)
    def addDistraction(self) -> str:
        return self.addNode(NodeType.DISTRACTION.value, "")

    @Slot(str, float, float)
    def moveNode(self, node_id: str, x: float, y: float) -> None:
        node = self._chart.get_node(node_id)
        if node is None or (node.x == x and node.y == y):
            return
        self._chart.move_node(node_id, x, y)
        self._node_changed(node_id, [self.XRole, self.YRole])
        self._commit()

    @Slot(str, str)
    def setNodeTitle(self, node_id: str, text: str) -> None:
        node = self._chart.get_node(node_id)
        if node is None:
            return
        previous = node.title
        self._chart.set_node_title(node_id, text)
        if node.title == previous:
            return
        self._node_changed(node_id, [self.TitleRole])
        self._commit()

    @Slot(str)
    def advanceStatus(self, node_id: str) -> None:
        """Cycle a task's status when its status indicator is activated."""
        now = self._clock() if self._clock is not None else None
        if not self._chart.advance_status(node_id, now):
            return
        self._node_changed(
            node_id, [self.StatusRole, self.StatusColorRole, self.CompletedTimeRole]
        )
        self._commit()

    @Slot(str)
    def advanceDistractionType(self, node_id: str) -> None:
        """Cycle a distraction's category when its color bar is activated."""
        if not self._chart.advance_distraction_type(node_id):
            return
        self._node_changed(node_id, [self.DistractionTypeRole, self.DistractionColorRole])
        self._commit()

    @Slot(str, str, str)
    def setTaskDetails(self, node_id: str, xp_text: str, deadline: str) -> None:
        """Set a task's XP and deadline from the details form.

        XP input that is not a whole number is stored as 0.
        """
        try:
            xp = int(str(xp_text).strip() or 0)
        except ValueError:
            xp = 0
        if not self._chart.set_task_details(node_id, xp, deadline or ""):
            return
        self._node_changed(node_id, [self.XpRole, self.DeadlineRole])
        self._commit()

    @Slot(str)
    def deleteNode(self, node_id: str) -> None:
        row = self._chart.node_row(node_id)
        if row < 0:
            return
        self.beginRemoveRows(QModelIndex(), row, row)
        self._chart.delete_node(node_id)
        self.endRemoveRows()
        self._set_interaction(self._interaction.forget(node_id).deselect())
        self._commit()

    @Slot()
    def deleteSelected(self) -> None:
        if self._interaction.selected_id:
            self.deleteNode(self._interaction.selected_id)

    # --- Selection and linking ----------------------------------------------
    @Slot(str)
    def selectNode(self, node_id: str) -> None:
        if self._chart.get_node(node_id) is None:
            return
        self._set_interaction(self._interaction.select(node_id))

    @Slot()
    def deselect(self) -> None:
        self._set_interaction(self._interaction.deselect())

    @Slot(str)
    def activateNode(self, node_id: str) -> None:
        """Feed a node activation into the linking gesture."""
        if self._chart.get_node(node_id) is None:
            return
        state, request = self._interaction.activate_node(node_id)
        self._set_interaction(state)
        if request is None:
            return
        self._chart.add_edge(self._next_id(EDGE_ID_PREFIX), request.source_id, request.target_id)
        self._commit()

    # --- Edges --------------------------------------------------------------
    @Slot(str)
    def activateEdge(self, edge_id: str) -> None:
        """Single activation: cycle the style once the double-activation window passes."""
        if self._chart.get_edge(edge_id) is None:
            return
        self._edge_activation.activate(edge_id)

    @Slot(str)
    def doubleActivateEdge(self, edge_id: str) -> None:
        """Double activation: cancel any pending style cycle and delete the edge."""
        self._edge_activation.activate_twice(edge_id)

    @Slot(str)
    def cycleEdgeStyle(self, edge_id: str) -> None:
        if self._chart.cycle_edge_style(edge_id):
            self._commit()

    @Slot(str)
    def deleteEdge(self, edge_id: str) -> None:
        if self._chart.delete_edge(edge_id):
            self._commit()

    @Slot(str, float, float, float, float, float, float, float, float, result="QVariant")
    def edgeAnchors(
        self,
        style: str,
        source_x: float,
        source_y: float,
        source_width: float,
        source_height: float,
        target_x: float,
        target_y: float,
        target_width: float,
        target_height: float,
    ) -> Dict[str, Any]:
        """Return anchor points for an edge between two live node rectangles.

        The rectangles are given in canvas coordinates, so no origin offset
        is applied.
        """
        try:
            edge_style = EdgeStyle(style)
        except ValueError:
            edge_style = EdgeStyle.NORMAL
        anchors = resolve_edge_anchors(
            Rect(source_x, source_y, source_width, source_height),
            Rect(target_x, target_y, target_width, target_height),
            edge_style,
        )
        return anchors.to_dict()

    # --- Chart-level operations ---------------------------------------------
    @Slot(str)
    def setTitle(self, text: str) -> None:
        previous = self._chart.title
        self._chart.set_title(text)
        if self._chart.title == previous:
            return
        self.titleChanged.emit()
        self._persist()

    @Slot()
    def clearAll(self) -> None:
        self._replace_chart(Flowchart())
        self._commit()

    @Slot()
    def toggleDistractions(self) -> None:
        self._show_distractions = not self._show_distractions
        link_start = self._chart.get_node(self._interaction.link_start_id or "")
        if link_start is not None and not self._is_visible(link_start):
            self._set_interaction(self._interaction.cancel_link())
        if self._chart.nodes:
            first = self.index(0, 0)
            last = self.index(len(self._chart.nodes) - 1, 0)
            self.dataChanged.emit(first, last, [self.VisibleRole])
        self.viewOptionsChanged.emit()
        self.edgesChanged.emit()

    @Slot()
    def toggleDetails(self) -> None:
        self._show_details = not self._show_details
        self.viewOptionsChanged.emit()

    # --- Persistence --------------------------------------------------------
    def restore(self) -> bool:
        """Load the last stored snapshot, if any.

        A corrupt snapshot is reported through ``errorOccurred`` and the
        current (empty) chart is kept.
        """
        if self._store is None:
            return False
        try:
            snapshot = self._store.load()
            if snapshot is None:
                return False
            chart = Flowchart.from_dict(snapshot)
        except ValueError as e:
            self._report_error(f"Stored flowchart is corrupted: {e}")
            return False
        self._replace_chart(chart)
        self._request_render()
        return True

    @Property(str, notify=titleChanged)
    def suggestedFileName(self) -> str:
        """Export file name derived from the chart title."""
        return suggested_file_name(self._chart.title)

    @Slot(str, result=bool)
    def exportChart(self, file_path: str) -> bool:
        """Write the chart as JSON to ``file_path``."""
        if not file_path:
            self._report_error("No file path specified")
            return False
        try:
            written = write_flowchart_file(file_path, self._chart.to_dict())
        except OSError as e:
            self._report_error(f"Failed to export flowchart: {e}")
            return False
        self.exportCompleted.emit(written)
        print(f"Flowchart exported to: {written}")
        return True

    @Slot(str, result=bool)
    def importChart(self, file_path: str) -> bool:
        """Replace the chart with the contents of a JSON file.

        Nothing changes, in memory or in the store, unless the whole file
        parses and validates.
        """
        if not file_path:
            self._report_error("No file path specified")
            return False
        try:
            chart = Flowchart.from_dict(read_flowchart_file(file_path))
        except OSError as e:
            self._report_error(f"Failed to import flowchart: {e}")
            return False
        except ValueError as e:
            self._report_error(f"Invalid flowchart file: {e}")
            return False
        self._replace_chart(chart)
        self._commit()
        self.importCompleted.emit(file_path)
        print(f"Flowchart imported from: {file_path}")
        return True

"""Data types for Kriya flowcharts.

This module contains the node and edge structures owned by a
:class:`~kriya.flowchart.Flowchart`. Nodes are a tagged union over
:class:`TaskNode` and :class:`DistractionNode`; the tag lives on the class
so a node can never change variant after creation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Sequence, TypeVar, Union


class NodeType(Enum):
    """Supported node variants."""

    TASK = "TASK"
    DISTRACTION = "DISTRACTION"


class TaskStatus(Enum):
    """Lifecycle states of a task node."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class EdgeStyle(Enum):
    """Stroke and arrowhead styles of an edge."""

    NORMAL = "normal"
    DOTTED = "dotted"
    REVERSED = "reversed"


T = TypeVar("T")


def next_in_cycle(cycle: Sequence[T], current: T) -> T:
    """Return the value following ``current`` in ``cycle``, wrapping at the end."""
    return cycle[(cycle.index(current) + 1) % len(cycle)]


@dataclass
class TaskNode:
    """A task with a status lifecycle."""

    node_type: ClassVar[NodeType] = NodeType.TASK

    id: str
    x: float = 0.0
    y: float = 0.0
    title: str = ""
    status: TaskStatus = TaskStatus.TODO
    xp: int = 0
    deadline: str = ""  # ISO date, or empty
    completed_time: Optional[str] = None  # ISO timestamp, set only while done


@dataclass
class DistractionNode:
    """A distraction tagged with a palette category."""

    node_type: ClassVar[NodeType] = NodeType.DISTRACTION

    id: str
    x: float = 0.0
    y: float = 0.0
    title: str = ""
    distraction_type: int = 0  # index into DISTRACTION_COLORS


Node = Union[TaskNode, DistractionNode]


@dataclass
class FlowEdge:
    """A directed, styled connection between two nodes."""

    id: str
    source_id: str
    target_id: str
    style: EdgeStyle = EdgeStyle.NORMAL

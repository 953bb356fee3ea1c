"""Edge anchor geometry.

Edges attach to the middle of the node side that faces the other node. The
rendering surface owns the live rectangles and asks for anchors on every
repaint; nothing here is cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple

from .types import EdgeStyle


@dataclass(frozen=True)
class Rect:
    """Axis-aligned bounding box in the surface's shared coordinate frame."""

    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


@dataclass(frozen=True)
class EdgeAnchors:
    """Endpoints of an edge line plus its decoration."""

    x1: float
    y1: float
    x2: float
    y2: float
    style: EdgeStyle = EdgeStyle.NORMAL

    @property
    def dashed(self) -> bool:
        return self.style is EdgeStyle.DOTTED

    @property
    def arrow_at_source(self) -> bool:
        return self.style is EdgeStyle.REVERSED

    @property
    def arrow_at_target(self) -> bool:
        return self.style is EdgeStyle.NORMAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "x1": self.x1,
            "y1": self.y1,
            "x2": self.x2,
            "y2": self.y2,
            "style": self.style.value,
            "dashed": self.dashed,
            "arrowStart": self.arrow_at_source,
            "arrowEnd": self.arrow_at_target,
        }


def resolve_edge_anchors(
    source: Rect,
    target: Rect,
    style: EdgeStyle = EdgeStyle.NORMAL,
    origin: Tuple[float, float] = (0.0, 0.0),
) -> EdgeAnchors:
    """Compute where an edge from ``source`` to ``target`` starts and ends.

    When the centers are further apart horizontally than vertically (ties
    count as horizontal) the edge joins the facing left/right sides at their
    vertical middle; otherwise it joins the facing top/bottom sides at their
    horizontal middle.

    Args:
        source: Rectangle of the edge's source node.
        target: Rectangle of the edge's target node.
        style: Edge style, which decides the decoration.
        origin: Top-left of the drawing surface in the same frame as the
            rectangles; subtracted from both endpoints.

    Returns:
        Endpoints in surface-local coordinates.
    """
    dx = target.center_x - source.center_x
    dy = target.center_y - source.center_y

    if abs(dx) >= abs(dy):
        if dx > 0:
            x1, y1 = source.right, source.center_y
            x2, y2 = target.left, target.center_y
        else:
            x1, y1 = source.left, source.center_y
            x2, y2 = target.right, target.center_y
    else:
        if dy > 0:
            x1, y1 = source.center_x, source.bottom
            x2, y2 = target.center_x, target.top
        else:
            x1, y1 = source.center_x, source.top
            x2, y2 = target.center_x, target.bottom

    origin_x, origin_y = origin
    return EdgeAnchors(
        x1=x1 - origin_x,
        y1=y1 - origin_y,
        x2=x2 - origin_x,
        y2=y2 - origin_y,
        style=style,
    )

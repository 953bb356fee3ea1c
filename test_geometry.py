"""Tests for edge anchor geometry."""

import pytest

from kriya import EdgeStyle, Rect, resolve_edge_anchors


def box(center_x, center_y, width=20.0, height=10.0):
    return Rect(center_x - width / 2, center_y - height / 2, width, height)


class TestRect:
    def test_edges_and_center(self):
        rect = Rect(10.0, 20.0, 100.0, 50.0)
        assert rect.right == 110.0
        assert rect.bottom == 70.0
        assert rect.center_x == 60.0
        assert rect.center_y == 45.0


class TestAnchors:
    def test_target_to_the_right(self):
        a, b = box(0, 0), box(100, 10)
        anchors = resolve_edge_anchors(a, b)
        assert (anchors.x1, anchors.y1) == (a.right, a.center_y)
        assert (anchors.x2, anchors.y2) == (b.left, b.center_y)

    def test_target_to_the_left(self):
        a, b = box(0, 0), box(-100, 10)
        anchors = resolve_edge_anchors(a, b)
        assert (anchors.x1, anchors.y1) == (a.left, a.center_y)
        assert (anchors.x2, anchors.y2) == (b.right, b.center_y)

    def test_target_below(self):
        a, b = box(0, 0), box(10, 100)
        anchors = resolve_edge_anchors(a, b)
        assert (anchors.x1, anchors.y1) == (a.center_x, a.bottom)
        assert (anchors.x2, anchors.y2) == (b.center_x, b.top)

    def test_target_above(self):
        a, b = box(0, 0), box(10, -100)
        anchors = resolve_edge_anchors(a, b)
        assert (anchors.x1, anchors.y1) == (a.center_x, a.top)
        assert (anchors.x2, anchors.y2) == (b.center_x, b.bottom)

    def test_diagonal_tie_is_horizontal(self):
        a, b = box(0, 0), box(10, 10)
        anchors = resolve_edge_anchors(a, b)
        assert (anchors.x1, anchors.y1) == (a.right, 0.0)
        assert (anchors.x2, anchors.y2) == (b.left, 10.0)

    def test_origin_is_subtracted(self):
        a, b = box(100, 100), box(300, 100)
        anchors = resolve_edge_anchors(a, b, origin=(40.0, 30.0))
        assert (anchors.x1, anchors.y1) == (a.right - 40.0, 70.0)
        assert (anchors.x2, anchors.y2) == (b.left - 40.0, 70.0)


@pytest.mark.parametrize(
    "style, dashed, arrow_start, arrow_end",
    [
        (EdgeStyle.NORMAL, False, False, True),
        (EdgeStyle.DOTTED, True, False, False),
        (EdgeStyle.REVERSED, False, True, False),
    ],
)
def test_decoration(style, dashed, arrow_start, arrow_end):
    anchors = resolve_edge_anchors(box(0, 0), box(100, 0), style)
    assert anchors.dashed is dashed
    assert anchors.arrow_at_source is arrow_start
    assert anchors.arrow_at_target is arrow_end
    data = anchors.to_dict()
    assert data["style"] == style.value
    assert (data["dashed"], data["arrowStart"], data["arrowEnd"]) == (dashed, arrow_start, arrow_end)

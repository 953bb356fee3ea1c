"""Tests for the Flowchart aggregate, its state machines and snapshot codec."""

import copy
from datetime import datetime, timezone

import pytest

from kriya import (
    DistractionNode,
    EdgeStyle,
    FlowEdge,
    Flowchart,
    FlowchartFormatError,
    NodeType,
    TaskNode,
    TaskStatus,
)
from kriya.flowchart import format_timestamp, next_edge_style


@pytest.fixture
def chart():
    return Flowchart()


@pytest.fixture
def linked_chart():
    chart = Flowchart(title="Week plan")
    chart.add_node("n1", NodeType.TASK, "Write report")
    chart.add_node("n2", NodeType.DISTRACTION, "Phone")
    chart.add_node("n3", NodeType.TASK, "Review")
    chart.add_edge("e1", "n1", "n2")
    chart.add_edge("e2", "n2", "n3")
    chart.add_edge("e3", "n3", "n1")
    return chart


class TestDataClasses:
    def test_task_node_defaults(self):
        node = TaskNode(id="n1")
        assert node.node_type is NodeType.TASK
        assert node.status is TaskStatus.TODO
        assert node.xp == 0
        assert node.deadline == ""
        assert node.completed_time is None

    def test_distraction_node_defaults(self):
        node = DistractionNode(id="n2")
        assert node.node_type is NodeType.DISTRACTION
        assert node.distraction_type == 0

    def test_edge_defaults(self):
        edge = FlowEdge(id="e1", source_id="a", target_id="b")
        assert edge.style is EdgeStyle.NORMAL


class TestStructure:
    def test_new_chart_is_empty(self, chart):
        assert chart.title == "My Flowchart"
        assert chart.nodes == []
        assert chart.edges == []

    def test_add_task_defaults(self, chart):
        node = chart.add_node("n1", NodeType.TASK, "Plan")
        assert isinstance(node, TaskNode)
        assert (node.x, node.y) == (0.0, 0.0)
        assert node.title == "Plan"
        assert node.status is TaskStatus.TODO
        assert node.xp == 0
        assert node.completed_time is None

    def test_add_node_uses_placeholder_title(self, chart):
        assert chart.add_node("n1", NodeType.TASK, "").title == "New Task"
        assert chart.add_node("n2", NodeType.DISTRACTION, "  ").title == "Distr."

    def test_nodes_keep_insertion_order(self, chart):
        for idx in range(4):
            chart.add_node(f"n{idx}", NodeType.TASK)
        assert [node.id for node in chart.nodes] == ["n0", "n1", "n2", "n3"]

    def test_add_edge_defaults_to_normal(self, chart):
        chart.add_node("n1", NodeType.TASK)
        chart.add_node("n2", NodeType.TASK)
        edge = chart.add_edge("e1", "n1", "n2")
        assert edge.style is EdgeStyle.NORMAL
        assert chart.edges == [edge]

    def test_delete_node_cascades_to_edges(self, linked_chart):
        assert linked_chart.delete_node("n1") is True
        assert linked_chart.get_node("n1") is None
        assert [edge.id for edge in linked_chart.edges] == ["e2"]
        for edge in linked_chart.edges:
            assert "n1" not in (edge.source_id, edge.target_id)

    def test_delete_every_node_removes_every_edge(self, linked_chart):
        for node_id in ["n2", "n3", "n1"]:
            linked_chart.delete_node(node_id)
            assert linked_chart.edges_touching(node_id) == []
        assert linked_chart.edges == []

    def test_delete_missing_node(self, linked_chart):
        assert linked_chart.delete_node("missing") is False
        assert len(linked_chart.nodes) == 3
        assert len(linked_chart.edges) == 3

    def test_delete_edge(self, linked_chart):
        assert linked_chart.delete_edge("e2") is True
        assert [edge.id for edge in linked_chart.edges] == ["e1", "e3"]
        assert linked_chart.delete_edge("e2") is False


class TestFieldEdits:
    def test_move_node(self, chart):
        chart.add_node("n1", NodeType.TASK)
        assert chart.move_node("n1", 120, 45.5) is True
        node = chart.get_node("n1")
        assert (node.x, node.y) == (120.0, 45.5)

    def test_move_missing_node(self, chart):
        assert chart.move_node("missing", 1, 1) is False

    def test_set_node_title_normalizes_empty(self, chart):
        chart.add_node("n1", NodeType.TASK, "Draft")
        chart.set_node_title("n1", "   ")
        assert chart.get_node("n1").title == "Untitled"
        chart.set_node_title("n1", " Ship it ")
        assert chart.get_node("n1").title == "Ship it"

    def test_set_chart_title_normalizes_empty(self, chart):
        chart.set_title("")
        assert chart.title == "Untitled"
        chart.set_title("Sprint")
        assert chart.title == "Sprint"

    def test_set_task_details(self, chart):
        chart.add_node("n1", NodeType.TASK)
        assert chart.set_task_details("n1", 30, "2026-11-01") is True
        node = chart.get_node("n1")
        assert node.xp == 30
        assert node.deadline == "2026-11-01"

    def test_set_task_details_clamps_negative_xp(self, chart):
        chart.add_node("n1", NodeType.TASK)
        chart.set_task_details("n1", -5, "")
        assert chart.get_node("n1").xp == 0

    def test_set_task_details_ignores_distractions(self, chart):
        chart.add_node("n1", NodeType.DISTRACTION)
        assert chart.set_task_details("n1", 10, "2026-11-01") is False


class TestStatusLifecycle:
    def test_scenario(self, chart):
        node = chart.add_node("n1", NodeType.TASK)
        assert node.status is TaskStatus.TODO
        assert node.completed_time is None

        chart.advance_status("n1")
        assert node.status is TaskStatus.IN_PROGRESS
        assert node.completed_time is None

        chart.advance_status("n1")
        assert node.status is TaskStatus.DONE
        assert node.completed_time is not None

        chart.advance_status("n1")
        assert node.status is TaskStatus.TODO
        assert node.completed_time is None

    @pytest.mark.parametrize("start", list(TaskStatus))
    def test_three_advances_return_to_start(self, start):
        chart = Flowchart()
        node = chart.add_node("n1", NodeType.TASK)
        while node.status is not start:
            chart.advance_status("n1")
        for _ in range(3):
            chart.advance_status("n1")
        assert node.status is start
        assert (node.completed_time is not None) == (node.status is TaskStatus.DONE)

    def test_completed_time_uses_given_clock(self, chart):
        node = chart.add_node("n1", NodeType.TASK)
        moment = datetime(2026, 10, 19, 8, 30, 0, tzinfo=timezone.utc)
        chart.advance_status("n1", moment)
        chart.advance_status("n1", moment)
        assert node.completed_time == "2026-10-19T08:30:00.000Z"

    def test_distraction_has_no_status(self, chart):
        chart.add_node("n1", NodeType.DISTRACTION)
        assert chart.advance_status("n1") is False

    def test_missing_node(self, chart):
        assert chart.advance_status("missing") is False


class TestDistractionCycle:
    def test_eight_advances_return_to_start(self, chart):
        node = chart.add_node("n1", NodeType.DISTRACTION)
        seen = []
        for _ in range(8):
            chart.advance_distraction_type("n1")
            seen.append(node.distraction_type)
        assert seen == [1, 2, 3, 4, 5, 6, 7, 0]

    def test_task_has_no_category(self, chart):
        chart.add_node("n1", NodeType.TASK)
        assert chart.advance_distraction_type("n1") is False


class TestEdgeStyleCycle:
    def test_order(self):
        assert next_edge_style(EdgeStyle.NORMAL) is EdgeStyle.DOTTED
        assert next_edge_style(EdgeStyle.DOTTED) is EdgeStyle.REVERSED
        assert next_edge_style(EdgeStyle.REVERSED) is EdgeStyle.NORMAL

    def test_cycle_edge_style(self, linked_chart):
        assert linked_chart.cycle_edge_style("e1") is True
        assert linked_chart.get_edge("e1").style is EdgeStyle.DOTTED

    def test_cycle_missing_edge_is_noop(self, linked_chart):
        before = linked_chart.to_dict()
        assert linked_chart.cycle_edge_style("missing") is False
        assert linked_chart.to_dict() == before


class TestSerialization:
    def test_to_dict_empty(self, chart):
        assert chart.to_dict() == {"title": "My Flowchart", "nodes": [], "edges": []}

    def test_task_fields(self, chart):
        chart.add_node("n1", NodeType.TASK, "Plan")
        data = chart.to_dict()["nodes"][0]
        assert data == {
            "id": "n1",
            "type": "TASK",
            "x": 0.0,
            "y": 0.0,
            "title": "Plan",
            "status": "todo",
            "xp": 0,
            "deadline": "",
            "completedTime": None,
        }

    def test_distraction_fields(self, chart):
        chart.add_node("n1", NodeType.DISTRACTION, "Phone")
        data = chart.to_dict()["nodes"][0]
        assert data == {
            "id": "n1",
            "type": "DISTRACTION",
            "x": 0.0,
            "y": 0.0,
            "title": "Phone",
            "distractionType": 0,
        }

    def test_edge_fields(self, linked_chart):
        linked_chart.cycle_edge_style("e3")
        linked_chart.cycle_edge_style("e3")
        assert linked_chart.to_dict()["edges"][2] == {
            "id": "e3",
            "sourceId": "n3",
            "targetId": "n1",
            "style": "reversed",
        }

    def test_roundtrip(self, linked_chart):
        linked_chart.move_node("n1", 40, 80)
        linked_chart.advance_status("n1")
        linked_chart.advance_status("n1")
        linked_chart.set_task_details("n3", 12, "2026-12-24")
        linked_chart.advance_distraction_type("n2")
        linked_chart.cycle_edge_style("e2")

        data = linked_chart.to_dict()
        restored = Flowchart.from_dict(copy.deepcopy(data))

        assert restored.to_dict() == data
        assert restored.nodes == linked_chart.nodes
        assert restored.edges == linked_chart.edges

    def test_missing_status_defaults_to_todo(self):
        data = {
            "title": "Old",
            "nodes": [{"id": "n1", "type": "TASK", "x": 0, "y": 0, "title": "Legacy"}],
            "edges": [],
        }
        node = Flowchart.from_dict(data).get_node("n1")
        assert node.status is TaskStatus.TODO

    def test_empty_status_defaults_to_todo(self):
        data = {"nodes": [{"id": "n1", "type": "TASK", "status": ""}], "edges": []}
        assert Flowchart.from_dict(data).get_node("n1").status is TaskStatus.TODO

    def test_missing_status_drops_completed_time(self):
        data = {
            "nodes": [{"id": "n1", "type": "TASK", "completedTime": "2026-01-01T00:00:00.000Z"}],
            "edges": [],
        }
        node = Flowchart.from_dict(data).get_node("n1")
        assert node.status is TaskStatus.TODO
        assert node.completed_time is None

    def test_done_task_keeps_completed_time(self):
        data = {
            "nodes": [
                {"id": "n1", "type": "TASK", "status": "done", "completedTime": "2026-01-01T00:00:00.000Z"}
            ],
            "edges": [],
        }
        node = Flowchart.from_dict(data).get_node("n1")
        assert node.completed_time == "2026-01-01T00:00:00.000Z"

    def test_missing_title_uses_default(self):
        assert Flowchart.from_dict({"nodes": [], "edges": []}).title == "My Flowchart"

    def test_dangling_edges_are_dropped(self):
        data = {
            "nodes": [
                {"id": "n1", "type": "TASK"},
                {"id": "n2", "type": "DISTRACTION"},
            ],
            "edges": [
                {"id": "e1", "sourceId": "n1", "targetId": "n2", "style": "normal"},
                {"id": "e2", "sourceId": "n1", "targetId": "gone", "style": "normal"},
                {"id": "e3", "sourceId": "gone", "targetId": "n2", "style": "dotted"},
            ],
        }
        chart = Flowchart.from_dict(data)
        assert [edge.id for edge in chart.edges] == ["e1"]

    def test_edge_without_style_is_normal(self):
        data = {
            "nodes": [{"id": "n1", "type": "TASK"}, {"id": "n2", "type": "TASK"}],
            "edges": [{"id": "e1", "sourceId": "n1", "targetId": "n2"}],
        }
        assert Flowchart.from_dict(data).edges[0].style is EdgeStyle.NORMAL

    def test_other_variant_fields_are_ignored(self):
        data = {
            "nodes": [
                {"id": "n1", "type": "DISTRACTION", "status": "done", "xp": 4, "distractionType": 3},
            ],
            "edges": [],
        }
        out = Flowchart.from_dict(data).to_dict()["nodes"][0]
        assert out["distractionType"] == 3
        assert "status" not in out
        assert "xp" not in out

    @pytest.mark.parametrize(
        "data",
        [
            [],
            "flowchart",
            {"nodes": {}, "edges": []},
            {"nodes": [], "edges": "none"},
            {"title": 7, "nodes": [], "edges": []},
            {"nodes": ["n1"], "edges": []},
            {"nodes": [{"type": "TASK"}], "edges": []},
            {"nodes": [{"id": "n1", "type": "BOX"}], "edges": []},
            {"nodes": [{"id": "n1", "type": "TASK", "x": "left"}], "edges": []},
            {"nodes": [{"id": "n1", "type": "TASK", "status": "COMPLETE"}], "edges": []},
            {"nodes": [{"id": "n1", "type": "TASK", "status": "done", "completedTime": None}], "edges": []},
            {"nodes": [{"id": "n1", "type": "TASK", "status": "done"}], "edges": []},
            {
                "nodes": [
                    {"id": "n1", "type": "TASK", "status": "todo", "completedTime": "2026-01-01T00:00:00.000Z"}
                ],
                "edges": [],
            },
            {"nodes": [{"id": "n1", "type": "TASK", "xp": -1}], "edges": []},
            {"nodes": [{"id": "n1", "type": "TASK", "xp": 1.5}], "edges": []},
            {"nodes": [{"id": "n1", "type": "DISTRACTION", "distractionType": 8}], "edges": []},
            {"nodes": [{"id": "n1", "type": "TASK"}, {"id": "n1", "type": "TASK"}], "edges": []},
            {"nodes": [], "edges": [{"id": "e1", "sourceId": "a"}]},
            {
                "nodes": [{"id": "n1", "type": "TASK"}, {"id": "n2", "type": "TASK"}],
                "edges": [{"id": "e1", "sourceId": "n1", "targetId": "n2", "style": "wavy"}],
            },
        ],
    )
    def test_invalid_snapshots_raise(self, data):
        with pytest.raises(FlowchartFormatError):
            Flowchart.from_dict(data)


def test_format_timestamp_converts_to_utc():
    moment = datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    assert format_timestamp(moment) == "2026-01-02T03:04:05.678Z"
    assert format_timestamp().endswith("Z")

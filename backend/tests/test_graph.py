"""
Schedule graph construction: durations, edge resolution, cycle checks.
"""

import logging
import uuid

import pytest

from cadence.exceptions import CyclicDependencyError
from cadence.models import ConstraintType, DependencyType
from cadence.services.graph import build_schedule_graph, calculate_duration

from conftest import make_dep, make_task


class TestCalculateDuration:

    @pytest.mark.parametrize("hours", [None, 0, -4])
    def test_missing_effort_is_one_day(self, hours):
        assert calculate_duration(hours) == 1

    @pytest.mark.parametrize("hours,expected", [(1, 1), (8, 1), (9, 2), (40, 5), (41.5, 6)])
    def test_rounds_up_to_whole_days(self, hours, expected):
        assert calculate_duration(hours) == expected

    def test_custom_hours_per_day(self):
        assert calculate_duration(12, hours_per_day=6) == 2
        assert calculate_duration(13, hours_per_day=6) == 3


class TestBuildScheduleGraph:

    def test_nodes_carry_task_fields(self):
        task = make_task("Design", hours=20, constraint=ConstraintType.MUST_START_ON)
        task.wbs_code = "1.2"

        schedule = build_schedule_graph([task], [])
        node = schedule.tasks[task.id]

        assert node.name == "Design"
        assert node.wbs_code == "1.2"
        assert node.duration == 3
        assert node.estimated_hours == 20
        assert node.constraint_type == ConstraintType.MUST_START_ON
        assert node.early_start is None
        assert node.is_critical_path is False

    def test_string_enum_values_are_normalized(self):
        task = make_task("A", 1)
        task.constraint_type = "snet"
        other = make_task("B", 1)
        dep = make_dep(task, other)
        dep.dependency_type = "SS"

        schedule = build_schedule_graph([task, other], [dep])

        assert schedule.tasks[task.id].constraint_type == ConstraintType.START_NO_EARLIER_THAN
        assert schedule.tasks[other.id].predecessors[0].type == DependencyType.START_TO_START

    def test_edges_resolved_both_ways(self):
        a, b = make_task("A", 2), make_task("B", 1)
        schedule = build_schedule_graph([a, b], [make_dep(a, b, DependencyType.FINISH_TO_FINISH, lag=-2)])

        succ_edge = schedule.tasks[a.id].successors[0]
        pred_edge = schedule.tasks[b.id].predecessors[0]

        assert (succ_edge.task_id, succ_edge.type, succ_edge.lag_days) == (b.id, DependencyType.FINISH_TO_FINISH, -2)
        assert (pred_edge.task_id, pred_edge.type, pred_edge.lag_days) == (a.id, DependencyType.FINISH_TO_FINISH, -2)
        assert schedule.tasks[a.id].predecessors == []
        assert list(schedule.graph.edges) == [(a.id, b.id)]

    def test_dangling_dependency_is_dropped(self, caplog):
        a = make_task("A", 1)
        ghost = uuid.uuid4()

        with caplog.at_level(logging.WARNING):
            schedule = build_schedule_graph([a], [make_dep(ghost, a), make_dep(a, ghost)])

        assert schedule.tasks[a.id].predecessors == []
        assert schedule.tasks[a.id].successors == []
        assert schedule.graph.number_of_edges() == 0
        assert "dangling" in caplog.text

    def test_keeps_input_order(self):
        tasks = [make_task(name, 1) for name in "CAB"]
        schedule = build_schedule_graph(tasks, [])
        assert [t.name for t in schedule.tasks.values()] == ["C", "A", "B"]


class TestCycles:

    def test_acyclic_graph_passes(self):
        a, b, c = make_task("A", 1), make_task("B", 1), make_task("C", 1)
        schedule = build_schedule_graph([a, b, c], [make_dep(a, b), make_dep(b, c), make_dep(a, c)])
        schedule.ensure_acyclic()

    def test_two_task_cycle(self):
        a, b = make_task("A", 1), make_task("B", 1)
        schedule = build_schedule_graph([a, b], [make_dep(a, b), make_dep(b, a)])

        with pytest.raises(CyclicDependencyError) as exc_info:
            schedule.ensure_acyclic()

        assert exc_info.value.error_code == "cyclic_dependency"
        assert {edge[0] for edge in exc_info.value.cycle} == {a.id, b.id}
        assert len(exc_info.value.details) == 2

    def test_self_dependency_is_a_cycle(self):
        a = make_task("A", 1)
        schedule = build_schedule_graph([a], [make_dep(a, a)])

        with pytest.raises(CyclicDependencyError):
            schedule.ensure_acyclic()


class TestTopologicalOrder:

    def test_predecessors_come_first(self):
        a, b, c, d = (make_task(name, 1) for name in "ABCD")
        deps = [make_dep(c, d), make_dep(b, c), make_dep(a, b), make_dep(a, d)]
        schedule = build_schedule_graph([d, c, b, a], deps)

        order = schedule.topological_order()
        position = {task_id: i for i, task_id in enumerate(order)}

        assert len(order) == 4
        for dep in deps:
            assert position[dep.predecessor_id] < position[dep.successor_id]

    def test_isolated_tasks_included(self):
        a, b = make_task("A", 1), make_task("B", 1)
        schedule = build_schedule_graph([a, b], [])
        assert set(schedule.topological_order()) == {a.id, b.id}

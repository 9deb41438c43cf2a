"""
Critical Path Method (CPM) implementation.

Calculates, in working days:
- Forward pass: Earliest Start (ES), Earliest Finish (EF)
- Backward pass: Latest Start (LS), Latest Finish (LF)
- Float: Total Float (EF -> LF) and Free Float (slack to the successors)
- Critical Path: Tasks where total float = 0

Supports FS, SS, FF and SF relationships with positive or negative lag, and
per-task date constraints. Constraints always win over the network; when a
must-start-on / must-finish-on date contradicts it, the clash is recorded
so callers can inspect it.
"""

import uuid
from dataclasses import dataclass
from datetime import date

from cadence.logging_config import get_logger
from cadence.models import ConstraintType, DependencyType
from cadence.services.calendar import (
    add_business_days,
    business_days_between,
    shift_business_days,
    subtract_business_days,
)
from cadence.services.graph import EdgeRef, ScheduleGraph, ScheduleTask

logger = get_logger(__name__)


@dataclass
class ConstraintConflict:
    """A hard constraint that overrode the date implied by the network."""
    task_id: uuid.UUID
    constraint_type: ConstraintType
    constraint_date: date
    graph_date: date


def _span_end(start: date, duration: int) -> date:
    # A 1-day task starts and finishes on the same day
    if duration <= 1:
        return start
    return add_business_days(start, duration - 1)


def _span_start(finish: date, duration: int) -> date:
    if duration <= 1:
        return finish
    return subtract_business_days(finish, duration - 1)


def _successor_start_from(
    edge: EdgeRef,
    pred: ScheduleTask,
    task: ScheduleTask,
    fallback: date,
) -> date:
    """
    Earliest start that `pred` allows for `task` through one relationship.

    `edge` carries the relationship type and lag; `fallback` is used when
    the predecessor date the relationship needs is not known.
    """
    lag = edge.lag_days

    if edge.type == DependencyType.START_TO_START:
        if pred.early_start is not None:
            return shift_business_days(pred.early_start, lag)
        if pred.early_finish is not None:
            return shift_business_days(pred.early_finish, lag - task.duration)
        return fallback

    if edge.type == DependencyType.FINISH_TO_FINISH:
        # EF(task) >= EF(pred) + lag
        if pred.early_finish is None:
            return fallback
        return shift_business_days(_span_start(pred.early_finish, task.duration), lag)

    if edge.type == DependencyType.START_TO_FINISH:
        # EF(task) >= ES(pred) + lag
        if pred.early_start is None:
            return fallback
        return shift_business_days(_span_start(pred.early_start, task.duration), lag)

    # Finish-to-start: the next working day after the predecessor finishes
    if pred.early_finish is None:
        return fallback
    return shift_business_days(pred.early_finish, 1 + lag)


def _predecessor_finish_from(
    edge: EdgeRef,
    task: ScheduleTask,
    succ: ScheduleTask,
) -> date:
    """Latest finish that `succ` allows for `task` through one relationship."""
    lag = edge.lag_days

    if edge.type == DependencyType.START_TO_START:
        # LS(task) <= LS(succ) - lag
        return shift_business_days(shift_business_days(succ.late_start, -lag), task.duration - 1)

    if edge.type == DependencyType.FINISH_TO_FINISH:
        return shift_business_days(succ.late_finish, -lag)

    if edge.type == DependencyType.START_TO_FINISH:
        # LS(task) <= LF(succ) - lag
        return shift_business_days(shift_business_days(succ.late_finish, -lag), task.duration - 1)

    return shift_business_days(succ.late_start, -(1 + lag))


def forward_pass(schedule: ScheduleGraph, project_start: date) -> dict[uuid.UUID, ScheduleTask]:
    """
    Calculate Early Start / Early Finish for every task.

    ES = max over predecessors of the date each relationship allows, or the
    project start for tasks without predecessors. Start-no-earlier-than
    pushes ES later; must-start-on pins it.
    """
    schedule.ensure_acyclic()
    tasks = schedule.tasks

    for task_id in schedule.topological_order():
        task = tasks[task_id]

        if not task.predecessors:
            es = project_start
        else:
            es = max(
                _successor_start_from(edge, tasks[edge.task_id], task, project_start)
                for edge in task.predecessors
            )

        task.graph_early_start = es

        if task.constraint_date is not None:
            if task.constraint_type == ConstraintType.START_NO_EARLIER_THAN:
                es = max(es, task.constraint_date)
            elif task.constraint_type == ConstraintType.MUST_START_ON:
                es = task.constraint_date

        task.early_start = es
        task.early_finish = _span_end(es, task.duration)

    logger.debug(f"Forward pass complete: {len(tasks)} tasks")
    return tasks


def backward_pass(schedule: ScheduleGraph, project_end: date) -> None:
    """
    Calculate Late Start / Late Finish in place, successors first.

    LF = min over successors of the date each relationship allows, never
    later than the project end. Finish-no-later-than pulls LF
    earlier; must-finish-on pins it.
    """
    tasks = schedule.tasks
    if any(task.early_start is None for task in tasks.values()):
        raise ValueError("backward_pass requires a completed forward pass")

    for task_id in reversed(schedule.topological_order()):
        task = tasks[task_id]

        if not task.successors:
            lf = project_end
        else:
            # Start-based successors alone do not stop a task from running
            # past the project end, so the end date stays a bound
            lf = min(
                project_end,
                *(
                    _predecessor_finish_from(edge, task, tasks[edge.task_id])
                    for edge in task.successors
                ),
            )

        task.graph_late_finish = lf

        if task.constraint_date is not None:
            if task.constraint_type == ConstraintType.FINISH_NO_LATER_THAN:
                lf = min(lf, task.constraint_date)
            elif task.constraint_type == ConstraintType.MUST_FINISH_ON:
                lf = task.constraint_date

        task.late_finish = lf
        task.late_start = _span_start(lf, task.duration)

    logger.debug(f"Backward pass complete: {len(tasks)} tasks")


def calculate_float_and_critical_path(schedule: ScheduleGraph) -> list[uuid.UUID]:
    """
    Fill in total/free float and the critical flag.

    Returns the IDs of critical tasks (total float = 0), sorted by ID.
    """
    tasks = schedule.tasks
    critical: list[uuid.UUID] = []

    for task_id, task in tasks.items():
        if None in (task.early_start, task.early_finish, task.late_start, task.late_finish):
            continue

        task.total_float = business_days_between(task.early_finish, task.late_finish)

        if task.successors:
            # Slack between what this task allows each successor and when
            # that successor actually starts
            slacks = []
            for edge in task.successors:
                succ = tasks[edge.task_id]
                allowed = _successor_start_from(edge, task, succ, succ.early_start)
                slacks.append(business_days_between(allowed, succ.early_start))
            task.free_float = min(max(0, min(slacks)), task.total_float)
        else:
            task.free_float = task.total_float

        task.is_critical_path = task.total_float == 0
        if task.is_critical_path:
            critical.append(task_id)

    return sorted(critical)


def find_constraint_conflicts(schedule: ScheduleGraph) -> list[ConstraintConflict]:
    """
    Must-start-on / must-finish-on dates that contradict the network.

    A must-start-on earlier than the start the predecessors allow, or a
    must-finish-on later than the finish the successors allow or earlier
    than the task can finish.
    """
    conflicts = []

    for task in schedule.tasks.values():
        if task.constraint_date is None:
            continue

        graph_date = None
        if task.constraint_type == ConstraintType.MUST_START_ON:
            if task.graph_early_start is not None and task.constraint_date < task.graph_early_start:
                graph_date = task.graph_early_start
        elif task.constraint_type == ConstraintType.MUST_FINISH_ON:
            if task.graph_late_finish is not None and task.constraint_date > task.graph_late_finish:
                graph_date = task.graph_late_finish
            elif task.early_finish is not None and task.constraint_date < task.early_finish:
                graph_date = task.early_finish

        if graph_date is None:
            continue

        logger.warning(
            f"Constraint {task.constraint_type.value} on task {task.id} "
            f"({task.constraint_date}) overrides network date {graph_date}"
        )
        conflicts.append(ConstraintConflict(
            task_id=task.id,
            constraint_type=task.constraint_type,
            constraint_date=task.constraint_date,
            graph_date=graph_date,
        ))

    return conflicts

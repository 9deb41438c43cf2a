"""
Schedule orchestration: one full CPM run for a project.

run_schedule loads the project's tasks and dependencies, runs the forward
pass, backward pass and float calculation, writes every task's schedule
back through the store and reports a ScheduleResult. Each call is a full
recomputation and keeps no state between runs.

Runs for the same project are not coordinated here; callers must
serialize them (the ARQ worker does so with one job ID per project).
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime

from cadence.config import get_settings
from cadence.logging_config import get_logger
from cadence.services.calendar import to_date
from cadence.services.critical_path import (
    ConstraintConflict,
    backward_pass,
    calculate_float_and_critical_path,
    find_constraint_conflicts,
    forward_pass,
)
from cadence.services.graph import ScheduleTask, build_schedule_graph, calculate_duration
from cadence.services.store import TaskScheduleUpdate, TaskStore

logger = get_logger(__name__)


@dataclass
class ScheduleResult:
    """Outcome of a single schedule run."""
    success: bool
    message: str
    tasks_updated: int = 0
    critical_path_length: int = 0  # Sum of durations of critical tasks
    project_end_date: date | None = None
    critical_tasks: list[uuid.UUID] = field(default_factory=list)
    constraint_conflicts: list[ConstraintConflict] = field(default_factory=list)


async def run_schedule(
    store: TaskStore,
    project_id: uuid.UUID,
    project_start_date: date | datetime | None = None,
    hours_per_day: float | None = None,
) -> ScheduleResult:
    """
    Compute and persist the critical-path schedule of a project.

    Never raises: any failure (storage, cyclic dependencies, ...) comes back
    as success=False with the error message. Tasks already written before
    the failure stay written.
    """
    start = to_date(project_start_date) if project_start_date else date.today()
    if hours_per_day is None:
        hours_per_day = get_settings().hours_per_day

    logger.info(f"Scheduling project {project_id} from {start}")

    try:
        tasks = await store.load_tasks(project_id)
        if not tasks:
            logger.info(f"Project {project_id} has no tasks to schedule")
            return ScheduleResult(success=True, message="No tasks to schedule")

        dependencies = await store.load_dependencies(project_id)
        schedule = build_schedule_graph(tasks, dependencies, hours_per_day)

        # Step 1: Forward pass
        forward_pass(schedule, start)
        project_end = max(task.early_finish for task in schedule.tasks.values())

        # Step 2: Backward pass, seeded with the forward pass end date
        backward_pass(schedule, project_end)

        # Step 3: Float and critical path
        critical_tasks = calculate_float_and_critical_path(schedule)
        conflicts = find_constraint_conflicts(schedule)

        # Step 4: Persist
        tasks_updated = 0
        for task_id, task in schedule.tasks.items():
            await store.save_task_schedule(task_id, TaskScheduleUpdate(
                duration=task.duration,
                early_start=task.early_start,
                early_finish=task.early_finish,
                late_start=task.late_start,
                late_finish=task.late_finish,
                total_float=task.total_float,
                free_float=task.free_float,
                is_critical_path=task.is_critical_path,
                start_date=task.early_start,
                end_date=task.early_finish,
            ))
            tasks_updated += 1

        critical_path_length = sum(schedule.tasks[task_id].duration for task_id in critical_tasks)

    except Exception as e:
        logger.exception(f"Scheduling failed for project {project_id}: {e}")
        return ScheduleResult(success=False, message=str(e) or type(e).__name__)

    logger.info(
        f"Scheduled project {project_id}: {tasks_updated} tasks, "
        f"end={project_end}, critical={len(critical_tasks)}"
    )

    return ScheduleResult(
        success=True,
        message=f"Successfully scheduled {tasks_updated} tasks",
        tasks_updated=tasks_updated,
        critical_path_length=critical_path_length,
        project_end_date=project_end,
        critical_tasks=critical_tasks,
        constraint_conflicts=conflicts,
    )


async def get_schedule_data(
    store: TaskStore,
    project_id: uuid.UUID,
    hours_per_day: float | None = None,
) -> list[ScheduleTask]:
    """
    The last persisted schedule of every task, with resolved dependencies.

    Nothing is recomputed. Tasks never scheduled report their derived
    duration and empty dates.
    """
    if hours_per_day is None:
        hours_per_day = get_settings().hours_per_day

    tasks = await store.load_tasks(project_id)
    dependencies = await store.load_dependencies(project_id)
    schedule = build_schedule_graph(tasks, dependencies, hours_per_day)

    for task in tasks:
        node = schedule.tasks[task.id]
        node.duration = task.duration or calculate_duration(task.estimated_hours, hours_per_day)
        node.early_start = task.early_start
        node.early_finish = task.early_finish
        node.late_start = task.late_start
        node.late_finish = task.late_finish
        node.total_float = task.total_float
        node.free_float = task.free_float
        node.is_critical_path = bool(task.is_critical_path)

    return list(schedule.tasks.values())

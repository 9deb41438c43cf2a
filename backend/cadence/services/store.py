"""
Task storage used by schedule runs.

The scheduler only talks to storage through the TaskStore protocol: load a
project's tasks and dependencies, then write the computed schedule back one
task at a time. SqlTaskStore is the database-backed implementation.
"""

import uuid
from dataclasses import asdict, dataclass
from datetime import date
from typing import Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import or_
from sqlmodel import select

from cadence.exceptions import NotFoundError
from cadence.models import Dependency, Task, utc_now


@dataclass
class TaskScheduleUpdate:
    """Computed schedule fields written back for one task."""
    duration: int
    early_start: date | None
    early_finish: date | None
    late_start: date | None
    late_finish: date | None
    total_float: int | None
    free_float: int | None
    is_critical_path: bool
    start_date: date | None
    end_date: date | None


class TaskStore(Protocol):
    async def load_tasks(self, project_id: uuid.UUID) -> Sequence[Task]: ...

    async def load_dependencies(self, project_id: uuid.UUID) -> Sequence[Dependency]: ...

    async def save_task_schedule(self, task_id: uuid.UUID, update: TaskScheduleUpdate) -> None: ...


class SqlTaskStore:
    """TaskStore on top of an async SQLModel session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_tasks(self, project_id: uuid.UUID) -> list[Task]:
        result = await self.session.execute(
            select(Task).where(Task.project_id == project_id)
        )
        return list(result.scalars().all())

    async def load_dependencies(self, project_id: uuid.UUID) -> list[Dependency]:
        """
        Every dependency touching a task of the project.

        Edges reaching into another project come back too; the graph
        builder drops them as dangling.
        """
        task_ids = select(Task.id).where(Task.project_id == project_id)
        result = await self.session.execute(
            select(Dependency).where(
                or_(
                    Dependency.predecessor_id.in_(task_ids),
                    Dependency.successor_id.in_(task_ids),
                )
            )
        )
        return list(result.scalars().all())

    async def save_task_schedule(self, task_id: uuid.UUID, update: TaskScheduleUpdate) -> None:
        task = await self.session.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", str(task_id))

        for field, value in asdict(update).items():
            setattr(task, field, value)
        task.updated_at = utc_now()
        self.session.add(task)

        # Surface write errors inside the schedule run; a failed flush leaves
        # the transaction unusable
        try:
            await self.session.flush()
        except Exception:
            await self.session.rollback()
            raise

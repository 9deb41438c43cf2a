"""
Schedule routes for the Cadence API.

Thin wrappers around the scheduler: run a project's schedule inline, queue
it on the worker, or read back the last persisted schedule.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cadence.database import get_session
from cadence.models import Project
from cadence.schemas import (
    EnqueuedScheduleRead,
    ScheduleRequest,
    ScheduleResultRead,
    ScheduleTaskRead,
)
from cadence.services.graph import ScheduleTask
from cadence.services.scheduler import get_schedule_data, run_schedule
from cadence.services.store import SqlTaskStore
from cadence.worker import enqueue_schedule
from cadence.exceptions import ErrorResponse, NotFoundError
from cadence.logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter()

NOT_FOUND = {status.HTTP_404_NOT_FOUND: {"model": ErrorResponse}}


async def _require_project(session: AsyncSession, project_id: uuid.UUID) -> Project:
    project = await session.get(Project, project_id)
    if not project:
        raise NotFoundError("Project", str(project_id))
    return project


@router.post("/{project_id}/schedule", response_model=ScheduleResultRead, responses=NOT_FOUND)
async def schedule_project(
    project_id: uuid.UUID,
    request: ScheduleRequest | None = None,
    session: AsyncSession = Depends(get_session),
) -> ScheduleResultRead:
    """
    Recompute the critical-path schedule of a project and persist it.

    A failed run is still a 200 response with success=false; the message
    says what went wrong.
    """
    await _require_project(session, project_id)

    result = await run_schedule(SqlTaskStore(session), project_id, request.start_date if request else None)

    if not result.success:
        logger.warning(f"Schedule run failed for project {project_id}: {result.message}")

    return ScheduleResultRead.model_validate(result)


@router.post(
    "/{project_id}/schedule/enqueue",
    response_model=EnqueuedScheduleRead,
    status_code=status.HTTP_202_ACCEPTED,
    responses=NOT_FOUND,
)
async def enqueue_project_schedule(
    project_id: uuid.UUID,
    request: ScheduleRequest | None = None,
    session: AsyncSession = Depends(get_session),
) -> EnqueuedScheduleRead:
    """Queue a schedule run on the background worker."""
    await _require_project(session, project_id)

    job_id = await enqueue_schedule(project_id, request.start_date if request else None)
    return EnqueuedScheduleRead(project_id=project_id, job_id=job_id)


@router.get("/{project_id}/schedule", response_model=list[ScheduleTaskRead], responses=NOT_FOUND)
async def read_project_schedule(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
) -> list[ScheduleTask]:
    """Get the last persisted schedule of every task in a project."""
    await _require_project(session, project_id)

    tasks = await get_schedule_data(SqlTaskStore(session), project_id)

    logger.debug(f"Read schedule of {len(tasks)} tasks for project={project_id}")

    return tasks

"""
ARQ Worker for background schedule runs.

This worker handles:
- schedule_project: full CPM run for one project

Jobs are enqueued under the ID "schedule:<project_id>", so ARQ refuses a
second job for a project while one is still queued or running. That keeps
runs for the same project from interleaving their writes.

Usage:
    arq cadence.worker.WorkerSettings
"""

import uuid
from dataclasses import asdict
from datetime import date

from arq import create_pool
from arq.connections import RedisSettings, ArqRedis

from cadence.config import get_settings
from cadence.database import get_session_context
from cadence.services.scheduler import run_schedule
from cadence.services.store import SqlTaskStore
from cadence.logging_config import setup_logging, get_logger

setup_logging()
logger = get_logger(__name__)

settings = get_settings()


def schedule_job_id(project_id: uuid.UUID | str) -> str:
    return f"schedule:{project_id}"


async def schedule_project(ctx: dict, project_id: str, start_date: str | None = None) -> dict:
    """
    ARQ job: recompute and persist the schedule of a project.

    Args:
        ctx: ARQ context
        project_id: Project to schedule
        start_date: ISO date the project starts on; today when omitted

    Returns:
        The ScheduleResult as a dict
    """
    start = date.fromisoformat(start_date) if start_date else None

    async with get_session_context() as session:
        result = await run_schedule(SqlTaskStore(session), uuid.UUID(project_id), start)

    return asdict(result)


async def startup(ctx: dict) -> None:
    logger.info("ARQ Worker starting up...")
    logger.info(f"Redis: {settings.redis_url}")


async def shutdown(ctx: dict) -> None:
    logger.info("ARQ Worker shutting down...")


class WorkerSettings:
    """ARQ Worker configuration."""

    functions = [schedule_project]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = RedisSettings.from_dsn(settings.redis_url)
    max_jobs = 10
    job_timeout = 300  # 5 minutes max per run
    # Results are not kept, so a finished run never blocks the next one
    # enqueued under the same job ID
    keep_result = 0


# Redis pool for enqueuing jobs from the API
_arq_pool: ArqRedis | None = None


async def get_arq_pool() -> ArqRedis:
    """Get or create the ARQ Redis pool for enqueuing jobs."""
    global _arq_pool
    if _arq_pool is None:
        logger.debug("Creating ARQ Redis pool")
        _arq_pool = await create_pool(RedisSettings.from_dsn(settings.redis_url))
    return _arq_pool


async def enqueue_schedule(project_id: uuid.UUID, start_date: date | None = None) -> str | None:
    """
    Queue a schedule run for a project.

    Returns the job ID, or None when a run for the project is already
    queued or in progress.
    """
    pool = await get_arq_pool()
    job = await pool.enqueue_job(
        "schedule_project",
        str(project_id),
        start_date.isoformat() if start_date else None,
        _job_id=schedule_job_id(project_id),
    )
    if job is None:
        logger.info(f"Schedule run for project {project_id} already queued")
        return None

    logger.debug(f"Enqueued schedule job: project={project_id}")
    return job.job_id

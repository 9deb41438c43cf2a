"""
Pytest configuration and fixtures for Cadence tests.
"""

import os

# Point settings at SQLite before any cadence module builds the engine
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import uuid
from dataclasses import asdict
from datetime import date

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from cadence.main import app
from cadence.database import get_session
from cadence.models import ConstraintType, Dependency, DependencyType, Task
from cadence.services.store import TaskScheduleUpdate


TEST_DATABASE_URL = "sqlite+aiosqlite://"

PROJECT_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")
MONDAY = date(2025, 1, 6)


def make_task(
    name: str,
    days: int | None = None,
    *,
    hours: float | None = None,
    constraint: ConstraintType = ConstraintType.AS_SOON_AS_POSSIBLE,
    constraint_date: date | None = None,
    project_id: uuid.UUID = PROJECT_ID,
) -> Task:
    """Build an unsaved Task; `days` is shorthand for days * 8 estimated hours."""
    if days is not None:
        hours = days * 8
    return Task(
        id=uuid.uuid4(),
        name=name,
        wbs_code=None,
        estimated_hours=hours,
        constraint_type=constraint,
        constraint_date=constraint_date,
        project_id=project_id,
    )


def make_dep(
    predecessor: Task | uuid.UUID,
    successor: Task | uuid.UUID,
    dep_type: DependencyType = DependencyType.FINISH_TO_START,
    lag: int = 0,
) -> Dependency:
    return Dependency(
        predecessor_id=getattr(predecessor, "id", predecessor),
        successor_id=getattr(successor, "id", successor),
        dependency_type=dep_type,
        lag_days=lag,
    )


class InMemoryTaskStore:
    """TaskStore backed by plain lists, recording every save."""

    def __init__(self, tasks=(), dependencies=(), fail_on_save: int | None = None):
        self.tasks = list(tasks)
        self.dependencies = list(dependencies)
        self.saved: dict[uuid.UUID, TaskScheduleUpdate] = {}
        self.save_calls = 0
        self.fail_on_save = fail_on_save
        self.load_error: Exception | None = None

    async def load_tasks(self, project_id):
        if self.load_error is not None:
            raise self.load_error
        return [t for t in self.tasks if t.project_id == project_id]

    async def load_dependencies(self, project_id):
        return list(self.dependencies)

    async def save_task_schedule(self, task_id, update):
        self.save_calls += 1
        if self.fail_on_save is not None and self.save_calls >= self.fail_on_save:
            raise IOError("disk full")
        self.saved[task_id] = update
        task = next(t for t in self.tasks if t.id == task_id)
        for field, value in asdict(update).items():
            setattr(task, field, value)


@pytest.fixture
def store_factory():
    return InMemoryTaskStore


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def test_session(session_maker):
    """Create a test database session."""
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(session_maker):
    """Create an async test client with test database."""

    async def override_get_session():
        async with session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

import uuid
from datetime import date
from pydantic import BaseModel

from cadence.models import ConstraintType, DependencyType


class ScheduleRequest(BaseModel):
    """Schema for starting a schedule run."""
    start_date: date | None = None  # Defaults to today if not provided


class ConstraintConflictRead(BaseModel):
    """A must-start-on / must-finish-on date that overrode the network."""
    task_id: uuid.UUID
    constraint_type: ConstraintType
    constraint_date: date
    graph_date: date

    model_config = {"from_attributes": True}


class ScheduleResultRead(BaseModel):
    """Schema for reading the outcome of a schedule run."""
    success: bool
    message: str
    tasks_updated: int
    critical_path_length: int
    project_end_date: date | None
    critical_tasks: list[uuid.UUID]
    constraint_conflicts: list[ConstraintConflictRead]

    model_config = {"from_attributes": True}


class EdgeRead(BaseModel):
    task_id: uuid.UUID
    type: DependencyType
    lag_days: int

    model_config = {"from_attributes": True}


class ScheduleTaskRead(BaseModel):
    """Schema for reading the persisted schedule of one task."""
    id: uuid.UUID
    name: str
    wbs_code: str | None
    duration: int
    estimated_hours: float | None
    constraint_type: ConstraintType
    constraint_date: date | None
    early_start: date | None
    early_finish: date | None
    late_start: date | None
    late_finish: date | None
    total_float: int | None
    free_float: int | None
    is_critical_path: bool
    predecessors: list[EdgeRead]
    successors: list[EdgeRead]

    model_config = {"from_attributes": True}


class EnqueuedScheduleRead(BaseModel):
    """Schema returned when a run is queued instead of executed inline."""
    project_id: uuid.UUID
    job_id: str | None  # None when a run for the project is already queued

import uuid
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship

from cadence.models.base import timestamp_field

if TYPE_CHECKING:
    from cadence.models.project import Project
    from cadence.models.dependency import Dependency


class ConstraintType(str, Enum):
    """Hard date rule attached to a single task."""

    AS_SOON_AS_POSSIBLE = "asap"
    START_NO_EARLIER_THAN = "snet"
    MUST_START_ON = "mso"
    FINISH_NO_LATER_THAN = "fnlt"
    MUST_FINISH_ON = "mfo"


class Task(SQLModel, table=True):
    """
    Task model holding both planning input and the last computed schedule.

    Input fields:
    - estimated_hours: effort, converted to a duration in working days
    - constraint_type / constraint_date: optional date rule

    Everything from duration down to is_critical_path is written by a
    schedule run; start_date/end_date mirror early start/finish.
    """

    __tablename__ = "tasks"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    wbs_code: str | None = Field(default=None)
    estimated_hours: float | None = Field(default=None)
    constraint_type: ConstraintType = Field(default=ConstraintType.AS_SOON_AS_POSSIBLE)
    constraint_date: date | None = Field(default=None)

    # Planned dates (overwritten by every schedule run)
    start_date: date | None = Field(default=None)
    end_date: date | None = Field(default=None)

    # Computed schedule
    duration: int | None = Field(default=None)
    early_start: date | None = Field(default=None)
    early_finish: date | None = Field(default=None)
    late_start: date | None = Field(default=None)
    late_finish: date | None = Field(default=None)
    total_float: int | None = Field(default=None)
    free_float: int | None = Field(default=None)
    is_critical_path: bool = Field(default=False)

    # Foreign keys
    project_id: uuid.UUID = Field(foreign_key="projects.id", index=True)

    # Timestamps
    created_at: datetime = timestamp_field()
    updated_at: datetime = timestamp_field()

    # Relationships
    project: "Project" = Relationship(back_populates="tasks")

    # Dependencies where this task is the predecessor
    successors: list["Dependency"] = Relationship(
        back_populates="predecessor",
        sa_relationship_kwargs={"foreign_keys": "Dependency.predecessor_id"},
    )

    # Dependencies where this task is the successor
    predecessors: list["Dependency"] = Relationship(
        back_populates="successor",
        sa_relationship_kwargs={"foreign_keys": "Dependency.successor_id"},
    )

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship

from cadence.models.base import timestamp_field

if TYPE_CHECKING:
    from cadence.models.task import Task


class DependencyType(str, Enum):
    """Precedence relationship between two tasks."""

    FINISH_TO_START = "FS"
    START_TO_START = "SS"
    FINISH_TO_FINISH = "FF"
    START_TO_FINISH = "SF"


class Dependency(SQLModel, table=True):
    """
    Dependency model representing a directed edge in the task DAG.

    predecessor_id -> successor_id, qualified by a relationship type and a
    lag in working days. A negative lag is a lead.

    Example: "B starts 2 days after A finishes" is
    - predecessor_id = A.id
    - successor_id = B.id
    - dependency_type = FS, lag_days = 2
    """

    __tablename__ = "dependencies"

    # Composite primary key
    predecessor_id: uuid.UUID = Field(
        foreign_key="tasks.id",
        primary_key=True,
    )
    successor_id: uuid.UUID = Field(
        foreign_key="tasks.id",
        primary_key=True,
    )

    dependency_type: DependencyType = Field(default=DependencyType.FINISH_TO_START)
    lag_days: int = Field(default=0)

    created_at: datetime = timestamp_field()

    # Relationships
    predecessor: "Task" = Relationship(
        back_populates="successors",
        sa_relationship_kwargs={"foreign_keys": "Dependency.predecessor_id"},
    )
    successor: "Task" = Relationship(
        back_populates="predecessors",
        sa_relationship_kwargs={"foreign_keys": "Dependency.successor_id"},
    )

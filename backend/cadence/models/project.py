import uuid
from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship

from cadence.models.base import timestamp_field

if TYPE_CHECKING:
    from cadence.models.task import Task


class Project(SQLModel, table=True):
    """Project model - the unit a schedule run covers."""

    __tablename__ = "projects"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    created_at: datetime = timestamp_field()

    # Relationships
    tasks: list["Task"] = Relationship(back_populates="project")

from cadence.models.base import utc_now
from cadence.models.project import Project
from cadence.models.task import ConstraintType, Task
from cadence.models.dependency import Dependency, DependencyType

__all__ = [
    "Project",
    "Task",
    "ConstraintType",
    "Dependency",
    "DependencyType",
    "utc_now",
]

from cadence.schemas.schedule import (
    ScheduleRequest,
    ScheduleResultRead,
    ScheduleTaskRead,
    ConstraintConflictRead,
    EdgeRead,
    EnqueuedScheduleRead,
)

__all__ = [
    "ScheduleRequest",
    "ScheduleResultRead",
    "ScheduleTaskRead",
    "ConstraintConflictRead",
    "EdgeRead",
    "EnqueuedScheduleRead",
]

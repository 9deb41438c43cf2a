"""
Scheduling graph construction using NetworkX.

This module handles:
- Turning a task/dependency snapshot into ScheduleTask working nodes
- Duration derivation from estimated effort
- Cycle detection and topological ordering
"""

import math
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

import networkx as nx

from cadence.exceptions import CyclicDependencyError
from cadence.logging_config import get_logger
from cadence.models import ConstraintType, Dependency, DependencyType, Task

logger = get_logger(__name__)

DEFAULT_HOURS_PER_DAY = 8.0


@dataclass
class EdgeRef:
    """One end of a dependency, as seen from the task holding it."""
    task_id: uuid.UUID
    type: DependencyType
    lag_days: int


@dataclass
class ScheduleTask:
    """Mutable working record for a single task during one schedule run."""
    id: uuid.UUID
    name: str
    wbs_code: str | None
    duration: int
    estimated_hours: float | None
    constraint_type: ConstraintType = ConstraintType.AS_SOON_AS_POSSIBLE
    constraint_date: date | None = None
    predecessors: list[EdgeRef] = field(default_factory=list)
    successors: list[EdgeRef] = field(default_factory=list)
    # Forward pass results
    early_start: date | None = None
    early_finish: date | None = None
    # Backward pass results
    late_start: date | None = None
    late_finish: date | None = None
    # Float
    total_float: int | None = None
    free_float: int | None = None
    is_critical_path: bool = False
    # Dates implied by the network alone, before constraint overrides
    graph_early_start: date | None = None
    graph_late_finish: date | None = None


@dataclass
class ScheduleGraph:
    """ScheduleTask nodes plus the predecessor -> successor DiGraph."""
    tasks: dict[uuid.UUID, ScheduleTask]
    graph: nx.DiGraph

    def ensure_acyclic(self) -> None:
        """Raise CyclicDependencyError if any dependency chain loops back."""
        try:
            cycle = nx.find_cycle(self.graph)
        except nx.NetworkXNoCycle:
            return
        logger.error(f"Cycle detected in graph: {cycle}")
        raise CyclicDependencyError(cycle)

    def topological_order(self) -> list[uuid.UUID]:
        """
        Task IDs ordered so every predecessor comes before its successors.

        Call ensure_acyclic() first; NetworkX raises NetworkXUnfeasible on
        a cyclic graph.
        """
        return list(nx.topological_sort(self.graph))


def calculate_duration(
    estimated_hours: float | None,
    hours_per_day: float = DEFAULT_HOURS_PER_DAY,
) -> int:
    """
    Working days needed for a given effort.

    Missing or non-positive effort still takes one day.
    """
    if not estimated_hours or estimated_hours <= 0:
        return 1
    return math.ceil(float(estimated_hours) / hours_per_day)


def build_schedule_graph(
    tasks: Iterable[Task],
    dependencies: Iterable[Dependency],
    hours_per_day: float = DEFAULT_HOURS_PER_DAY,
) -> ScheduleGraph:
    """
    Build ScheduleTask nodes and the dependency DiGraph for one project.

    Dependencies that point at a task outside the snapshot are dropped:
    they cannot constrain anything.
    """
    graph = nx.DiGraph()
    nodes: dict[uuid.UUID, ScheduleTask] = {}

    for task in tasks:
        nodes[task.id] = ScheduleTask(
            id=task.id,
            name=task.name,
            wbs_code=task.wbs_code,
            duration=calculate_duration(task.estimated_hours, hours_per_day),
            estimated_hours=task.estimated_hours,
            constraint_type=ConstraintType(task.constraint_type or ConstraintType.AS_SOON_AS_POSSIBLE),
            constraint_date=task.constraint_date,
        )
        graph.add_node(task.id)

    for dep in dependencies:
        if dep.predecessor_id not in nodes or dep.successor_id not in nodes:
            logger.warning(
                f"Ignoring dangling dependency {dep.predecessor_id} -> {dep.successor_id}"
            )
            continue

        dep_type = DependencyType(dep.dependency_type or DependencyType.FINISH_TO_START)
        lag = int(dep.lag_days or 0)

        nodes[dep.successor_id].predecessors.append(
            EdgeRef(task_id=dep.predecessor_id, type=dep_type, lag_days=lag)
        )
        nodes[dep.predecessor_id].successors.append(
            EdgeRef(task_id=dep.successor_id, type=dep_type, lag_days=lag)
        )
        graph.add_edge(dep.predecessor_id, dep.successor_id)

    logger.debug(f"Built schedule graph: {len(nodes)} tasks, {graph.number_of_edges()} edges")

    return ScheduleGraph(tasks=nodes, graph=graph)

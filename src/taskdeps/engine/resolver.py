"""Lenient dependency resolution: earliest starts and zero-slack critical path."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from taskdeps.logger import get_logger

from .core import ResolutionResult
from .cycles import detect_cycles
from .graph import DependencyGraph
from .ordering import order_tasks

if TYPE_CHECKING:
    from taskdeps.models import Task

logger = get_logger()


def calculate_earliest_starts(
    ordered_tasks: list[Task],
    tasks_by_id: dict[str, Task],
    now: datetime,
    working_hours_per_day: float,
) -> dict[str, datetime]:
    """Compute the earliest start of each task, walking in dependency order.

    A task starts no earlier than its own start date (or ``now`` if it has
    none) and no earlier than any dependency allows.
    """
    earliest_starts: dict[str, datetime] = {}

    for task in ordered_tasks:
        own_duration = task.duration_days(working_hours_per_day)
        earliest = task.start_date or now

        for dep in task.dependencies:
            predecessor = tasks_by_id.get(dep.task_id)
            if predecessor is None:
                continue

            # Only missing when walking the input-order fallback of a cyclic graph
            predecessor_start = earliest_starts.get(dep.task_id, now)
            offset = dep.start_offset_days(
                predecessor.duration_days(working_hours_per_day), own_duration
            )
            candidate = predecessor_start + timedelta(days=offset)
            logger.checks(
                f"  {task.id}: {dep.type.abbreviation} on {dep.task_id} allows start {candidate}"
            )
            earliest = max(earliest, candidate)

        earliest_starts[task.id] = earliest

    return earliest_starts


def calculate_latest_starts(
    ordered_tasks: list[Task],
    earliest_starts: dict[str, datetime],
    graph: DependencyGraph,
    working_hours_per_day: float,
) -> dict[str, datetime]:
    """Backward pass from the project end using successors' latest starts."""
    if not ordered_tasks:
        return {}

    durations = {
        task.id: timedelta(days=task.duration_days(working_hours_per_day))
        for task in ordered_tasks
    }
    project_end = max(earliest_starts[task.id] + durations[task.id] for task in ordered_tasks)
    logger.debug(f"Project end (earliest finish of all tasks): {project_end}")

    latest_starts: dict[str, datetime] = {}
    for task in reversed(ordered_tasks):
        latest_finish = project_end
        for successor_id in graph.get_successors(task.id):
            successor_start = latest_starts.get(successor_id)
            if successor_start is not None and successor_start < latest_finish:
                latest_finish = successor_start
        latest_starts[task.id] = latest_finish - durations[task.id]

    return latest_starts


def calculate_critical_path(
    ordered_tasks: list[Task],
    earliest_starts: dict[str, datetime],
    latest_starts: dict[str, datetime],
) -> list[str]:
    """Tasks with zero slack, in dependency order."""
    return [
        task.id
        for task in ordered_tasks
        if task.id in latest_starts and latest_starts[task.id] == earliest_starts[task.id]
    ]


def resolve_dependencies(
    tasks: list[Task],
    now: datetime | None = None,
    working_hours_per_day: float = 8.0,
    graph: DependencyGraph | None = None,
) -> ResolutionResult:
    """Run the full pipeline without raising.

    graph -> cycles -> order -> earliest starts -> critical path. Cycles are
    returned as data; on a cyclic graph the tasks keep input order and the
    dates are best effort.
    """
    now = now or datetime.now()  # noqa: DTZ005
    graph = graph if graph is not None else DependencyGraph.build(tasks)

    circular_dependencies = detect_cycles(graph, graph.task_ids)
    ordered = order_tasks(tasks, graph, strict=False)
    tasks_by_id = {task.id: task for task in tasks}

    earliest_starts = calculate_earliest_starts(ordered, tasks_by_id, now, working_hours_per_day)
    latest_starts = calculate_latest_starts(
        ordered, earliest_starts, graph, working_hours_per_day
    )
    critical_path = calculate_critical_path(ordered, earliest_starts, latest_starts)

    logger.changes(
        f"Resolved {len(ordered)} tasks: {len(circular_dependencies)} cycle(s), "
        f"critical path {' -> '.join(critical_path) or '(empty)'}"
    )

    return ResolutionResult(
        ordered_tasks=ordered,
        critical_path=critical_path,
        circular_dependencies=circular_dependencies,
        earliest_starts=earliest_starts,
        latest_starts=latest_starts,
    )

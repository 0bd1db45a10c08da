"""Apply resolved earliest starts back onto task copies."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from .config import EngineConfig
from .engine import DependencyEngine, ResolutionResult
from .logger import get_logger
from .models import Task

logger = get_logger()


def auto_schedule(
    tasks: list[Task],
    engine: DependencyEngine | None = None,
    result: ResolutionResult | None = None,
    now: datetime | None = None,
) -> list[Task]:
    """Push dated tasks later where their dependencies require it.

    Only tasks that already have a start date are moved, and only forwards:
    the new start is the resolved earliest start and the end keeps the task's
    duration. Undated tasks and tasks already late enough are returned as-is.
    The input list is not modified; persisting the result is up to the caller.

    Args:
        tasks: Current task snapshot
        engine: Engine to resolve with (a default one is created if omitted)
        result: Precomputed resolution for these tasks, resolved if omitted
        now: Reference time for undated tasks when resolving

    Returns:
        Tasks in input order, moved ones replaced by updated copies
    """
    if result is None:
        engine = engine or DependencyEngine(now=now)
        result = engine.resolve_dependencies(tasks)
    hours_per_day = (engine.config if engine else EngineConfig()).working_hours_per_day

    updated: dict[str, Task] = {}
    for task in result.ordered_tasks:
        earliest = result.earliest_starts.get(task.id)
        if earliest is None or task.start_date is None or earliest <= task.start_date:
            continue

        duration = timedelta(days=task.duration_days(hours_per_day))
        updated[task.id] = replace(task, start_date=earliest, end_date=earliest + duration)
        logger.changes(f"Moved '{task.id}' from {task.start_date} to {earliest}")

    return [updated.get(task.id, task) for task in tasks]

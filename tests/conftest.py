"""Pytest configuration and fixtures for taskdeps tests."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from taskdeps.logger import reset_logger
from taskdeps.models import Dependency, DependencyType, Task

# Fixed reference instant so date math never depends on the wall clock
DAY0 = datetime(2025, 1, 6)
HOURS_PER_DAY = 8.0


def day(n: float) -> datetime:
    """DAY0 shifted by n days."""
    return DAY0 + timedelta(days=n)


def dep_list(*task_ids: str) -> tuple[Dependency, ...]:
    """Create finish-to-start dependencies from task ID strings.

    Example:
        make_task("b", dependencies=dep_list("a"))
    """
    return tuple(Dependency(task_id=tid) for tid in task_ids)


def make_task(
    task_id: str,
    *,
    days: float | None = None,
    start: float | None = None,
    dependencies: tuple[Dependency, ...] = (),
    end: float | None = None,
    progress: float | None = None,
) -> Task:
    """Build a task whose duration comes from estimated effort.

    Args:
        task_id: Task ID
        days: Duration in working days (converted to hours at 8h/day)
        start: Start date as an offset from DAY0
        dependencies: Predecessors
        end: End date as an offset from DAY0
        progress: Completion percentage
    """
    return Task(
        id=task_id,
        name=task_id.upper(),
        start_date=day(start) if start is not None else None,
        end_date=day(end) if end is not None else None,
        estimated_time=days * HOURS_PER_DAY if days is not None else None,
        progress=progress,
        dependencies=dependencies,
    )


@pytest.fixture(autouse=True)
def clean_logger() -> None:
    """Reset logger state before each test for isolation."""
    reset_logger()


@pytest.fixture
def chain_tasks() -> list[Task]:
    """a -> b -> c, two days each, a starting on DAY0."""
    return [
        Task(id="a", start_date=day(0), end_date=day(2)),
        make_task("b", days=2, dependencies=dep_list("a")),
        make_task("c", days=2, dependencies=dep_list("b")),
    ]


@pytest.fixture
def diamond_tasks() -> list[Task]:
    """a -> (b, c) -> d where b takes 5 days and c takes 2."""
    return [
        make_task("a", days=1),
        make_task("b", days=5, dependencies=dep_list("a")),
        make_task("c", days=2, dependencies=dep_list("a")),
        make_task("d", days=1, dependencies=dep_list("b", "c")),
    ]


@pytest.fixture
def two_cycle_tasks() -> list[Task]:
    """a and b depend on each other."""
    return [
        make_task("a", days=1, dependencies=dep_list("b")),
        make_task("b", days=1, dependencies=dep_list("a")),
    ]


def typed(task_id: str, dep_type: DependencyType, lag: float = 0.0) -> tuple[Dependency, ...]:
    """One dependency of the given type."""
    return (Dependency(task_id=task_id, type=dep_type, lag_days=lag),)

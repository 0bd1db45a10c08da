"""Dependency validation: a lenient report and a strict check that raises."""

from __future__ import annotations

from typing import TYPE_CHECKING

from taskdeps.exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    SelfDependencyError,
)
from taskdeps.logger import get_logger

from .core import DependencyValidation
from .cycles import detect_cycles, format_cycle
from .graph import DependencyGraph

if TYPE_CHECKING:
    from taskdeps.models import Task

logger = get_logger()


def check_dependencies(
    tasks: list[Task], graph: DependencyGraph | None = None
) -> DependencyValidation:
    """Collect every dependency problem without raising.

    Checks for references to unknown tasks, self-dependencies and cycles.
    """
    graph = graph if graph is not None else DependencyGraph.build(tasks)
    unknown = set(graph.unknown_ids)

    errors: list[str] = []
    self_dependencies: list[str] = []

    for task in tasks:
        for dep in task.dependencies:
            if dep.task_id in unknown:
                errors.append(f"Task {task.id} depends on non-existent task {dep.task_id}")
            if dep.task_id == task.id and task.id not in self_dependencies:
                self_dependencies.append(task.id)
                errors.append(f"Task {task.id} has self-dependency")

    cycles = detect_cycles(graph, graph.task_ids)
    for cycle in cycles:
        errors.append(f"Circular dependency detected: {format_cycle(cycle)}")

    for error in errors:
        logger.checks(f"Validation: {error}")

    return DependencyValidation(
        is_valid=not errors,
        circular_dependencies=cycles,
        invalid_task_ids=list(graph.unknown_ids),
        self_dependencies=self_dependencies,
        errors=errors,
    )


def validate_dependencies(tasks: list[Task], graph: DependencyGraph | None = None) -> None:
    """Validate dependencies, raising on the first category of failure.

    Order of checks: missing references, self-dependencies, cycles.

    Raises:
        MissingReferenceError: A dependency names a task that is not in the set
        SelfDependencyError: A task depends on itself
        CircularDependencyError: The graph has one or more cycles
    """
    graph = graph if graph is not None else DependencyGraph.build(tasks)
    unknown = set(graph.unknown_ids)

    for task in tasks:
        for dep in task.dependencies:
            if dep.task_id in unknown:
                raise MissingReferenceError(
                    f"Task {task.id} depends on non-existent task {dep.task_id}",
                    [task.id, dep.task_id],
                )

    for task in tasks:
        if task.depends_on(task.id):
            raise SelfDependencyError(f"Task {task.id} has self-dependency", [task.id])

    cycles = detect_cycles(graph, graph.task_ids)
    if cycles:
        raise CircularDependencyError(
            "Circular dependencies detected: " + ", ".join(format_cycle(c) for c in cycles),
            cycles,
        )

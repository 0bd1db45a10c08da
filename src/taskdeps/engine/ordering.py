"""Topological ordering (Kahn's algorithm)."""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Literal, overload

from taskdeps.exceptions import CircularDependencyError
from taskdeps.logger import get_logger

from .cycles import detect_cycles, format_cycle
from .graph import DependencyGraph

if TYPE_CHECKING:
    from taskdeps.models import Task

logger = get_logger()


@overload
def topological_sort(graph: DependencyGraph, strict: Literal[True] = ...) -> list[str]: ...


@overload
def topological_sort(graph: DependencyGraph, strict: bool) -> list[str] | None: ...


def topological_sort(graph: DependencyGraph, strict: bool = True) -> list[str] | None:
    """Order node IDs so every node comes after all of its predecessors.

    Nodes with no predecessors are seeded in graph order and processed
    first-in first-out, so ties keep input order.

    Args:
        graph: Graph to sort
        strict: Raise on a cycle instead of returning None

    Returns:
        Node IDs in dependency order, or None if the graph is cyclic and
        strict is False

    Raises:
        CircularDependencyError: If the graph is cyclic and strict is True
    """
    in_degree = graph.in_degrees()
    queue = deque(node_id for node_id in graph.nodes if in_degree[node_id] == 0)
    result: list[str] = []

    while queue:
        node_id = queue.popleft()
        result.append(node_id)

        for dependent in graph.get_successors(node_id):
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(result) == len(graph):
        return result

    if strict:
        cycles = detect_cycles(graph)
        raise CircularDependencyError(
            "Circular dependency detected in task graph: "
            + ", ".join(format_cycle(c) for c in cycles),
            cycles,
        )
    logger.debug(f"Topological sort stopped after {len(result)} of {len(graph)} nodes")
    return None


def order_tasks(tasks: list[Task], graph: DependencyGraph, strict: bool = True) -> list[Task]:
    """Return the tasks in topological order.

    IDs that only exist as dangling references are dropped. In lenient mode a
    cyclic graph yields the tasks in their original input order: the list is
    still usable but carries no ordering guarantee.
    """
    order = topological_sort(graph, strict=strict)
    if order is None:
        logger.warning("Cyclic dependency graph: keeping tasks in input order")
        return list(tasks)

    tasks_by_id = {task.id: task for task in tasks}
    return [tasks_by_id[task_id] for task_id in order if task_id in tasks_by_id]

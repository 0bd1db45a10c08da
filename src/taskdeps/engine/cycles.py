"""Cycle detection over the dependency graph."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from taskdeps.logger import get_logger

from .graph import DependencyGraph

logger = get_logger()


def detect_cycles(
    graph: DependencyGraph, roots: Iterable[str] | None = None
) -> list[list[str]]:
    """Find circular dependencies with an iterative depth-first search.

    Each cycle is reported as the path from the first node of the loop back to
    itself, e.g. ``["a", "b", "a"]``. Cycles in disconnected parts of the
    graph are all reported. Fully explored nodes are never re-entered, so the
    search is O(V + E) however many cycles overlap.

    Args:
        graph: Graph to search
        roots: Start nodes in visiting order (defaults to every node)

    Returns:
        List of cycles, empty if the graph is acyclic
    """
    visited: set[str] = set()
    on_stack: set[str] = set()
    cycles: list[list[str]] = []

    for root in graph.nodes if roots is None else roots:
        if root in visited:
            continue

        path: list[str] = [root]
        stack: list[Iterator[str]] = [iter(graph.get_successors(root))]
        visited.add(root)
        on_stack.add(root)

        while stack:
            neighbor = next(stack[-1], None)
            if neighbor is None:
                # All dependents explored: leave the recursion stack for good
                on_stack.discard(path.pop())
                stack.pop()
                continue

            if neighbor in on_stack:
                cycle = path[path.index(neighbor) :] + [neighbor]
                logger.changes(f"Circular dependency detected: {' -> '.join(cycle)}")
                cycles.append(cycle)
            elif neighbor not in visited:
                visited.add(neighbor)
                on_stack.add(neighbor)
                path.append(neighbor)
                stack.append(iter(graph.get_successors(neighbor)))

    return cycles


def format_cycle(cycle: list[str]) -> str:
    return " -> ".join(cycle)

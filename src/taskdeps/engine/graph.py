"""Dependency graph over a task snapshot."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taskdeps.models import Task


class DependencyGraph:
    """Adjacency map (predecessor -> dependents) and its transpose.

    Edges point from a predecessor to the task that depends on it. Building
    never fails: IDs referenced by a dependency but absent from the task set
    get a node of their own and are listed in ``unknown_ids`` so validation
    can report them later.
    """

    def __init__(self) -> None:
        # Inner dicts are used as ordered sets
        self._successors: dict[str, dict[str, None]] = {}
        self._predecessors: dict[str, dict[str, None]] = {}
        self.task_ids: list[str] = []
        self.unknown_ids: list[str] = []

    @classmethod
    def build(cls, tasks: Iterable[Task]) -> DependencyGraph:
        """Build the graph for a task list in O(V + E)."""
        graph = cls()
        task_list = list(tasks)
        known: set[str] = set()
        for task in task_list:
            graph._add_node(task.id)
            if task.id not in known:
                known.add(task.id)
                graph.task_ids.append(task.id)

        for task in task_list:
            for dep in task.dependencies:
                if dep.task_id not in known and dep.task_id not in graph:
                    graph.unknown_ids.append(dep.task_id)
                graph.add_edge(dep.task_id, task.id)
        return graph

    def _add_node(self, node_id: str) -> None:
        if node_id not in self._successors:
            self._successors[node_id] = {}
            self._predecessors[node_id] = {}

    def add_edge(self, predecessor: str, dependent: str) -> None:
        """Add predecessor -> dependent, creating either node if needed."""
        self._add_node(predecessor)
        self._add_node(dependent)
        self._successors[predecessor][dependent] = None
        self._predecessors[dependent][predecessor] = None

    def with_edge(self, predecessor: str, dependent: str) -> DependencyGraph:
        """Return a copy of this graph with one extra edge."""
        clone = DependencyGraph()
        clone._successors = {k: dict(v) for k, v in self._successors.items()}
        clone._predecessors = {k: dict(v) for k, v in self._predecessors.items()}
        clone.task_ids = list(self.task_ids)
        clone.unknown_ids = list(self.unknown_ids)
        clone.add_edge(predecessor, dependent)
        return clone

    @property
    def nodes(self) -> list[str]:
        """All node IDs: tasks in input order, then unknown references."""
        return list(self._successors)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._successors

    def __len__(self) -> int:
        return len(self._successors)

    def get_successors(self, node_id: str) -> list[str]:
        """Tasks that depend on node_id."""
        return list(self._successors.get(node_id, ()))

    def get_predecessors(self, node_id: str) -> list[str]:
        """Tasks node_id depends on."""
        return list(self._predecessors.get(node_id, ()))

    def in_degrees(self) -> dict[str, int]:
        """Number of distinct predecessors per node."""
        return {node_id: len(preds) for node_id, preds in self._predecessors.items()}

    def edge_count(self) -> int:
        return sum(len(succs) for succs in self._successors.values())

    def has_path(self, source: str, target: str) -> bool:
        """Breadth-first reachability from source to target along dependency edges.

        A node always reaches itself.
        """
        if source == target:
            return True

        visited = {source}
        queue = deque([source])
        while queue:
            current = queue.popleft()
            for neighbor in self._successors.get(current, ()):
                if neighbor == target:
                    return True
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return False

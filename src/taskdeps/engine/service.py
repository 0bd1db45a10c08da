"""High-level dependency engine."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from taskdeps.config import EngineConfig
from taskdeps.exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    SelfDependencyError,
)
from taskdeps.logger import get_logger
from taskdeps.models import DependencyType

from .core import CriticalPath, DependencyValidation, ResolutionResult, ScheduledTask
from .cpm import CPMScheduler
from .cycles import detect_cycles
from .graph import DependencyGraph
from .ordering import order_tasks
from .resolver import resolve_dependencies
from .validator import check_dependencies, validate_dependencies

if TYPE_CHECKING:
    from taskdeps.models import Dependency, Task

logger = get_logger()

COMPLETE_PROGRESS = 100


class DependencyEngine:
    """Entry point for dependency resolution and scheduling.

    Operations that take a task list are pure functions of that list. The
    engine also keeps one snapshot (set with ``rebuild``) for the queries that
    only take an ID: predecessors, successors, reachability and start
    permission. The snapshot is read-only until the next rebuild.
    """

    def __init__(
        self,
        tasks: list[Task] | None = None,
        config: EngineConfig | None = None,
        now: datetime | None = None,
    ):
        """Initialize the engine.

        Args:
            tasks: Optional initial snapshot for ID-based queries
            config: Engine settings (defaults used if omitted)
            now: Fixed "current time" for date math (defaults to the wall clock per call)
        """
        self.config = config or EngineConfig()
        self.now = now
        self._tasks: dict[str, Task] = {}
        self._graph = DependencyGraph()
        if tasks is not None:
            self.rebuild(tasks)

    def _current_time(self) -> datetime:
        return self.now or datetime.now()  # noqa: DTZ005

    def rebuild(self, tasks: list[Task]) -> None:
        """Replace the snapshot and its cached graph."""
        self._tasks = {task.id: task for task in tasks}
        self._graph = DependencyGraph.build(tasks)
        logger.debug(
            f"Engine snapshot: {len(self._tasks)} tasks, {self._graph.edge_count()} edges"
        )

    @property
    def graph(self) -> DependencyGraph:
        return self._graph

    # Whole-set operations

    def resolve_dependencies(self, tasks: list[Task]) -> ResolutionResult:
        """Order, date and find the zero-slack path; cycles are reported, not raised."""
        return resolve_dependencies(
            tasks, self._current_time(), self.config.working_hours_per_day
        )

    def validate_dependencies(self, tasks: list[Task]) -> None:
        """Raise a DependencyError if the set has missing, self or circular references."""
        validate_dependencies(tasks)

    def check_dependencies(self, tasks: list[Task]) -> DependencyValidation:
        """Report every dependency problem without raising."""
        return check_dependencies(tasks)

    def topological_sort(self, tasks: list[Task], strict: bool | None = None) -> list[Task]:
        """Tasks in dependency order.

        With strict=False a cyclic set comes back in input order instead of
        raising. Defaults to config.strict_ordering.
        """
        strict = self.config.strict_ordering if strict is None else strict
        return order_tasks(tasks, DependencyGraph.build(tasks), strict=strict)

    def calculate_schedule(
        self,
        tasks: list[Task],
        project_start_date: datetime | None = None,
        working_hours_per_day: float | None = None,
    ) -> dict[str, ScheduledTask]:
        """CPM schedule: early/late dates, float and critical flag per task."""
        return self._cpm(tasks, project_start_date, working_hours_per_day).schedule()

    def find_critical_path(
        self,
        tasks: list[Task],
        project_start_date: datetime | None = None,
        working_hours_per_day: float | None = None,
    ) -> CriticalPath:
        """Critical tasks by early start, total duration and delay flag."""
        return self._cpm(tasks, project_start_date, working_hours_per_day).critical_path()

    def _cpm(
        self,
        tasks: list[Task],
        project_start_date: datetime | None,
        working_hours_per_day: float | None,
    ) -> CPMScheduler:
        return CPMScheduler(
            tasks,
            project_start_date or self._current_time(),
            self.config,
            working_hours_per_day,
        )

    # Mutation safety

    def would_create_cycle(self, tasks: list[Task], from_id: str, to_id: str) -> bool:
        """Check whether making from_id depend on to_id would close a cycle.

        The edge is added to a cloned graph and cycle detection re-run; the
        engine's snapshot is untouched. An unknown from_id returns False.
        """
        if not any(task.id == from_id for task in tasks):
            return False

        candidate = DependencyGraph.build(tasks).with_edge(to_id, from_id)
        cycles = detect_cycles(candidate, candidate.task_ids)
        if cycles:
            logger.checks(f"Dependency {from_id} -> {to_id} would create a cycle")
        return bool(cycles)

    def has_path(self, source: str, target: str) -> bool:
        """True if target is reachable from source in the snapshot graph."""
        return self._graph.has_path(source, target)

    def add_dependency(
        self, tasks: list[Task], task_id: str, dependency: Dependency
    ) -> list[Task]:
        """Return a new task list where task_id also depends on dependency.task_id.

        Raises:
            MissingReferenceError: Either task is not in the list
            SelfDependencyError: The task would depend on itself
            CircularDependencyError: The new edge would close a cycle
        """
        ids = {task.id for task in tasks}
        if task_id not in ids:
            raise MissingReferenceError(f"Task {task_id} not found", [task_id])
        if dependency.task_id not in ids:
            raise MissingReferenceError(
                f"Dependency task {dependency.task_id} not found", [task_id, dependency.task_id]
            )
        if dependency.task_id == task_id:
            raise SelfDependencyError(f"Task {task_id} cannot depend on itself", [task_id])

        # The new edge is predecessor -> task_id; a path back closes a loop
        graph = DependencyGraph.build(tasks)
        if graph.has_path(task_id, dependency.task_id):
            raise CircularDependencyError(
                f"Adding dependency {task_id} -> {dependency.task_id} "
                "would create a circular dependency",
                [[dependency.task_id, task_id, dependency.task_id]],
            )

        logger.changes(f"Task {task_id} now depends on {dependency}")
        return [
            task.with_dependency(dependency) if task.id == task_id else task for task in tasks
        ]

    def remove_dependency(
        self, tasks: list[Task], task_id: str, dependency_task_id: str
    ) -> list[Task]:
        """Return a new task list without task_id's dependency on dependency_task_id."""
        if not any(task.id == task_id for task in tasks):
            raise MissingReferenceError(f"Task {task_id} not found", [task_id])
        return [
            task.without_dependency(dependency_task_id) if task.id == task_id else task
            for task in tasks
        ]

    # Snapshot queries

    def get_predecessors(self, task_id: str) -> list[str]:
        """IDs the task depends on (empty for unknown IDs)."""
        return self._graph.get_predecessors(task_id)

    def get_successors(self, task_id: str) -> list[str]:
        """IDs that depend on the task (empty for unknown IDs)."""
        return self._graph.get_successors(task_id)

    def can_task_start(self, task_id: str, current_date: datetime | None = None) -> bool:
        """Check whether every dependency of a task is satisfied at current_date.

        - finish-to-start: predecessor 100% complete or past its end date
        - start-to-start: predecessor started (progress above zero)
        - finish-to-finish, start-to-finish: never block a start

        Unknown tasks and tasks without dependencies can always start; a
        dependency on a task missing from the snapshot blocks.
        """
        task = self._tasks.get(task_id)
        if task is None or not task.dependencies:
            return True

        current_date = current_date or self._current_time()
        for dep in task.dependencies:
            predecessor = self._tasks.get(dep.task_id)
            if predecessor is None:
                logger.checks(f"  {task_id}: predecessor {dep.task_id} missing")
                return False

            if dep.type == DependencyType.FINISH_TO_START:
                finished = predecessor.progress == COMPLETE_PROGRESS or (
                    predecessor.end_date is not None and predecessor.end_date <= current_date
                )
                if not finished:
                    logger.checks(f"  {task_id}: waiting for {dep.task_id} to finish")
                    return False
            elif dep.type == DependencyType.START_TO_START:
                if predecessor.progress is None or predecessor.progress <= 0:
                    logger.checks(f"  {task_id}: waiting for {dep.task_id} to start")
                    return False
            # Finish constraints do not gate the start

        return True

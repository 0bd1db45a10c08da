"""Critical Path Method: forward/backward pass with total and free float."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from taskdeps.config import EngineConfig
from taskdeps.logger import checks_enabled, get_logger
from taskdeps.models import SECONDS_PER_DAY

from .core import CriticalPath, ScheduledTask
from .graph import DependencyGraph
from .ordering import topological_sort
from .validator import validate_dependencies

if TYPE_CHECKING:
    from taskdeps.models import Task

logger = get_logger()


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


class CPMScheduler:
    """Computes early/late dates and float for a validated task set.

    The forward pass places each task as early as its predecessors allow
    (never before the project start). The backward pass places each task as
    late as its successors allow without moving the project end. Both passes
    use the same per-type offset (see ``Dependency.start_offset_days``).
    """

    def __init__(
        self,
        tasks: list[Task],
        project_start_date: datetime,
        config: EngineConfig | None = None,
        working_hours_per_day: float | None = None,
        graph: DependencyGraph | None = None,
    ):
        """Initialize the scheduler.

        Args:
            tasks: Tasks to schedule (not modified)
            project_start_date: No task starts before this instant
            config: Engine settings (defaults used if omitted)
            working_hours_per_day: Overrides config.working_hours_per_day
            graph: Prebuilt graph for these tasks, built if omitted
        """
        self.tasks = tasks
        self.project_start_date = project_start_date
        self.config = config or EngineConfig()
        self.working_hours_per_day = working_hours_per_day or self.config.working_hours_per_day
        self.graph = graph if graph is not None else DependencyGraph.build(tasks)
        self.tasks_by_id = {task.id: task for task in tasks}

    def duration_of(self, task: Task) -> float:
        return task.duration_days(self.working_hours_per_day, self.config.default_duration_days)

    def schedule(self) -> dict[str, ScheduledTask]:
        """Validate, then run both passes.

        Returns:
            ScheduledTask per task ID, in topological order

        Raises:
            DependencyError: If the task set has missing references,
                self-dependencies or cycles
        """
        validate_dependencies(self.tasks, self.graph)
        order = topological_sort(self.graph, strict=True)
        if not order:
            return {}

        durations = {task_id: self.duration_of(self.tasks_by_id[task_id]) for task_id in order}

        early_start, early_finish = self._forward_pass(order, durations)
        project_end = max(early_finish.values())
        logger.debug(f"CPM project window: {self.project_start_date} .. {project_end}")
        late_start = self._backward_pass(order, durations, project_end)

        scheduled: dict[str, ScheduledTask] = {}
        for task_id in order:
            successors = self.graph.get_successors(task_id)
            duration = timedelta(days=durations[task_id])

            total_float = _days_between(early_start[task_id], late_start[task_id])
            free_float = 0.0
            if successors:
                earliest_successor_start = min(early_start[s] for s in successors)
                free_float = _days_between(early_finish[task_id], earliest_successor_start)

            is_critical = total_float <= self.config.critical_float_tolerance
            if is_critical:
                logger.checks(f"  {task_id} is critical (total float {total_float:.3f}d)")

            scheduled[task_id] = ScheduledTask(
                task_id=task_id,
                early_start=early_start[task_id],
                early_finish=early_finish[task_id],
                late_start=late_start[task_id],
                late_finish=late_start[task_id] + duration,
                total_float=self._report_days(total_float),
                free_float=self._report_days(free_float),
                is_critical=is_critical,
                predecessors=self.graph.get_predecessors(task_id),
                successors=successors,
            )

        return scheduled

    def _report_days(self, days: float) -> float:
        return round(max(0.0, days), self.config.float_precision)

    def _forward_pass(
        self, order: list[str], durations: dict[str, float]
    ) -> tuple[dict[str, datetime], dict[str, datetime]]:
        early_start: dict[str, datetime] = {}
        early_finish: dict[str, datetime] = {}

        for task_id in order:
            task = self.tasks_by_id[task_id]
            start = self.project_start_date
            for dep in task.dependencies:
                offset = dep.start_offset_days(durations[dep.task_id], durations[task_id])
                candidate = early_start[dep.task_id] + timedelta(days=offset)
                if checks_enabled():
                    logger.checks(f"  forward {task_id}: {dep} -> no start before {candidate}")
                start = max(start, candidate)

            early_start[task_id] = start
            early_finish[task_id] = start + timedelta(days=durations[task_id])

        return early_start, early_finish

    def _backward_pass(
        self, order: list[str], durations: dict[str, float], project_end: datetime
    ) -> dict[str, datetime]:
        late_start: dict[str, datetime] = {}

        for task_id in reversed(order):
            latest = project_end - timedelta(days=durations[task_id])
            for successor_id in self.graph.get_successors(task_id):
                successor = self.tasks_by_id[successor_id]
                for dep in successor.dependencies:
                    if dep.task_id != task_id:
                        continue
                    offset = dep.start_offset_days(durations[task_id], durations[successor_id])
                    candidate = late_start[successor_id] - timedelta(days=offset)
                    if checks_enabled():
                        logger.checks(
                            f"  backward {task_id}: {successor_id} needs start by {candidate}"
                        )
                    latest = min(latest, candidate)

            late_start[task_id] = latest

        return late_start

    def critical_path(self, scheduled: dict[str, ScheduledTask] | None = None) -> CriticalPath:
        """Summarize the critical chain of a schedule (computed if not given)."""
        scheduled = scheduled if scheduled is not None else self.schedule()
        critical = sorted(
            (st for st in scheduled.values() if st.is_critical), key=lambda st: st.early_start
        )

        duration = sum(st.duration_days for st in critical)
        has_delays = False
        for st in critical:
            end_date = self.tasks_by_id[st.task_id].end_date
            if end_date is not None and end_date < st.early_finish:
                logger.changes(
                    f"Critical task '{st.task_id}' ends {end_date} "
                    f"but cannot finish before {st.early_finish}"
                )
                has_delays = True

        return CriticalPath(
            task_ids=[st.task_id for st in critical],
            duration=round(duration, self.config.float_precision),
            has_delays=has_delays,
            total_slack=0.0,
        )


def calculate_schedule(
    tasks: list[Task],
    project_start_date: datetime | None = None,
    working_hours_per_day: float | None = None,
    config: EngineConfig | None = None,
) -> dict[str, ScheduledTask]:
    """Run CPM scheduling for a task list (project start defaults to now)."""
    start = project_start_date or datetime.now()  # noqa: DTZ005
    return CPMScheduler(tasks, start, config, working_hours_per_day).schedule()


def find_critical_path(
    tasks: list[Task],
    project_start_date: datetime | None = None,
    working_hours_per_day: float | None = None,
    config: EngineConfig | None = None,
) -> CriticalPath:
    """Schedule the tasks and return their critical path summary."""
    start = project_start_date or datetime.now()  # noqa: DTZ005
    return CPMScheduler(tasks, start, config, working_hours_per_day).critical_path()

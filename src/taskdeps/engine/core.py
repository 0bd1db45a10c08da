"""Core dataclasses for engine results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taskdeps.models import Task


def _default_str_list() -> list[str]:
    return []


def _default_cycle_list() -> list[list[str]]:
    return []


def _default_date_map() -> dict[str, datetime]:
    return {}


@dataclass
class ResolutionResult:
    """Result of the lenient resolver (earliest starts + zero-slack critical path)."""

    ordered_tasks: "list[Task]"  # Topological order, or input order if cyclic
    critical_path: list[str]
    circular_dependencies: list[list[str]] = field(default_factory=_default_cycle_list)
    earliest_starts: dict[str, datetime] = field(default_factory=_default_date_map)
    latest_starts: dict[str, datetime] = field(default_factory=_default_date_map)

    @property
    def has_cycles(self) -> bool:
        return bool(self.circular_dependencies)


@dataclass
class ScheduledTask:
    """CPM dates and float for one task."""

    task_id: str
    early_start: datetime
    early_finish: datetime
    late_start: datetime
    late_finish: datetime
    total_float: float  # Days, floored at zero and rounded
    free_float: float  # Days, floored at zero and rounded
    is_critical: bool
    predecessors: list[str] = field(default_factory=_default_str_list)
    successors: list[str] = field(default_factory=_default_str_list)

    @property
    def duration_days(self) -> float:
        return (self.early_finish - self.early_start).total_seconds() / (24 * 60 * 60)


@dataclass
class CriticalPath:
    """Summary of the critical chain of a CPM schedule."""

    task_ids: list[str]  # Ordered by early start
    duration: float  # Sum of critical task durations in days
    has_delays: bool  # A critical task's recorded end date is before its early finish
    total_slack: float = 0.0


@dataclass
class DependencyValidation:
    """Lenient validation report: every problem found, nothing raised."""

    is_valid: bool
    circular_dependencies: list[list[str]] = field(default_factory=_default_cycle_list)
    invalid_task_ids: list[str] = field(default_factory=_default_str_list)
    self_dependencies: list[str] = field(default_factory=_default_str_list)
    errors: list[str] = field(default_factory=_default_str_list)

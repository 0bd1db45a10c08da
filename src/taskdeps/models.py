"""Data models for taskdeps."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

# Duration conversion constants
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30
SECONDS_PER_DAY = 24 * 60 * 60


class DependencyType(str, Enum):
    """The four standard relationships between a predecessor and a dependent."""

    FINISH_TO_START = "finish-to-start"
    START_TO_START = "start-to-start"
    FINISH_TO_FINISH = "finish-to-finish"
    START_TO_FINISH = "start-to-finish"

    @property
    def from_predecessor_finish(self) -> bool:
        """True if the constraint is measured from the predecessor's finish."""
        return self in (DependencyType.FINISH_TO_START, DependencyType.FINISH_TO_FINISH)

    @property
    def constrains_finish(self) -> bool:
        """True if the constraint bounds the dependent's finish rather than its start."""
        return self in (DependencyType.FINISH_TO_FINISH, DependencyType.START_TO_FINISH)

    @property
    def abbreviation(self) -> str:
        """Short form used in the compact dependency syntax (FS, SS, FF, SF)."""
        return "".join(part[0] for part in self.value.split("-to-")).upper()

    @classmethod
    def parse(cls, value: str | DependencyType) -> DependencyType:
        """Parse a full name ("start-to-start") or abbreviation ("SS")."""
        if isinstance(value, DependencyType):
            return value
        normalized = value.strip().lower().replace("_", "-")
        for member in cls:
            if normalized in (member.value, member.abbreviation.lower()):
                return member
        valid = ", ".join(f"{m.value} ({m.abbreviation})" for m in cls)
        raise ValueError(f"Unknown dependency type '{value}'. Valid types are: {valid}")


_DEPENDENCY_RE = re.compile(
    r"^(?P<task_id>.+?)"
    r"(?:\s*\[(?P<type>[A-Za-z_-]+)\])?"
    r"(?:(?P<sign>\s*\+|\s+-)\s*(?P<value>[\d.]+)(?P<unit>[dwm]))?$"
)


@dataclass(frozen=True)
class Dependency:
    """A dependency on a predecessor task.

    The lag is added to the computed constraint; a negative lag is lead time.
    """

    task_id: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag_days: float = 0.0

    @classmethod
    def parse(cls, dep_str: str) -> Dependency:
        """Parse a dependency string into a Dependency object.

        Supported formats:
        - "task_id" - Finish-to-start, no lag
        - "task_id + 1d" / "task_id - 1d" - Lag (or lead) in days
        - "task_id + 2w" - 2 weeks (14 days) lag
        - "task_id + 1.5m" - 1.5 months (45 days) lag
        - "task_id [SS]" / "task_id [finish-to-finish] + 2d" - Explicit type
        """
        dep_str = dep_str.strip()
        match = _DEPENDENCY_RE.match(dep_str)
        if not match or not match.group("task_id").strip():
            raise ValueError(f"Invalid dependency: '{dep_str}'")

        task_id = match.group("task_id").strip()
        dep_type = (
            DependencyType.parse(match.group("type"))
            if match.group("type")
            else DependencyType.FINISH_TO_START
        )

        lag_days = 0.0
        if match.group("value"):
            num = float(match.group("value"))
            unit = match.group("unit")
            if unit == "w":
                num *= DAYS_PER_WEEK
            elif unit == "m":
                num *= DAYS_PER_MONTH
            lag_days = -num if match.group("sign").strip() == "-" else num

        return cls(task_id=task_id, type=dep_type, lag_days=lag_days)

    def start_offset_days(self, predecessor_duration: float, dependent_duration: float) -> float:
        """Minimum gap from the predecessor's start to the dependent's start.

        | type | offset                                |
        | FS   | pred duration + lag                   |
        | SS   | lag                                   |
        | FF   | pred duration + lag - own duration    |
        | SF   | lag - own duration                    |

        Forward passes add it to the predecessor's start; backward passes
        subtract it from the dependent's latest start.
        """
        offset = self.lag_days
        if self.type.from_predecessor_finish:
            offset += predecessor_duration
        if self.type.constrains_finish:
            offset -= dependent_duration
        return offset

    def __str__(self) -> str:
        """Return the compact form accepted by parse()."""
        text = self.task_id
        if self.type != DependencyType.FINISH_TO_START:
            text += f" [{self.type.abbreviation}]"
        if self.lag_days == 0.0:
            return text
        # Fixed point: parse() has no exponent syntax
        magnitude = f"{abs(self.lag_days):.6f}".rstrip("0").rstrip(".")
        if magnitude == "0":
            return text
        sign = "-" if self.lag_days < 0 else "+"
        return f"{text} {sign} {magnitude}d"


def to_local_naive(value: datetime) -> datetime:
    """Convert an offset-aware datetime to naive local time (naive values pass through)."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def span_days(start: datetime, end: datetime) -> int:
    """Whole days between two instants, rounded up."""
    return math.ceil((end - start).total_seconds() / SECONDS_PER_DAY)


@dataclass(frozen=True)
class Task:
    """A schedulable work item.

    Tasks are read-only inputs: helpers that change a task return a copy.
    """

    id: str
    name: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    estimated_time: float | None = None  # Effort in hours
    progress: float | None = None  # 0-100
    dependencies: tuple[Dependency, ...] = field(default=())

    @property
    def dependency_ids(self) -> list[str]:
        """IDs of the predecessors, in declaration order."""
        return [dep.task_id for dep in self.dependencies]

    def depends_on(self, task_id: str) -> bool:
        return any(dep.task_id == task_id for dep in self.dependencies)

    def get_dependency(self, task_id: str) -> Dependency | None:
        for dep in self.dependencies:
            if dep.task_id == task_id:
                return dep
        return None

    def with_dependency(self, dependency: Dependency) -> Task:
        """Return a copy with the dependency appended (unchanged if already present)."""
        if self.depends_on(dependency.task_id):
            return self
        return replace(self, dependencies=(*self.dependencies, dependency))

    def without_dependency(self, task_id: str) -> Task:
        """Return a copy without any dependency on task_id (unchanged if absent)."""
        if not self.depends_on(task_id):
            return self
        return replace(
            self, dependencies=tuple(d for d in self.dependencies if d.task_id != task_id)
        )

    def date_span_days(self) -> int | None:
        """Duration implied by explicit dates, or None if either date is missing."""
        if self.start_date is None or self.end_date is None:
            return None
        return span_days(self.start_date, self.end_date)

    def duration_days(self, working_hours_per_day: float, default: float = 0.0) -> float:
        """Derive the duration in days.

        Explicit dates take priority, then estimated effort divided by the
        working day length (rounded up), then the given default.
        """
        span = self.date_span_days()
        if span is not None:
            return float(span)
        if self.estimated_time:
            return float(math.ceil(self.estimated_time / working_hours_per_day))
        return default

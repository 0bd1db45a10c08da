"""Custom exceptions for taskdeps."""

from __future__ import annotations

from enum import Enum


class DependencyErrorKind(str, Enum):
    """Category of a dependency validation failure."""

    CIRCULAR = "circular"
    MISSING = "missing"
    INVALID = "invalid"


class TaskDepsError(Exception):
    """Base exception for all taskdeps errors."""

    pass


class ValidationError(TaskDepsError):
    """Raised when validation fails."""

    pass


class DependencyError(ValidationError):
    """Raised when the dependency graph of a task set is unusable.

    Attributes:
        kind: Which rule was broken (circular, missing or invalid)
        involved_ids: Task IDs involved in the failure, in the order found
    """

    kind: DependencyErrorKind = DependencyErrorKind.INVALID

    def __init__(self, message: str, involved_ids: list[str] | None = None):
        super().__init__(message)
        self.involved_ids: list[str] = list(involved_ids or [])


class CircularDependencyError(DependencyError):
    """Raised when a circular dependency is detected."""

    kind = DependencyErrorKind.CIRCULAR

    def __init__(self, message: str, cycles: list[list[str]] | None = None):
        self.cycles: list[list[str]] = [list(cycle) for cycle in cycles or []]
        super().__init__(message, [task_id for cycle in self.cycles for task_id in cycle])


class MissingReferenceError(DependencyError):
    """Raised when a referenced ID does not exist."""

    kind = DependencyErrorKind.MISSING


class SelfDependencyError(DependencyError):
    """Raised when a task depends on itself."""

    kind = DependencyErrorKind.INVALID


class ParseError(TaskDepsError):
    """Raised when YAML parsing fails."""

    pass

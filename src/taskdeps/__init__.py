"""taskdeps - task dependency resolution and critical path scheduling."""

from .config import EngineConfig
from .engine import (
    CriticalPath,
    DependencyEngine,
    DependencyValidation,
    ResolutionResult,
    ScheduledTask,
)
from .exceptions import (
    CircularDependencyError,
    DependencyError,
    DependencyErrorKind,
    MissingReferenceError,
    ParseError,
    SelfDependencyError,
    TaskDepsError,
    ValidationError,
)
from .models import Dependency, DependencyType, Task

__all__ = [
    "EngineConfig",
    "DependencyEngine",
    "CriticalPath",
    "DependencyValidation",
    "ResolutionResult",
    "ScheduledTask",
    "Dependency",
    "DependencyType",
    "Task",
    "TaskDepsError",
    "ValidationError",
    "DependencyError",
    "DependencyErrorKind",
    "CircularDependencyError",
    "MissingReferenceError",
    "SelfDependencyError",
    "ParseError",
]

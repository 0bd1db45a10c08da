"""Engine package - dependency resolution and scheduling.

Pipeline:
- DependencyGraph: adjacency map and transpose over a task snapshot
- detect_cycles: iterative DFS, every cycle reported
- topological_sort / order_tasks: Kahn's algorithm, strict or lenient
- resolve_dependencies: earliest starts and zero-slack critical path
- CPMScheduler: forward/backward pass with total and free float

Main entry point:
- DependencyEngine: facade exposing all operations plus snapshot queries
"""

from .core import CriticalPath, DependencyValidation, ResolutionResult, ScheduledTask
from .cpm import CPMScheduler, calculate_schedule, find_critical_path
from .cycles import detect_cycles
from .graph import DependencyGraph
from .ordering import order_tasks, topological_sort
from .resolver import resolve_dependencies
from .service import DependencyEngine
from .validator import check_dependencies, validate_dependencies

__all__ = [
    # Results
    "CriticalPath",
    "DependencyValidation",
    "ResolutionResult",
    "ScheduledTask",
    # Graph primitives
    "DependencyGraph",
    "detect_cycles",
    "order_tasks",
    "topological_sort",
    # Validation
    "check_dependencies",
    "validate_dependencies",
    # Scheduling
    "resolve_dependencies",
    "CPMScheduler",
    "calculate_schedule",
    "find_critical_path",
    # Facade
    "DependencyEngine",
]

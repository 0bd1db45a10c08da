"""Engine configuration and config file loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

DEFAULT_CONFIG_FILENAME = "taskdeps_config.yaml"


class EngineConfig(BaseModel):
    """Tunable constants for duration derivation and CPM scheduling."""

    # Divisor for turning estimated effort (hours) into days
    working_hours_per_day: float = Field(default=8.0, gt=0)
    # Duration used by the CPM scheduler when a task has neither dates nor an estimate
    default_duration_days: float = Field(default=1.0, ge=0)
    # Total float at or below this many days marks a task critical
    critical_float_tolerance: float = Field(default=0.1, ge=0)
    # Decimal places kept when reporting float and path duration
    float_precision: int = Field(default=1, ge=0)
    # Raise on cycles in topological_sort() instead of falling back to input order
    strict_ordering: bool = True


class TaskDepsConfig(BaseModel):
    """Top-level contents of a taskdeps config file."""

    engine: EngineConfig = Field(default_factory=EngineConfig)


def load_config(config_path: Path | str) -> TaskDepsConfig:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to taskdeps_config.yaml

    Returns:
        TaskDepsConfig with engine settings

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is empty or invalid
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open(encoding="utf-8") as f:
        data: Any = yaml.safe_load(f)

    if not data:
        raise ValueError("Empty configuration file")
    if not isinstance(data, dict):
        raise ValueError("Config file must contain a dictionary at the root level")

    return TaskDepsConfig.model_validate(data)


def discover_config(
    task_file: Path | None = None,
    config_path: Path | None = None,
) -> TaskDepsConfig:
    """Find and load the config, falling back to defaults.

    Search order:
    1. Explicit config_path argument
    2. Task file directory / taskdeps_config.yaml
    3. Current directory / taskdeps_config.yaml
    """
    if config_path is not None:
        return load_config(config_path)

    candidates: list[Path] = []
    if task_file is not None:
        candidates.append(Path(task_file).parent / DEFAULT_CONFIG_FILENAME)
    candidates.append(Path(DEFAULT_CONFIG_FILENAME))

    for candidate in candidates:
        if candidate.exists():
            return load_config(candidate)

    return TaskDepsConfig()

"""Global CLI state: the config chosen on the command line and its cached load."""

from __future__ import annotations

from pathlib import Path

from .config import TaskDepsConfig, discover_config


class _Context:
    """State shared between the CLI callback and the commands."""

    def __init__(self) -> None:
        self.config_path: Path | None = None
        self.loaded: dict[Path | None, TaskDepsConfig] = {}


# Singleton instance
_context = _Context()


def get_config_path() -> Path | None:
    """Get the config path given with --config, if any."""
    return _context.config_path


def set_config_path(path: Path | None) -> None:
    """Set the config path and drop any config loaded for the previous one."""
    _context.config_path = path
    _context.loaded.clear()


def get_config(task_file: Path | None = None) -> TaskDepsConfig:
    """Return the effective config for a task file, loading it once per location."""
    key = _context.config_path if _context.config_path is not None else task_file
    if key not in _context.loaded:
        _context.loaded[key] = discover_config(task_file, _context.config_path)
    return _context.loaded[key]

"""Diagnostic output for the dependency engine.

Everything goes through the single "taskdeps" logger. Two extra levels sit
between the standard ones so the CLI's ``-v`` flag maps onto what the engine
actually does:

- ``-v 1`` FINDINGS: cycles found, tasks moved, ordering fallbacks
- ``-v 2`` CONSTRAINTS: every dependency constraint evaluated in a pass
- ``-v 3`` DEBUG: pass windows and graph sizes
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

FINDINGS_LEVEL = 25  # INFO < level < WARNING
CONSTRAINTS_LEVEL = 15  # DEBUG < level < INFO

logging.addLevelName(FINDINGS_LEVEL, "FINDINGS")
logging.addLevelName(CONSTRAINTS_LEVEL, "CONSTRAINTS")

VERBOSITY_SILENT = 0
VERBOSITY_FINDINGS = 1
VERBOSITY_CONSTRAINTS = 2
VERBOSITY_DEBUG = 3

_LEVEL_FOR_VERBOSITY = {
    VERBOSITY_SILENT: logging.ERROR,
    VERBOSITY_FINDINGS: FINDINGS_LEVEL,
    VERBOSITY_CONSTRAINTS: CONSTRAINTS_LEVEL,
    VERBOSITY_DEBUG: logging.DEBUG,
}

VERBOSITY_HELP = (
    f"Verbosity: {VERBOSITY_SILENT}=errors only (default), {VERBOSITY_FINDINGS}=cycles and "
    f"moved tasks, {VERBOSITY_CONSTRAINTS}=each dependency constraint, {VERBOSITY_DEBUG}=debug"
)


class TaskDepsLogger(logging.Logger):
    """Logger with one method per engine verbosity level."""

    def changes(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report something the engine found or changed (cycle, moved task, fallback)."""
        if self.isEnabledFor(FINDINGS_LEVEL):
            self._log(FINDINGS_LEVEL, msg, args, **kwargs)

    def checks(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Report a single dependency constraint as it is evaluated."""
        if self.isEnabledFor(CONSTRAINTS_LEVEL):
            self._log(CONSTRAINTS_LEVEL, msg, args, **kwargs)


def get_logger() -> TaskDepsLogger:
    """Return the shared "taskdeps" logger."""
    logging.setLoggerClass(TaskDepsLogger)
    logger = logging.getLogger("taskdeps")
    assert isinstance(logger, TaskDepsLogger)
    return logger


def setup_logger(verbosity: int, stream: TextIO | None = None) -> None:
    """Send engine diagnostics at the given verbosity to a stream (stderr by default).

    Replaces any handler installed by an earlier call. Unknown verbosity
    values fall back to errors only.
    """
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(_LEVEL_FOR_VERBOSITY.get(verbosity, logging.ERROR))

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False


def reset_logger() -> None:
    """Drop handlers and go back to errors only."""
    logger = get_logger()
    logger.handlers.clear()
    logger.setLevel(logging.ERROR)


def checks_enabled() -> bool:
    """True when per-constraint messages would be emitted (verbosity 2 or more)."""
    return get_logger().isEnabledFor(CONSTRAINTS_LEVEL)

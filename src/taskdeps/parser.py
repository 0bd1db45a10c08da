"""YAML parser for taskdeps task files."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ParseError, ValidationError
from .models import Dependency, Task
from .schemas import DependencySchema, TaskFileSchema, TaskSchema


def _to_dependency(raw: str | DependencySchema) -> Dependency:
    if isinstance(raw, DependencySchema):
        return Dependency(task_id=raw.task_id, type=raw.type, lag_days=raw.lag)
    return Dependency.parse(raw)


class TaskFileParser:
    """Parser for task YAML files.

    Only parsing and model construction happen here; reference and cycle
    checks are the engine's job, so a file with dangling dependencies still
    parses.
    """

    def parse_file(self, file_path: Path | str) -> list[Task]:
        """Parse a YAML file into a list of tasks (file order preserved)."""
        path = Path(file_path)
        if not path.exists():
            raise ParseError(f"File not found: {file_path}")

        try:
            with path.open(encoding="utf-8") as f:
                data: Any = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ParseError(f"Failed to parse YAML: {e}") from e

        if not isinstance(data, dict):
            raise ParseError("YAML must contain a dictionary at the root level")

        return self.parse_data(data)  # type: ignore[arg-type]

    def parse_data(self, data: dict[str, Any]) -> list[Task]:
        """Convert already-loaded YAML data into tasks."""
        try:
            schema = TaskFileSchema(**data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid YAML structure: {e}") from e

        return [self._build_task(task_id, body) for task_id, body in schema.tasks.items()]

    def _build_task(self, task_id: str, body: TaskSchema) -> Task:
        try:
            dependencies = tuple(_to_dependency(raw) for raw in body.dependencies)
        except ValueError as e:
            raise ValidationError(f"Task '{task_id}' has an invalid dependency: {e}") from e

        return Task(
            id=task_id,
            name=body.name or task_id,
            start_date=body.start_date,
            end_date=body.end_date,
            estimated_time=body.estimated_time,
            progress=body.progress,
            dependencies=dependencies,
        )


def load_tasks(path: Path | str) -> list[Task]:
    """Load tasks from a YAML file."""
    return TaskFileParser().parse_file(path)


def dump_tasks(tasks: list[Task]) -> dict[str, Any]:
    """Convert tasks back into the task file structure (for writing YAML)."""
    output: dict[str, Any] = {}
    for task in tasks:
        body: dict[str, Any] = {}
        if task.name and task.name != task.id:
            body["name"] = task.name
        if task.start_date is not None:
            body["start_date"] = task.start_date.isoformat()
        if task.end_date is not None:
            body["end_date"] = task.end_date.isoformat()
        if task.estimated_time is not None:
            body["estimated_time"] = task.estimated_time
        if task.progress is not None:
            body["progress"] = task.progress
        if task.dependencies:
            body["dependencies"] = [str(dep) for dep in task.dependencies]
        output[task.id] = body
    return {"tasks": output}

"""Pydantic schemas for YAML task file validation."""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .models import DependencyType, to_local_naive


class DependencySchema(BaseModel):
    """Long-form dependency entry: {task_id, type, lag}."""

    task_id: str
    type: DependencyType = DependencyType.FINISH_TO_START
    lag: float = 0.0

    @field_validator("task_id", mode="before")
    @classmethod
    def coerce_id_to_string(cls, v: Any) -> str:
        """Allow numeric IDs in YAML."""
        return str(v)

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Any) -> DependencyType:
        """Accept abbreviations (FS, SS, FF, SF) as well as full names."""
        if v is None:
            return DependencyType.FINISH_TO_START
        return DependencyType.parse(str(v))


class TaskSchema(BaseModel):
    """Schema for a single task in a task file."""

    name: str = ""
    start_date: datetime | None = None
    end_date: datetime | None = None
    estimated_time: float | None = Field(default=None, ge=0)
    progress: float | None = Field(default=None, ge=0, le=100)
    # Compact strings ("design [SS] + 1d") or long-form mappings
    dependencies: list[str | DependencySchema] = Field(default_factory=list)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def promote_date(cls, v: Any) -> Any:
        """Treat plain dates as midnight."""
        if isinstance(v, date) and not isinstance(v, datetime):
            return datetime.combine(v, time.min)
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def drop_offset(cls, v: datetime | None) -> datetime | None:
        """Store offset-aware values as naive local time."""
        return to_local_naive(v) if v is not None else None

    @field_validator("dependencies", mode="before")
    @classmethod
    def ensure_list(cls, v: Any) -> list[Any]:
        """Ensure value is a list; scalars become one-element lists."""
        if v is None:
            return []
        if isinstance(v, list):
            return [item if isinstance(item, dict) else str(item) for item in v]  # type: ignore[misc]
        return [v if isinstance(v, dict) else str(v)]


class TaskFileSchema(BaseModel):
    """Schema for an entire task file."""

    tasks: dict[str, TaskSchema] = Field(default_factory=dict)

    @field_validator("tasks", mode="before")
    @classmethod
    def fill_empty_tasks(cls, v: Any) -> Any:
        """Allow an empty `tasks:` section and bare `task_id:` entries with no body."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(k): ({} if body is None else body) for k, body in v.items()}  # type: ignore[misc]
        return v

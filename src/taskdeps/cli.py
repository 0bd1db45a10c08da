"""Command-line interface for taskdeps."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
import yaml

from . import context
from .autoschedule import auto_schedule
from .engine import DependencyEngine, ScheduledTask
from .exceptions import DependencyError, TaskDepsError
from .logger import VERBOSITY_DEBUG, VERBOSITY_HELP, VERBOSITY_SILENT, setup_logger
from .models import Task, to_local_naive
from .parser import dump_tasks, load_tasks

app = typer.Typer(
    name="taskdeps",
    help="Task dependency resolution and critical path scheduling",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            help=VERBOSITY_HELP,
            min=VERBOSITY_SILENT,
            max=VERBOSITY_DEBUG,
        ),
    ] = VERBOSITY_SILENT,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to config file (default: taskdeps_config.yaml)",
        ),
    ] = None,
) -> None:
    """Global options for taskdeps commands."""
    setup_logger(verbose)
    context.set_config_path(config)


def _parse_datetime_option(value: str | None, option_name: str) -> datetime | None:
    """Parse an ISO date or datetime given on the command line."""
    if value is None:
        return None

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        typer.echo(
            f"Error: Invalid {option_name} '{value}'. Use YYYY-MM-DD or YYYY-MM-DDTHH:MM.",
            err=True,
        )
        raise typer.Exit(1) from None
    return to_local_naive(parsed)


def _load(file: Path, now: datetime | None = None) -> tuple[list[Task], DependencyEngine]:
    """Load the task file and an engine configured for it."""
    try:
        tasks = load_tasks(file)
        config = context.get_config(file)
    except (TaskDepsError, FileNotFoundError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e
    return tasks, DependencyEngine(tasks, config=config.engine, now=now)


def _write_or_echo(data: dict[str, Any], output: Path | None, label: str) -> None:
    text = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
    if output:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"{label} written to {output}")
    else:
        typer.echo(text, nl=False)


def _fail(error: DependencyError) -> NoReturn:
    typer.echo(f"Error ({error.kind.value}): {error}", err=True)
    raise typer.Exit(1) from error


@app.command()
def validate(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path(
        "tasks.yaml"
    ),
) -> None:
    """Check for missing references, self-dependencies and cycles."""
    tasks, engine = _load(file)
    report = engine.check_dependencies(tasks)

    if report.is_valid:
        typer.echo(f"All dependencies valid ({len(tasks)} tasks)")
        return

    for error in report.errors:
        typer.echo(f"  - {error}", err=True)
    typer.echo(f"Found {len(report.errors)} dependency problem(s)", err=True)
    raise typer.Exit(1)


@app.command()
def resolve(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path(
        "tasks.yaml"
    ),
    now: Annotated[
        str | None, typer.Option("--now", help="Start for undated tasks (default: current time)")
    ] = None,
) -> None:
    """Order tasks and compute earliest starts; cycles are reported, not fatal."""
    tasks, engine = _load(file, _parse_datetime_option(now, "--now"))
    result = engine.resolve_dependencies(tasks)

    for cycle in result.circular_dependencies:
        typer.echo(f"Warning: circular dependency {' -> '.join(cycle)}", err=True)

    critical = set(result.critical_path)
    typer.echo("Order:")
    for task in result.ordered_tasks:
        marker = " *" if task.id in critical else ""
        start = result.earliest_starts[task.id].isoformat(sep=" ")
        typer.echo(f"  {task.id:<20} earliest start {start}{marker}")
    typer.echo(f"Critical path: {' -> '.join(result.critical_path) or '(none)'}")


def _schedule_to_dict(scheduled: dict[str, ScheduledTask]) -> dict[str, Any]:
    return {
        "schedule": {
            task_id: {
                "early_start": st.early_start.isoformat(),
                "early_finish": st.early_finish.isoformat(),
                "late_start": st.late_start.isoformat(),
                "late_finish": st.late_finish.isoformat(),
                "total_float": st.total_float,
                "free_float": st.free_float,
                "critical": st.is_critical,
                "predecessors": st.predecessors,
                "successors": st.successors,
            }
            for task_id, st in scheduled.items()
        }
    }


@app.command()
def schedule(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path(
        "tasks.yaml"
    ),
    start: Annotated[
        str | None, typer.Option("--start", "-s", help="Project start (default: now)")
    ] = None,
    hours_per_day: Annotated[
        float | None,
        typer.Option("--hours-per-day", help="Working hours per day for effort estimates"),
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Run CPM scheduling and print early/late dates and float as YAML."""
    tasks, engine = _load(file)
    try:
        scheduled = engine.calculate_schedule(
            tasks, _parse_datetime_option(start, "--start"), hours_per_day
        )
    except DependencyError as e:
        _fail(e)
    _write_or_echo(_schedule_to_dict(scheduled), output, "Schedule")


@app.command("critical-path")
def critical_path(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path(
        "tasks.yaml"
    ),
    start: Annotated[
        str | None, typer.Option("--start", "-s", help="Project start (default: now)")
    ] = None,
    hours_per_day: Annotated[
        float | None,
        typer.Option("--hours-per-day", help="Working hours per day for effort estimates"),
    ] = None,
) -> None:
    """Show the CPM critical path."""
    tasks, engine = _load(file)
    try:
        path = engine.find_critical_path(
            tasks, _parse_datetime_option(start, "--start"), hours_per_day
        )
    except DependencyError as e:
        _fail(e)

    typer.echo(f"Critical path: {' -> '.join(path.task_ids) or '(none)'}")
    typer.echo(f"Duration: {path.duration} days")
    if path.has_delays:
        typer.echo("Warning: critical tasks are behind schedule", err=True)


@app.command("check-cycle")
def check_cycle(
    from_id: Annotated[str, typer.Argument(help="Task that would gain the dependency")],
    to_id: Annotated[str, typer.Argument(help="Task it would depend on")],
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path(
        "tasks.yaml"
    ),
) -> None:
    """Check whether FROM_ID depending on TO_ID would create a cycle."""
    tasks, engine = _load(file)
    if engine.would_create_cycle(tasks, from_id, to_id):
        typer.echo(f"{from_id} -> {to_id} would create a circular dependency")
        raise typer.Exit(1)
    typer.echo(f"{from_id} -> {to_id} is safe to add")


@app.command("can-start")
def can_start(
    task_id: Annotated[str, typer.Argument(help="Task to check")],
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path(
        "tasks.yaml"
    ),
    at: Annotated[
        str | None, typer.Option("--date", "-d", help="Instant to check at (default: now)")
    ] = None,
) -> None:
    """Check whether a task's dependencies allow it to start."""
    _, engine = _load(file)
    if engine.can_task_start(task_id, _parse_datetime_option(at, "--date")):
        typer.echo(f"{task_id} can start")
        return
    typer.echo(f"{task_id} is blocked by its dependencies")
    raise typer.Exit(1)


@app.command("auto-schedule")
def auto_schedule_command(
    file: Annotated[Path, typer.Argument(help="Path to the task YAML file")] = Path(
        "tasks.yaml"
    ),
    now: Annotated[
        str | None, typer.Option("--now", help="Start for undated tasks (default: current time)")
    ] = None,
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
) -> None:
    """Move dated tasks later where dependencies require and print the task file."""
    tasks, engine = _load(file, _parse_datetime_option(now, "--now"))
    updated = auto_schedule(tasks, engine=engine)
    moved = sum(1 for old, new in zip(tasks, updated) if old is not new)
    typer.echo(f"Moved {moved} task(s)", err=True)
    _write_or_echo(dump_tasks(updated), output, "Tasks")


def main() -> int:
    """Main entry point."""
    # Typer handles sys.exit() internally
    app()
    return 0


if __name__ == "__main__":
    main()

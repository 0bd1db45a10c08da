"""Tests for Critical Path Method scheduling."""

import pytest

from taskdeps.config import EngineConfig
from taskdeps.engine import CPMScheduler, calculate_schedule, find_critical_path
from taskdeps.exceptions import CircularDependencyError, MissingReferenceError
from taskdeps.models import DependencyType, Task
from tests.conftest import DAY0, day, dep_list, make_task, typed


class TestForwardBackwardPass:
    """Test early/late dates and float."""

    def test_diamond_float(self, diamond_tasks: list[Task]) -> None:
        scheduled = calculate_schedule(diamond_tasks, DAY0)

        assert list(scheduled) == ["a", "b", "c", "d"]
        assert scheduled["d"].early_start == day(6)
        assert scheduled["d"].early_finish == day(7)

        c = scheduled["c"]
        assert c.early_start == day(1)
        assert c.late_start == day(4)
        assert c.late_finish == day(6)
        assert c.total_float == 3.0
        assert c.free_float == 3.0
        assert not c.is_critical

        for task_id in ("a", "b", "d"):
            assert scheduled[task_id].is_critical
            assert scheduled[task_id].total_float == 0.0

    def test_float_never_negative(self, diamond_tasks: list[Task]) -> None:
        for st in calculate_schedule(diamond_tasks, DAY0).values():
            assert st.total_float >= 0
            assert st.free_float >= 0

    def test_free_float_without_successors_is_zero(self) -> None:
        tasks = [make_task("long", days=5), make_task("short", days=1)]
        scheduled = calculate_schedule(tasks, DAY0)

        assert scheduled["short"].total_float == 4.0
        assert scheduled["short"].free_float == 0.0

    def test_predecessors_and_successors(self, diamond_tasks: list[Task]) -> None:
        scheduled = calculate_schedule(diamond_tasks, DAY0)

        assert scheduled["a"].successors == ["b", "c"]
        assert scheduled["d"].predecessors == ["b", "c"]

    def test_default_duration_for_unsized_task(self) -> None:
        scheduled = calculate_schedule([Task(id="x")], DAY0)
        assert scheduled["x"].early_finish == day(1)

    def test_configured_default_duration(self) -> None:
        config = EngineConfig(default_duration_days=3.0)
        scheduled = calculate_schedule([Task(id="x")], DAY0, config=config)
        assert scheduled["x"].duration_days == 3.0

    def test_hours_per_day_override(self) -> None:
        scheduled = calculate_schedule([make_task("x", days=2)], DAY0, working_hours_per_day=4.0)
        assert scheduled["x"].early_finish == day(4)

    def test_tasks_never_start_before_project_start(self) -> None:
        """Explicit start dates do not pull a task before the project start."""
        scheduled = calculate_schedule([make_task("x", days=1, start=-5)], DAY0)
        assert scheduled["x"].early_start == DAY0

    def test_float_precision(self) -> None:
        tasks = [
            make_task("a", days=1),
            make_task("b", days=1, dependencies=typed("a", DependencyType.FINISH_TO_START, 0.25)),
            make_task("long", days=3),
        ]

        precise = calculate_schedule(tasks, DAY0, config=EngineConfig(float_precision=2))
        assert precise["b"].total_float == 0.75

        coarse = calculate_schedule(tasks, DAY0, config=EngineConfig(float_precision=0))
        assert coarse["b"].total_float == 1.0

    def test_date_span_rounds_up(self) -> None:
        scheduled = calculate_schedule([Task(id="x", start_date=day(0), end_date=day(0.5))], DAY0)
        assert scheduled["x"].early_finish == day(1)

    def test_empty(self) -> None:
        assert calculate_schedule([], DAY0) == {}


class TestDependencyTypes:
    """Test the per-type constraint in both passes."""

    def test_start_to_start(self) -> None:
        tasks = [
            make_task("a", days=3),
            make_task("b", days=2, dependencies=typed("a", DependencyType.START_TO_START, 1)),
        ]
        scheduled = calculate_schedule(tasks, DAY0)

        assert scheduled["b"].early_start == day(1)
        assert scheduled["b"].early_finish == day(3)
        assert scheduled["a"].late_start == DAY0

    def test_finish_to_finish(self) -> None:
        tasks = [
            make_task("a", days=3),
            make_task("b", days=2, dependencies=typed("a", DependencyType.FINISH_TO_FINISH)),
        ]
        scheduled = calculate_schedule(tasks, DAY0)

        assert scheduled["b"].early_finish == scheduled["a"].early_finish
        assert scheduled["b"].early_start == day(1)

    def test_start_to_finish_clamped_to_project_start(self) -> None:
        tasks = [
            make_task("a", days=3),
            make_task("b", days=2, dependencies=typed("a", DependencyType.START_TO_FINISH)),
        ]
        scheduled = calculate_schedule(tasks, DAY0)
        assert scheduled["b"].early_start == DAY0

    def test_start_to_finish_with_lag(self) -> None:
        tasks = [
            make_task("a", days=3),
            make_task("b", days=2, dependencies=typed("a", DependencyType.START_TO_FINISH, 5)),
        ]
        scheduled = calculate_schedule(tasks, DAY0)

        # b must finish no earlier than a's start + 5 days
        assert scheduled["b"].early_finish == day(5)
        assert scheduled["b"].early_start == day(3)

    def test_finish_to_start_lag(self) -> None:
        tasks = [
            make_task("a", days=2),
            make_task("b", days=1, dependencies=typed("a", DependencyType.FINISH_TO_START, 2)),
        ]
        scheduled = calculate_schedule(tasks, DAY0)

        assert scheduled["b"].early_start == day(4)
        assert scheduled["a"].free_float == 2.0
        assert scheduled["a"].is_critical


class TestValidation:
    """Scheduling refuses invalid graphs."""

    def test_cycle_raises(self, two_cycle_tasks: list[Task]) -> None:
        with pytest.raises(CircularDependencyError):
            calculate_schedule(two_cycle_tasks, DAY0)

    def test_missing_reference_raises(self) -> None:
        with pytest.raises(MissingReferenceError):
            calculate_schedule([make_task("b", dependencies=dep_list("ghost"))], DAY0)


class TestCriticalPathSummary:
    """Test the critical path summary."""

    def test_diamond(self, diamond_tasks: list[Task]) -> None:
        path = find_critical_path(diamond_tasks, DAY0)

        assert path.task_ids == ["a", "b", "d"]
        assert path.duration == 7.0
        assert not path.has_delays
        assert path.total_slack == 0.0

    def test_critical_tasks_have_zero_float(self, diamond_tasks: list[Task]) -> None:
        scheduler = CPMScheduler(diamond_tasks, DAY0)
        scheduled = scheduler.schedule()
        path = scheduler.critical_path(scheduled)

        for task_id in path.task_ids:
            assert scheduled[task_id].total_float <= 0.1

    def test_has_delays_when_end_date_is_too_early(self, chain_tasks: list[Task]) -> None:
        """Task a is recorded as ending on day 2 but cannot start before day 1."""
        path = find_critical_path(chain_tasks, day(1))

        assert path.task_ids == ["a", "b", "c"]
        assert path.has_delays

    def test_no_delays_on_time(self, chain_tasks: list[Task]) -> None:
        assert not find_critical_path(chain_tasks, DAY0).has_delays

    def test_empty(self) -> None:
        path = find_critical_path([], DAY0)

        assert path.task_ids == []
        assert path.duration == 0.0

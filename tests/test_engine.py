"""Tests for the DependencyEngine facade."""

from datetime import datetime

import pytest

from taskdeps.config import EngineConfig
from taskdeps.engine import DependencyEngine
from taskdeps.exceptions import (
    CircularDependencyError,
    MissingReferenceError,
    SelfDependencyError,
)
from taskdeps.models import Dependency, DependencyType, Task
from tests.conftest import DAY0, day, dep_list, make_task, typed


class TestWholeSetOperations:
    """Operations that take the task list as an argument."""

    def test_resolve_uses_fixed_now(self, chain_tasks: list[Task]) -> None:
        engine = DependencyEngine(now=DAY0)
        result = engine.resolve_dependencies(chain_tasks)

        assert result.earliest_starts["c"] == day(4)
        assert result.critical_path == ["a", "b", "c"]

    def test_resolve_uses_configured_hours(self) -> None:
        tasks = [make_task("a", days=2), make_task("b", dependencies=dep_list("a"))]
        engine = DependencyEngine(config=EngineConfig(working_hours_per_day=16.0), now=DAY0)

        assert engine.resolve_dependencies(tasks).earliest_starts["b"] == day(1)

    def test_validate_raises(self, two_cycle_tasks: list[Task]) -> None:
        with pytest.raises(CircularDependencyError):
            DependencyEngine().validate_dependencies(two_cycle_tasks)

    def test_check_reports(self, two_cycle_tasks: list[Task]) -> None:
        report = DependencyEngine().check_dependencies(two_cycle_tasks)
        assert not report.is_valid

    def test_topological_sort_strict_by_default(self, two_cycle_tasks: list[Task]) -> None:
        with pytest.raises(CircularDependencyError):
            DependencyEngine().topological_sort(two_cycle_tasks)

    def test_topological_sort_lenient_from_config(self, two_cycle_tasks: list[Task]) -> None:
        engine = DependencyEngine(config=EngineConfig(strict_ordering=False))
        assert engine.topological_sort(two_cycle_tasks) == two_cycle_tasks

    def test_topological_sort_explicit_flag_wins(self, two_cycle_tasks: list[Task]) -> None:
        engine = DependencyEngine(config=EngineConfig(strict_ordering=False))
        with pytest.raises(CircularDependencyError):
            engine.topological_sort(two_cycle_tasks, strict=True)

    def test_schedule_defaults_to_now(self, diamond_tasks: list[Task]) -> None:
        engine = DependencyEngine(now=DAY0)
        scheduled = engine.calculate_schedule(diamond_tasks)

        assert scheduled["a"].early_start == DAY0
        assert engine.find_critical_path(diamond_tasks).task_ids == ["a", "b", "d"]


class TestWouldCreateCycle:
    """Test cycle checks for a prospective dependency."""

    def test_closing_the_chain(self, chain_tasks: list[Task]) -> None:
        """a depending on c would give a -> b -> c -> a."""
        assert DependencyEngine().would_create_cycle(chain_tasks, "a", "c")

    def test_forward_edge_is_safe(self, chain_tasks: list[Task]) -> None:
        assert not DependencyEngine().would_create_cycle(chain_tasks, "c", "a")

    def test_self_edge(self, chain_tasks: list[Task]) -> None:
        assert DependencyEngine().would_create_cycle(chain_tasks, "b", "b")

    def test_unknown_task(self, chain_tasks: list[Task]) -> None:
        assert not DependencyEngine().would_create_cycle(chain_tasks, "ghost", "a")

    def test_snapshot_untouched(self, chain_tasks: list[Task]) -> None:
        engine = DependencyEngine(chain_tasks)
        engine.would_create_cycle(chain_tasks, "a", "c")

        assert engine.get_predecessors("a") == []
        assert not engine.has_path("c", "a")


class TestAddRemoveDependency:
    """Test copy-on-write dependency edits."""

    def test_add(self, chain_tasks: list[Task]) -> None:
        updated = DependencyEngine().add_dependency(chain_tasks, "c", Dependency("a"))

        assert updated[2].dependency_ids == ["b", "a"]
        assert chain_tasks[2].dependency_ids == ["b"]
        assert updated[0] is chain_tasks[0]

    def test_add_typed(self, chain_tasks: list[Task]) -> None:
        dep = Dependency("a", DependencyType.START_TO_START, 1.0)
        updated = DependencyEngine().add_dependency(chain_tasks, "c", dep)
        assert updated[2].get_dependency("a") == dep

    def test_add_cycle_rejected(self, chain_tasks: list[Task]) -> None:
        with pytest.raises(CircularDependencyError) as exc_info:
            DependencyEngine().add_dependency(chain_tasks, "a", Dependency("c"))
        assert set(exc_info.value.involved_ids) == {"a", "c"}

    def test_add_self_rejected(self, chain_tasks: list[Task]) -> None:
        with pytest.raises(SelfDependencyError):
            DependencyEngine().add_dependency(chain_tasks, "a", Dependency("a"))

    def test_add_unknown_rejected(self, chain_tasks: list[Task]) -> None:
        with pytest.raises(MissingReferenceError):
            DependencyEngine().add_dependency(chain_tasks, "ghost", Dependency("a"))
        with pytest.raises(MissingReferenceError):
            DependencyEngine().add_dependency(chain_tasks, "a", Dependency("ghost"))

    def test_remove(self, chain_tasks: list[Task]) -> None:
        updated = DependencyEngine().remove_dependency(chain_tasks, "b", "a")

        assert updated[1].dependencies == ()
        assert chain_tasks[1].dependency_ids == ["a"]

    def test_remove_unknown_task(self, chain_tasks: list[Task]) -> None:
        with pytest.raises(MissingReferenceError):
            DependencyEngine().remove_dependency(chain_tasks, "ghost", "a")


class TestSnapshotQueries:
    """Queries answered from the engine's snapshot."""

    def test_neighbours(self, diamond_tasks: list[Task]) -> None:
        engine = DependencyEngine(diamond_tasks)

        assert engine.get_predecessors("d") == ["b", "c"]
        assert engine.get_successors("a") == ["b", "c"]
        assert engine.get_successors("unknown") == []

    def test_has_path(self, chain_tasks: list[Task]) -> None:
        engine = DependencyEngine(chain_tasks)

        assert engine.has_path("a", "c")
        assert not engine.has_path("c", "a")

    def test_rebuild_replaces_snapshot(self, chain_tasks: list[Task]) -> None:
        engine = DependencyEngine(chain_tasks)
        engine.rebuild([make_task("x")])

        assert engine.get_successors("a") == []
        assert "x" in engine.graph


class TestCanTaskStart:
    """Test start permission from predecessor progress and dates."""

    def engine_for(self, predecessor: Task, dep_type: DependencyType) -> DependencyEngine:
        return DependencyEngine([predecessor, Task(id="b", dependencies=typed("a", dep_type))])

    def test_finish_to_start_complete(self) -> None:
        engine = self.engine_for(Task(id="a", progress=100), DependencyType.FINISH_TO_START)
        assert engine.can_task_start("b", DAY0)

    def test_finish_to_start_in_progress(self) -> None:
        engine = self.engine_for(Task(id="a", progress=50), DependencyType.FINISH_TO_START)
        assert not engine.can_task_start("b", DAY0)

    def test_finish_to_start_past_end_date(self) -> None:
        engine = self.engine_for(Task(id="a", end_date=day(2)), DependencyType.FINISH_TO_START)

        assert engine.can_task_start("b", day(2))
        assert engine.can_task_start("b", day(3))
        assert not engine.can_task_start("b", day(1))

    def test_start_to_start(self) -> None:
        started = self.engine_for(Task(id="a", progress=10), DependencyType.START_TO_START)
        not_started = self.engine_for(Task(id="a", progress=0), DependencyType.START_TO_START)
        no_progress = self.engine_for(Task(id="a"), DependencyType.START_TO_START)

        assert started.can_task_start("b", DAY0)
        assert not not_started.can_task_start("b", DAY0)
        assert not no_progress.can_task_start("b", DAY0)

    @pytest.mark.parametrize(
        "dep_type", [DependencyType.FINISH_TO_FINISH, DependencyType.START_TO_FINISH]
    )
    def test_finish_constraints_never_block(self, dep_type: DependencyType) -> None:
        engine = self.engine_for(Task(id="a", progress=0), dep_type)
        assert engine.can_task_start("b", DAY0)

    def test_missing_predecessor_blocks(self) -> None:
        engine = DependencyEngine([make_task("b", dependencies=dep_list("ghost"))])
        assert not engine.can_task_start("b", DAY0)

    def test_unknown_task_and_no_dependencies(self) -> None:
        engine = DependencyEngine([Task(id="a")])

        assert engine.can_task_start("a", DAY0)
        assert engine.can_task_start("ghost", DAY0)

    def test_defaults_to_engine_now(self) -> None:
        tasks = [
            Task(id="a", end_date=datetime(2020, 1, 1)),
            make_task("b", dependencies=dep_list("a")),
        ]
        engine = DependencyEngine(tasks, now=DAY0)
        assert engine.can_task_start("b")

    def test_all_dependencies_must_pass(self) -> None:
        engine = DependencyEngine(
            [
                Task(id="done", progress=100),
                Task(id="busy", progress=20),
                make_task("b", dependencies=dep_list("done", "busy")),
            ]
        )
        assert not engine.can_task_start("b", DAY0)

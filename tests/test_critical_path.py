"""Tests for critical path extraction."""

from planner.models import TeamMember
from planner.scheduler import (
    ProjectValidator,
    SchedulingConfig,
    SchedulingService,
    TieBreakOrder,
    compute_critical_path,
)
from planner.scheduler.forward_pass import ForwardPassScheduler
from tests.conftest import make_project, make_task

THREE_MEMBERS = [TeamMember(name="alice"), TeamMember(name="bob"), TeamMember(name="carol")]


class TestCriticalPath:
    """Test the backward walk over gating predecessors."""

    def test_longer_branch_is_critical(self) -> None:
        project = make_project(
            [
                make_task("A", 2),
                make_task("B", 5, assignees=["bob"]),
                make_task("C", 1, after=["A", "B"]),
            ]
        )
        result = SchedulingService(project).schedule()

        assert result.critical_path == ["B", "C"]
        flags = {t.task_id: t.critical for t in result.scheduled_tasks}
        assert flags == {"A": False, "B": True, "C": True}

    def test_tie_between_predecessors_uses_id(self) -> None:
        project = make_project(
            [
                make_task("A", 2),
                make_task("B", 2, assignees=["bob"]),
                make_task("C", 1, assignees=["carol"], after=["A", "B"]),
            ],
            members=THREE_MEMBERS,
        )
        assert SchedulingService(project).schedule().critical_path == ["A", "C"]

    def test_tie_between_predecessors_uses_declaration_order(self) -> None:
        project = make_project(
            [
                make_task("B", 2, assignees=["bob"]),
                make_task("A", 2),
                make_task("C", 1, assignees=["carol"], after=["A", "B"]),
            ],
            members=THREE_MEMBERS,
        )
        config = SchedulingConfig(tie_break=TieBreakOrder.DECLARATION)
        assert SchedulingService(project, config).schedule().critical_path == ["B", "C"]

    def test_tie_for_latest_finish(self) -> None:
        project = make_project([make_task("Y", 2, assignees=["bob"]), make_task("X", 2)])
        assert SchedulingService(project).schedule().critical_path == ["X"]

    def test_chain_follows_ready_not_start(self) -> None:
        """A task delayed by its assignee's other work still links to its gating predecessor."""
        project = make_project(
            [
                make_task("a", 1, assignees=["bob"]),
                make_task("b", 3),
                make_task("c", 1, after=["a"]),
            ]
        )
        result = SchedulingService(project).schedule()
        c = result.get("c")
        assert c is not None
        assert c.start > c.ready
        assert result.critical_path == ["a", "c"]

    def test_chain_is_consistent(self) -> None:
        project = make_project(
            [
                make_task("design", 2),
                make_task("build", 3, after=["design"]),
                make_task("docs", 1, assignees=["bob"], after=["design"]),
                make_task("ship", 1, assignees=["bob"], after=["build", "docs"]),
            ]
        )
        result = SchedulingService(project).schedule()
        assert result.critical_path == ["design", "build", "ship"]

        by_id = {t.task_id: t for t in result.scheduled_tasks}
        for earlier, later in zip(result.critical_path, result.critical_path[1:]):
            assert by_id[earlier].finish == by_id[later].ready
        assert by_id[result.critical_path[-1]].finish == result.project_finish

    def test_empty_schedule(self) -> None:
        project = make_project([])
        graph = ProjectValidator().validate(project)
        drafts = ForwardPassScheduler(project, graph).schedule()
        assert compute_critical_path(drafts, graph) == []

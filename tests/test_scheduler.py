"""Tests for the forward-pass scheduler and the scheduling service."""

from datetime import date

from planner.calendar import DatePeriod, Instant, PublicHoliday, WorkCalendar
from planner.models import TeamMember
from planner.scheduler import (
    ForwardPassScheduler,
    ProjectValidator,
    SchedulingConfig,
    SchedulingService,
    TieBreakOrder,
)
from tests.conftest import MONDAY, make_project, make_task


def company_calendar() -> WorkCalendar:
    return WorkCalendar(
        "company", public_holidays=[PublicHoliday(name="Company day", dates=["2025-01-08"])]
    )


class TestBasicScenarios:
    """Worked examples with hand-computed results."""

    def test_single_task_full_focus(self) -> None:
        """Five units at focus 1.0 from Monday end on Friday evening."""
        result = SchedulingService(make_project([make_task("a", 5)])).schedule()

        task = result.get("a")
        assert task is not None
        assert task.start == Instant(MONDAY, 0.0)
        assert task.finish == Instant(date(2025, 1, 10), 1.0)
        assert task.working_days == 5
        assert task.rate == 1.0
        assert result.project_finish == task.finish

    def test_half_focus_doubles_elapsed_time(self) -> None:
        project = make_project(
            [make_task("a", 5)], members=[TeamMember(name="alice", focus_factor=0.5)]
        )
        task = SchedulingService(project).schedule().get("a")
        assert task is not None
        assert task.working_days == 10
        assert task.finish == Instant(date(2025, 1, 17), 1.0)
        # Next weekend lies inside the span
        assert task.pause_days == (date(2025, 1, 11), date(2025, 1, 12))

    def test_dependency_chain(self) -> None:
        project = make_project([make_task("A", 2), make_task("B", 2, after=["A"])])
        result = SchedulingService(project).schedule()

        a, b = result.get("A"), result.get("B")
        assert a is not None and b is not None
        assert a.finish == Instant(date(2025, 1, 7), 1.0)
        assert b.ready == a.finish
        assert b.start == Instant(date(2025, 1, 8), 0.0)
        assert b.finish == Instant(date(2025, 1, 9), 1.0)
        assert b.predecessors == ("A",)

    def test_holiday_shifts_finish(self) -> None:
        project = make_project([make_task("a", 5)], calendar=company_calendar())
        task = SchedulingService(project).schedule().get("a")
        assert task is not None
        assert task.finish == Instant(date(2025, 1, 13), 1.0)
        assert task.pause_days == (date(2025, 1, 8), date(2025, 1, 11), date(2025, 1, 12))

    def test_dual_assignment_combines_rates(self) -> None:
        project = make_project(
            [make_task("pair", 3, assignees=["alice", "bob"])],
            members=[TeamMember(name="alice", focus_factor=0.5), TeamMember(name="bob")],
        )
        result = SchedulingService(project).schedule()

        task = result.get("pair")
        assert task is not None
        assert task.rate == 1.5
        assert task.working_days == 2
        assert task.finish == Instant(date(2025, 1, 7), 1.0)
        assert result.member_intervals["alice"] == result.member_intervals["bob"]
        assert len(result.member_intervals["alice"]) == 1

    def test_fractional_estimate_carries_into_next_task(self) -> None:
        project = make_project([make_task("a", 1.5), make_task("b", 1, after=["a"])])
        result = SchedulingService(project).schedule()

        a, b = result.get("a"), result.get("b")
        assert a is not None and b is not None
        assert a.finish == Instant(date(2025, 1, 7), 0.5)
        assert b.start == Instant(date(2025, 1, 7), 0.5)
        assert b.finish == Instant(date(2025, 1, 8), 0.5)
        assert b.daily_effort == ((date(2025, 1, 7), 0.5), (date(2025, 1, 8), 0.5))

    def test_start_on_friday_crosses_weekend(self) -> None:
        project = make_project([make_task("a", 2)], start=date(2025, 1, 10))
        task = SchedulingService(project).schedule().get("a")
        assert task is not None
        assert task.finish == Instant(date(2025, 1, 13), 1.0)

    def test_zero_estimate_on_weekend_moves_to_monday(self) -> None:
        project = make_project([make_task("milestone", 0)], start=date(2025, 1, 11))
        task = SchedulingService(project).schedule().get("milestone")
        assert task is not None
        assert task.start == task.finish == Instant(date(2025, 1, 13), 0.0)

    def test_empty_project(self) -> None:
        result = SchedulingService(make_project([])).schedule()
        assert result.scheduled_tasks == []
        assert result.critical_path == []
        assert result.project_finish == Instant(MONDAY, 0.0)


class TestResourceContention:
    """Tasks sharing a member are serialized."""

    def test_same_member_runs_back_to_back(self) -> None:
        project = make_project([make_task("a", 2), make_task("b", 3)])
        result = SchedulingService(project).schedule()

        b = result.get("b")
        assert b is not None
        assert b.ready == Instant(MONDAY, 0.0)
        assert b.start == Instant(date(2025, 1, 8), 0.0)
        assert b.finish == Instant(date(2025, 1, 10), 1.0)

    def test_gap_too_small_is_skipped(self) -> None:
        """A task scheduled earlier in topological order never gets overlapped."""
        project = make_project(
            [
                make_task("a_prep", 3, assignees=["bob"]),
                make_task("b_build", 2, after=["a_prep"]),
                make_task("c_docs", 5),
            ]
        )
        result = SchedulingService(project).schedule()

        build, docs = result.get("b_build"), result.get("c_docs")
        assert build is not None and docs is not None
        assert build.start == Instant(date(2025, 1, 9), 0.0)
        assert build.finish == Instant(date(2025, 1, 10), 1.0)
        assert docs.start == Instant(date(2025, 1, 13), 0.0)
        assert docs.finish == Instant(date(2025, 1, 17), 1.0)

    def test_gap_large_enough_is_filled(self) -> None:
        project = make_project(
            [
                make_task("a_prep", 3, assignees=["bob"]),
                make_task("b_build", 2, after=["a_prep"]),
                make_task("c_docs", 3),
            ]
        )
        result = SchedulingService(project).schedule()

        docs = result.get("c_docs")
        assert docs is not None
        assert docs.start == Instant(MONDAY, 0.0)
        assert docs.finish == Instant(date(2025, 1, 8), 1.0)
        assert [iv.task_id for iv in result.member_intervals["alice"]] == ["c_docs", "b_build"]

    def test_milestone_does_not_block_later_work(self) -> None:
        """A zero-estimate task occupies no time on its assignee's ledger."""
        project = make_project(
            [
                make_task("a_x", 2, assignees=["bob"]),
                make_task("b_m", 0, after=["a_x"]),
                make_task("c_work", 5),
            ]
        )
        result = SchedulingService(project).schedule()

        milestone, work = result.get("b_m"), result.get("c_work")
        assert milestone is not None and work is not None
        assert milestone.start == milestone.finish == Instant(date(2025, 1, 8), 0.0)
        assert work.start == Instant(MONDAY, 0.0)
        assert work.finish == Instant(date(2025, 1, 10), 1.0)
        assert [iv.task_id for iv in result.member_intervals["alice"]] == ["c_work", "b_m"]

    def test_multi_assignee_waits_for_everyone(self) -> None:
        project = make_project(
            [make_task("a_solo", 2, assignees=["bob"]), make_task("b_pair", 2, ["alice", "bob"])]
        )
        pair = SchedulingService(project).schedule().get("b_pair")
        assert pair is not None
        assert pair.start == Instant(date(2025, 1, 8), 0.0)
        assert pair.finish == Instant(date(2025, 1, 8), 1.0)


class TestPersonalCalendars:
    """Leave, other duties and per-assignment focus."""

    def test_leave_pauses_shared_task(self) -> None:
        members = [
            TeamMember(name="alice"),
            TeamMember(name="bob", leave=[DatePeriod.model_validate("2025-01-08:2025-01-09")]),
        ]
        project = make_project([make_task("pair", 6, ["alice", "bob"])], members=members)
        task = SchedulingService(project).schedule().get("pair")

        assert task is not None
        assert task.finish == Instant(date(2025, 1, 10), 1.0)
        assert task.pause_days == (date(2025, 1, 8), date(2025, 1, 9))

    def test_other_duties_block_the_member(self) -> None:
        members = [
            TeamMember(name="alice", other_duties=[DatePeriod.model_validate("2025-01-07")])
        ]
        project = make_project([make_task("a", 2)], members=members)
        task = SchedulingService(project).schedule().get("a")
        assert task is not None
        assert task.finish == Instant(date(2025, 1, 8), 1.0)

    def test_leave_on_start_date_delays_start(self) -> None:
        members = [TeamMember(name="alice", leave=[DatePeriod.model_validate("2025-01-06")])]
        project = make_project([make_task("a", 1)], members=members)
        task = SchedulingService(project).schedule().get("a")
        assert task is not None
        assert task.ready == Instant(MONDAY, 0.0)
        assert task.start == Instant(date(2025, 1, 7), 0.0)

    def test_member_calendar_overrides_project_calendar(self) -> None:
        # Alice works Sunday to Thursday
        sun_thu = WorkCalendar("sun-thu", closed_days={4, 5})
        members = [TeamMember(name="alice", calendar=sun_thu)]
        project = make_project(
            [make_task("a", 5)],
            members=members,
            start=date(2025, 1, 10),
            calendar=company_calendar(),
        )
        task = SchedulingService(project).schedule().get("a")
        assert task is not None
        assert task.start == Instant(date(2025, 1, 12), 0.0)
        assert task.finish == Instant(date(2025, 1, 16), 1.0)

    def test_focus_override(self) -> None:
        project = make_project([make_task("a", 2, overrides={"alice": 0.5})])
        task = SchedulingService(project).schedule().get("a")
        assert task is not None
        assert task.rate == 0.5
        assert task.finish == Instant(date(2025, 1, 9), 1.0)


class TestSchedulingService:
    """Test the high-level service."""

    def test_metadata_records_policy(self) -> None:
        config = SchedulingConfig(tie_break=TieBreakOrder.DECLARATION)
        result = SchedulingService(make_project([make_task("a", 1)]), config).schedule()
        assert result.metadata == {"tie_break": "declaration", "assignee_policy": "all_working"}

    def test_tasks_in_topological_order(self) -> None:
        project = make_project(
            [make_task("b", 1, after=["c"]), make_task("c", 1), make_task("a", 1)]
        )
        result = SchedulingService(project).schedule()
        assert [t.task_id for t in result.scheduled_tasks] == ["a", "c", "b"]

    def test_separate_runs_share_no_state(self) -> None:
        project = make_project([make_task("a", 2), make_task("b", 1, after=["a"])])
        graph = ProjectValidator().validate(project)

        first = ForwardPassScheduler(project, graph).schedule()
        second = ForwardPassScheduler(project, graph).schedule()
        assert first == second

    def test_export_shortcut(self) -> None:
        export = SchedulingService(make_project([make_task("a", 5)])).export()
        assert export.finish_date == date(2025, 1, 10)
        assert export.critical_path == ("a",)

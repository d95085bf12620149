"""Single forward pass placing every task at its earliest feasible slot."""

from typing import TYPE_CHECKING

from ..calendar import (
    Calendar,
    Instant,
    advance,
    daily_breakdown,
    next_working_instant,
    non_working_days_between,
    union_of,
)
from ..logger import checks_enabled, get_logger
from .config import SchedulingConfig
from .core import ScheduledTask
from .graph import DependencyGraph
from .resources import BusyInterval, ResourceLedger, effective_rate

logger = get_logger()

if TYPE_CHECKING:
    from ..models import Project, Task


class ForwardPassScheduler:
    """Deterministic list scheduler over a validated dependency graph.

    Tasks are visited in topological order. Each one starts at the earliest
    instant that is after all its predecessors, when every assignee is free
    for the whole span, and on a date every assignee is working. There is no
    backtracking: a placed task never moves.

    The ledgers belong to this instance, so separate runs never share state.
    """

    def __init__(
        self,
        project: "Project",
        graph: DependencyGraph,
        *,
        config: SchedulingConfig | None = None,
    ):
        """Initialize the scheduler.

        Args:
            project: Validated project
            graph: Dependency graph built from the same project
            config: Optional scheduling policy
        """
        self.project = project
        self.graph = graph
        self.config = config or SchedulingConfig()
        self.project_start = Instant(project.start_date, 0.0)
        self._tasks = {task.id: task for task in project.tasks}
        self._members = {member.name: member for member in project.members}
        self._calendars = project.member_calendars()
        self.ledgers = {member.name: ResourceLedger(member.name) for member in project.members}

    def schedule(self) -> list[ScheduledTask]:
        """Schedule all tasks.

        Returns:
            Scheduled tasks in topological order, none flagged critical yet
        """
        scheduled: dict[str, ScheduledTask] = {}
        result: list[ScheduledTask] = []

        for task_id in self.graph.topological_order():
            placed = self._schedule_task(self._tasks[task_id], scheduled)
            scheduled[task_id] = placed
            result.append(placed)

        return result

    def task_calendar(self, task: "Task") -> Calendar:
        """Calendar on which the task progresses: all assignees must be working."""
        return union_of([self._calendars[name] for name in task.assignees])

    def combined_rate(self, task: "Task") -> float:
        """Sum of the assignees' focus factors for this task."""
        return sum(
            effective_rate(self._members[name], task.focus_overrides.get(name))
            for name in task.assignees
        )

    def _ready_instant(self, task: "Task", scheduled: dict[str, ScheduledTask]) -> Instant:
        ready = self.project_start
        for pred_id in task.predecessors:
            ready = max(ready, scheduled[pred_id].finish)
        return ready

    def _common_availability(self, assignees: list[str], not_before: Instant) -> Instant:
        """Earliest instant at which every assignee is simultaneously free."""
        candidate = not_before
        while True:
            latest = max(self.ledgers[name].earliest_available(candidate) for name in assignees)
            if latest == candidate:
                return candidate
            candidate = latest

    def _find_slot(
        self, task: "Task", ready: Instant, calendar: Calendar, working_days: float
    ) -> tuple[Instant, Instant]:
        """Find the earliest [start, finish) that conflicts with no assignee's ledger."""
        candidate = ready
        while True:
            candidate = self._common_availability(task.assignees, candidate)
            start = next_working_instant(candidate, calendar)
            finish = advance(start, working_days, calendar)
            requested = BusyInterval(start, finish, task.id)

            conflicts = [
                conflict
                for name in task.assignees
                if (conflict := self.ledgers[name].first_conflict(requested)) is not None
            ]
            if not conflicts:
                return (start, finish)

            # Every conflict finishes after start, so the search always moves forward
            candidate = max(conflict.finish for conflict in conflicts)
            if checks_enabled():
                blockers = ", ".join(sorted({c.task_id for c in conflicts}))
                logger.checks(
                    f"    Span {requested.start} -> {requested.finish} blocked by {blockers}, "
                    f"retrying from {candidate}"
                )

    def _schedule_task(self, task: "Task", scheduled: dict[str, ScheduledTask]) -> ScheduledTask:
        ready = self._ready_instant(task, scheduled)
        calendar = self.task_calendar(task)
        rate = self.combined_rate(task)
        working_days = task.estimate / rate

        logger.checks(
            f"  Considering task {task.id}: ready at {ready}, "
            f"effort={task.estimate}, rate={rate:g}, working_days={working_days:g}"
        )

        start, finish = self._find_slot(task, ready, calendar, working_days)
        interval = BusyInterval(start, finish, task.id)
        for name in task.assignees:
            self.ledgers[name].reserve(interval)

        logger.changes(
            f"Scheduled task {task.id} on {', '.join(task.assignees)}: "
            f"{start} -> {finish} ({working_days:g} working days)"
        )

        return ScheduledTask(
            task_id=task.id,
            name=task.name,
            ready=ready,
            start=start,
            finish=finish,
            effort=task.estimate,
            working_days=working_days,
            rate=rate,
            assignees=tuple(task.assignees),
            predecessors=tuple(self.graph.predecessors(task.id)),
            pause_days=tuple(non_working_days_between(start, finish, calendar)),
            daily_effort=tuple(daily_breakdown(start, finish, calendar)),
        )

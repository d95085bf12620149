"""Read-only schedule view handed to chart renderers.

Everything a Gantt renderer needs is precomputed here: task bars, critical
flags, per-member claims and a day-by-day load strip. Renderers never see
ledgers or calendars and never do scheduling arithmetic of their own.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

import yaml

from .calendar import EPSILON, WEEKDAY_NAMES, DayKind, Instant, WorkCalendar
from .scheduler.resources import effective_rate

if TYPE_CHECKING:
    from .models import Project
    from .scheduler.core import ScheduledTask, SchedulingResult


class LoadKind(str, Enum):
    """Classification of one member-day in the load strip."""

    FULL = "full"
    PARTIAL = "partial"
    IDLE = "idle"
    CLOSED = "closed"
    PUBLIC_HOLIDAY = "public_holiday"
    LEAVE = "leave"
    OTHER_DUTIES = "other_duties"


_KIND_FOR_DAY = {
    DayKind.CLOSED: LoadKind.CLOSED,
    DayKind.PUBLIC_HOLIDAY: LoadKind.PUBLIC_HOLIDAY,
    DayKind.LEAVE: LoadKind.LEAVE,
    DayKind.OTHER_DUTIES: LoadKind.OTHER_DUTIES,
}

_ABSENCE_KINDS = {LoadKind.PUBLIC_HOLIDAY, LoadKind.LEAVE, LoadKind.OTHER_DUTIES}


def _instant_dict(instant: Instant) -> dict[str, Any]:
    return {"day": instant.day.isoformat(), "offset": round(instant.offset, 6)}


@dataclass(frozen=True)
class ExportedTask:
    """One bar on the chart."""

    task_id: str
    name: str
    start: Instant
    finish: Instant
    assignees: tuple[str, ...]
    predecessors: tuple[str, ...]
    effort: float
    working_days: float
    effort_hours: float
    critical: bool
    pause_days: tuple[date, ...]

    @property
    def start_date(self) -> date:
        return self.start.day

    @property
    def end_date(self) -> date:
        """Last date the task occupies."""
        return self.finish.day

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.task_id,
            "name": self.name,
            "start": _instant_dict(self.start),
            "finish": _instant_dict(self.finish),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "assignees": list(self.assignees),
            "predecessors": list(self.predecessors),
            "effort": self.effort,
            "working_days": round(self.working_days, 6),
            "effort_hours": round(self.effort_hours, 6),
            "critical": self.critical,
            "pause_days": [d.isoformat() for d in self.pause_days],
        }


@dataclass(frozen=True)
class Claim:
    """A span of a member's time claimed by a task."""

    task_id: str
    start: Instant
    finish: Instant


@dataclass(frozen=True)
class DailyLoad:
    """How much of one member-day is used, and why the rest is not."""

    day: date
    load: float  # Fraction of the working day occupied
    hours: float
    kind: LoadKind


@dataclass(frozen=True)
class MemberUtilization:
    """Claims and day-by-day load for one team member."""

    member: str
    focus_factor: float
    claims: tuple[Claim, ...]
    daily_load: tuple[DailyLoad, ...]

    @property
    def absences(self) -> tuple[DailyLoad, ...]:
        """Days the member is away (holidays, leave, other duties)."""
        return tuple(d for d in self.daily_load if d.kind in _ABSENCE_KINDS)

    def to_dict(self) -> dict[str, Any]:
        return {
            "member": self.member,
            "focus_factor": self.focus_factor,
            "claims": [
                {
                    "task": c.task_id,
                    "start": _instant_dict(c.start),
                    "finish": _instant_dict(c.finish),
                }
                for c in self.claims
            ],
            "daily_load": [
                {
                    "day": d.day.isoformat(),
                    "load": round(d.load, 6),
                    "hours": round(d.hours, 6),
                    "kind": d.kind.value,
                }
                for d in self.daily_load
            ],
        }


@dataclass(frozen=True)
class TimeMarkerSpan:
    label: str
    start: date
    end: date


@dataclass(frozen=True)
class ScheduleExport:
    """Complete, immutable description of a computed schedule."""

    title: str
    project_start: date
    project_finish: Instant
    tasks: tuple[ExportedTask, ...]  # Topological order
    members: tuple[MemberUtilization, ...]  # Declaration order
    critical_path: tuple[str, ...]
    closed_days: tuple[str, ...]  # Weekday names
    public_holidays: tuple[tuple[date, str], ...]
    time_markers: tuple[TimeMarkerSpan, ...]

    @property
    def finish_date(self) -> date:
        return self.project_finish.day

    def get_task(self, task_id: str) -> ExportedTask | None:
        """Get an exported task by ID."""
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None

    def get_member(self, name: str) -> MemberUtilization | None:
        """Get a member's utilization by name."""
        for member in self.members:
            if member.member == name:
                return member
        return None

    def to_dict(self) -> dict[str, Any]:
        """Plain data (str, int, float, bool, list, dict) safe for JSON or YAML."""
        return {
            "title": self.title,
            "project_start": self.project_start.isoformat(),
            "project_finish": _instant_dict(self.project_finish),
            "finish_date": self.finish_date.isoformat(),
            "closed_days": list(self.closed_days),
            "public_holidays": [
                {"date": d.isoformat(), "name": name} for d, name in self.public_holidays
            ],
            "critical_path": list(self.critical_path),
            "tasks": [task.to_dict() for task in self.tasks],
            "members": [member.to_dict() for member in self.members],
            "time_markers": [
                {"label": m.label, "start": m.start.isoformat(), "end": m.end.isoformat()}
                for m in self.time_markers
            ],
        }

    def to_yaml(self) -> str:
        """Serialize to a YAML document."""
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)


def _daily_load(
    calendar: WorkCalendar,
    effort_by_day: dict[date, float],
    first_day: date,
    last_day: date,
) -> tuple[DailyLoad, ...]:
    loads: list[DailyLoad] = []
    hours_per_day = calendar.hours_per_day
    day = first_day
    while day <= last_day:
        day_kind = calendar.day_kind(day)
        load = effort_by_day.get(day, 0.0)
        if day_kind is not DayKind.WORKING:
            kind = _KIND_FOR_DAY[day_kind]
        elif load >= 1.0 - EPSILON:
            kind = LoadKind.FULL
        elif load > EPSILON:
            kind = LoadKind.PARTIAL
        else:
            kind = LoadKind.IDLE
        loads.append(DailyLoad(day=day, load=load, hours=load * hours_per_day, kind=kind))
        day += timedelta(days=1)
    return tuple(loads)


def _effort_hours(
    project: Project, scheduled: ScheduledTask, calendars: dict[str, WorkCalendar]
) -> float:
    """Effort in hours, each assignee's share counted at their own hours per day.

    Assignees share the effort in proportion to their rates on the task.
    """
    task = project.get_task(scheduled.task_id)
    overrides = task.focus_overrides if task is not None else {}
    members = {member.name: member for member in project.members}
    rates = {
        name: effective_rate(members[name], overrides.get(name)) for name in scheduled.assignees
    }
    total = sum(rates.values())
    return sum(
        scheduled.effort * rate / total * calendars[name].hours_per_day
        for name, rate in rates.items()
    )


def build_export(project: Project, result: SchedulingResult) -> ScheduleExport:
    """Assemble the renderer-facing view of a scheduling result.

    Args:
        project: Project that was scheduled
        result: Result of SchedulingService.schedule() for that project

    Returns:
        ScheduleExport covering every task and member
    """
    calendars = project.member_calendars()
    project_calendar = project.calendar or WorkCalendar()
    first_day = project.start_date
    last_day = max(result.project_finish.day, first_day)

    tasks: list[ExportedTask] = []
    effort_by_member: dict[str, dict[date, float]] = defaultdict(dict)
    for scheduled in result.scheduled_tasks:
        tasks.append(
            ExportedTask(
                task_id=scheduled.task_id,
                name=scheduled.name,
                start=scheduled.start,
                finish=scheduled.finish,
                assignees=scheduled.assignees,
                predecessors=scheduled.predecessors,
                effort=scheduled.effort,
                working_days=scheduled.working_days,
                effort_hours=_effort_hours(project, scheduled, calendars),
                critical=scheduled.critical,
                pause_days=scheduled.pause_days,
            )
        )
        for name in scheduled.assignees:
            per_day = effort_by_member[name]
            for day, fraction in scheduled.daily_effort:
                per_day[day] = per_day.get(day, 0.0) + fraction

    members: list[MemberUtilization] = []
    for member in project.members:
        claims = tuple(
            Claim(task_id=iv.task_id, start=iv.start, finish=iv.finish)
            for iv in result.member_intervals.get(member.name, ())
        )
        members.append(
            MemberUtilization(
                member=member.name,
                focus_factor=member.focus_factor,
                claims=claims,
                daily_load=_daily_load(
                    calendars[member.name], effort_by_member[member.name], first_day, last_day
                ),
            )
        )

    closed: set[int] = set(project_calendar.all_closed_days())
    for calendar in calendars.values():
        closed |= calendar.all_closed_days()

    holidays = set(project_calendar.named_holidays_between(first_day, last_day))
    for calendar in calendars.values():
        holidays.update(calendar.named_holidays_between(first_day, last_day))

    markers = tuple(
        TimeMarkerSpan(label=marker.label, start=period.start, end=period.end)
        for marker in project.time_markers
        for period in marker.periods
    )

    return ScheduleExport(
        title=project.name,
        project_start=project.start_date,
        project_finish=result.project_finish,
        tasks=tuple(tasks),
        members=tuple(members),
        critical_path=tuple(result.critical_path),
        closed_days=tuple(WEEKDAY_NAMES[i] for i in sorted(closed)),
        public_holidays=tuple(sorted(holidays)),
        time_markers=markers,
    )

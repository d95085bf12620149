"""Data models for Planner."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from .calendar import DatePeriod, WorkCalendar


def _default_period_list() -> list[DatePeriod]:
    return []


def _default_str_list() -> list[str]:
    return []


def _default_float_dict() -> dict[str, float]:
    return {}


def _default_marker_list() -> list[TimeMarker]:
    return []


@dataclass
class TeamMember:
    """A person who can be assigned to tasks.

    ``focus_factor`` is the fraction of a nominal working day the member can
    spend on ideal effort. ``calendar`` is the shared organization calendar the
    member works under; ``leave`` and ``other_duties`` are personal overlays.
    """

    name: str
    focus_factor: float = 1.0
    calendar: WorkCalendar | None = None
    leave: list[DatePeriod] = field(default_factory=_default_period_list)
    other_duties: list[DatePeriod] = field(default_factory=_default_period_list)

    def effective_calendar(self, default: WorkCalendar | None = None) -> WorkCalendar:
        """Personal calendar: base calendar plus leave and other duties.

        Args:
            default: Calendar to inherit when the member has no calendar of their own
        """
        base = self.calendar or default or WorkCalendar()
        if not self.leave and not self.other_duties:
            return base
        return base.overlay(self.name, leave=self.leave, other_duties=self.other_duties)


@dataclass
class Task:
    """A unit of work with an ideal-effort estimate in person-days."""

    id: str
    name: str
    estimate: float
    predecessors: list[str] = field(default_factory=_default_str_list)
    assignees: list[str] = field(default_factory=_default_str_list)
    # Per-assignment focus factor replacing the member's own for this task
    focus_overrides: dict[str, float] = field(default_factory=_default_float_dict)


@dataclass
class TimeMarker:
    """A labelled date or date range shown on the chart (release, freeze, ...)."""

    label: str
    periods: list[DatePeriod]


@dataclass
class Project:
    """Complete, already-parsed project definition."""

    name: str
    start_date: date
    members: list[TeamMember]
    tasks: list[Task]
    calendar: WorkCalendar | None = None  # Organization calendar shared by members
    time_markers: list[TimeMarker] = field(default_factory=_default_marker_list)

    def get_task(self, task_id: str) -> Task | None:
        """Get a task by its ID."""
        for task in self.tasks:
            if task.id == task_id:
                return task
        return None

    def get_member(self, name: str) -> TeamMember | None:
        """Get a team member by name."""
        for member in self.members:
            if member.name == name:
                return member
        return None

    def member_calendars(self) -> dict[str, WorkCalendar]:
        """Effective calendar for every member, keyed by name."""
        return {m.name: m.effective_calendar(self.calendar) for m in self.members}

"""Planner - calendar-aware project scheduling.

Turns team members, estimated tasks, dependencies and assignments into a
start/finish for every task, the project finish, and the critical path.
"""

from .calendar import DatePeriod, Instant, PublicHoliday, WorkCalendar
from .export import ScheduleExport, build_export
from .models import Project, Task, TeamMember, TimeMarker
from .scheduler import SchedulingConfig, SchedulingResult, SchedulingService

__version__ = "0.1.0"

__all__ = [
    "DatePeriod",
    "Instant",
    "Project",
    "PublicHoliday",
    "ScheduleExport",
    "SchedulingConfig",
    "SchedulingResult",
    "SchedulingService",
    "Task",
    "TeamMember",
    "TimeMarker",
    "WorkCalendar",
    "build_export",
]

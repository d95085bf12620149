"""Core dataclasses for the scheduling system."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..calendar import Instant
from .resources import BusyInterval


def _default_dict() -> dict[str, Any]:
    return {}


@dataclass(frozen=True)
class ScheduledTask:
    """A task with its computed place in the schedule."""

    task_id: str
    name: str
    ready: Instant  # Latest of project start and predecessor finishes
    start: Instant
    finish: Instant
    effort: float  # Ideal effort in person-days
    working_days: float  # Elapsed working time: effort / rate
    rate: float  # Combined focus factor of all assignees
    assignees: tuple[str, ...]
    predecessors: tuple[str, ...]
    critical: bool = False
    pause_days: tuple[date, ...] = ()  # Non-working days inside the span
    daily_effort: tuple[tuple[date, float], ...] = ()  # Fraction of each day occupied


@dataclass
class SchedulingResult:
    """Complete result of a scheduling run."""

    scheduled_tasks: list[ScheduledTask]  # Topological order
    project_start: Instant
    project_finish: Instant
    critical_path: list[str]  # First task to last
    member_intervals: dict[str, tuple[BusyInterval, ...]]
    metadata: dict[str, Any] = field(default_factory=_default_dict)

    def get(self, task_id: str) -> ScheduledTask | None:
        """Get a scheduled task by ID."""
        for task in self.scheduled_tasks:
            if task.task_id == task_id:
                return task
        return None

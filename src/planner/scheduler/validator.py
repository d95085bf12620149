"""Input validation run before any scheduling begins."""

import math
from typing import TYPE_CHECKING, Any

from ..calendar import WEEKDAY_NAMES
from ..exceptions import (
    DuplicateIdError,
    InvalidEstimateError,
    InvalidFocusFactorError,
    NoWorkingDaysError,
    UnassignedTaskError,
)
from ..logger import get_logger
from .config import SchedulingConfig
from .graph import DependencyGraph

logger = get_logger()

if TYPE_CHECKING:
    from ..models import Project


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def is_valid_focus_factor(value: Any) -> bool:
    """True for a finite number in (0, 1]."""
    return _is_number(value) and 0 < value <= 1


class ProjectValidator:
    """Checks a project for everything that would make scheduling meaningless.

    All checks run up front so that a run either fails before any task is
    placed or produces a complete schedule.
    """

    def __init__(self, config: SchedulingConfig | None = None):
        self.config = config or SchedulingConfig()

    def validate(self, project: "Project") -> DependencyGraph:
        """Validate the project and return its dependency graph.

        Raises:
            DuplicateIdError: If two members or two tasks share an id
            InvalidFocusFactorError: If a focus factor or override is outside (0, 1]
            InvalidEstimateError: If an estimate is negative or not a number
            UnassignedTaskError: If a task has no assignees
            DanglingReferenceError: If a predecessor or assignee is unknown
            CycleDetectedError: If dependencies form a cycle
            NoWorkingDaysError: If a task's assignees share no open weekday
        """
        self._check_members(project)
        self._check_tasks(project)

        graph = DependencyGraph(
            project.tasks,
            member_names=[m.name for m in project.members],
            tie_break=self.config.tie_break,
        )
        graph.validate()
        self._check_calendars(project)
        logger.checks(
            f"Validated project '{project.name}': "
            f"{len(project.tasks)} tasks, {len(project.members)} members"
        )
        return graph

    def _check_members(self, project: "Project") -> None:
        seen: set[str] = set()
        for member in project.members:
            if member.name in seen:
                raise DuplicateIdError("team member", member.name)
            seen.add(member.name)
            if not is_valid_focus_factor(member.focus_factor):
                raise InvalidFocusFactorError(member.name, member.focus_factor)

    def _check_tasks(self, project: "Project") -> None:
        seen: set[str] = set()
        for task in project.tasks:
            if task.id in seen:
                raise DuplicateIdError("task", task.id)
            seen.add(task.id)
            if not _is_number(task.estimate) or task.estimate < 0:
                raise InvalidEstimateError(task.id, task.estimate)
            if not task.assignees:
                raise UnassignedTaskError(task.id)
            if len(set(task.assignees)) != len(task.assignees):
                duplicate = next(n for n in task.assignees if task.assignees.count(n) > 1)
                raise DuplicateIdError(f"assignee on task '{task.id}'", duplicate)
            for name, override in task.focus_overrides.items():
                if not is_valid_focus_factor(override):
                    raise InvalidFocusFactorError(name, override, task_id=task.id)

    def _check_calendars(self, project: "Project") -> None:
        """Every task needs at least one weekday on which all its assignees can work."""
        calendars = project.member_calendars()
        for task in project.tasks:
            closed: set[int] = set()
            for name in task.assignees:
                closed |= calendars[name].all_closed_days()
            if len(closed) >= len(WEEKDAY_NAMES):
                raise NoWorkingDaysError(task.assignees, task_id=task.id)

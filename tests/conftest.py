"""Pytest configuration and fixtures for planner tests."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import date

import pytest

from planner.calendar import WorkCalendar
from planner.logger import reset_logger
from planner.models import Project, Task, TeamMember

# 2025-01-06 is a Monday
MONDAY = date(2025, 1, 6)


def make_task(
    task_id: str,
    estimate: float,
    assignees: list[str] | None = None,
    after: list[str] | None = None,
    overrides: dict[str, float] | None = None,
) -> Task:
    """Build a task; assigned to alice unless told otherwise."""
    return Task(
        id=task_id,
        name=task_id.replace("_", " ").title(),
        estimate=estimate,
        predecessors=list(after or []),
        assignees=list(assignees if assignees is not None else ["alice"]),
        focus_overrides=dict(overrides or {}),
    )


def make_project(
    tasks: list[Task],
    members: list[TeamMember] | None = None,
    *,
    start: date = MONDAY,
    calendar: WorkCalendar | None = None,
) -> Project:
    """Build a project; alice and bob (focus 1.0) unless members are given."""
    if members is None:
        members = [TeamMember(name="alice"), TeamMember(name="bob")]
    return Project(
        name="Test project",
        start_date=start,
        members=members,
        tasks=tasks,
        calendar=calendar,
    )


@pytest.fixture(autouse=True)
def clean_logger() -> Iterator[None]:
    """Keep logger configuration from leaking between tests."""
    yield
    reset_logger()


@pytest.fixture
def mon_fri_calendar() -> WorkCalendar:
    """Default Monday-Friday calendar with no holidays."""
    return WorkCalendar("mon-fri")

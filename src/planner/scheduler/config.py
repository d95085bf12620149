"""Configuration classes for the scheduling system."""

from enum import Enum

from pydantic import BaseModel


class TieBreakOrder(str, Enum):
    """How ties are broken in topological order and critical-path selection."""

    ID = "id"  # Ascending task id
    DECLARATION = "declaration"  # Order tasks appear in the project


class AssigneePolicy(str, Enum):
    """When a multi-assignee task is allowed to make progress.

    Only the strict policy is implemented: a task advances on a date only if
    every assignee is working that date, and their focus factors add up.
    """

    ALL_WORKING = "all_working"


class SchedulingConfig(BaseModel):
    """Policy choices for a scheduling run."""

    tie_break: TieBreakOrder = TieBreakOrder.ID
    assignee_policy: AssigneePolicy = AssigneePolicy.ALL_WORKING

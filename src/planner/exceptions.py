"""Custom exceptions for Planner."""

from __future__ import annotations

from typing import Any


class PlannerError(Exception):
    """Base exception for all Planner errors."""

    pass


class ValidationError(PlannerError):
    """Raised when the project definition fails validation."""

    pass


class CycleDetectedError(ValidationError):
    """Raised when task dependencies form a cycle."""

    def __init__(self, cycle: list[str]):
        self.cycle = list(cycle)
        super().__init__(f"Circular dependency detected: {' -> '.join(self.cycle)}")


class DanglingReferenceError(ValidationError):
    """Raised when a task names a predecessor or assignee that does not exist."""

    def __init__(self, owner_id: str, reference: str, kind: str):
        self.owner_id = owner_id
        self.reference = reference
        self.kind = kind  # "predecessor", "assignee" or "focus_override"
        super().__init__(f"Task '{owner_id}' references unknown {kind}: '{reference}'")


class UnassignedTaskError(ValidationError):
    """Raised when a task has nobody assigned to it."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task '{task_id}' is not assigned to any team member")


class InvalidFocusFactorError(ValidationError):
    """Raised when a focus factor lies outside (0, 1]."""

    def __init__(self, member: str, value: Any, task_id: str | None = None):
        self.member = member
        self.value = value
        self.task_id = task_id
        where = f" (override on task '{task_id}')" if task_id else ""
        super().__init__(
            f"Team member '{member}' has invalid focus factor {value!r}{where}; "
            "expected a value in (0, 1]"
        )


class DuplicateIdError(ValidationError):
    """Raised when two tasks or two team members share an id."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"Duplicate {kind} id: '{item_id}'")


class InvalidEstimateError(ValidationError):
    """Raised when a task estimate is negative or not a number."""

    def __init__(self, task_id: str, value: Any):
        self.task_id = task_id
        self.value = value
        super().__init__(f"Task '{task_id}' has invalid estimate {value!r}")


class NoWorkingDaysError(ValidationError):
    """Raised when calendars, alone or combined, close every day of the week.

    Work placed on such a calendar could never make progress.
    """

    def __init__(self, names: list[str], task_id: str | None = None):
        self.names = list(names)
        self.task_id = task_id
        quoted = ", ".join(f"'{name}'" for name in self.names)
        if task_id is not None:
            message = (
                f"Task '{task_id}' can never progress: no weekday is open for all of {quoted}"
            )
        else:
            message = f"Calendar {quoted} closes every day of the week"
        super().__init__(message)


class ConfigError(PlannerError):
    """Raised when a settings file cannot be read or validated."""

    pass


class InternalError(PlannerError):
    """Raised when the scheduler breaks one of its own invariants.

    This never describes a problem with the input; it signals a bug.
    """

    pass


class LedgerConflictError(InternalError):
    """Raised when a reservation overlaps an interval already on a member's ledger."""

    def __init__(self, member: str, existing: Any, requested: Any):
        self.member = member
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"Ledger conflict for '{member}': {requested} overlaps existing {existing}"
        )

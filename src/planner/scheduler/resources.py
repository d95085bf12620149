"""Per-member capacity and busy-interval ledgers."""

import bisect
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..calendar import Instant
from ..exceptions import LedgerConflictError
from ..logger import get_logger

if TYPE_CHECKING:
    from ..models import TeamMember

logger = get_logger()


@dataclass(frozen=True)
class BusyInterval:
    """Half-open span [start, finish) claimed by a task."""

    start: Instant
    finish: Instant
    task_id: str = ""

    def __str__(self) -> str:
        return f"[{self.start}, {self.finish}) {self.task_id}".rstrip()

    @property
    def empty(self) -> bool:
        """True for a zero-length claim, such as a milestone."""
        return self.finish <= self.start

    def overlaps(self, other: "BusyInterval") -> bool:
        if self.empty or other.empty:
            return False
        return self.start < other.finish and other.start < self.finish

    def contains(self, instant: Instant) -> bool:
        return self.start <= instant < self.finish


def effective_rate(member: "TeamMember", override: float | None = None) -> float:
    """Fraction of a nominal day the member applies to ideal effort.

    Args:
        member: Team member
        override: Focus factor set on the assignment itself, if any
    """
    return override if override is not None else member.focus_factor


class ResourceLedger:
    """Tracks claimed intervals for one member.

    Maintains the invariant that intervals are sorted by start and that no
    two non-empty intervals overlap. Zero-length claims (milestones) may sit
    inside a non-empty one. This enables O(log n) binary search lookups.
    """

    def __init__(self, member_name: str) -> None:
        self.member_name = member_name
        self._intervals: list[BusyInterval] = []

    @property
    def intervals(self) -> tuple[BusyInterval, ...]:
        return tuple(self._intervals)

    def __len__(self) -> int:
        return len(self._intervals)

    def earliest_available(self, not_before: Instant) -> Instant:
        """Earliest instant >= ``not_before`` not inside a claimed interval.

        Args:
            not_before: Instant to search from

        Returns:
            ``not_before`` itself if already free, otherwise the finish of the
            run of back-to-back intervals covering it
        """
        candidate = not_before
        idx = bisect.bisect_right(self._intervals, candidate, key=lambda iv: iv.start)

        # Only the latest non-empty interval starting at or before candidate can contain it
        i = idx - 1
        while i > 0 and self._intervals[i].empty:
            i -= 1
        i = max(i, 0)
        while i < len(self._intervals) and self._intervals[i].start <= candidate:
            interval = self._intervals[i]
            if interval.contains(candidate):
                candidate = interval.finish
            i += 1

        return candidate

    def first_conflict(self, requested: BusyInterval) -> BusyInterval | None:
        """Return a claimed interval overlapping ``requested``, or None.

        Zero-length claims never conflict, in either direction.
        """
        if requested.empty:
            return None
        idx = bisect.bisect_left(self._intervals, requested.finish, key=lambda iv: iv.start)
        for i in range(idx - 1, -1, -1):
            interval = self._intervals[i]
            if interval.overlaps(requested):
                return interval
            if not interval.empty and interval.finish <= requested.start:
                # Earlier intervals finish even sooner
                break
        return None

    def reserve(self, requested: BusyInterval) -> None:
        """Add a claimed interval.

        Raises:
            LedgerConflictError: If ``requested`` overlaps an existing claim
        """
        conflict = self.first_conflict(requested)
        if conflict is not None:
            raise LedgerConflictError(self.member_name, conflict, requested)
        bisect.insort(self._intervals, requested, key=lambda iv: (iv.start, iv.finish))
        logger.debug(f"      {self.member_name}: reserved {requested}")

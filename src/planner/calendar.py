"""Working-time calendars and calendar-aware date arithmetic.

This module handles:
- Calendar definitions (closed weekdays, named public holidays, date ranges)
- Member overlays that inherit a shared organization calendar
- Working-time instants and the arithmetic the scheduler needs on them

A working day supplies exactly 1.0 unit of capacity. An ``Instant`` names a
position inside that capacity: ``Instant(day, 0.25)`` is a quarter of the way
through ``day``'s working time, ``Instant(day, 1.0)`` is its end.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Any, Protocol

from pydantic import BaseModel, Field, field_validator, model_validator

from .exceptions import NoWorkingDaysError
from .logger import debug_enabled, get_logger

logger = get_logger()

# Tolerance for comparing fractional day offsets
EPSILON = 1e-9

DEFAULT_HOURS_PER_DAY = 8.0

WEEKDAY_NAMES = ["monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday"]
DEFAULT_CLOSED_DAYS: frozenset[int] = frozenset({5, 6})  # Saturday, Sunday

_ONE_DAY = timedelta(days=1)


class DayKind(str, Enum):
    """Why a date is (or is not) available for work."""

    WORKING = "working"
    CLOSED = "closed"  # Closed weekday (weekend)
    PUBLIC_HOLIDAY = "public_holiday"
    LEAVE = "leave"  # Personal holiday
    OTHER_DUTIES = "other_duties"  # Member is busy outside this project


def parse_weekday(value: Any) -> int:
    """Parse a weekday given as an index (0=Monday) or a name ("sat", "Saturday")."""
    if isinstance(value, int):
        if 0 <= value <= 6:  # noqa: PLR2004
            return value
        raise ValueError(f"Weekday index out of range: {value}")
    name = str(value).strip().lower()
    for index, weekday in enumerate(WEEKDAY_NAMES):
        if len(name) >= 3 and weekday.startswith(name):  # noqa: PLR2004
            return index
    raise ValueError(f"Unknown weekday: {value!r}")


class DatePeriod(BaseModel):
    """An inclusive range of dates; a single date is a one-day period.

    Accepts ``"2024-05-01"`` and ``"2024-07-01:2024-07-14"`` shorthand strings.
    """

    start: date
    end: date

    @model_validator(mode="before")
    @classmethod
    def parse_shorthand(cls, data: Any) -> Any:
        """Expand the string and bare-date forms into start/end fields."""
        if isinstance(data, date):
            return {"start": data, "end": data}
        if isinstance(data, str):
            text = data.strip()
            if ":" in text:
                start, end = text.split(":", 1)
                return {"start": start.strip(), "end": end.strip()}
            return {"start": text, "end": text}
        if isinstance(data, dict) and "end" not in data and "start" in data:
            return {**data, "end": data["start"]}
        return data

    @model_validator(mode="after")
    def validate_end_after_start(self) -> DatePeriod:
        """Ensure end date is not before start date."""
        if self.end < self.start:
            raise ValueError("end date must not be before start date")
        return self

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end

    def days(self) -> list[date]:
        """All dates in the period, in order."""
        count = (self.end - self.start).days + 1
        return [self.start + timedelta(days=i) for i in range(count)]


class PublicHoliday(BaseModel):
    """A named public holiday spanning one or more dates or ranges."""

    name: str
    dates: list[DatePeriod]

    @field_validator("dates", mode="before")
    @classmethod
    def split_comma_list(cls, v: Any) -> Any:
        """Accept a comma-separated string of dates and ranges."""
        if isinstance(v, str):
            return [part for part in (p.strip() for p in v.split(",")) if part]
        if isinstance(v, (date, dict)):
            return [v]
        return v


class CalendarDefinition(BaseModel):
    """Declarative definition of a shared business-days calendar."""

    name: str = "default"
    closed_days: list[int] = Field(default_factory=lambda: sorted(DEFAULT_CLOSED_DAYS))
    hours_per_day: float = Field(default=DEFAULT_HOURS_PER_DAY, gt=0)
    public_holidays: list[PublicHoliday] = Field(default_factory=list[PublicHoliday])

    @field_validator("closed_days", mode="before")
    @classmethod
    def parse_closed_days(cls, v: Any) -> list[int]:
        """Convert weekday names to indices."""
        if v is None:
            return []
        if isinstance(v, (str, int)):
            v = [v]
        return sorted({parse_weekday(item) for item in v})

    @model_validator(mode="after")
    def validate_some_day_open(self) -> CalendarDefinition:
        """A calendar closed on every weekday could never make progress."""
        if len(set(self.closed_days)) >= len(WEEKDAY_NAMES):
            raise ValueError(f"Calendar '{self.name}' closes every day of the week")
        return self


@dataclass(frozen=True, order=True)
class Instant:
    """A position in working time: ``offset`` of ``day``'s capacity already used."""

    day: date
    offset: float = 0.0

    def __str__(self) -> str:
        return f"{self.day.isoformat()}+{self.offset:.2f}"

    @property
    def exhausted(self) -> bool:
        """True when no working capacity remains on ``day``."""
        return self.offset >= 1.0 - EPSILON


class Calendar(Protocol):
    """Anything the date arithmetic can query for working days."""

    name: str

    def all_closed_days(self) -> frozenset[int]:
        """Weekdays that are never working."""
        ...

    def day_kind(self, day: date) -> DayKind:
        """Classify a date."""
        ...

    def is_working_day(self, day: date) -> bool:
        """True when the date supplies working capacity."""
        ...

    def next_working_day(self, day: date) -> date:
        """Earliest working date on or after ``day``."""
        ...

    def named_holidays_between(self, start: date, end: date) -> list[tuple[date, str]]:
        """Public holidays in [start, end] as (date, name) pairs."""
        ...


def _merge_periods(periods: list[tuple[date, date]]) -> list[tuple[date, date]]:
    """Merge overlapping or adjacent periods into a sorted, non-overlapping list."""
    if not periods:
        return []

    sorted_periods = sorted(periods)
    merged: list[tuple[date, date]] = [sorted_periods[0]]

    for start, end in sorted_periods[1:]:
        last_start, last_end = merged[-1]
        if start <= last_end + _ONE_DAY:
            merged[-1] = (last_start, max(last_end, end))
        else:
            merged.append((start, end))

    return merged


def _find_period(periods: list[tuple[date, date]], day: date) -> tuple[date, date] | None:
    """Binary search for the merged period containing ``day``."""
    idx = bisect.bisect_right(periods, day, key=lambda p: p[0])
    if idx == 0:
        return None
    start, end = periods[idx - 1]
    if start <= day <= end:
        return (start, end)
    return None


class WorkCalendar:
    """Business-days calendar with closed weekdays and holiday periods.

    Holiday periods are kept merged and sorted so lookups are binary searches.
    A calendar may inherit from a ``parent``: a date is working only when it is
    working in both, which is how a member's personal leave overlays the shared
    organization calendar.
    """

    def __init__(  # noqa: PLR0913 - one parameter per kind of non-working date
        self,
        name: str = "default",
        *,
        closed_days: frozenset[int] | set[int] | list[int] | None = None,
        public_holidays: list[PublicHoliday] | None = None,
        leave: list[DatePeriod] | None = None,
        other_duties: list[DatePeriod] | None = None,
        hours_per_day: float | None = None,
        parent: WorkCalendar | None = None,
    ) -> None:
        if closed_days is None:
            closed_days = DEFAULT_CLOSED_DAYS if parent is None else frozenset()
        self.name = name
        self.closed_days = frozenset(parse_weekday(d) for d in closed_days)
        self.parent = parent
        if len(self.all_closed_days()) >= len(WEEKDAY_NAMES):
            raise NoWorkingDaysError([name] if parent is None else [name, parent.name])
        self._hours_per_day = hours_per_day
        self.public_holidays = list(public_holidays or [])

        holiday_periods = [(p.start, p.end) for h in self.public_holidays for p in h.dates]
        leave_periods = [(p.start, p.end) for p in leave or []]
        duty_periods = [(p.start, p.end) for p in other_duties or []]

        # Checked in this order when classifying a date
        self._periods_by_kind: list[tuple[DayKind, list[tuple[date, date]]]] = [
            (DayKind.PUBLIC_HOLIDAY, _merge_periods(holiday_periods)),
            (DayKind.LEAVE, _merge_periods(leave_periods)),
            (DayKind.OTHER_DUTIES, _merge_periods(duty_periods)),
        ]
        self._blocked = _merge_periods(holiday_periods + leave_periods + duty_periods)

    @classmethod
    def from_definition(cls, definition: CalendarDefinition) -> WorkCalendar:
        """Build a calendar from its validated configuration."""
        return cls(
            definition.name,
            closed_days=definition.closed_days,
            public_holidays=definition.public_holidays,
            hours_per_day=definition.hours_per_day,
        )

    def overlay(
        self,
        name: str,
        leave: list[DatePeriod] | None = None,
        other_duties: list[DatePeriod] | None = None,
    ) -> WorkCalendar:
        """Create a personal calendar that inherits this one."""
        return WorkCalendar(name, leave=leave, other_duties=other_duties, parent=self)

    @property
    def hours_per_day(self) -> float:
        if self._hours_per_day is not None:
            return self._hours_per_day
        if self.parent is not None:
            return self.parent.hours_per_day
        return DEFAULT_HOURS_PER_DAY

    def all_closed_days(self) -> frozenset[int]:
        """Closed weekdays including those inherited from the parent."""
        if self.parent is None:
            return self.closed_days
        return self.closed_days | self.parent.all_closed_days()

    def day_kind(self, day: date) -> DayKind:
        if self.parent is not None:
            kind = self.parent.day_kind(day)
            if kind is not DayKind.WORKING:
                return kind
        if day.weekday() in self.closed_days:
            return DayKind.CLOSED
        for kind, periods in self._periods_by_kind:
            if _find_period(periods, day) is not None:
                return kind
        return DayKind.WORKING

    def is_working_day(self, day: date) -> bool:
        return self.day_kind(day) is DayKind.WORKING

    def _skip_own(self, day: date) -> date:
        """Earliest date on or after ``day`` not blocked by this calendar alone."""
        while True:
            if day.weekday() in self.closed_days:
                day += _ONE_DAY
                continue
            period = _find_period(self._blocked, day)
            if period is not None:
                # Jump the whole period in one step
                day = period[1] + _ONE_DAY
                continue
            return day

    def next_working_day(self, day: date) -> date:
        while True:
            candidate = self._skip_own(day)
            if self.parent is not None:
                candidate = self.parent.next_working_day(candidate)
            if candidate == day:
                return day
            day = candidate

    def named_holidays_between(self, start: date, end: date) -> list[tuple[date, str]]:
        found: set[tuple[date, str]] = set()
        if self.parent is not None:
            found.update(self.parent.named_holidays_between(start, end))
        for holiday in self.public_holidays:
            for period in holiday.dates:
                for day in period.days():
                    if start <= day <= end:
                        found.add((day, holiday.name))
        return sorted(found)

    def __repr__(self) -> str:
        return f"WorkCalendar({self.name!r})"


class CalendarUnion:
    """Least permissive combination of several calendars.

    A date is working only when every member calendar says it is working.
    """

    def __init__(self, calendars: list[Calendar]) -> None:
        if not calendars:
            raise ValueError("CalendarUnion needs at least one calendar")
        self.calendars = list(calendars)
        self.name = " + ".join(calendar.name for calendar in self.calendars)
        if len(self.all_closed_days()) >= len(WEEKDAY_NAMES):
            raise NoWorkingDaysError([calendar.name for calendar in self.calendars])

    def all_closed_days(self) -> frozenset[int]:
        return frozenset().union(*(calendar.all_closed_days() for calendar in self.calendars))

    def day_kind(self, day: date) -> DayKind:
        for calendar in self.calendars:
            kind = calendar.day_kind(day)
            if kind is not DayKind.WORKING:
                return kind
        return DayKind.WORKING

    def is_working_day(self, day: date) -> bool:
        return all(calendar.is_working_day(day) for calendar in self.calendars)

    def next_working_day(self, day: date) -> date:
        # Each calendar only moves the candidate forward, so this reaches a fixed point
        while True:
            candidate = day
            for calendar in self.calendars:
                candidate = calendar.next_working_day(candidate)
            if candidate == day:
                return day
            day = candidate

    def named_holidays_between(self, start: date, end: date) -> list[tuple[date, str]]:
        found: set[tuple[date, str]] = set()
        for calendar in self.calendars:
            found.update(calendar.named_holidays_between(start, end))
        return sorted(found)


def union_of(calendars: list[Calendar]) -> Calendar:
    """Return the single calendar, or a union when there are several."""
    if len(calendars) == 1:
        return calendars[0]
    return CalendarUnion(calendars)


def is_working(day: date, calendar: Calendar) -> bool:
    """Return True if ``day`` supplies working capacity under ``calendar``."""
    return calendar.is_working_day(day)


def next_working_instant(instant: Instant, calendar: Calendar) -> Instant:
    """Normalize an instant to the first moment that still has working capacity.

    An exhausted day or a non-working day moves to the start of the next
    working day; an instant with capacity left on a working day is returned
    unchanged.
    """
    if instant.exhausted:
        day = calendar.next_working_day(instant.day + _ONE_DAY)
        return Instant(day, 0.0)
    if not calendar.is_working_day(instant.day):
        return Instant(calendar.next_working_day(instant.day), 0.0)
    return instant


def advance(start: Instant, amount: float, calendar: Calendar) -> Instant:
    """Return the instant at which ``amount`` working-time units have elapsed.

    Work is consumed day by day starting at ``start``: each working day
    supplies 1.0 unit (less on the first day if ``start`` is part-way through
    it), non-working days are skipped, and the remainder carries over.

    Args:
        start: Instant to start consuming from
        amount: Working-time units to consume (fractions allowed)
        calendar: Calendar deciding which dates are working

    Returns:
        Instant reached after consuming ``amount``; for ``amount == 0`` this is
        ``start`` moved forward to working time
    """
    if amount < 0:
        raise ValueError(f"Cannot advance by a negative amount: {amount}")

    current = next_working_instant(start, calendar)
    remaining = amount
    day, offset = current.day, current.offset

    while True:
        capacity = 1.0 - offset
        if remaining <= capacity + EPSILON:
            return Instant(day, min(1.0, offset + remaining))
        remaining -= capacity
        if debug_enabled():
            logger.debug(f"        {day}: consumed {capacity:.3f}, {remaining:.3f} remaining")
        day = calendar.next_working_day(day + _ONE_DAY)
        offset = 0.0


def daily_breakdown(start: Instant, end: Instant, calendar: Calendar) -> list[tuple[date, float]]:
    """Working time consumed on each working date between two instants.

    Returns:
        Ordered (date, fraction_of_day) pairs; dates with no consumption are omitted
    """
    if end <= start:
        return []

    current = next_working_instant(start, calendar)
    day, offset = current.day, current.offset
    result: list[tuple[date, float]] = []

    while day <= end.day:
        stop = end.offset if day == end.day else 1.0
        if stop > offset + EPSILON:
            result.append((day, stop - offset))
        day = calendar.next_working_day(day + _ONE_DAY)
        offset = 0.0

    return result


def working_time_between(start: Instant, end: Instant, calendar: Calendar) -> float:
    """Working-time units elapsed between two instants (0.0 if ``end <= start``)."""
    return sum(fraction for _, fraction in daily_breakdown(start, end, calendar))


def non_working_days_between(start: Instant, end: Instant, calendar: Calendar) -> list[date]:
    """Non-working dates strictly between the first and last day of a span."""
    days: list[date] = []
    day = start.day + _ONE_DAY
    while day < end.day:
        if not calendar.is_working_day(day):
            days.append(day)
        day += _ONE_DAY
    return days

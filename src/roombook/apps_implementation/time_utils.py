#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""A light wrapper around the `datetime` library, containing utilities
for parsing wall-clock time strings, calendar-aware date offsets and interval
helpers. All values are time-zone naive: dates and times are interpreted in the
local wall clock of the meeting room."""

import datetime
import re
from enum import StrEnum, auto
from typing import NamedTuple, Self

from dateutil.relativedelta import relativedelta

from roombook.apps_implementation.exceptions import ParseError
from roombook.constants import DEFAULT_HORIZON_MONTHS

_TIME_PATTERN = re.compile(r"([0-9]{1,2}):([0-9]{2})(?::([0-9]{2}))?")

MINUTES_PER_DAY = 24 * 60


class RecurrenceUnit(StrEnum):
    """The calendar unit by which a recurring event advances."""

    day = auto()
    week = auto()
    month = auto()
    year = auto()


class TimeInterval(NamedTuple):
    """Represents the time interval between two specific time points."""

    start: datetime.datetime
    end: datetime.datetime

    def contains(self, dt: datetime.datetime) -> bool:
        """Check if a given datetime falls in the half-open interval [start, end)."""
        return self.start <= dt < self.end

    def contains_date(self, d: datetime.date) -> bool:
        """Check if a given date is contained within this time interval."""
        return self.start.date() <= d <= self.end.date()

    def includes(self, other: Self) -> bool:
        """Check if `other` is included in this time interval."""
        return self.start <= other.start and self.end >= other.end

    def intersects(self, other: Self) -> bool:
        """Check whether the two intervals share any time. Intervals that only
        touch (one ends exactly when the other starts) do not intersect."""
        return self.start < other.end and other.start < self.end


def parse_time(time: str | datetime.time) -> datetime.time:
    """Parse a wall-clock time written as ``HH:mm`` or ``HH:mm:ss``.

    Raises
    ------
    ParseError
        If `time` is not a well-formed time of the day.
    """
    if isinstance(time, datetime.time):
        return time
    if not isinstance(time, str):
        raise ParseError(f"Expected a time string, got {type(time).__name__}")
    match = _TIME_PATTERN.fullmatch(time)
    if match is None:
        raise ParseError(f"Malformed time string: {time!r}")
    hour, minute, second = (int(g) if g is not None else 0 for g in match.groups())
    try:
        return datetime.time(hour=hour, minute=minute, second=second)
    except ValueError as e:
        raise ParseError(f"Invalid time of day {time!r}: {e}") from e


def time_to_minutes(time: str | datetime.time) -> int:
    """Number of whole minutes elapsed since midnight. Seconds are dropped."""
    parsed = parse_time(time)
    return parsed.hour * 60 + parsed.minute


def minutes_to_time(minutes: int) -> datetime.time:
    """Inverse of `time_to_minutes`, for values within a single day."""
    if not 0 <= minutes < MINUTES_PER_DAY:
        raise ParseError(f"{minutes} minutes is not a time of the day")
    hour, minute = divmod(minutes, 60)
    return datetime.time(hour=hour, minute=minute)


def add_recurrence_step(
    date: datetime.date, unit: RecurrenceUnit | str, interval: int
) -> datetime.date:
    """Offset `date` by `interval` calendar units.

    Month and year offsets clamp to the last valid day of the target month, so
    January 31st plus one month is the last day of February and February 29th
    plus one year is February 28th.

    Raises
    ------
    ParseError
        If `unit` is not one of ``day``, ``week``, ``month`` or ``year``.
    """
    try:
        unit = RecurrenceUnit(unit)
    except ValueError:
        raise ParseError(f"Unsupported recurrence unit: {unit}")
    match unit:
        case RecurrenceUnit.day:
            delta = relativedelta(days=interval)
        case RecurrenceUnit.week:
            delta = relativedelta(weeks=interval)
        case RecurrenceUnit.month:
            delta = relativedelta(months=interval)
        case RecurrenceUnit.year:
            delta = relativedelta(years=interval)
    return date + delta


def today_() -> datetime.date:
    """Return the current date on the user's device."""
    return datetime.date.today()


def default_horizon(
    today: datetime.date | None = None, months: int = DEFAULT_HORIZON_MONTHS
) -> datetime.date:
    """The last date recurring events are expanded to when no explicit
    horizon is given."""
    if today is None:
        today = today_()
    return today + relativedelta(months=months)


def combine(date: datetime.date, time: str | datetime.time) -> datetime.datetime:
    """Combine a date and time into a single object representing a given moment
    in time."""
    return datetime.datetime.combine(date, parse_time(time))


def to_interval(
    date: datetime.date, time_start: str | datetime.time, time_end: str | datetime.time
) -> TimeInterval:
    """The interval a same-day booking occupies."""
    return TimeInterval(start=combine(date, time_start), end=combine(date, time_end))

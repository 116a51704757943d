#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Placement of bookings on the room occupancy timeline.

The timeline shows a fixed window of the day (06:00 - 22:00 by default). The
functions here map wall-clock intervals onto horizontal coordinates. Deciding
which events to draw is a separate step: `calculate_event_position` clamps
events overlapping the window edges but does not hide events falling outside
of it, `visible_events` does.
"""

import datetime
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, NamedTuple

from roombook.apps_implementation.time_utils import minutes_to_time, time_to_minutes
from roombook.constants import (
    DEFAULT_TIMELINE_MARGIN,
    DEFAULT_WINDOW_END,
    DEFAULT_WINDOW_START,
    EVENT_PALETTE,
)

if TYPE_CHECKING:
    from roombook.apps_implementation.work_calendar import Event


class TimelineSettings(NamedTuple):
    """Timeline display settings.

    Parameters
    ----------
    window_start, window_end
        The first and last time of the day shown on the timeline.
    margin
        Space left free on each side of the timeline, in pixels.
    """

    window_start: str | datetime.time = DEFAULT_WINDOW_START
    window_end: str | datetime.time = DEFAULT_WINDOW_END
    margin: float = DEFAULT_TIMELINE_MARGIN

    @property
    def start_minutes(self) -> int:
        return time_to_minutes(self.window_start)

    @property
    def end_minutes(self) -> int:
        return time_to_minutes(self.window_end)

    @property
    def window_minutes(self) -> int:
        minutes = self.end_minutes - self.start_minutes
        if minutes <= 0:
            raise ValueError(
                f"Timeline window {self.window_start} - {self.window_end} is empty"
            )
        return minutes


class EventPosition(NamedTuple):
    """Horizontal placement of an event, in pixels."""

    left: float
    width: float


class HourSegment(NamedTuple):
    """The part of an hour column of the grid timeline covered by an event.

    Parameters
    ----------
    hour
        The time the column starts at, formatted as ``HH:00``.
    offset, width
        Start and width of the covered part, as percentages of the column.
    """

    hour: str
    offset: float
    width: float


def calculate_event_position(
    time_start: str | datetime.time,
    time_end: str | datetime.time,
    timeline_width: float,
    settings: TimelineSettings | None = None,
) -> EventPosition:
    """Compute where an event is drawn on a timeline `timeline_width` pixels wide.

    Events starting before the window are drawn from the left margin and
    events with a negative duration get a zero width. Neither case raises, so
    that every event can be drawn.
    """
    if settings is None:
        settings = TimelineSettings()
    minute_width = (timeline_width - 2 * settings.margin) / settings.window_minutes
    start = time_to_minutes(time_start)
    end = time_to_minutes(time_end)
    left = settings.margin + (start - settings.start_minutes) * minute_width
    width = (end - start) * minute_width
    return EventPosition(left=max(left, settings.margin), width=max(width, 0.0))


def is_within_window(
    time_start: str | datetime.time,
    time_end: str | datetime.time,
    settings: TimelineSettings | None = None,
) -> bool:
    """Check whether any part of the interval falls in the visible window."""
    if settings is None:
        settings = TimelineSettings()
    start, end = time_to_minutes(time_start), time_to_minutes(time_end)
    return start < settings.end_minutes and end > settings.start_minutes


def visible_events(
    events: Iterable["Event"], settings: TimelineSettings | None = None
) -> list["Event"]:
    """Keep the events which should be drawn on the timeline."""
    return [
        e for e in events if is_within_window(e.time_start, e.time_end, settings)
    ]


def hour_columns(settings: TimelineSettings | None = None) -> list[str]:
    """Labels of the hour columns of the grid timeline, both window ends included.

    Columns span whole hours: a window starting at 06:30 starts with the
    06:00 column, of which only the part after 06:30 is ever covered by
    `hour_slot_segments`.
    """
    if settings is None:
        settings = TimelineSettings()
    first_hour = settings.start_minutes - settings.start_minutes % 60
    return [
        minutes_to_time(minutes).strftime("%H:00")
        for minutes in range(first_hour, settings.end_minutes + 1, 60)
        if minutes < 24 * 60
    ]


def hour_slot_segments(
    time_start: str | datetime.time,
    time_end: str | datetime.time,
    settings: TimelineSettings | None = None,
) -> list[HourSegment]:
    """Split an event into the parts drawn in each hour column of the grid
    timeline. Parts outside the window and columns the event does not touch are
    omitted."""
    if settings is None:
        settings = TimelineSettings()
    start = max(time_to_minutes(time_start), settings.start_minutes)
    end = min(time_to_minutes(time_end), settings.end_minutes)
    segments = []
    for hour in hour_columns(settings):
        column_start = time_to_minutes(hour)
        column_end = column_start + 60
        if end <= column_start or start >= column_end:
            continue
        start_offset = max(0, start - column_start) / 60 * 100
        end_offset = min(60, end - column_start) / 60 * 100
        segments.append(
            HourSegment(hour=hour, offset=start_offset, width=end_offset - start_offset)
        )
    return segments


def event_colour(index: int, palette: Sequence[str] = EVENT_PALETTE) -> str:
    """Colour of the `index`-th event drawn in a room row."""
    return palette[index % len(palette)]

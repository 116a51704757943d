#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import io
from typing import Callable

import pytest
from rich.console import Console

from roombook.apps_implementation.event_policy import (
    Counts,
    PaginatedResponse,
    PaginationMeta,
)
from roombook.apps_implementation.room_booking import MeetingRoom
from roombook.apps_implementation.work_calendar import Event
from roombook.interactive.display import (
    display_events,
    display_room_timeline,
    event_positions_table,
    rich_colour,
    room_timeline_table,
)

DAY = datetime.date(2025, 3, 1)


@pytest.fixture
def rooms() -> list[MeetingRoom]:
    return [
        MeetingRoom(id=1, name="Kepler", size=8),
        MeetingRoom(id=2, name="Galileo", size=4),
    ]


@pytest.fixture
def day_events(make_event: Callable[..., Event]) -> list[Event]:
    return [
        make_event(),
        make_event(
            id=2,
            name="Design review",
            time_start=datetime.time(13, 30),
            time_end=datetime.time(15, 0),
        ),
        make_event(
            id=3,
            name="Early call",
            time_start=datetime.time(4, 0),
            time_end=datetime.time(5, 0),
        ),
        make_event(id=4, name="Tomorrow", date=DAY + datetime.timedelta(days=1)),
    ]


def _render(renderable) -> str:
    console = Console(file=io.StringIO(), width=200, color_system=None)
    console.print(renderable)
    return console.file.getvalue()


@pytest.mark.parametrize(
    "css, expected",
    [
        ("rgba(50, 193, 255, 0.7)", "rgb(50,193,255)"),
        ("rgb(1,2,3)", "rgb(1,2,3)"),
        ("red", "red"),
    ],
)
def test_rich_colour(css: str, expected: str):
    assert rich_colour(css) == expected


def test_room_timeline_table(rooms: list[MeetingRoom], day_events: list[Event]):
    table = room_timeline_table(rooms, day_events, DAY)
    assert table.row_count == 2
    assert [c.header for c in table.columns][:3] == ["Room", "06:00", "07:00"]
    assert len(table.columns) == 18
    output = _render(table)
    assert "Kepler" in output
    assert "█" in output


def test_event_positions_table(rooms: list[MeetingRoom], day_events: list[Event]):
    table = event_positions_table(rooms, day_events, DAY, 1000)
    # the early call is outside of the window and the last event on another day
    assert table.row_count == 2
    output = _render(table)
    assert "Sprint planning" in output
    assert "Early call" not in output
    assert "Tomorrow" not in output
    assert "193.75" in output


def test_display_room_timeline(rooms: list[MeetingRoom], day_events: list[Event]):
    console = Console(file=io.StringIO(), width=200, color_system=None)
    display_room_timeline(rooms, day_events, DAY, 1000, console=console)
    assert "Room occupancy on 2025-03-01" in console.file.getvalue()


def test_display_events(day_events: list[Event]):
    response = PaginatedResponse(
        data=day_events[:2],
        meta=PaginationMeta(total=12, page=1, limit=2, total_pages=6),
        counts=Counts(author=3, member=9),
    )
    console = Console(file=io.StringIO(), width=200, color_system=None)
    display_events(response, console=console)
    output = console.file.getvalue()
    assert "Design review" in output
    assert "page 1/6, 12 events" in output
    assert "organised: 3, attended: 9" in output

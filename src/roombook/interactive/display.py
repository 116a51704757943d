#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import re

from rich.console import Console
from rich.table import Table
from rich.text import Text

from roombook.apps_implementation.event_policy import PaginatedResponse
from roombook.apps_implementation.room_booking import MeetingRoom
from roombook.apps_implementation.timeline import (
    TimelineSettings,
    calculate_event_position,
    event_colour,
    hour_columns,
    hour_slot_segments,
    visible_events,
)
from roombook.apps_implementation.work_calendar import Event, EventId
from roombook.constants import CURRENT_EVENT_COLOUR

CELL_WIDTH = 6
"""Number of characters drawn for each hour column."""
ROOM_COL_WIDTH = 20

_RGBA_PATTERN = re.compile(r"rgba?\((\d+),\s*(\d+),\s*(\d+)")


def rich_colour(css_colour: str) -> str:
    """Convert a CSS ``rgb``/``rgba`` colour to a rich colour. Transparency is dropped."""
    match = _RGBA_PATTERN.match(css_colour)
    if match is None:
        return css_colour
    return "rgb({},{},{})".format(*match.groups())


def _room_events(
    room: MeetingRoom,
    events: list[Event],
    date: datetime.date,
    settings: TimelineSettings,
) -> list[Event]:
    return visible_events(
        [e for e in events if e.meeting_room_id == room.id and e.date == date],
        settings,
    )


def _hour_cell(
    hour: str, day_events: list[Event], settings: TimelineSettings, colours: list[str]
) -> Text:
    cells = [(" ", "")] * CELL_WIDTH
    for event, colour in zip(day_events, colours):
        for segment in hour_slot_segments(event.time_start, event.time_end, settings):
            if segment.hour != hour:
                continue
            first = round(segment.offset / 100 * CELL_WIDTH)
            last = round((segment.offset + segment.width) / 100 * CELL_WIDTH)
            for i in range(first, max(last, first + 1)):
                if i < CELL_WIDTH:
                    cells[i] = ("█", rich_colour(colour))
    text = Text()
    for char, style in cells:
        text.append(char, style=style)
    return text


def room_timeline_table(
    rooms: list[MeetingRoom],
    events: list[Event],
    date: datetime.date,
    settings: TimelineSettings | None = None,
    current_event_id: EventId | None = None,
) -> Table:
    """Build the occupancy grid of `rooms` on `date`.

    ┏━━━━━━━━━━┳━━━━━━━┳━━━━━━━┳━━━━━━━┳━━━━━━━┓
    ┃ Room     ┃ 06:00 ┃ 07:00 ┃ 08:00 ┃ ...   ┃
    ┡━━━━━━━━━━╇━━━━━━━╇━━━━━━━╇━━━━━━━╇━━━━━━━┩
    │ Kepler   │       │  ████ │ ██    │       │
    """  # noqa

    if settings is None:
        settings = TimelineSettings()
    hours = hour_columns(settings)
    table = Table(
        title=f"Room occupancy on {date.isoformat()}",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Room", style="cyan", width=ROOM_COL_WIDTH, no_wrap=True)
    for hour in hours:
        table.add_column(hour, width=CELL_WIDTH, no_wrap=True)

    for room in rooms:
        day_events = _room_events(room, events, date, settings)
        colours = [
            CURRENT_EVENT_COLOUR if e.id == current_event_id else event_colour(i)
            for i, e in enumerate(day_events)
        ]
        table.add_row(
            room.name,
            *[_hour_cell(hour, day_events, settings, colours) for hour in hours],
        )
    return table


def event_positions_table(
    rooms: list[MeetingRoom],
    events: list[Event],
    date: datetime.date,
    timeline_width: float,
    settings: TimelineSettings | None = None,
) -> Table:
    """List where each event of `date` is drawn on a timeline `timeline_width`
    pixels wide."""

    if settings is None:
        settings = TimelineSettings()
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Room", style="cyan", no_wrap=True)
    table.add_column("Event", style="white")
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Left", justify="right")
    table.add_column("Width", justify="right")
    for room in rooms:
        for index, event in enumerate(_room_events(room, events, date, settings)):
            position = calculate_event_position(
                event.time_start, event.time_end, timeline_width, settings
            )
            table.add_row(
                room.name,
                Text(event.name, style=rich_colour(event_colour(index))),
                f"{event.time_start:%H:%M}-{event.time_end:%H:%M}",
                f"{position.left:.2f}",
                f"{position.width:.2f}",
            )
    return table


def display_room_timeline(
    rooms: list[MeetingRoom],
    events: list[Event],
    date: datetime.date,
    timeline_width: float,
    settings: TimelineSettings | None = None,
    console: Console | None = None,
):
    """Print the occupancy grid of `rooms` on `date`, followed by the position of
    each event on the timeline."""

    console = console or Console()
    console.print(room_timeline_table(rooms, events, date, settings))
    console.print(event_positions_table(rooms, events, date, timeline_width, settings))


def display_events(response: PaginatedResponse, console: Console | None = None):
    """Display a page of listed events as a rich table with the following format

    ┏━━━━┳━━━━━━━━━━━━┳━━━━━━━━━━━━━┳━━━━━━━━━━━━┳━━━━━━━━━━━┳━━━━━━━━━━━┓
    ┃ ID ┃ Date       ┃ Time        ┃ Event      ┃ Room      ┃ Organizer ┃
    ┡━━━━╇━━━━━━━━━━━━╇━━━━━━━━━━━━━╇━━━━━━━━━━━━╇━━━━━━━━━━━╇━━━━━━━━━━━┩
    """  # noqa

    console = console or Console()
    table = Table(show_header=True, header_style="bold magenta", expand=True)
    table.add_column("ID", justify="right", style="cyan", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Time", style="dim", no_wrap=True)
    table.add_column("Event", style="white")
    table.add_column("Room", style="white")
    table.add_column("Organizer", style="green")
    for event in response.data:
        name = event.name
        if event.is_generated_instance:
            name += " (recurring)"
        table.add_row(
            str(event.id),
            event.date.isoformat(),
            f"{event.time_start:%H:%M}-{event.time_end:%H:%M}",
            name,
            event.meeting_room_name or str(event.meeting_room_id),
            event.author.full_name,
        )
    meta = response.meta
    caption = f"page {meta.page}/{max(meta.total_pages, 1)}, {meta.total} events"
    if response.counts is not None:
        caption += (
            f" | organised: {response.counts.author}, "
            f"attended: {response.counts.member}"
        )
    table.caption = caption
    console.print(table)

#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Rules deciding which events are listed, and in which order."""

import datetime
import math
from collections.abc import Iterable, Sequence
from enum import StrEnum, auto

from pydantic import Field

from roombook.apps_implementation.company_directory import ApiModel, EmployeeID
from roombook.apps_implementation.room_booking import MeetingRoom
from roombook.apps_implementation.time_utils import today_
from roombook.apps_implementation.work_calendar import Event, RoomId
from roombook.constants import DEFAULT_PAGE_SIZE


class EventRole(StrEnum):
    """The part the user plays in an event."""

    organizer = auto()
    participant = auto()


class EventFilters(ApiModel):
    """Criteria for listing events.

    Parameters
    ----------
    name
        Case-insensitive substring of the event name.
    role
        Only list events the user organises or participates in. Moderators
        leave this unset to list all events.
    archived
        If `True`, only events before today are listed; if `False` only
        events from today onwards. All events are listed if unset.
    desc_order
        List the latest events first.
    page
        The page to return, starting from 1.
    """

    room_id: RoomId | None = None
    name: str | None = None
    role: EventRole | None = None
    date: datetime.date | None = None
    office_id: int | None = None
    archived: bool | None = None
    desc_order: bool = False
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)


class PaginationMeta(ApiModel):
    total: int
    page: int
    limit: int
    total_pages: int


class Counts(ApiModel):
    """Number of listed events the user organises (`author`) or attends (`member`)."""

    author: int = 0
    member: int = 0


class PaginatedResponse(ApiModel):
    data: list[Event]
    meta: PaginationMeta
    counts: Counts | None = None


def is_archived(event: Event, today: datetime.date | None = None) -> bool:
    """An event is archived once the day it happens on is over. The time of
    day is not taken into account."""
    if today is None:
        today = today_()
    return event.date < today


def partition_archived(
    events: Iterable[Event], today: datetime.date | None = None
) -> tuple[list[Event], list[Event]]:
    """Split `events` into archived and upcoming events, preserving their order."""
    if today is None:
        today = today_()
    archived, upcoming = [], []
    for event in events:
        if is_archived(event, today):
            archived.append(event)
        else:
            upcoming.append(event)
    return archived, upcoming


def sort_events(events: Iterable[Event], descending: bool = False) -> list[Event]:
    """Sort events by date and start time. Events starting at the same time
    keep their relative order."""
    return sorted(events, key=lambda e: (e.date, e.time_start), reverse=descending)


def event_role(event: Event, user_id: EmployeeID) -> EventRole | None:
    """The role of the user in `event`, or `None` if the user is not involved.
    The author of an event is its organizer even if also listed as an attendee."""
    if event.author.id == user_id:
        return EventRole.organizer
    if user_id in event.attendee_ids:
        return EventRole.participant
    return None


def filter_by_role(
    events: Iterable[Event], user_id: EmployeeID, role: EventRole
) -> list[Event]:
    return [e for e in events if event_role(e, user_id) == role]


def count_roles(events: Iterable[Event], user_id: EmployeeID) -> Counts:
    counts = Counts()
    for event in events:
        match event_role(event, user_id):
            case EventRole.organizer:
                counts.author += 1
            case EventRole.participant:
                counts.member += 1
    return counts


def apply_filters(
    events: Iterable[Event],
    filters: EventFilters,
    user_id: EmployeeID | None = None,
    rooms: Sequence[MeetingRoom] | None = None,
    today: datetime.date | None = None,
) -> list[Event]:
    """Return the events matching `filters`, in input order. Ordering and
    pagination are not applied.

    Raises
    ------
    ValueError
        If filtering by role without `user_id` or by office without `rooms`.
    """
    events = list(events)
    if filters.room_id is not None:
        events = [e for e in events if e.meeting_room_id == filters.room_id]
    if filters.office_id is not None:
        if rooms is None:
            raise ValueError("Rooms are required to filter events by office.")
        office_rooms = {r.id for r in rooms if r.office_id == filters.office_id}
        events = [e for e in events if e.meeting_room_id in office_rooms]
    if filters.name:
        needle = filters.name.lower()
        events = [e for e in events if needle in e.name.lower()]
    if filters.date is not None:
        events = [e for e in events if e.date == filters.date]
    if filters.archived is not None:
        archived, upcoming = partition_archived(events, today)
        events = archived if filters.archived else upcoming
    if filters.role is not None:
        if user_id is None:
            raise ValueError("The user is required to filter events by role.")
        events = filter_by_role(events, user_id, filters.role)
    return events


def paginate(
    events: Sequence[Event], page: int, limit: int
) -> tuple[list[Event], PaginationMeta]:
    """Return the events on `page` (1-indexed) and the pagination details."""
    total = len(events)
    meta = PaginationMeta(
        total=total, page=page, limit=limit, total_pages=math.ceil(total / limit)
    )
    start = (page - 1) * limit
    return list(events[start : start + limit]), meta

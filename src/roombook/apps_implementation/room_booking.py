#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Meeting rooms, booking conflicts and room availability."""

import datetime
from collections.abc import Iterable
from typing import Self

from pydantic import Field

from roombook.apps_implementation.company_directory import (
    ApiModel,
    Employee,
    Office,
    Status,
)
from roombook.apps_implementation.exceptions import SearchError
from roombook.apps_implementation.time_utils import TimeInterval, combine, to_interval
from roombook.apps_implementation.timeline import TimelineSettings
from roombook.apps_implementation.work_calendar import (
    Event,
    EventId,
    RoomId,
    generate_recurring_events,
)
from roombook.simulation.utils import (
    NOT_GIVEN,
    exact_match_filter_dataframe,
    filter_dataframe,
)


class MeetingRoom(ApiModel):
    """A bookable meeting room.

    Parameters
    ----------
    size
        How many people fit in the room.
    access
        Whether the current user may book the room.
    employees
        For private rooms, the employees allowed to book it.
    occupied
        Whether the service reported the room as in use when it was fetched.
        See `is_room_occupied` to compute this from events.
    """

    id: RoomId
    name: str
    size: int
    status: Status = Status.active
    office: Office | None = None
    access: bool = True
    is_public: bool = True
    employees: list[Employee] = Field(default_factory=list)
    occupied: bool = False
    description: str | None = None

    @property
    def office_id(self) -> int | None:
        return self.office.id if self.office is not None else None

    @property
    def is_bookable(self) -> bool:
        return self.status == Status.active and self.access


class CandidateBooking(ApiModel):
    """A booking the user is about to submit.

    Parameters
    ----------
    date
        The day of the booking. If not set, the booking is compared with
        existing events as if it was on the same day as each of them, so the
        caller should only pass events happening on the booking day.
    event_id
        When an existing event is edited, its id. Occurrences of the edited
        event never conflict with the booking.
    """

    room_id: RoomId
    date: datetime.date | None = None
    time_start: datetime.time
    time_end: datetime.time
    event_id: EventId | None = None

    @classmethod
    def from_event(cls, event: Event, editing: bool = False) -> Self:
        return cls(
            room_id=event.meeting_room_id,
            date=event.date,
            time_start=event.time_start,
            time_end=event.time_end,
            event_id=event.id if editing else None,
        )

    def interval_on(self, date: datetime.date) -> TimeInterval:
        return to_interval(self.date or date, self.time_start, self.time_end)


def _conflicts(candidate: CandidateBooking, event: Event) -> bool:
    if event.meeting_room_id != candidate.room_id:
        return False
    if candidate.event_id is not None and event.id == candidate.event_id:
        return False
    return candidate.interval_on(event.date).intersects(event.interval)


def has_overlap(candidate: CandidateBooking, existing: Iterable[Event]) -> bool:
    """Check whether `candidate` overlaps any of the `existing` bookings.

    Only bookings of the same room are compared. Bookings that are back to
    back (one ends exactly when the other starts) do not overlap.

    Notes
    -----
    1. `existing` should contain event instances, not recurring events: a
    recurring event only blocks the room on the date of the record passed in.
    Use `find_conflicts` to check against canonical records.
    """
    return any(_conflicts(candidate, event) for event in existing)


def find_conflicts(
    candidate: CandidateBooking,
    events: list[Event],
    horizon: datetime.date | None = None,
    *,
    today: datetime.date | None = None,
) -> list[Event]:
    """Expand `events` into instances and return those conflicting with
    `candidate`, in the order they were generated.

    Parameters
    ----------
    events
        Canonical events, as issued by the service.
    horizon
        Passed to the recurrence expansion. See `expand_to_instances`.
    """
    instances = generate_recurring_events(events, horizon, today=today)
    same_room = [
        e
        for e in instances
        if e.meeting_room_id == candidate.room_id
        and (candidate.date is None or e.date == candidate.date)
    ]
    return [e for e in same_room if _conflicts(candidate, e)]


def is_room_occupied(
    room_id: RoomId, events: Iterable[Event], at: datetime.datetime
) -> bool:
    """Check whether an event instance is taking place in the room at `at`."""
    return any(
        event.meeting_room_id == room_id and event.interval.contains(at)
        for event in events
    )


def find_available_time_slots(
    room_id: RoomId,
    date: datetime.date,
    events: Iterable[Event],
    settings: TimelineSettings | None = None,
) -> list[TimeInterval]:
    """Return the time intervals when the room is free on `date`.

    Parameters
    ----------
    events
        Event instances, which may include other rooms and days.
    settings
        The free slots are restricted to the visible window of the
        timeline. Defaults to 06:00 - 22:00.

    Returns
    -------
    The free intervals, sorted by start time. An empty list is returned if
    the room is booked for the whole window.
    """
    if settings is None:
        settings = TimelineSettings()
    day_start = combine(date, settings.window_start)
    day_end = combine(date, settings.window_end)
    bookings = sorted(
        e.interval
        for e in events
        if e.meeting_room_id == room_id and e.date == date
    )
    available_slots = []
    current_start = day_start
    for booking_start, booking_end in bookings:
        if booking_end <= current_start:
            continue
        if current_start < booking_start:
            available_slots.append(
                TimeInterval(start=current_start, end=min(booking_start, day_end))
            )
        current_start = max(current_start, booking_end)
        if current_start >= day_end:
            break
    if current_start < day_end:
        available_slots.append(TimeInterval(start=current_start, end=day_end))
    return [slot for slot in available_slots if slot.start < slot.end]


def _room_from_record(record: dict, offices: dict[int, Office]) -> MeetingRoom:
    record = dict(record)
    office_id = record.pop("office_id")
    return MeetingRoom(**record, office=offices.get(office_id))


def _get_offices() -> dict[int, Office]:
    from roombook.simulation.database_schemas import DatabaseNamespace
    from roombook.simulation.execution_context import get_current_context

    context = get_current_context()
    records = context.get_database(namespace=DatabaseNamespace.OFFICES).to_dicts()
    return {r["id"]: Office(**r) for r in records}


def get_meeting_rooms(office_id: int | None = None) -> list[MeetingRoom]:
    """List the meeting rooms known to the booking service, sorted by name.

    Parameters
    ----------
    office_id
        If specified, only the rooms of this office are returned.
    """
    from roombook.simulation.database_schemas import DatabaseNamespace
    from roombook.simulation.execution_context import get_current_context

    context = get_current_context()
    raw_records = filter_dataframe(
        dataframe=context.get_database(namespace=DatabaseNamespace.MEETING_ROOMS),
        filter_criteria=[
            (
                "office_id",
                NOT_GIVEN if office_id is None else office_id,
                exact_match_filter_dataframe,
            )
        ],
        allow_no_criteria=True,
    ).to_dicts()
    offices = _get_offices()
    rooms = [_room_from_record(r, offices) for r in raw_records]
    rooms.sort(key=lambda r: r.name)
    return rooms


def get_meeting_room(room_id: RoomId) -> MeetingRoom:
    """Retrieve a meeting room by id.

    Raises
    ------
    SearchError if the room does not exist.
    """
    from roombook.simulation.database_schemas import DatabaseNamespace
    from roombook.simulation.execution_context import get_current_context

    context = get_current_context()
    raw_records = filter_dataframe(
        dataframe=context.get_database(namespace=DatabaseNamespace.MEETING_ROOMS),
        filter_criteria=[("id", room_id, exact_match_filter_dataframe)],
    ).to_dicts()
    if not raw_records:
        raise SearchError(f"Room '{room_id}' not found")
    return _room_from_record(raw_records[0], _get_offices())

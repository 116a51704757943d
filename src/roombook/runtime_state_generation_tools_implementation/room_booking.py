#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Populate the simulated booking service with offices, rooms, employees and events."""

from typing import Iterable

from roombook.apps_implementation.company_directory import Employee, Status
from roombook.apps_implementation.exceptions import EventDefinitionError
from roombook.apps_implementation.room_booking import MeetingRoom
from roombook.apps_implementation.work_calendar import Event, EventId, RoomId
from roombook.simulation.database_schemas import DatabaseNamespace
from roombook.simulation.execution_context import get_current_context

OfficeId = int


def _next_id(namespace: DatabaseNamespace) -> int:
    ids = get_current_context().get_database(namespace=namespace).get_column("id")
    return 1 if ids.is_empty() else int(ids.max()) + 1


def create_employee(
    full_name: str, email: str | None = None, employee_id: int | None = None
) -> Employee:
    """Add an employee to the company directory."""
    if employee_id is None:
        employee_id = _next_id(DatabaseNamespace.EMPLOYEES)
    employee = Employee(id=employee_id, full_name=full_name, email=email)
    get_current_context().add_to_database(
        namespace=DatabaseNamespace.EMPLOYEES,
        rows=[{"id": employee.id, "full_name": full_name, "email": email}],
    )
    return employee


def add_event_participants(events: Iterable[Event]) -> list[Employee]:
    """Register the authors and attendees of `events` in the company directory.

    Employees already in the directory are skipped. Returns the employees added.
    """
    known = set(
        get_current_context()
        .get_database(namespace=DatabaseNamespace.EMPLOYEES)
        .get_column("id")
        .to_list()
    )
    added = []
    for event in events:
        for employee in [event.author, *event.employees]:
            if employee.id in known:
                continue
            added.append(
                create_employee(
                    employee.full_name, email=employee.email, employee_id=employee.id
                )
            )
            known.add(employee.id)
    return added


def create_office(
    name: str, city: str | None = None, time_zone: int = 0, office_id: int | None = None
) -> OfficeId:
    if office_id is None:
        office_id = _next_id(DatabaseNamespace.OFFICES)
    get_current_context().add_to_database(
        namespace=DatabaseNamespace.OFFICES,
        rows=[{"id": office_id, "name": name, "city": city, "time_zone": time_zone}],
    )
    return office_id


def create_room(
    room_name: str,
    size: int,
    office_id: OfficeId | None = None,
    status: Status = Status.active,
    is_public: bool = True,
    room_id: RoomId | None = None,
) -> RoomId:
    """Create a room in the underlying database."""
    if room_id is None:
        room_id = _next_id(DatabaseNamespace.MEETING_ROOMS)
    get_current_context().add_to_database(
        namespace=DatabaseNamespace.MEETING_ROOMS,
        rows=[
            {
                "id": room_id,
                "name": room_name,
                "size": size,
                "status": str(status),
                "office_id": office_id,
                "is_public": is_public,
                "access": True,
            }
        ],
    )
    return room_id


def add_rooms(rooms: list[MeetingRoom]) -> None:
    """Store rooms, and their offices, as issued by the booking service."""
    known_offices = set(
        get_current_context()
        .get_database(namespace=DatabaseNamespace.OFFICES)
        .get_column("id")
        .to_list()
    )
    for room in rooms:
        if room.office is not None and room.office.id not in known_offices:
            create_office(
                room.office.name,
                city=room.office.city,
                time_zone=room.office.time_zone,
                office_id=room.office.id,
            )
            known_offices.add(room.office.id)
        create_room(
            room.name,
            room.size,
            office_id=room.office_id,
            status=room.status,
            is_public=room.is_public,
            room_id=room.id,
        )


def create_event(event: Event) -> EventId:
    """Store a canonical event. Attendees and author must be in the directory.

    Raises
    ------
    EventDefinitionError
        If `event` is an instance generated from a recurring event. Only the
        event the series was generated from is stored.
    """
    if event.is_generated_instance:
        raise EventDefinitionError(
            f"Event {event.id} on {event.date} is a generated instance and "
            "cannot be stored"
        )
    get_current_context().add_to_database(
        namespace=DatabaseNamespace.EVENTS,
        rows=[event.to_record()],
    )
    return event.id


def simulate_meeting_room(
    room_name: str,
    size: int,
    office_id: OfficeId | None = None,
    events: list[Event] | None = None,
) -> RoomId:
    """Add a meeting room to the database, together with its bookings.

    Parameters
    ----------
    room_name
        Which meeting room to add to the database
    size
        The maximum number of people the room can host.
    events
        Canonical events booked in the room. Their `meeting_room_id` is
        replaced by the id of the new room. Set to `None` if there is no
        booking for this room.
    """

    room_id = create_room(room_name, size, office_id=office_id)
    if events is not None:
        for event in events:
            create_event(
                event.model_copy(
                    update={"meeting_room_id": room_id, "meeting_room_name": room_name}
                )
            )
    return room_id

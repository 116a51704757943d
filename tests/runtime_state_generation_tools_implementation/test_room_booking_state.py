#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from typing import Callable

import pytest

from roombook.apps_implementation.company_directory import (
    Employee,
    Office,
    get_all_employees,
)
from roombook.apps_implementation.exceptions import EventDefinitionError
from roombook.apps_implementation.room_booking import (
    MeetingRoom,
    get_meeting_room,
    get_meeting_rooms,
)
from roombook.apps_implementation.work_calendar import Event, expand_to_instances
from roombook.runtime_state_generation_tools_implementation.room_booking import (
    add_event_participants,
    add_rooms,
    create_employee,
    create_event,
    simulate_meeting_room,
)
from roombook.simulation.database_schemas import DatabaseNamespace
from roombook.simulation.execution_context import ExecutionContext

pytestmark = pytest.mark.usefixtures("execution_context")


def test_create_employee_assigns_next_id():
    employee = create_employee("Zoe Quinn")
    assert employee.id == 5


def test_add_event_participants(
    make_event: Callable[..., Event], employees: dict[str, Employee]
):
    newcomer = Employee(id=7, full_name="Zoe Quinn")
    events = [
        make_event(employees=[employees["Pete"], newcomer]),
        make_event(id=2, author=newcomer, employees=[employees["Hector"]]),
    ]
    assert add_event_participants(events) == [newcomer]
    assert [e.id for e in get_all_employees()] == [1, 3, 4, 2, 7]


def test_simulate_meeting_room(
    execution_context: ExecutionContext, make_event: Callable[..., Event]
):
    events = [
        make_event(id=10, meeting_room_id=99),
        make_event(id=11, date=datetime.date(2025, 3, 2), meeting_room_id=99),
    ]
    room_id = simulate_meeting_room("Kepler", 8, events=events)
    stored = execution_context.get_database(DatabaseNamespace.EVENTS)
    assert stored.get_column("id").to_list() == [10, 11]
    assert set(stored.get_column("meeting_room_id").to_list()) == {room_id}
    assert set(stored.get_column("meeting_room_name").to_list()) == {"Kepler"}
    assert get_meeting_room(room_id).name == "Kepler"


def test_simulate_meeting_room_without_bookings(execution_context: ExecutionContext):
    simulate_meeting_room("Kepler", 8)
    simulate_meeting_room("Galileo", 4)
    assert [r.id for r in get_meeting_rooms()] == [2, 1]
    assert execution_context.get_database(DatabaseNamespace.EVENTS).is_empty()


def test_generated_instances_cannot_be_stored(make_event: Callable[..., Event]):
    weekly = make_event(recurrence_type_value="week")
    generated = expand_to_instances(weekly, datetime.date(2025, 4, 1))[1]
    with pytest.raises(EventDefinitionError):
        create_event(generated)


def test_add_rooms_creates_offices(execution_context: ExecutionContext):
    head_office = Office(id=7, name="Head office", city="Berlin", time_zone=1)
    add_rooms(
        [
            MeetingRoom(id=3, name="Kepler", size=8, office=head_office),
            MeetingRoom(id=4, name="Galileo", size=4, office=head_office),
            MeetingRoom(id=5, name="Annex", size=2),
        ]
    )
    offices = execution_context.get_database(DatabaseNamespace.OFFICES)
    assert offices.get_column("id").to_list() == [7]
    rooms = get_meeting_rooms(office_id=7)
    assert [r.name for r in rooms] == ["Galileo", "Kepler"]
    assert rooms[0].office == head_office
    assert get_meeting_room(5).office is None

#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
from typing import Callable, Iterator

import pytest

from roombook.apps_implementation.company_directory import Employee
from roombook.apps_implementation.work_calendar import Event
from roombook.runtime_state_generation_tools_implementation.room_booking import (
    create_employee,
)
from roombook.simulation.execution_context import ExecutionContext, new_context

EMPLOYEE_DETAILS = {
    "Alex": (1, "Alex Morgan", "alex.morgan@company.com"),
    "Pete": (2, "Pete Walsh", "pete.walsh@company.com"),
    "Anders": (3, "Anders Nilsson", "anders.nilsson@company.com"),
    "Hector": (4, "Hector Ruiz", "hector.ruiz@company.com"),
}


@pytest.fixture()
def employees() -> dict[str, Employee]:
    return {
        name: Employee(id=id_, full_name=full_name, email=email)
        for name, (id_, full_name, email) in EMPLOYEE_DETAILS.items()
    }


@pytest.fixture
def basic_event(employees: dict[str, Employee]) -> Event:
    return Event(
        id=1,
        name="Sprint planning",
        description="Plan the work for the next two weeks.",
        date=datetime.date(2025, 3, 1),
        time_start=datetime.time(9, 0),
        time_end=datetime.time(10, 0),
        meeting_room_id=1,
        meeting_room_name="Kepler",
        author=employees["Alex"],
        employees=[employees["Pete"], employees["Anders"]],
    )


@pytest.fixture
def make_event(basic_event: Event) -> Callable[..., Event]:
    """Factory creating variations of `basic_event`."""

    def _make_event(**updates) -> Event:
        return basic_event.model_copy(update=updates)

    return _make_event


@pytest.fixture
def execution_context() -> Iterator[ExecutionContext]:
    """Fresh simulated booking service, with the employees of `EMPLOYEE_DETAILS`
    registered in the directory."""
    test_context = ExecutionContext()
    with new_context(test_context):
        for id_, full_name, email in EMPLOYEE_DETAILS.values():
            create_employee(full_name, email=email, employee_id=id_)
        yield test_context

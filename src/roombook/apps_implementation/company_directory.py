#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Employees, organisations and offices, as issued by the booking service."""

from enum import StrEnum, auto
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from roombook.apps_implementation.exceptions import SearchError
from roombook.simulation.utils import (
    exact_match_filter_dataframe,
    filter_dataframe,
    fuzzy_match_filter_dataframe,
)

if TYPE_CHECKING:
    from roombook.simulation.database_schemas import DatabaseNamespace

EmployeeID = int


class ApiModel(BaseModel):
    """Base class for records exchanged with the booking service.

    Records arrive with camelCase keys (`timeStart`, `meetingRoomId`) but
    are accessed with snake_case attributes. Either spelling is accepted
    when a record is created.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Status(StrEnum):
    active = auto()
    inactive = auto()


class Organization(ApiModel, frozen=True):
    id: int
    name: str
    status: Status = Status.active


class Office(ApiModel, frozen=True):
    """An office hosting meeting rooms.

    Parameters
    ----------
    time_zone
        UTC offset of the office, in hours. Informational only: all event
        dates and times are wall-clock values local to the office.
    """

    id: int
    name: str
    city: str | None = None
    time_zone: int = 0
    organization: Organization | None = None


class Employee(ApiModel, frozen=True):
    """A member of the organisation, registered in the company directory."""

    id: EmployeeID
    full_name: str
    email: str | None = None
    organization: Organization | None = None

    def __str__(self) -> str:
        return f"{self.full_name} ({self.id})"


def get_employee_by_id(employee_id: EmployeeID) -> Employee:
    """Retrieve the employee with `employee_id` from the company directory.

    Raises
    ------
    SearchError if the employee is not in the directory.
    """

    from roombook.simulation.database_schemas import DatabaseNamespace
    from roombook.simulation.execution_context import get_current_context

    current_context = get_current_context()
    raw_records = filter_dataframe(
        dataframe=current_context.get_database(namespace=DatabaseNamespace.EMPLOYEES),
        filter_criteria=[
            ("id", employee_id, exact_match_filter_dataframe),
        ],
    ).to_dicts()
    if len(raw_records) != 1:
        raise SearchError(f"No employee with id {employee_id} in the directory.")
    return Employee(**raw_records[0])


def find_employee(name: str) -> list[Employee]:
    """Find an employee by name in the company's directory.

    Parameters
    ----------
    name
       The full name of the employee searched (fuzzy matched).
    """

    from roombook.simulation.database_schemas import DatabaseNamespace
    from roombook.simulation.execution_context import get_current_context

    context = get_current_context()
    raw_records = filter_dataframe(
        dataframe=context.get_database(
            namespace=DatabaseNamespace.EMPLOYEES,
        ),
        # a threshold of 90 is used to fuzzy match the names
        filter_criteria=[
            ("full_name", name, fuzzy_match_filter_dataframe),
        ],
    ).to_dicts()
    return [Employee(**r) for r in raw_records]


def get_all_employees() -> list[Employee]:
    """List all employees in alphabetical order according to `full_name`."""

    from roombook.simulation.database_schemas import DatabaseNamespace
    from roombook.simulation.execution_context import get_current_context

    context = get_current_context()
    raw_db = context.get_database(namespace=DatabaseNamespace.EMPLOYEES).to_dicts()
    company = [Employee(**r) for r in raw_db]
    company.sort(key=lambda x: x.full_name)
    return company

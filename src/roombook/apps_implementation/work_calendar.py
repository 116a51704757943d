#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Meeting events and the expansion of recurring events into their instances."""

import datetime
import logging
from typing import Any, Self

from pydantic import Field

from roombook.apps_implementation.company_directory import (
    ApiModel,
    Employee,
    EmployeeID,
)
from roombook.apps_implementation.exceptions import EventDefinitionError
from roombook.apps_implementation.time_utils import (
    RecurrenceUnit,
    TimeInterval,
    add_recurrence_step,
    default_horizon,
    to_interval,
)
from roombook.constants import MAX_EVENT_RECURRENCES

EventId = int
RoomId = int

logger = logging.getLogger(__name__)


class Event(ApiModel):
    """A meeting booked in a meeting room.

    Parameters
    ----------
    date
        The calendar day of the meeting, in the room's wall clock.
    time_start, time_end
        Wall-clock start and end of the meeting, on `date`. The end is not
        guaranteed to be after the start; forms validate this.
    author
        The organiser of the meeting.
    employees
        The invited attendees.
    recurrence_type_value
        How the meeting repeats: ``day``, ``week``, ``month`` or ``year``.
        Unset, or any other value, means the meeting does not repeat.
    recurrence_interval
        Number of `recurrence_type_value` units between two occurrences.
    recurrence_end
        The last date (inclusive) an occurrence may fall on. If not set, the
        series is only bounded by the expansion horizon.
    recurrence_parent
        Set only on instances generated from a recurring event and equal to
        the event they were generated from. Generated instances are never
        expanded again.
    original_date
        For instances, the date of the event the series was generated from.
        Edit flows use it to find the record stored by the service.
    """

    id: EventId
    name: str
    description: str = ""
    date: datetime.date
    time_start: datetime.time
    time_end: datetime.time
    meeting_room_id: RoomId
    meeting_room_name: str | None = None
    author: Employee
    employees: list[Employee] = Field(default_factory=list)
    recurrence_type_value: str | None = None
    recurrence_interval: int = 1
    recurrence_end: datetime.date | None = None
    recurrence_parent: "Event | None" = None
    original_date: datetime.date | None = None

    @property
    def recurrence_unit(self) -> RecurrenceUnit | None:
        """The unit the event repeats by, or `None` if it does not recur."""
        if self.recurrence_type_value is None:
            return None
        try:
            return RecurrenceUnit(self.recurrence_type_value)
        except ValueError:
            return None

    @property
    def is_generated_instance(self) -> bool:
        return self.recurrence_parent is not None

    @property
    def source_event(self) -> Self:
        """The record stored by the service for this event."""
        return self.recurrence_parent if self.recurrence_parent is not None else self

    @property
    def interval(self) -> TimeInterval:
        return to_interval(self.date, self.time_start, self.time_end)

    @property
    def attendee_ids(self) -> set[EmployeeID]:
        return {e.id for e in self.employees}

    def to_record(self) -> dict[str, Any]:
        """Flatten the event into a row of the events table."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "date": self.date,
            "time_start": self.time_start,
            "time_end": self.time_end,
            "meeting_room_id": self.meeting_room_id,
            "meeting_room_name": self.meeting_room_name,
            "author_id": self.author.id,
            "employee_ids": sorted(self.attendee_ids),
            "recurrence_type_value": self.recurrence_type_value,
            "recurrence_interval": self.recurrence_interval,
            "recurrence_end": self.recurrence_end,
        }

    @classmethod
    def from_record(
        cls, record: dict[str, Any], employees: dict[EmployeeID, Employee]
    ) -> Self:
        """Inverse of `to_record`, resolving employee ids with `employees`."""
        data = dict(record)
        data["author"] = employees[data.pop("author_id")]
        data["employees"] = [employees[id_] for id_ in data.pop("employee_ids") or []]
        if data.get("recurrence_interval") is None:
            data.pop("recurrence_interval", None)
        return cls(**data)

    def __str__(self) -> str:
        when = (
            f"{self.date.isoformat()} "
            f"{self.time_start.strftime('%H:%M')}-{self.time_end.strftime('%H:%M')}"
        )
        display = f"'{self.name}' on {when}"
        if self.meeting_room_name is not None:
            display += f" (room: {self.meeting_room_name})"
        return display


def expand_to_instances(
    event: Event,
    horizon: datetime.date | None = None,
    *,
    today: datetime.date | None = None,
    max_instances: int = MAX_EVENT_RECURRENCES,
) -> list[Event]:
    """Return the instances of `event`, the event itself first.

    Parameters
    ----------
    event
        A canonical event, as issued by the service.
    horizon
        No instance is generated after this date. Defaults to 24 months
        after `today`.
    today
        The current date, used to compute the default horizon.
    max_instances
        Maximum number of instances returned for a single series.

    Returns
    -------
    The instances in chronological order. Each instance falls
    `recurrence_interval` units after the previous one, so a series clamped to
    a short month keeps the clamped day (Jan 31, Feb 28, Mar 28, ...). Every
    instance holds its own copy of the attendee list.
    An empty list is returned for generated instances, which must not be
    expanded again.

    Raises
    ------
    EventDefinitionError
        If the event recurs with a non-positive `recurrence_interval`.
    """

    if event.is_generated_instance:
        return []
    instances = [
        event.model_copy(
            update={"original_date": event.date, "employees": list(event.employees)}
        )
    ]
    unit = event.recurrence_unit
    if unit is None:
        if event.recurrence_type_value is not None:
            # the service validates recurrence types, so an unknown value is
            # treated as a one-off event
            logger.debug(
                f"Event {event.id} has unknown recurrence type "
                f"{event.recurrence_type_value!r}, not expanding"
            )
        return instances
    if event.recurrence_interval <= 0:
        raise EventDefinitionError(
            f"Event {event.id} recurs every {event.recurrence_interval} "
            f"{unit}(s): the recurrence interval must be a positive integer"
        )
    if horizon is None:
        horizon = default_horizon(today)
    end = horizon
    if event.recurrence_end is not None:
        end = min(event.recurrence_end, horizon)

    next_date = add_recurrence_step(event.date, unit, event.recurrence_interval)
    while next_date <= end:
        if len(instances) >= max_instances:
            logger.warning(
                f"Event {event.id} has more than {max_instances} occurrences "
                f"before {end}, the series was truncated"
            )
            break
        instances.append(
            event.model_copy(
                update={
                    "date": next_date,
                    "employees": list(event.employees),
                    "original_date": event.date,
                    "recurrence_parent": event,
                }
            )
        )
        next_date = add_recurrence_step(next_date, unit, event.recurrence_interval)
    return instances


def generate_recurring_events(
    events: list[Event],
    horizon: datetime.date | None = None,
    *,
    today: datetime.date | None = None,
    max_instances: int = MAX_EVENT_RECURRENCES,
) -> list[Event]:
    """Expand each event into its instances, keeping the input order of the
    series. Generated instances found in `events` are skipped."""
    if horizon is None:
        horizon = default_horizon(today)
    instances = []
    for event in events:
        instances.extend(
            expand_to_instances(event, horizon, max_instances=max_instances)
        )
    return instances

#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Interchangeable strategies for listing event instances.

`ClientExpandedEventSource` receives the canonical events returned by the
booking service and expands, filters and paginates them locally.
`ServerPaginatedEventSource` answers the same queries from the tables of the
simulated booking service, as the service itself does. Both use the same
recurrence expansion, so they return the same pages for the same data.
"""

import datetime
import logging
import math
from typing import Protocol, runtime_checkable

import polars as pl

from roombook.apps_implementation.company_directory import (
    EmployeeID,
    get_all_employees,
)
from roombook.apps_implementation.event_policy import (
    Counts,
    EventFilters,
    PaginatedResponse,
    PaginationMeta,
    apply_filters,
    count_roles,
    filter_by_role,
    paginate,
    sort_events,
)
from roombook.apps_implementation.room_booking import MeetingRoom
from roombook.apps_implementation.time_utils import default_horizon, today_
from roombook.apps_implementation.work_calendar import (
    Event,
    generate_recurring_events,
)
from roombook.constants import MAX_EVENT_RECURRENCES
from roombook.simulation.database_schemas import EVENTS_SCHEMA, DatabaseNamespace
from roombook.simulation.execution_context import (
    ExecutionContext,
    get_current_context,
    new_context,
)
from roombook.simulation.utils import (
    NOT_GIVEN,
    exact_match_filter_dataframe,
    filter_dataframe,
    is_sequence_member_filter_dataframe,
    subsequence_filter_dataframe,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class EventSource(Protocol):
    """Something that lists event instances page by page."""

    def fetch_events(self, filters: EventFilters) -> PaginatedResponse: ...


class _ExpandingSource:
    """Shared settings of the sources: who is asking, and which day it is."""

    def __init__(
        self,
        user_id: EmployeeID | None = None,
        today: datetime.date | None = None,
        horizon: datetime.date | None = None,
        max_instances: int = MAX_EVENT_RECURRENCES,
    ):
        self.user_id = user_id
        self._today = today
        self._horizon = horizon
        self.max_instances = max_instances

    @property
    def today(self) -> datetime.date:
        return self._today if self._today is not None else today_()

    @property
    def horizon(self) -> datetime.date:
        if self._horizon is not None:
            return self._horizon
        return default_horizon(self.today)

    def _check_role_filter(self, filters: EventFilters) -> None:
        if filters.role is not None and self.user_id is None:
            raise ValueError("The user is required to filter events by role.")

    def _expand(self, events: list[Event]) -> list[Event]:
        return generate_recurring_events(
            events, self.horizon, max_instances=self.max_instances
        )


class ClientExpandedEventSource(_ExpandingSource):
    """List instances of events already fetched from the booking service.

    Parameters
    ----------
    events
        Canonical events.
    rooms
        The rooms the events take place in. Required to filter by office.
    """

    def __init__(
        self,
        events: list[Event],
        user_id: EmployeeID | None = None,
        rooms: list[MeetingRoom] | None = None,
        today: datetime.date | None = None,
        horizon: datetime.date | None = None,
        max_instances: int = MAX_EVENT_RECURRENCES,
    ):
        super().__init__(user_id, today, horizon, max_instances)
        self.events = events
        self.rooms = rooms

    def fetch_events(self, filters: EventFilters) -> PaginatedResponse:
        self._check_role_filter(filters)
        matching = apply_filters(
            self._expand(self.events),
            filters.model_copy(update={"role": None}),
            rooms=self.rooms,
            today=self.today,
        )
        counts = None
        if self.user_id is not None:
            counts = count_roles(matching, self.user_id)
        if filters.role is not None:
            matching = filter_by_role(matching, self.user_id, filters.role)
        data, meta = paginate(
            sort_events(matching, descending=filters.desc_order),
            filters.page,
            filters.limit,
        )
        return PaginatedResponse(data=data, meta=meta, counts=counts)


class ServerPaginatedEventSource(_ExpandingSource):
    """List instances of the events stored by the simulated booking service.

    Parameters
    ----------
    context
        The simulated service state. Defaults to the current execution context.
    """

    def __init__(
        self,
        context: ExecutionContext | None = None,
        user_id: EmployeeID | None = None,
        today: datetime.date | None = None,
        horizon: datetime.date | None = None,
        max_instances: int = MAX_EVENT_RECURRENCES,
    ):
        super().__init__(user_id, today, horizon, max_instances)
        self._context = context

    @property
    def context(self) -> ExecutionContext:
        return self._context if self._context is not None else get_current_context()

    def canonical_events(self) -> list[Event]:
        """The events stored by the service, resolved against the directory."""
        with new_context(self.context):
            employees = {e.id: e for e in get_all_employees()}
        records = self.context.get_database(namespace=DatabaseNamespace.EVENTS)
        return [Event.from_record(r, employees) for r in records.to_dicts()]

    def _office_room_ids(self, office_id: int) -> list[int]:
        rooms = self.context.get_database(namespace=DatabaseNamespace.MEETING_ROOMS)
        return (
            rooms.filter(pl.col("office_id") == office_id).get_column("id").to_list()
        )

    def fetch_events(self, filters: EventFilters) -> PaginatedResponse:
        self._check_role_filter(filters)
        instances = self._expand(self.canonical_events())
        logger.debug(f"Querying {len(instances)} event instances with {filters}")
        frame = pl.DataFrame(
            [e.to_record() for e in instances], schema=EVENTS_SCHEMA
        ).with_row_index("position")

        def given(value):
            return NOT_GIVEN if value is None else value

        frame = filter_dataframe(
            dataframe=frame,
            filter_criteria=[
                ("meeting_room_id", given(filters.room_id), exact_match_filter_dataframe),
                (
                    "meeting_room_id",
                    NOT_GIVEN
                    if filters.office_id is None
                    else self._office_room_ids(filters.office_id),
                    is_sequence_member_filter_dataframe,
                ),
                ("name", filters.name or NOT_GIVEN, subsequence_filter_dataframe),
                ("date", given(filters.date), exact_match_filter_dataframe),
            ],
            allow_no_criteria=True,
        )
        if filters.archived is not None:
            archived = pl.col("date") < self.today
            frame = frame.filter(archived if filters.archived else ~archived)

        counts = None
        if self.user_id is not None:
            organizer = pl.col("author_id") == self.user_id
            participant = pl.col("employee_ids").list.contains(self.user_id) & ~organizer
            counts = Counts(
                author=frame.filter(organizer).height,
                member=frame.filter(participant).height,
            )
            if filters.role is not None:
                frame = frame.filter(
                    organizer if filters.role == "organizer" else participant
                )

        frame = frame.sort(
            ["date", "time_start"], descending=filters.desc_order, maintain_order=True
        )
        total = frame.height
        page = frame.slice((filters.page - 1) * filters.limit, filters.limit)
        meta = PaginationMeta(
            total=total,
            page=filters.page,
            limit=filters.limit,
            total_pages=math.ceil(total / filters.limit),
        )
        data = [instances[i] for i in page.get_column("position").to_list()]
        return PaginatedResponse(data=data, meta=meta, counts=counts)

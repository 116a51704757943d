#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging
from typing import Callable

import pytest

from roombook.apps_implementation.company_directory import Employee
from roombook.apps_implementation.exceptions import EventDefinitionError
from roombook.apps_implementation.time_utils import RecurrenceUnit, default_horizon
from roombook.apps_implementation.work_calendar import (
    Event,
    expand_to_instances,
    generate_recurring_events,
)

HORIZON = datetime.date(2026, 12, 31)


@pytest.fixture
def monthly_event(make_event: Callable[..., Event]) -> Event:
    return make_event(
        date=datetime.date(2025, 1, 31),
        recurrence_type_value="month",
        recurrence_interval=1,
        recurrence_end=datetime.date(2025, 4, 30),
    )


def _dates(instances: list[Event]) -> list[datetime.date]:
    return [e.date for e in instances]


def test_month_end_series_steps_from_previous_instance(monthly_event: Event):
    instances = expand_to_instances(monthly_event, HORIZON)
    assert _dates(instances) == [
        datetime.date(2025, 1, 31),
        datetime.date(2025, 2, 28),
        datetime.date(2025, 3, 28),
        datetime.date(2025, 4, 28),
    ]


def test_leap_day_series_keeps_clamped_day(make_event: Callable[..., Event]):
    event = make_event(
        date=datetime.date(2024, 2, 29),
        recurrence_type_value="year",
        recurrence_end=datetime.date(2028, 12, 31),
    )
    assert _dates(expand_to_instances(event, HORIZON)) == [
        datetime.date(2024, 2, 29),
        datetime.date(2025, 2, 28),
        datetime.date(2026, 2, 28),
    ]


def test_canonical_event_is_first_instance(monthly_event: Event):
    canonical, *generated = expand_to_instances(monthly_event, HORIZON)
    assert canonical.id == monthly_event.id
    assert canonical.date == monthly_event.date
    assert not canonical.is_generated_instance
    assert canonical.original_date == monthly_event.date
    assert canonical.source_event is canonical
    for instance in generated:
        assert instance.is_generated_instance
        assert instance.recurrence_parent == monthly_event
        assert instance.source_event == monthly_event
        assert instance.original_date == monthly_event.date
        assert instance.id == monthly_event.id
        assert instance.time_start == monthly_event.time_start
        assert instance.employees == monthly_event.employees


def test_expansion_does_not_mutate_input(monthly_event: Event):
    before = monthly_event.model_dump()
    expand_to_instances(monthly_event, HORIZON)
    assert monthly_event.model_dump() == before


def test_instances_have_their_own_attendees(
    monthly_event: Event, employees: dict[str, Employee]
):
    attendees = list(monthly_event.employees)
    canonical, first, second, *_ = expand_to_instances(monthly_event, HORIZON)
    first.employees.append(employees["Hector"])
    canonical.employees.clear()
    assert monthly_event.employees == attendees
    assert second.employees == attendees
    again = expand_to_instances(monthly_event, HORIZON)
    assert again[1].employees == attendees


def test_expansion_is_idempotent(monthly_event: Event):
    assert expand_to_instances(monthly_event, HORIZON) == expand_to_instances(
        monthly_event, HORIZON
    )


@pytest.mark.parametrize("unit", list(RecurrenceUnit))
@pytest.mark.parametrize("interval", [1, 2, 3])
def test_instances_fall_between_event_date_and_end(
    make_event: Callable[..., Event], unit: RecurrenceUnit, interval: int
):
    event = make_event(
        date=datetime.date(2025, 1, 31),
        recurrence_type_value=str(unit),
        recurrence_interval=interval,
    )
    instances = expand_to_instances(event, HORIZON)
    dates = _dates(instances)
    assert dates.count(event.date) == 1
    assert all(event.date <= d <= HORIZON for d in dates)
    assert dates == sorted(set(dates))


def test_non_recurring_event_yields_single_instance(basic_event: Event):
    instances = expand_to_instances(basic_event, HORIZON)
    assert len(instances) == 1
    assert instances[0].date == basic_event.date
    assert instances[0].recurrence_parent is None


def test_unknown_recurrence_type_is_not_expanded(
    make_event: Callable[..., Event], caplog: pytest.LogCaptureFixture
):
    event = make_event(recurrence_type_value="fortnightly", recurrence_interval=0)
    with caplog.at_level(logging.DEBUG):
        instances = expand_to_instances(event, HORIZON)
    assert _dates(instances) == [event.date]
    assert "unknown recurrence type" in caplog.text


@pytest.mark.parametrize("interval", [0, -1])
def test_non_positive_interval_is_rejected(
    make_event: Callable[..., Event], interval: int
):
    event = make_event(recurrence_type_value="week", recurrence_interval=interval)
    with pytest.raises(EventDefinitionError):
        expand_to_instances(event, HORIZON)


def test_recurrence_end_before_event_date(make_event: Callable[..., Event]):
    event = make_event(
        recurrence_type_value="day", recurrence_end=datetime.date(2025, 2, 1)
    )
    assert _dates(expand_to_instances(event, HORIZON)) == [event.date]


def test_recurrence_end_is_inclusive(make_event: Callable[..., Event]):
    event = make_event(
        date=datetime.date(2025, 3, 3),
        recurrence_type_value="week",
        recurrence_end=datetime.date(2025, 3, 17),
    )
    assert _dates(expand_to_instances(event, HORIZON)) == [
        datetime.date(2025, 3, 3),
        datetime.date(2025, 3, 10),
        datetime.date(2025, 3, 17),
    ]


def test_open_ended_series_stops_at_horizon(make_event: Callable[..., Event]):
    event = make_event(recurrence_type_value="day")
    horizon = event.date + datetime.timedelta(days=10)
    instances = expand_to_instances(event, horizon)
    assert len(instances) == 11
    assert instances[-1].date == horizon


def test_horizon_caps_recurrence_end(make_event: Callable[..., Event]):
    event = make_event(
        recurrence_type_value="year", recurrence_end=datetime.date(2040, 1, 1)
    )
    instances = expand_to_instances(event, datetime.date(2027, 6, 1))
    assert _dates(instances) == [
        datetime.date(2025, 3, 1),
        datetime.date(2026, 3, 1),
        datetime.date(2027, 3, 1),
    ]


def test_default_horizon_is_relative_to_today(make_event: Callable[..., Event]):
    event = make_event(recurrence_type_value="month")
    today = datetime.date(2025, 3, 1)
    instances = expand_to_instances(event, today=today)
    assert instances[-1].date == default_horizon(today)
    assert len(instances) == 25


def test_generated_instances_are_not_expanded_again(monthly_event: Event):
    generated = expand_to_instances(monthly_event, HORIZON)[1]
    assert expand_to_instances(generated, HORIZON) == []


def test_series_is_truncated_at_max_instances(
    make_event: Callable[..., Event], caplog: pytest.LogCaptureFixture
):
    event = make_event(recurrence_type_value="day")
    with caplog.at_level(logging.WARNING):
        instances = expand_to_instances(event, HORIZON, max_instances=5)
    assert len(instances) == 5
    assert "truncated" in caplog.text


def test_generate_recurring_events(
    basic_event: Event, monthly_event: Event, make_event: Callable[..., Event]
):
    weekly_event = make_event(
        id=3,
        date=datetime.date(2025, 3, 3),
        recurrence_type_value="week",
        recurrence_interval=2,
        recurrence_end=datetime.date(2025, 3, 31),
    )
    generated = expand_to_instances(weekly_event, HORIZON)[1]
    instances = generate_recurring_events(
        [basic_event, monthly_event, weekly_event, generated], HORIZON
    )
    assert [(e.id, e.date) for e in instances] == [
        (1, datetime.date(2025, 3, 1)),
        (1, datetime.date(2025, 1, 31)),
        (1, datetime.date(2025, 2, 28)),
        (1, datetime.date(2025, 3, 28)),
        (1, datetime.date(2025, 4, 28)),
        (3, datetime.date(2025, 3, 3)),
        (3, datetime.date(2025, 3, 17)),
        (3, datetime.date(2025, 3, 31)),
    ]


def test_event_accepts_camel_case_records(employees: dict[str, Employee]):
    event = Event(
        **{
            "id": 7,
            "name": "Retro",
            "date": "2025-03-01",
            "timeStart": "16:00:00",
            "timeEnd": "17:00:00",
            "meetingRoomId": 2,
            "author": {"id": 1, "fullName": "Alex Morgan"},
            "employees": [{"id": 2, "fullName": "Pete Walsh"}],
            "recurrenceTypeValue": "week",
            "recurrenceEnd": "2025-03-15",
        }
    )
    assert event.time_start == datetime.time(16, 0)
    assert event.recurrence_unit == RecurrenceUnit.week
    assert event.recurrence_interval == 1
    assert event.attendee_ids == {2}
    assert str(event) == "'Retro' on 2025-03-01 16:00-17:00"


def test_record_round_trip(basic_event: Event, employees: dict[str, Employee]):
    record = basic_event.to_record()
    assert record["author_id"] == employees["Alex"].id
    assert record["employee_ids"] == [2, 3]
    directory = {e.id: e for e in employees.values()}
    assert Event.from_record(record, directory) == basic_event

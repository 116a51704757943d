#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
from enum import StrEnum, auto

import polars as pl

from roombook.apps_implementation.company_directory import Status


class DatabaseNamespace(StrEnum):
    """Namespace for each database"""

    EMPLOYEES = auto()
    OFFICES = auto()
    MEETING_ROOMS = auto()
    EVENTS = auto()


EVENTS_SCHEMA = {
    "id": pl.Int64,
    "name": pl.String,
    "description": pl.String,
    "date": pl.Date,
    "time_start": pl.Time,
    "time_end": pl.Time,
    "meeting_room_id": pl.Int64,
    "meeting_room_name": pl.String,
    "author_id": pl.Int64,
    "employee_ids": pl.List(pl.Int64),
    "recurrence_type_value": pl.String,
    "recurrence_interval": pl.Int32,
    "recurrence_end": pl.Date,
}
DATABASE_SCHEMAS = {
    DatabaseNamespace.EMPLOYEES: {
        "id": pl.Int64,
        "full_name": pl.String,
        "email": pl.String,
    },
    DatabaseNamespace.OFFICES: {
        "id": pl.Int64,
        "name": pl.String,
        "city": pl.String,
        "time_zone": pl.Int32,
    },
    DatabaseNamespace.MEETING_ROOMS: {
        "id": pl.Int64,
        "name": pl.String,
        "size": pl.Int32,
        "status": pl.Enum([str(x) for x in Status]),
        "office_id": pl.Int64,
        "is_public": pl.Boolean,
        "access": pl.Boolean,
    },
    DatabaseNamespace.EVENTS: EVENTS_SCHEMA,
}

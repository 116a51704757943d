#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
"""Load records exported from the booking service."""

import json
import logging
from pathlib import Path
from typing import Any

from roombook.apps_implementation.room_booking import MeetingRoom
from roombook.apps_implementation.work_calendar import Event

logger = logging.getLogger(__name__)


def load_json(path: str | Path):
    with open(path, "r") as f:
        data = json.load(f)
    return data


def _records(data: Any, path: str | Path) -> list[dict[str, Any]]:
    # paginated responses wrap the records in a `data` field
    if isinstance(data, dict) and "data" in data:
        data = data["data"]
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of records in {path}")
    return data


def load_events(path: str | Path) -> list[Event]:
    """Read canonical events, as listed by the booking service.

    The file holds either a list of event records or a paginated response."""
    events = [Event(**r) for r in _records(load_json(path), path)]
    logger.info(f"Loaded {len(events)} events from {path}")
    return events


def load_rooms(path: str | Path) -> list[MeetingRoom]:
    rooms = [MeetingRoom(**r) for r in _records(load_json(path), path)]
    logger.info(f"Loaded {len(rooms)} meeting rooms from {path}")
    return rooms

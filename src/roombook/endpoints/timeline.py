#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
import datetime
import logging

import hydra
from omegaconf import DictConfig, OmegaConf
from rich.prompt import Prompt

from roombook.apps_implementation.company_directory import (
    EmployeeID,
    find_employee,
    get_employee_by_id,
)
from roombook.apps_implementation.event_policy import EventFilters
from roombook.apps_implementation.event_sources import ClientExpandedEventSource
from roombook.apps_implementation.exceptions import SearchError
from roombook.apps_implementation.time_utils import default_horizon, today_
from roombook.apps_implementation.timeline import TimelineSettings
from roombook.apps_implementation.work_calendar import Event, generate_recurring_events
from roombook.interactive.display import display_events, display_room_timeline
from roombook.readers import load_events, load_rooms
from roombook.runtime_state_generation_tools_implementation.room_booking import (
    add_event_participants,
)
from roombook.simulation.execution_context import ExecutionContext, new_context

logger = logging.getLogger(__name__)

USER_MESSAGE = "[bold green]Next page?[/bold green]"  # noqa


def _get_date(cfg: DictConfig) -> datetime.date:
    if cfg.date is None:
        return today_()
    return datetime.date.fromisoformat(str(cfg.date))


@hydra.main(
    config_name="timeline",
    config_path="pkg://roombook.configs.endpoints",
)
def timeline(cfg: DictConfig):
    if cfg.debug:
        logger.info(OmegaConf.to_yaml(cfg, resolve=True))
    date = _get_date(cfg)
    events = load_events(cfg.events_path)
    rooms = load_rooms(cfg.rooms_path)
    instances = generate_recurring_events(
        events,
        default_horizon(date, months=cfg.horizon_months),
        max_instances=cfg.max_instances,
    )
    logger.info(f"Expanded {len(events)} events into {len(instances)} instances")
    settings = TimelineSettings(
        window_start=cfg.window_start, window_end=cfg.window_end, margin=cfg.margin
    )
    display_room_timeline(rooms, instances, date, cfg.timeline_width, settings)


def _resolve_user(cfg: DictConfig, events: list[Event]) -> EmployeeID | None:
    """Look up the user the events are listed for, by id or by name, among the
    people taking part in `events`."""
    if cfg.user_id is None and cfg.user is None:
        return None
    with new_context(ExecutionContext()):
        add_event_participants(events)
        if cfg.user_id is not None:
            user = get_employee_by_id(cfg.user_id)
        else:
            matches = find_employee(cfg.user)
            if len(matches) != 1:
                raise SearchError(
                    f"Expected one employee matching {cfg.user!r}, "
                    f"found {len(matches)}"
                )
            (user,) = matches
    logger.info(f"Listing the events of {user}")
    return user.id


@hydra.main(
    config_name="timeline",
    config_path="pkg://roombook.configs.endpoints",
)
def events(cfg: DictConfig):
    if cfg.debug:
        logger.info(OmegaConf.to_yaml(cfg, resolve=True))
    today = _get_date(cfg)
    canonical_events = load_events(cfg.events_path)
    source = ClientExpandedEventSource(
        canonical_events,
        user_id=_resolve_user(cfg, canonical_events),
        rooms=load_rooms(cfg.rooms_path),
        today=today,
        horizon=default_horizon(today, months=cfg.horizon_months),
        max_instances=cfg.max_instances,
    )
    page = 1
    while True:
        response = source.fetch_events(
            EventFilters(
                role=cfg.role,
                archived=cfg.archived,
                desc_order=cfg.desc_order,
                page=page,
                limit=cfg.page_size,
            )
        )
        display_events(response)
        if page >= response.meta.total_pages:
            break
        should_continue = Prompt.ask(USER_MESSAGE, default="yes", choices=["yes", "no"])
        if should_continue.lower() in ["no", "n"]:
            break
        page += 1

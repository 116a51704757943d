#
# For licensing see accompanying LICENSE file.
# Copyright © 2025 Apple Inc. All Rights Reserved.
#
PACKAGE_NAME = "roombook"
DEFAULT_HORIZON_MONTHS = 24
"""How far ahead of today recurring events are expanded."""
MAX_EVENT_RECURRENCES = 1000
"""Upper bound on the number of instances generated for a single series."""
DEFAULT_WINDOW_START = "06:00"
DEFAULT_WINDOW_END = "22:00"
DEFAULT_TIMELINE_MARGIN = 10
DEFAULT_TIMELINE_WIDTH = 1000
DEFAULT_PAGE_SIZE = 10
EVENT_PALETTE = (
    "rgba(50, 193, 255, 0.7)",
    "rgba(50, 67, 255, 0.7)",
    "rgba(50, 122, 255, 0.7)",
    "rgba(42, 200, 71, 0.7)",
)
CURRENT_EVENT_COLOUR = "rgba(149, 50, 255, 0.7)"
WIRE_DATE_FORMAT = "%Y-%m-%d"
WIRE_TIME_FORMAT = "%H:%M:%S"

"""Utility functions for the signal engine."""

from goldtrackr.utils.math import (
    as_positive_float,
    clamp,
    format_compact_usd,
    format_percent,
    format_price,
    percent_change,
    safe_divide,
)
from goldtrackr.utils.time import (
    LatencyTimer,
    format_time_ago,
    get_timestamp_ms,
    get_timestamp_us,
    ms_to_iso,
)


__all__ = [
    "LatencyTimer",
    "as_positive_float",
    "clamp",
    "format_compact_usd",
    "format_percent",
    "format_price",
    "format_time_ago",
    "get_timestamp_ms",
    "get_timestamp_us",
    "ms_to_iso",
    "percent_change",
    "safe_divide",
]

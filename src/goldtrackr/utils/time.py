"""
Time utilities.

All domain timestamps are Unix epoch milliseconds.
"""

import time
from datetime import UTC, datetime


def get_timestamp_ms() -> int:
    """
    Get current timestamp in milliseconds.

    Returns:
        Current Unix timestamp in milliseconds.
    """
    return time.time_ns() // 1_000_000


def get_timestamp_us() -> int:
    """
    Get current timestamp in microseconds.

    Used for latency measurement.
    """
    return time.time_ns() // 1000


def ms_to_iso(timestamp_ms: int) -> str:
    """
    Convert epoch milliseconds to an ISO-8601 UTC string.

    Example:
        >>> ms_to_iso(1704067200000)
        '2024-01-01T00:00:00+00:00'
    """
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).isoformat()


def format_time_ago(timestamp_ms: int, now_ms: int | None = None) -> str:
    """
    Human readable age of a timestamp.

    Examples:
        >>> format_time_ago(0, now_ms=5 * 60_000)
        '5m ago'
        >>> format_time_ago(0, now_ms=3 * 3_600_000)
        '3h ago'
    """
    now = get_timestamp_ms() if now_ms is None else now_ms
    mins = max(0, now - timestamp_ms) // 60_000
    if mins < 60:
        return f"{mins}m ago"
    hours = mins // 60
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


class LatencyTimer:
    """
    Context manager for measuring operation latency.

    Example:
        >>> with LatencyTimer() as timer:
        ...     do_something()
        >>> print(f"Latency: {timer.latency_us}μs")
    """

    __slots__ = ("start_us", "end_us", "latency_us")

    def __init__(self) -> None:
        self.start_us: int = 0
        self.end_us: int = 0
        self.latency_us: int = 0

    def __enter__(self) -> "LatencyTimer":
        self.start_us = get_timestamp_us()
        return self

    def __exit__(self, *args: object) -> None:
        self.end_us = get_timestamp_us()
        self.latency_us = self.end_us - self.start_us


def format_duration_us(duration_us: int) -> str:
    """
    Format a duration in microseconds for display.

    Examples:
        >>> format_duration_us(500)
        '500μs'
        >>> format_duration_us(1500)
        '1.50ms'
    """
    if duration_us < 1000:
        return f"{duration_us}μs"
    elif duration_us < 1_000_000:
        return f"{duration_us / 1000:.2f}ms"
    else:
        return f"{duration_us / 1_000_000:.2f}s"

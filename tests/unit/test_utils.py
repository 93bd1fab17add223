"""
Unit tests for numeric and time helpers.
"""

import math

import pytest

from goldtrackr.utils.math import (
    as_positive_float,
    clamp,
    format_compact_usd,
    format_percent,
    format_price,
    percent_change,
    safe_divide,
)
from goldtrackr.utils.time import format_duration_us, format_time_ago, ms_to_iso


class TestMath:
    """Tests for math helpers."""

    def test_safe_divide(self) -> None:
        assert safe_divide(1.0, 4.0) == 0.25
        assert safe_divide(1.0, 0.0) == 0.0
        assert safe_divide(1.0, 0.0, default=-1.0) == -1.0

    def test_percent_change(self) -> None:
        assert percent_change(100.0, 101.5) == pytest.approx(1.5)
        assert percent_change(0.0, 5.0) == 0.0

    def test_clamp(self) -> None:
        assert clamp(1.2, -1.0, 1.0) == 1.0
        assert clamp(-3.0, -1.0, 1.0) == -1.0

    @pytest.mark.parametrize(
        "raw, expected",
        [(2, 2.0), ("0.5", 0.5), (0, None), (-1, None), ("x", None), (None, None), (math.nan, None), (False, None)],
    )
    def test_as_positive_float(self, raw: object, expected: float | None) -> None:
        assert as_positive_float(raw) == expected

    def test_formatting(self) -> None:
        assert format_price(97450) == "$97,450.00"
        assert format_price(-12.5) == "-$12.50"
        assert format_percent(1.234) == "+1.23%"
        assert format_percent(-0.5) == "-0.50%"
        assert format_percent(0.0) == "0.00%"
        assert format_compact_usd(1_250_000_000) == "$1.25B"
        assert format_compact_usd(950) == "$950"


class TestTime:
    """Tests for time helpers."""

    def test_ms_to_iso(self) -> None:
        assert ms_to_iso(1704067200000) == "2024-01-01T00:00:00+00:00"

    @pytest.mark.parametrize(
        "age_ms, expected",
        [(0, "0m ago"), (5 * 60_000, "5m ago"), (3 * 3_600_000, "3h ago"), (50 * 3_600_000, "2d ago")],
    )
    def test_format_time_ago(self, age_ms: int, expected: str) -> None:
        assert format_time_ago(1_000_000_000, now_ms=1_000_000_000 + age_ms) == expected

    def test_future_timestamp_clamped(self) -> None:
        assert format_time_ago(10 * 60_000, now_ms=0) == "0m ago"

    def test_format_duration(self) -> None:
        assert format_duration_us(500) == "500μs"
        assert format_duration_us(1500) == "1.50ms"
        assert format_duration_us(2_500_000) == "2.50s"

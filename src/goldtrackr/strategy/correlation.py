"""
Pearson correlation matrix over sparkline history.

Each asset contributes its hourly sparkline, down-sampled to the
period's target sample count. Assets without data correlate 0 with
everything except themselves.
"""

import math
from collections.abc import Mapping, Sequence

from goldtrackr.config.constants import ASSET_GOLD, CORRELATION_ASSETS, CORRELATION_LABELS
from goldtrackr.core.types import (
    CorrelationMatrix,
    CorrelationPeriod,
    PriceQuote,
    ReferenceSpot,
    SparklinePoint,
)
from goldtrackr.utils.math import clamp
from goldtrackr.utils.time import get_timestamp_ms


def sparkline_prices(points: Sequence[SparklinePoint], count: int = 24) -> list[float]:
    """
    Down-sample a sparkline to at most `count` prices.

    Takes every step-th sample, step = max(1, len // count), then keeps the
    most recent `count` of those.

    Example:
        >>> pts = [SparklinePoint(i, float(i)) for i in range(10)]
        >>> sparkline_prices(pts, 3)
        [3.0, 6.0, 9.0]
    """
    if count <= 0:
        return []
    step = max(1, len(points) // count)
    return [p.price for p in points[::step][-count:]]


def pearson_correlation(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient of two series.

    Only the first min(len(x), len(y)) samples are used. Fewer than two
    samples or a constant series give 0. The result is clamped to [-1, 1]
    to absorb floating point overshoot.
    """
    n = min(len(x), len(y))
    if n < 2:
        return 0.0

    xs = x[:n]
    ys = y[:n]
    mean_x = sum(xs) / n
    mean_y = sum(ys) / n

    num = 0.0
    dx2 = 0.0
    dy2 = 0.0
    for a, b in zip(xs, ys):
        dx = a - mean_x
        dy = b - mean_y
        num += dx * dy
        dx2 += dx * dx
        dy2 += dy * dy

    denom = math.sqrt(dx2 * dy2)
    if denom == 0:
        return 0.0
    return clamp(num / denom, -1.0, 1.0)


def _series_for(
    asset_id: str,
    quotes: Mapping[str, PriceQuote],
    spot: ReferenceSpot | None,
    samples: int,
) -> list[float]:
    if asset_id == ASSET_GOLD:
        return sparkline_prices(spot.sparkline, samples) if spot else []
    quote = quotes.get(asset_id)
    return sparkline_prices(quote.sparkline, samples) if quote else []


def compute_correlation_matrix(
    quotes: Mapping[str, PriceQuote],
    spot: ReferenceSpot | None,
    period: CorrelationPeriod | str,
    now_ms: int | None = None,
) -> CorrelationMatrix:
    """
    Correlation matrix for spot gold, PAXG, XAUT, BTC and ETH.

    Args:
        quotes: Current quotes keyed by asset id.
        spot: Spot gold benchmark, or None if unknown.
        period: Lookback period ("1h", "1d", "7d", "30d").
        now_ms: Timestamp stamped on the result.

    Returns:
        Symmetric matrix with a unit diagonal.

    Raises:
        ValueError: If `period` is not a known period.
    """
    period = CorrelationPeriod(period)
    samples = period.samples
    series = [_series_for(a, quotes, spot, samples) for a in CORRELATION_ASSETS]

    size = len(CORRELATION_ASSETS)
    rows = [[0.0] * size for _ in range(size)]
    for i in range(size):
        rows[i][i] = 1.0
        for j in range(i + 1, size):
            value = pearson_correlation(series[i], series[j])
            rows[i][j] = value
            rows[j][i] = value

    return CorrelationMatrix(
        period=period,
        assets=CORRELATION_LABELS,
        matrix=tuple(tuple(row) for row in rows),
        updated_at=get_timestamp_ms() if now_ms is None else now_ms,
    )

"""
Static fallback dataset.

Used when the price feeds are unreachable and no earlier snapshot exists,
and when no spot gold API key is configured. Prices are a fixed reference
set; sparklines are synthetic noise around them.
"""

import random
from datetime import UTC, datetime, timedelta

from goldtrackr.config.constants import (
    ASSET_BCH,
    ASSET_BTC,
    ASSET_ETH,
    ASSET_PAXG,
    ASSET_XAUT,
    HOUR_MS,
)
from goldtrackr.core.types import NewsItem, PriceQuote, ReferenceSpot, SparklinePoint
from goldtrackr.utils.time import get_timestamp_ms


# id, symbol, name, price, 24h %, 7d %
FALLBACK_QUOTES: tuple[tuple[str, str, str, float, float, float], ...] = (
    (ASSET_PAXG, "PAXG", "PAX Gold", 3280.5, -0.12, 2.4),
    (ASSET_XAUT, "XAUT", "Tether Gold", 3284.2, 0.08, 2.1),
    (ASSET_BTC, "BTC", "Bitcoin", 97450.0, -1.8, 5.6),
    (ASSET_ETH, "ETH", "Ethereum", 3850.0, -2.1, 3.2),
    (ASSET_BCH, "BCH", "Bitcoin Cash", 504.0, 0.5, 1.2),
)

FALLBACK_SPOT_PRICE = 3290.0
FALLBACK_SPOT_CHANGE_24H = 0.35
FALLBACK_SPOT_CHANGE_7D = 1.8

# Relative width of the synthetic noise band (+/- 1%)
SYNTHETIC_NOISE = 0.02
SYNTHETIC_POINTS = 24

# title, snippet
FALLBACK_HEADLINES: tuple[tuple[str, str], ...] = (
    (
        "Gold rallies as Fed signals rate cut pause amid inflation concerns",
        "Gold prices surged past $3,290/oz as the Federal Reserve signaled a "
        "cautious approach to rate cuts...",
    ),
    (
        "PAXG vs XAUT: Arbitrage opportunity widens to 0.8% on Coinbase",
        "Traders have spotted a growing spread between PAXG and XAUT on major exchanges...",
    ),
    (
        "China increases gold reserves for third consecutive month amid tariff uncertainty",
        "China's central bank added to its gold reserves again as trade tensions "
        "with the US persist...",
    ),
    (
        "Bitcoin correlation with gold reaches 6-month high during Fed uncertainty",
        "The 30-day rolling correlation between BTC and gold has hit 0.68, the "
        "highest since August...",
    ),
    (
        "Dollar weakens on tariff news, gold benefits as safe-haven demand rises",
        "The US dollar index fell 0.4% after new tariff announcements spooked "
        "currency markets...",
    ),
)
FALLBACK_NEWS_SOURCE = "Kitco"
FALLBACK_NEWS_URL = "https://www.kitco.com"


def synthetic_sparkline(
    base_price: float,
    points: int = SYNTHETIC_POINTS,
    now_ms: int | None = None,
    rng: random.Random | None = None,
) -> tuple[SparklinePoint, ...]:
    """
    Build an hourly series jittered around a price.

    Args:
        base_price: Centre price.
        points: Number of hourly samples, oldest first.
        now_ms: Reference time; the last sample is one hour before it.
        rng: Random source, for reproducible series in tests.

    Returns:
        Sparkline points.
    """
    now = get_timestamp_ms() if now_ms is None else now_ms
    draw = (rng or random).random
    return tuple(
        SparklinePoint(
            time=now - (points - i) * HOUR_MS,
            price=base_price * (1 + (draw() - 0.5) * SYNTHETIC_NOISE),
        )
        for i in range(points)
    )


def fallback_quotes(rng: random.Random | None = None) -> dict[str, PriceQuote]:
    """Static quotes for every tracked asset."""
    return {
        asset_id: PriceQuote(
            id=asset_id,
            symbol=symbol,
            name=name,
            price=price,
            change_24h=change_24h,
            change_7d=change_7d,
            sparkline=synthetic_sparkline(price, rng=rng),
            volume_24h=price * 10_000,
            market_cap=price * 1_000_000,
        )
        for asset_id, symbol, name, price, change_24h, change_7d in FALLBACK_QUOTES
    }


def fallback_spot(rng: random.Random | None = None) -> ReferenceSpot:
    """Static spot gold benchmark."""
    return ReferenceSpot(
        price=FALLBACK_SPOT_PRICE,
        change_24h=FALLBACK_SPOT_CHANGE_24H,
        change_7d=FALLBACK_SPOT_CHANGE_7D,
        sparkline=synthetic_sparkline(FALLBACK_SPOT_PRICE, rng=rng),
    )


def fallback_news(now: datetime | None = None) -> list[NewsItem]:
    """Curated headlines, one hour apart, newest first."""
    reference = now or datetime.now(tz=UTC)
    return [
        NewsItem(
            id=f"n{i + 1}",
            title=title,
            url=FALLBACK_NEWS_URL,
            source=FALLBACK_NEWS_SOURCE,
            published_at=(reference - timedelta(hours=i)).isoformat(),
            snippet=snippet,
        )
        for i, (title, snippet) in enumerate(FALLBACK_HEADLINES)
    ]

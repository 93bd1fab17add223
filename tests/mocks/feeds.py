"""
Mock price, spot and news feeds for testing.

Each mock returns a configurable value or raises FeedError, and counts
calls, so engine behavior can be driven without network access.
"""

import asyncio

from goldtrackr.core.types import NewsItem, PriceQuote, ReferenceSpot
from goldtrackr.market.feeds import FeedError


class MockQuoteSource:
    """
    Quote feed that serves a fixed mapping or fails on demand.

    With `gate` set, each fetch waits on it, so a test can hold a fetch open.
    """

    def __init__(
        self,
        quotes: dict[str, PriceQuote] | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.quotes: dict[str, PriceQuote] = dict(quotes or {})
        self.gate = gate
        self.fail = False
        self.calls = 0
        self.closed = False
        self.in_flight = 0
        self.max_in_flight = 0
        self.fetch_started = asyncio.Event()

    async def fetch_prices(self) -> dict[str, PriceQuote]:
        self.calls += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.fetch_started.set()
        try:
            if self.gate is not None:
                await self.gate.wait()
            if self.fail:
                raise FeedError("HTTP 503: service unavailable", status=503)
            return dict(self.quotes)
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


class MockSpotSource:
    """Spot feed that serves a fixed benchmark or fails on demand."""

    def __init__(self, spot: ReferenceSpot | None = None) -> None:
        self.spot = spot
        self.fail = False
        self.calls = 0

    async def fetch_reference_spot(self) -> ReferenceSpot:
        self.calls += 1
        if self.fail or self.spot is None:
            raise FeedError("Metal price API error: quota exceeded")
        return self.spot


class MockNewsSource:
    """Headline feed that serves a fixed list or fails on demand."""

    def __init__(self, items: list[NewsItem] | None = None) -> None:
        self.items = list(items or [])
        self.fail = False

    async def fetch_news(self) -> list[NewsItem]:
        if self.fail:
            raise FeedError("news unavailable")
        return list(self.items)

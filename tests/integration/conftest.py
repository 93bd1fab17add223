"""
Fixtures for engine and HTTP integration tests.
"""

from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import test_utils, web

from goldtrackr.config.settings import Settings
from goldtrackr.core.engine import DashboardEngine
from goldtrackr.core.event_bus import Event
from goldtrackr.core.types import PriceQuote, ReferenceSpot
from goldtrackr.market.fallback import fallback_news
from tests.mocks import MockNewsSource, MockQuoteSource, MockSpotSource, MockSubmitter
from tests.mocks.market import FakeClock


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]
ServerFactory = Callable[[str, Handler], Awaitable[str]]


@pytest_asyncio.fixture
async def http_server() -> AsyncIterator[ServerFactory]:
    """Factory that serves one route on a local port and returns the base URL."""
    servers: list[test_utils.TestServer] = []

    async def start(path: str, handler: Handler) -> str:
        app = web.Application()
        app.router.add_route("*", path, handler)
        server = test_utils.TestServer(app)
        await server.start_server()
        servers.append(server)
        return f"http://{server.host}:{server.port}"

    yield start

    for server in servers:
        await server.close()


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def quote_source(quotes: dict[str, PriceQuote]) -> MockQuoteSource:
    return MockQuoteSource(quotes)


@pytest.fixture
def spot_source(spot: ReferenceSpot) -> MockSpotSource:
    return MockSpotSource(spot)


@pytest.fixture
def news_source() -> MockNewsSource:
    return MockNewsSource(fallback_news()[:2])


@pytest.fixture
def submitters() -> dict[str, MockSubmitter]:
    return {"coinbase": MockSubmitter("coinbase"), "kraken": MockSubmitter("kraken")}


@pytest.fixture
def engine(
    settings: Settings,
    quote_source: MockQuoteSource,
    spot_source: MockSpotSource,
    news_source: MockNewsSource,
    submitters: dict[str, MockSubmitter],
    clock: FakeClock,
) -> DashboardEngine:
    """Engine wired to mock feeds and submitters."""
    return DashboardEngine(
        settings,
        quote_source=quote_source,
        spot_source=spot_source,
        news_source=news_source,
        submitters=submitters,
        clock=clock,
    )


@pytest.fixture
def events(engine: DashboardEngine) -> list[Event[Any]]:
    """Every event the engine publishes, in order."""
    seen: list[Event[Any]] = []

    async def record(event: Event[Any]) -> None:
        seen.append(event)

    engine.event_bus.subscribe_all(record)
    return seen

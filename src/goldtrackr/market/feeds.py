"""
Async HTTP price, spot and news feeds.

Each feed owns one aiohttp session with keep-alive and parses responses
with orjson and the pydantic models in `market.models`. Network, HTTP and
parse failures all surface as FeedError so the engine has one thing to
catch when deciding to fall back.
"""

import logging
import random
from collections.abc import Callable
from typing import Any

import aiohttp
import orjson
from pydantic import ValidationError

from goldtrackr.config.constants import (
    COINGECKO_API_KEY_HEADER,
    COINGECKO_REST_URL,
    DEFAULT_REQUEST_TIMEOUT,
    ENDPOINT_COINS_MARKETS,
    ENDPOINT_METAL_LATEST,
    HOUR_MS,
    METALPRICE_REST_URL,
    SPARKLINE_HOURS,
    SPOT_GOLD_SYMBOL,
    TRACKED_COIN_IDS,
)
from goldtrackr.core.types import (
    GoldTrackrError,
    NewsItem,
    PriceQuote,
    ReferenceSpot,
    SparklinePoint,
)
from goldtrackr.market.fallback import fallback_news, fallback_spot, synthetic_sparkline
from goldtrackr.market.models import CoinGeckoMarket, MetalPriceError, MetalPriceLatest
from goldtrackr.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


class FeedError(GoldTrackrError):
    """Price or news feed could not deliver usable data."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


# =============================================================================
# Response Parsing
# =============================================================================


def parse_markets(
    payload: Any,
    now_ms: int,
    rng: random.Random | None = None,
) -> dict[str, PriceQuote]:
    """
    Convert a /coins/markets payload into quotes.

    Sparkline samples are hourly and end at `now_ms`. A coin without a
    sparkline gets a synthetic 24 hour series so charts and correlations
    always have data.

    Args:
        payload: Decoded JSON body.
        now_ms: Reference time for sparkline timestamps.
        rng: Random source for synthetic sparklines.

    Returns:
        Asset id -> quote.

    Raises:
        FeedError: If the payload is not a list of market entries.
    """
    if not isinstance(payload, list):
        raise FeedError(f"Unexpected markets payload type: {type(payload).__name__}")

    try:
        markets = [CoinGeckoMarket.model_validate(item) for item in payload]
    except ValidationError as e:
        raise FeedError(f"Invalid markets payload: {e.error_count()} errors") from e

    quotes: dict[str, PriceQuote] = {}
    for market in markets:
        prices = market.sparkline_prices
        if prices:
            sparkline = tuple(
                SparklinePoint(time=now_ms - (SPARKLINE_HOURS - i) * HOUR_MS, price=p)
                for i, p in enumerate(prices)
            )
        else:
            sparkline = synthetic_sparkline(market.current_price, now_ms=now_ms, rng=rng)

        quotes[market.id] = PriceQuote(
            id=market.id,
            symbol=market.symbol.upper(),
            name=market.name,
            price=market.current_price,
            change_24h=market.price_change_percentage_24h or 0.0,
            change_7d=market.price_change_percentage_7d or 0.0,
            sparkline=sparkline,
            volume_24h=market.total_volume,
            market_cap=market.market_cap,
        )

    return quotes


def parse_metal_latest(
    payload: Any,
    now_ms: int,
    rng: random.Random | None = None,
) -> ReferenceSpot:
    """
    Convert a metalpriceapi /latest payload (base XAU) into a spot quote.

    The endpoint carries no history, so changes are 0 and the sparkline
    is synthetic.

    Raises:
        FeedError: If the payload reports failure or lacks a USD rate.
    """
    if not isinstance(payload, dict):
        raise FeedError(f"Unexpected metal payload type: {type(payload).__name__}")

    if payload.get("success") is False:
        raise FeedError(f"Metal price API error: {MetalPriceError.model_validate(payload).message}")

    try:
        latest = MetalPriceLatest.model_validate(payload)
    except ValidationError as e:
        raise FeedError(f"Invalid metal payload: {e.error_count()} errors") from e

    price = latest.usd_per_ounce
    if price is None or price <= 0:
        raise FeedError(f"Metal payload has no USD rate for {SPOT_GOLD_SYMBOL}")

    return ReferenceSpot(
        price=price,
        change_24h=0.0,
        change_7d=0.0,
        sparkline=synthetic_sparkline(price, now_ms=now_ms, rng=rng),
    )


# =============================================================================
# HTTP Clients
# =============================================================================


class _HttpFeed:
    """Shared aiohttp session handling for JSON GET endpoints."""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._headers = headers or {}
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=10,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers={"Accept": "application/json", **self._headers},
                timeout=self._timeout,
            )
        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def _get_json(self, endpoint: str, params: dict[str, str] | None = None) -> Any:
        """
        GET an endpoint and decode its JSON body.

        Raises:
            FeedError: On network error, HTTP error status or invalid JSON.
        """
        session = await self._get_session()
        url = f"{self._base_url}{endpoint}"

        try:
            async with session.get(url, params=params) as response:
                status = response.status
                body = await response.read()
        except (aiohttp.ClientError, TimeoutError) as e:
            raise FeedError(f"Network error on {endpoint}: {e!r}") from e

        if status >= 400:
            raise FeedError(
                f"HTTP {status} on {endpoint}: {body[:200].decode(errors='replace')}",
                status=status,
            )

        try:
            return orjson.loads(body)
        except orjson.JSONDecodeError as e:
            raise FeedError(f"Invalid JSON from {endpoint}: {e}") from e

    async def __aenter__(self) -> "_HttpFeed":
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()


class CoinGeckoClient(_HttpFeed):
    """
    CoinGecko market data feed.

    One /coins/markets request returns price, 24h/7d change, volume,
    market cap and the 7 day hourly sparkline for every tracked coin.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        base_url: str = COINGECKO_REST_URL,
        coin_ids: tuple[str, ...] = TRACKED_COIN_IDS,
        clock: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        """
        Initialize the CoinGecko client.

        Args:
            api_key: Optional demo API key, sent as a header.
            timeout: Request timeout in seconds.
            base_url: REST base URL.
            coin_ids: CoinGecko ids to request.
            clock: Epoch-ms time source for sparkline timestamps.
        """
        headers = {COINGECKO_API_KEY_HEADER: api_key} if api_key else None
        super().__init__(base_url, timeout, headers)
        self._coin_ids = coin_ids
        self._clock = clock

    async def fetch_prices(self) -> dict[str, PriceQuote]:
        """
        Fetch quotes for every tracked coin.

        Returns:
            Asset id -> quote. Coins the API did not return are absent.

        Raises:
            FeedError: On any failure.
        """
        params = {
            "vs_currency": "usd",
            "ids": ",".join(self._coin_ids),
            "sparkline": "true",
            "price_change_percentage": "24h,7d",
        }
        payload = await self._get_json(ENDPOINT_COINS_MARKETS, params)
        quotes = parse_markets(payload, self._clock())
        logger.debug(f"CoinGecko returned {len(quotes)} quotes")
        return quotes


class MetalPriceClient(_HttpFeed):
    """
    Spot gold feed backed by metalpriceapi.com.

    Without an API key the static fallback spot is returned and no request
    is made.
    """

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        base_url: str = METALPRICE_REST_URL,
        clock: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        super().__init__(base_url, timeout)
        self._api_key = api_key
        self._clock = clock

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    async def fetch_reference_spot(self) -> ReferenceSpot:
        """
        Fetch spot gold in USD per ounce.

        Raises:
            FeedError: On any failure when an API key is configured.
        """
        if not self._api_key:
            return fallback_spot()

        params = {
            "api_key": self._api_key,
            "base": SPOT_GOLD_SYMBOL,
            "currencies": "USD",
        }
        payload = await self._get_json(ENDPOINT_METAL_LATEST, params)
        return parse_metal_latest(payload, self._clock())


class NewsFeed:
    """
    Gold market headlines.

    Serves the curated static list; no live source is wired up.
    """

    async def fetch_news(self) -> list[NewsItem]:
        """Current headlines, newest first."""
        return fallback_news()

    async def close(self) -> None:
        """Nothing to release."""

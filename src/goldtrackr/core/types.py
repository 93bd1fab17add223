"""
Type definitions for the signal engine.

This module contains the dataclasses, enums and Protocol definitions
shared across the application. Value types are frozen so a snapshot can
be handed to any consumer without copying.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from goldtrackr.config.constants import (
    ASSET_GOLD,
    PERIOD_SAMPLES,
    SPOT_GOLD_NAME,
    SPOT_GOLD_SYMBOL,
    SPOT_GOLD_UNIT,
)


# =============================================================================
# Errors
# =============================================================================


class GoldTrackrError(Exception):
    """Base class for domain errors."""


# =============================================================================
# Enums
# =============================================================================


class OrderSide(str, Enum):
    """Order side enumeration."""

    BUY = "BUY"
    SELL = "SELL"


class CorrelationPeriod(str, Enum):
    """Correlation lookback period."""

    HOUR = "1h"
    DAY = "1d"
    WEEK = "7d"
    MONTH = "30d"

    @property
    def samples(self) -> int:
        """Target number of hourly sparkline samples."""
        return PERIOD_SAMPLES[self.value]


class AlertCategory(str, Enum):
    """Alert log entry category."""

    ARBITRAGE = "arbitrage"
    PRICE = "price"
    INFO = "info"


class SuggestionCategory(str, Enum):
    """Trade suggestion rule family."""

    ARB = "arb"
    PREMIUM = "premium"
    HEDGE = "hedge"


# =============================================================================
# Market Data Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class SparklinePoint:
    """Single historical price sample."""

    time: int  # epoch ms
    price: float


@dataclass(slots=True, frozen=True)
class PriceQuote:
    """
    Latest quote for a tracked asset.

    Replaced wholesale on every refresh, never mutated.
    """

    id: str
    symbol: str
    name: str
    price: float
    change_24h: float
    change_7d: float
    sparkline: tuple[SparklinePoint, ...] = ()
    volume_24h: float | None = None
    market_cap: float | None = None


@dataclass(slots=True, frozen=True)
class ReferenceSpot:
    """Spot gold benchmark, quoted in USD per troy ounce."""

    price: float
    change_24h: float
    change_7d: float
    sparkline: tuple[SparklinePoint, ...] = ()
    unit: str = SPOT_GOLD_UNIT

    @property
    def id(self) -> str:
        return ASSET_GOLD

    @property
    def symbol(self) -> str:
        return SPOT_GOLD_SYMBOL

    @property
    def name(self) -> str:
        return SPOT_GOLD_NAME


@dataclass(slots=True, frozen=True)
class NewsItem:
    """Gold market headline."""

    id: str
    title: str
    url: str
    source: str
    published_at: str  # ISO-8601
    snippet: str | None = None


# =============================================================================
# Signal Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class CorrelationMatrix:
    """
    Pairwise Pearson correlations over a lookback period.

    Symmetric with a unit diagonal; every value lies in [-1, 1].
    """

    period: CorrelationPeriod
    assets: tuple[str, ...]
    matrix: tuple[tuple[float, ...], ...]
    updated_at: int  # epoch ms

    def value(self, row: str, col: str) -> float:
        """Look up a coefficient by asset label."""
        return self.matrix[self.assets.index(row)][self.assets.index(col)]


@dataclass(slots=True)
class AlertItem:
    """Entry in the alert log. Only `dismissed` ever changes."""

    id: str
    message: str
    category: AlertCategory
    timestamp: int  # epoch ms
    spread: float | None = None
    dismissed: bool = False


@dataclass(slots=True, frozen=True)
class TradeSuggestion:
    """
    Explainable trade idea derived from the current snapshot.

    The id is stable per rule and pair so consumers can de-duplicate and
    apply per-suggestion cool-downs across refreshes.
    """

    id: str
    category: SuggestionCategory
    action: str
    size: str
    expected_profit: str
    reason: str
    confidence: int
    product_id: str
    side: OrderSide
    button_text: str
    deep_link: str
    edge_pct: float
    expected_profit_pct: float | None = None


# =============================================================================
# Portfolio Types
# =============================================================================


@dataclass(slots=True, frozen=True)
class PortfolioEntry:
    """User holding. Amount and buy price are always positive."""

    id: str
    asset_id: str
    symbol: str
    name: str
    amount: float
    buy_price: float


@dataclass(slots=True, frozen=True)
class PortfolioPosition:
    """Holding joined against the live snapshot."""

    entry: PortfolioEntry
    current_price: float
    value: float
    cost: float
    pnl: float
    pnl_pct: float
    priced: bool


@dataclass(slots=True, frozen=True)
class PortfolioValuation:
    """Portfolio totals and allocation split."""

    positions: tuple[PortfolioPosition, ...] = ()
    total_value: float = 0.0
    total_cost: float = 0.0
    total_pnl: float = 0.0
    total_pnl_pct: float = 0.0
    gold_allocation_pct: float = 0.0
    crypto_allocation_pct: float = 0.0
    unpriced: tuple[str, ...] = field(default=())


# =============================================================================
# Protocols (Interfaces)
# =============================================================================


class QuoteSource(Protocol):
    """Protocol for crypto price feeds."""

    async def fetch_prices(self) -> dict[str, PriceQuote]:
        """Fetch latest quotes keyed by asset id."""
        ...


class SpotSource(Protocol):
    """Protocol for spot gold feeds."""

    async def fetch_reference_spot(self) -> ReferenceSpot:
        """Fetch the spot gold benchmark."""
        ...


class NewsSource(Protocol):
    """Protocol for headline feeds."""

    async def fetch_news(self) -> list[NewsItem]:
        """Fetch current headlines."""
        ...

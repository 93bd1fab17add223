"""
Pydantic models for price feed responses.

These models provide type-safe parsing of third-party responses with
automatic validation. Fields the feeds may omit or null are optional.
"""

from pydantic import BaseModel, Field


class CoinGeckoSparkline(BaseModel):
    """Seven-day hourly price series."""

    price: list[float] = Field(default_factory=list)


class CoinGeckoMarket(BaseModel):
    """Single entry of the /coins/markets response."""

    id: str
    symbol: str
    name: str
    current_price: float
    price_change_percentage_24h: float | None = None
    price_change_percentage_7d: float | None = Field(
        default=None, alias="price_change_percentage_7d_in_currency"
    )
    sparkline_in_7d: CoinGeckoSparkline | None = None
    total_volume: float | None = None
    market_cap: float | None = None

    model_config = {"populate_by_name": True}

    @property
    def sparkline_prices(self) -> list[float]:
        """Sparkline prices, empty when the feed omitted them."""
        return self.sparkline_in_7d.price if self.sparkline_in_7d else []


class MetalPriceLatest(BaseModel):
    """metalpriceapi.com /latest response."""

    success: bool = True
    base: str = "XAU"
    timestamp: int | None = None
    rates: dict[str, float] = Field(default_factory=dict)

    @property
    def usd_per_ounce(self) -> float | None:
        """USD price of one troy ounce when quoted with base XAU."""
        return self.rates.get("USD")


class MetalPriceError(BaseModel):
    """metalpriceapi.com error body."""

    success: bool = False
    error: dict[str, str | int] = Field(default_factory=dict)

    @property
    def message(self) -> str:
        return str(self.error.get("info") or self.error.get("message") or "unknown error")

"""
Signal and feed constants.

This module contains all hardcoded values used throughout the signal engine.
Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Price Feed Endpoints
# =============================================================================

COINGECKO_REST_URL: Final[str] = "https://api.coingecko.com/api/v3"
ENDPOINT_COINS_MARKETS: Final[str] = "/coins/markets"

METALPRICE_REST_URL: Final[str] = "https://api.metalpriceapi.com/v1"
ENDPOINT_METAL_LATEST: Final[str] = "/latest"

COINGECKO_API_KEY_HEADER: Final[str] = "x-cg-demo-api-key"


# =============================================================================
# Exchange Endpoints
# =============================================================================

KRAKEN_REST_URL: Final[str] = "https://api.kraken.com"
KRAKEN_ENDPOINT_ADD_ORDER: Final[str] = "/0/private/AddOrder"
KRAKEN_ENDPOINT_BALANCE: Final[str] = "/0/private/Balance"

COINBASE_REST_URL: Final[str] = "https://api.coinbase.com"
COINBASE_API_HOST: Final[str] = "api.coinbase.com"
COINBASE_ENDPOINT_ORDERS: Final[str] = "/api/v3/brokerage/orders"
COINBASE_ENDPOINT_ACCOUNTS: Final[str] = "/api/v3/brokerage/accounts"
COINBASE_TRADE_URL: Final[str] = "https://www.coinbase.com/advanced-trade/spot"

# JWT lifetime for Coinbase CDP keys (seconds)
COINBASE_JWT_TTL: Final[int] = 120


# =============================================================================
# Tracked Assets
# =============================================================================

ASSET_GOLD: Final[str] = "gold"
ASSET_PAXG: Final[str] = "pax-gold"
ASSET_XAUT: Final[str] = "tether-gold"
ASSET_BTC: Final[str] = "bitcoin"
ASSET_ETH: Final[str] = "ethereum"
ASSET_BCH: Final[str] = "bitcoin-cash"

# Ids requested from CoinGecko on each refresh
TRACKED_COIN_IDS: Final[tuple[str, ...]] = (
    ASSET_PAXG,
    ASSET_XAUT,
    ASSET_BTC,
    ASSET_ETH,
    ASSET_BCH,
)

# Assets counted as gold exposure in portfolio allocation
GOLD_BACKED_ASSETS: Final[frozenset[str]] = frozenset({ASSET_GOLD, ASSET_PAXG, ASSET_XAUT})

SPOT_GOLD_SYMBOL: Final[str] = "XAU"
SPOT_GOLD_NAME: Final[str] = "Spot Gold"
SPOT_GOLD_UNIT: Final[str] = "USD/oz"


# =============================================================================
# Correlation Engine
# =============================================================================

# Matrix row/column order and display labels
CORRELATION_ASSETS: Final[tuple[str, ...]] = (
    ASSET_GOLD,
    ASSET_PAXG,
    ASSET_XAUT,
    ASSET_BTC,
    ASSET_ETH,
)
CORRELATION_LABELS: Final[tuple[str, ...]] = ("Gold", "PAXG", "XAUT", "BTC", "ETH")

# Hourly sparkline samples per lookback period. The feed only carries seven
# days of hourly data, so 30d reuses the 7d window.
PERIOD_SAMPLES: Final[dict[str, int]] = {
    "1h": 1,
    "1d": 24,
    "7d": 168,
    "30d": 168,
}


# =============================================================================
# Arbitrage Alerts
# =============================================================================

SPREAD_ALERT_THRESHOLD_PCT: Final[float] = 0.5
SPREAD_ALERT_COOLDOWN_MS: Final[int] = 5 * 60 * 1000
PAXG_XAUT_PAIR_KEY: Final[str] = "paxg-xaut"

# Active alerts kept in the log
ALERT_LOG_CAPACITY: Final[int] = 20


# =============================================================================
# Trade Suggestions
# =============================================================================

ARB_SPREAD_THRESHOLD_PCT: Final[float] = 0.55
# Fee + slippage haircut applied to the arb spread estimate
ARB_FEE_HAIRCUT_PCT: Final[float] = 0.45
ARB_CONFIDENCE: Final[int] = 92

PREMIUM_THRESHOLD_PCT: Final[float] = 0.80
PREMIUM_CONFIDENCE: Final[int] = 85

HEDGE_MAGNITUDE_RATIO: Final[float] = 3.0
HEDGE_CONFIDENCE: Final[int] = 75
HEDGE_SIZE_LABEL: Final[str] = "20% of holdings"

# Auto-trade only acts on suggestions at or above this confidence
AUTO_TRADE_MIN_CONFIDENCE: Final[int] = 90
AUTO_TRADE_COOLDOWN_MS: Final[int] = 5 * 60 * 1000


# =============================================================================
# Order Configuration
# =============================================================================

SIDE_BUY: Final[str] = "BUY"
SIDE_SELL: Final[str] = "SELL"

# Product id -> Kraken pair
KRAKEN_PAIRS: Final[dict[str, str]] = {
    "PAXG-USD": "PAXGUSD",
    "XAUT-USD": "XAUTUSD",
    "BTC-USD": "XXBTZUSD",
    "ETH-USD": "XETHZUSD",
    "PAXG-XAUT": "PAXGXAUT",
}

COINBASE_PRODUCTS: Final[frozenset[str]] = frozenset(
    {"PAXG-USD", "XAUT-USD", "BTC-USD", "ETH-USD"}
)


# =============================================================================
# Polling
# =============================================================================

PRICE_REFRESH_INTERVAL: Final[float] = 60.0  # seconds
NEWS_REFRESH_INTERVAL: Final[float] = 300.0  # seconds
DEFAULT_REQUEST_TIMEOUT: Final[float] = 10.0  # seconds

# CoinGecko's 7d sparkline is hourly
SPARKLINE_HOURS: Final[int] = 168
HOUR_MS: Final[int] = 3_600_000


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

MAX_LOG_QUEUE_SIZE: Final[int] = 10_000

# CLI dashboard redraw interval (seconds)
REPORT_INTERVAL: Final[float] = 5.0

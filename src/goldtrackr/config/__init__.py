"""Configuration module for the signal engine."""

from goldtrackr.config.constants import (
    COINGECKO_REST_URL,
    METALPRICE_REST_URL,
    PRICE_REFRESH_INTERVAL,
    SPREAD_ALERT_THRESHOLD_PCT,
    TRACKED_COIN_IDS,
)
from goldtrackr.config.preferences import PreferencesStore, TradingPreferences
from goldtrackr.config.settings import Settings, get_settings


__all__ = [
    "Settings",
    "get_settings",
    "PreferencesStore",
    "TradingPreferences",
    "COINGECKO_REST_URL",
    "METALPRICE_REST_URL",
    "PRICE_REFRESH_INTERVAL",
    "SPREAD_ALERT_THRESHOLD_PCT",
    "TRACKED_COIN_IDS",
]

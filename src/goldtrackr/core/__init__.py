"""Core module containing the event bus, alert log, scheduler and type definitions."""

from goldtrackr.core.alerts import AlertLog
from goldtrackr.core.event_bus import Event, EventBus, EventType
from goldtrackr.core.scheduler import PeriodicTask
from goldtrackr.core.types import (
    AlertCategory,
    AlertItem,
    CorrelationMatrix,
    CorrelationPeriod,
    GoldTrackrError,
    NewsItem,
    OrderSide,
    PriceQuote,
    ReferenceSpot,
    SparklinePoint,
    SuggestionCategory,
    TradeSuggestion,
)


__all__ = [
    "AlertCategory",
    "AlertItem",
    "AlertLog",
    "CorrelationMatrix",
    "CorrelationPeriod",
    "Event",
    "EventBus",
    "EventType",
    "GoldTrackrError",
    "NewsItem",
    "OrderSide",
    "PeriodicTask",
    "PriceQuote",
    "ReferenceSpot",
    "SparklinePoint",
    "SuggestionCategory",
    "TradeSuggestion",
]

"""Mock implementations for testing."""

from tests.mocks.exchange import MockSubmitter
from tests.mocks.feeds import MockNewsSource, MockQuoteSource, MockSpotSource


__all__ = [
    "MockNewsSource",
    "MockQuoteSource",
    "MockSpotSource",
    "MockSubmitter",
]

"""Market data: price feeds, fallback data and the snapshot store."""

from goldtrackr.market.feeds import CoinGeckoClient, FeedError, MetalPriceClient, NewsFeed
from goldtrackr.market.snapshot import PriceSnapshotStore


__all__ = [
    "CoinGeckoClient",
    "FeedError",
    "MetalPriceClient",
    "NewsFeed",
    "PriceSnapshotStore",
]

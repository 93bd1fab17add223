"""
Latest-quote snapshot store.

Holds the most recent quote per tracked asset plus the spot gold
benchmark. Each refresh replaces the quote mapping wholesale, so readers
always see one consistent generation of prices.
"""

from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from goldtrackr.core.types import PriceQuote, ReferenceSpot
from goldtrackr.utils.time import get_timestamp_ms


# Type alias for update callbacks
SnapshotCallback = Callable[["PriceSnapshotStore"], None]


class PriceSnapshotStore:
    """
    Snapshot of the latest market data with O(1) access by asset id.

    Features:
    - Wholesale replacement of quotes on refresh
    - Non-blocking error flag that keeps the last good data visible
    - Callback support for downstream processing
    """

    __slots__ = (
        "_quotes",
        "_spot",
        "_last_updated",
        "_error",
        "_is_stale",
        "_callbacks",
        "_update_count",
        "_clock",
    )

    def __init__(self, clock: Callable[[], int] = get_timestamp_ms) -> None:
        """Initialize empty snapshot."""
        self._quotes: Mapping[str, PriceQuote] = MappingProxyType({})
        self._spot: ReferenceSpot | None = None
        self._last_updated: int | None = None
        self._error: str | None = None
        self._is_stale = False
        self._callbacks: list[SnapshotCallback] = []
        self._update_count = 0
        self._clock = clock

    def register_callback(self, callback: SnapshotCallback) -> None:
        """
        Register a callback fired after every replacement.

        Args:
            callback: Function called with this store.
        """
        self._callbacks.append(callback)

    def unregister_callback(self, callback: SnapshotCallback) -> None:
        """Unregister a callback."""
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _notify(self) -> None:
        self._update_count += 1
        for callback in self._callbacks:
            callback(self)

    def set_quotes(self, quotes: Mapping[str, PriceQuote]) -> None:
        """
        Replace all quotes.

        Clears the error flag and stamps `last_updated`.

        Args:
            quotes: Asset id -> quote.
        """
        self._quotes = MappingProxyType(dict(quotes))
        self._last_updated = self._clock()
        self._error = None
        self._is_stale = False
        self._notify()

    def set_spot(self, spot: ReferenceSpot) -> None:
        """Replace the spot gold benchmark."""
        self._spot = spot
        self._notify()

    def mark_error(self, message: str) -> None:
        """
        Flag the snapshot as stale without touching its data.

        Args:
            message: Human readable reason, shown to consumers.
        """
        self._error = message
        self._is_stale = True

    def get(self, asset_id: str) -> PriceQuote | None:
        """
        Get quote for an asset.

        Args:
            asset_id: Asset id such as "pax-gold".

        Returns:
            Quote or None if not present.
        """
        return self._quotes.get(asset_id)

    def get_many(self, asset_ids: list[str]) -> dict[str, PriceQuote]:
        """Get quotes for the ids that are present."""
        return {a: self._quotes[a] for a in asset_ids if a in self._quotes}

    def has_asset(self, asset_id: str) -> bool:
        """Check if an asset has a quote."""
        return asset_id in self._quotes

    def price_of(self, asset_id: str) -> float | None:
        """
        Current USD price of an asset, spot gold included.

        Args:
            asset_id: Asset id, or "gold" for spot.
        """
        if self._spot is not None and asset_id == self._spot.id:
            return self._spot.price
        quote = self._quotes.get(asset_id)
        return quote.price if quote else None

    @property
    def quotes(self) -> Mapping[str, PriceQuote]:
        """Read-only view of the current quotes."""
        return self._quotes

    @property
    def spot(self) -> ReferenceSpot | None:
        return self._spot

    @property
    def last_updated(self) -> int | None:
        """Epoch ms of the last quote replacement."""
        return self._last_updated

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_stale(self) -> bool:
        return self._is_stale

    @property
    def has_data(self) -> bool:
        """Whether any quote has been stored."""
        return bool(self._quotes)

    @property
    def update_count(self) -> int:
        """Total number of replacements."""
        return self._update_count

    def to_dict(self) -> dict[str, Any]:
        """
        Convert snapshot to a serializable dict.

        Returns:
            Dict with quotes, spot and freshness metadata.
        """
        return {
            "quotes": dict(self._quotes),
            "spot": self._spot,
            "last_updated": self._last_updated,
            "error": self._error,
            "is_stale": self._is_stale,
        }

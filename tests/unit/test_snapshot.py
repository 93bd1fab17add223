"""
Unit tests for the price snapshot store.
"""

import pytest

from goldtrackr.config.constants import ASSET_BTC, ASSET_GOLD, ASSET_PAXG
from goldtrackr.core.types import PriceQuote, ReferenceSpot
from goldtrackr.market.snapshot import PriceSnapshotStore
from tests.mocks.market import NOW_MS, FakeClock, make_quote


class TestPriceSnapshotStore:
    """Tests for PriceSnapshotStore."""

    def test_empty(self, clock: FakeClock) -> None:
        store = PriceSnapshotStore(clock=clock)

        assert store.has_data is False
        assert store.last_updated is None
        assert store.spot is None
        assert store.get(ASSET_PAXG) is None
        assert store.is_stale is False

    def test_set_quotes(self, snapshot: PriceSnapshotStore, clock: FakeClock) -> None:
        assert snapshot.has_data is True
        assert snapshot.last_updated == NOW_MS
        assert snapshot.get(ASSET_PAXG).price == 3300.0
        assert snapshot.has_asset(ASSET_BTC)

    def test_replacement_is_wholesale(self, snapshot: PriceSnapshotStore) -> None:
        snapshot.set_quotes({ASSET_BTC: make_quote(ASSET_BTC, "BTC", 90000.0)})

        assert snapshot.get(ASSET_PAXG) is None
        assert list(snapshot.quotes) == [ASSET_BTC]

    def test_quotes_view_is_read_only(self, snapshot: PriceSnapshotStore) -> None:
        view = snapshot.quotes
        with pytest.raises(TypeError):
            view[ASSET_PAXG] = make_quote(ASSET_PAXG, "PAXG", 1.0)  # type: ignore[index]
        assert snapshot.get(ASSET_PAXG).price == 3300.0

    def test_mark_error_keeps_data(
        self, snapshot: PriceSnapshotStore, clock: FakeClock
    ) -> None:
        clock.advance(60_000)
        snapshot.mark_error("CoinGecko unavailable")

        assert snapshot.is_stale is True
        assert snapshot.error == "CoinGecko unavailable"
        assert snapshot.get(ASSET_PAXG).price == 3300.0
        assert snapshot.last_updated == NOW_MS

    def test_set_quotes_clears_error(
        self, snapshot: PriceSnapshotStore, quotes: dict[str, PriceQuote], clock: FakeClock
    ) -> None:
        snapshot.mark_error("boom")
        clock.advance(60_000)
        snapshot.set_quotes(quotes)

        assert snapshot.error is None
        assert snapshot.is_stale is False
        assert snapshot.last_updated == NOW_MS + 60_000

    def test_price_of(self, snapshot: PriceSnapshotStore, spot: ReferenceSpot) -> None:
        assert snapshot.price_of(ASSET_GOLD) == spot.price
        assert snapshot.price_of(ASSET_BTC) == 97000.0
        assert snapshot.price_of("dogecoin") is None

    def test_get_many(self, snapshot: PriceSnapshotStore) -> None:
        found = snapshot.get_many([ASSET_PAXG, "dogecoin"])
        assert list(found) == [ASSET_PAXG]

    def test_callbacks(self, clock: FakeClock) -> None:
        store = PriceSnapshotStore(clock=clock)
        seen: list[int] = []

        def callback(s: PriceSnapshotStore) -> None:
            seen.append(s.update_count)

        store.register_callback(callback)
        store.set_quotes({})
        store.set_spot(ReferenceSpot(price=3300.0, change_24h=0.0, change_7d=0.0))
        store.unregister_callback(callback)
        store.set_quotes({})

        assert seen == [1, 2]
        assert store.update_count == 3

    def test_to_dict(self, snapshot: PriceSnapshotStore, spot: ReferenceSpot) -> None:
        snapshot.mark_error("stale")
        data = snapshot.to_dict()

        assert set(data) == {"quotes", "spot", "last_updated", "error", "is_stale"}
        assert data["spot"] is spot
        assert data["is_stale"] is True
        assert data["quotes"][ASSET_PAXG].symbol == "PAXG"

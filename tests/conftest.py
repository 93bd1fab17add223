"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

import random
from pathlib import Path

import pytest

from goldtrackr.config.constants import ASSET_BCH, ASSET_BTC, ASSET_ETH, ASSET_PAXG, ASSET_XAUT
from goldtrackr.config.settings import Settings
from goldtrackr.core.alerts import AlertLog
from goldtrackr.core.types import PriceQuote, ReferenceSpot
from goldtrackr.market.snapshot import PriceSnapshotStore
from goldtrackr.storage.state import JsonStateStore
from tests.mocks.market import FakeClock, make_quote, make_sparkline


# =============================================================================
# Clock
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    """Clock frozen at 2025-01-01 until advanced."""
    return FakeClock()


# =============================================================================
# Quote Fixtures
# =============================================================================


@pytest.fixture
def quotes() -> dict[str, PriceQuote]:
    """Quiet market: tight PAXG/XAUT spread, no divergence."""
    rng = random.Random(7)

    def series(base: float) -> list[float]:
        return [base * (1 + (rng.random() - 0.5) * 0.01) for _ in range(168)]

    return {
        ASSET_PAXG: make_quote(ASSET_PAXG, "PAXG", 3300.0, 0.1, 1.0, series(3300.0)),
        ASSET_XAUT: make_quote(ASSET_XAUT, "XAUT", 3302.0, 0.1, 1.1, series(3302.0)),
        ASSET_BTC: make_quote(ASSET_BTC, "BTC", 97000.0, 0.2, 4.0, series(97000.0)),
        ASSET_ETH: make_quote(ASSET_ETH, "ETH", 3800.0, 0.3, 2.0, series(3800.0)),
        ASSET_BCH: make_quote(ASSET_BCH, "BCH", 500.0, 0.1, 1.0, series(500.0)),
    }


@pytest.fixture
def spot() -> ReferenceSpot:
    """Spot gold at $3,300/oz, up slightly."""
    return ReferenceSpot(
        price=3300.0,
        change_24h=0.2,
        change_7d=1.0,
        sparkline=make_sparkline([3300.0 + i for i in range(24)]),
    )


@pytest.fixture
def snapshot(
    clock: FakeClock,
    quotes: dict[str, PriceQuote],
    spot: ReferenceSpot,
) -> PriceSnapshotStore:
    """Snapshot holding the quiet market."""
    store = PriceSnapshotStore(clock=clock)
    store.set_quotes(quotes)
    store.set_spot(spot)
    return store


# =============================================================================
# State Fixtures
# =============================================================================


@pytest.fixture
def alert_log(clock: FakeClock) -> AlertLog:
    """Alert log with sequential ids."""
    counter = iter(range(1, 10_000))
    return AlertLog(capacity=20, clock=clock, id_factory=lambda ts: f"alert-{next(counter)}")


@pytest.fixture
def state_file(tmp_path: Path) -> Path:
    """Path of a not-yet-existing state file."""
    return tmp_path / "state" / "settings.json"


@pytest.fixture
def state_store(state_file: Path) -> JsonStateStore:
    """Empty JSON state store in a temp directory."""
    return JsonStateStore(state_file)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment and the working directory."""
    return Settings(
        _env_file=None,
        state_dir=tmp_path / "goldtrackr",
        coingecko_api_key=None,
        metalprice_api_key=None,
        kraken_api_key=None,
        kraken_api_secret=None,
        coinbase_key_name=None,
        coinbase_private_key=None,
        use_uvloop=False,
    )

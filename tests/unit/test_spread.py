"""
Unit tests for spread detection and the cool-down gate.
"""

import pytest

from goldtrackr.config.constants import (
    ASSET_BTC,
    ASSET_PAXG,
    ASSET_XAUT,
    PAXG_XAUT_PAIR_KEY,
    SPREAD_ALERT_COOLDOWN_MS,
)
from goldtrackr.core.alerts import AlertLog
from goldtrackr.core.types import AlertCategory
from goldtrackr.strategy.spread import Cooldown, SpreadDetector, compute_spread
from tests.mocks.market import FakeClock, make_quote


def pair(paxg_price: float, xaut_price: float) -> dict:
    return {
        ASSET_PAXG: make_quote(ASSET_PAXG, "PAXG", paxg_price),
        ASSET_XAUT: make_quote(ASSET_XAUT, "XAUT", xaut_price),
    }


class TestComputeSpread:
    """Tests for compute_spread."""

    def test_positive(self) -> None:
        assert compute_spread(100.0, 101.0) == pytest.approx(1.0)

    def test_negative(self) -> None:
        assert compute_spread(3300.0, 3280.0) == pytest.approx(-0.60606, rel=1e-4)

    def test_zero_base(self) -> None:
        assert compute_spread(0.0, 100.0) == 0.0

    def test_reference_values(self) -> None:
        assert compute_spread(100.0, 100.5) == pytest.approx(0.5)
        assert compute_spread(100.0, 99.0) == pytest.approx(-1.0)
        assert compute_spread(0.0, 50.0) == 0.0


class TestCooldown:
    """Tests for the keyed cool-down."""

    def test_unknown_key_ready(self, clock: FakeClock) -> None:
        cooldown = Cooldown(1000, clock=clock)
        assert cooldown.is_ready("a")
        assert cooldown.remaining_ms("a") == 0

    def test_window_boundary(self, clock: FakeClock) -> None:
        """Ready again only once more than the window has elapsed."""
        cooldown = Cooldown(1000, clock=clock)
        assert cooldown.try_acquire("a")

        clock.advance(999)
        assert not cooldown.try_acquire("a")
        assert cooldown.remaining_ms("a") == 2

        clock.advance(1)
        assert not cooldown.try_acquire("a")
        assert cooldown.remaining_ms("a") == 1

        clock.advance(1)
        assert cooldown.remaining_ms("a") == 0
        assert cooldown.try_acquire("a")

    def test_keys_independent(self, clock: FakeClock) -> None:
        cooldown = Cooldown(1000, clock=clock)
        cooldown.mark("a")
        assert not cooldown.is_ready("a")
        assert cooldown.is_ready("b")

    def test_reset(self, clock: FakeClock) -> None:
        cooldown = Cooldown(1000, clock=clock)
        cooldown.mark("a")
        cooldown.mark("b")

        cooldown.reset("a")
        assert cooldown.is_ready("a")
        assert not cooldown.is_ready("b")

        cooldown.reset()
        assert cooldown.is_ready("b")

    def test_negative_window_rejected(self) -> None:
        with pytest.raises(ValueError):
            Cooldown(-1)


class TestSpreadDetector:
    """Tests for SpreadDetector."""

    @pytest.fixture
    def detector(self, alert_log: AlertLog, clock: FakeClock) -> SpreadDetector:
        return SpreadDetector(
            alert_log, threshold_pct=0.5, cooldown=Cooldown(SPREAD_ALERT_COOLDOWN_MS, clock)
        )

    def test_alert_when_xaut_cheaper(self, detector: SpreadDetector, alert_log: AlertLog) -> None:
        alert = detector.observe(pair(3300.0, 3280.0))

        assert alert is not None
        assert alert.message == "XAUT is 0.61% cheaper than PAXG - potential swap signal!"
        assert alert.category is AlertCategory.ARBITRAGE
        assert alert.spread == pytest.approx(0.60606, rel=1e-4)
        assert alert_log.active == [alert]

    def test_alert_when_paxg_cheaper(self, detector: SpreadDetector) -> None:
        alert = detector.observe(pair(3280.0, 3300.0))

        assert alert is not None
        assert alert.message.startswith("PAXG is 0.61% cheaper than XAUT")

    def test_no_alert_within_threshold(
        self, detector: SpreadDetector, alert_log: AlertLog
    ) -> None:
        assert detector.observe(pair(1000.0, 1004.0)) is None
        assert detector.last_spread == pytest.approx(0.4)
        assert len(alert_log) == 0
        # Quiet observations leave the cool-down untouched
        assert detector.cooldown.is_ready(PAXG_XAUT_PAIR_KEY)

    def test_one_alert_per_window(
        self, detector: SpreadDetector, alert_log: AlertLog, clock: FakeClock
    ) -> None:
        """Repeated observations inside the window raise once."""
        quotes = pair(3300.0, 3280.0)

        assert detector.observe(quotes) is not None
        for _ in range(5):
            clock.advance(60_000)
            assert detector.observe(quotes) is None

        assert len(alert_log.active) == 1
        assert detector.alerts_raised == 1

    def test_alerts_again_after_window(
        self, detector: SpreadDetector, alert_log: AlertLog, clock: FakeClock
    ) -> None:
        quotes = pair(3300.0, 3280.0)

        detector.observe(quotes)
        clock.advance(SPREAD_ALERT_COOLDOWN_MS)
        assert detector.observe(quotes) is None

        clock.advance(1)
        assert detector.observe(quotes) is not None
        assert len(alert_log.active) == 2

    def test_missing_quote_skips_everything(
        self, detector: SpreadDetector, alert_log: AlertLog
    ) -> None:
        quotes = {ASSET_PAXG: make_quote(ASSET_PAXG, "PAXG", 3300.0)}

        assert detector.observe(quotes) is None
        assert detector.last_spread is None
        assert detector.cooldown.is_ready(PAXG_XAUT_PAIR_KEY)
        assert len(alert_log) == 0

    def test_other_assets_ignored(self, detector: SpreadDetector) -> None:
        quotes = pair(3300.0, 3301.0)
        quotes[ASSET_BTC] = make_quote(ASSET_BTC, "BTC", 50000.0, change_24h=-20.0)

        assert detector.observe(quotes) is None

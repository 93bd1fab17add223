"""
Unit tests for the trade suggestion rules.
"""

import pytest

from goldtrackr.config.constants import ASSET_BTC, ASSET_ETH, ASSET_PAXG, ASSET_XAUT
from goldtrackr.core.types import OrderSide, ReferenceSpot, SuggestionCategory
from goldtrackr.strategy.suggestions import (
    arbitrage_suggestion,
    generate_suggestions,
    hedge_suggestion,
    pick_auto_trade_candidate,
    premium_suggestion,
    trade_link,
)
from tests.mocks.market import make_quote


def gold_spot(price: float = 3300.0, change_24h: float = 0.5) -> ReferenceSpot:
    return ReferenceSpot(price=price, change_24h=change_24h, change_7d=0.0)


class TestArbitrageRule:
    """Tests for the PAXG/XAUT arbitrage rule."""

    def test_paxg_expensive(self) -> None:
        """PAXG 1% over XAUT: sell PAXG, buy XAUT."""
        paxg = make_quote(ASSET_PAXG, "PAXG", 3333.0)
        xaut = make_quote(ASSET_XAUT, "XAUT", 3300.0)

        s = arbitrage_suggestion(paxg, xaut, 0.5)

        assert s is not None
        assert s.id == "arb-paxg-xaut"
        assert s.category is SuggestionCategory.ARB
        assert s.action == "SELL PAXG • BUY XAUT"
        assert s.side is OrderSide.SELL
        assert s.edge_pct == pytest.approx(1.0)
        assert s.expected_profit_pct == pytest.approx(0.55)
        assert s.expected_profit == "0.55% (est. spread 1.00%)"
        assert s.size == "0.5 oz equiv"
        assert s.confidence == 92
        assert s.product_id == "PAXG-USD"
        assert s.button_text == "Execute Swap"
        assert s.deep_link == trade_link("PAXG-USD")

    def test_paxg_cheap(self) -> None:
        paxg = make_quote(ASSET_PAXG, "PAXG", 3267.0)
        xaut = make_quote(ASSET_XAUT, "XAUT", 3300.0)

        s = arbitrage_suggestion(paxg, xaut, 1.0)

        assert s is not None
        assert s.action == "BUY PAXG • SELL XAUT"
        assert s.side is OrderSide.BUY
        assert s.reason == "PAXG is 1.00% cheaper than XAUT."

    def test_paxg_over_xaut_reference_prices(self) -> None:
        """PAXG 3300 / XAUT 3266: about 1.04% spread, 0.59% after fees."""
        paxg = make_quote(ASSET_PAXG, "PAXG", 3300.0)
        xaut = make_quote(ASSET_XAUT, "XAUT", 3266.0)

        s = arbitrage_suggestion(paxg, xaut, 1.0)

        assert s is not None
        assert s.side is OrderSide.SELL
        assert s.action == "SELL PAXG • BUY XAUT"
        assert s.confidence == 92
        assert s.edge_pct == pytest.approx(1.041, abs=1e-3)
        assert s.expected_profit_pct == pytest.approx(0.59, abs=5e-3)

    def test_below_threshold(self) -> None:
        """0.5% does not clear the 0.55% threshold."""
        paxg = make_quote(ASSET_PAXG, "PAXG", 3316.5)
        xaut = make_quote(ASSET_XAUT, "XAUT", 3300.0)
        assert arbitrage_suggestion(paxg, xaut, 0.5) is None


class TestPremiumRule:
    """Tests for the premium/discount rule."""

    def test_premium_sells(self) -> None:
        token = make_quote(ASSET_PAXG, "PAXG", 3333.0)

        s = premium_suggestion(token, gold_spot(3300.0), 0.25)

        assert s is not None
        assert s.id == "premium-pax-gold"
        assert s.action == "SELL PAXG (Premium)"
        assert s.side is OrderSide.SELL
        assert s.size == "0.25 oz"
        assert s.confidence == 85
        assert s.button_text == "Go to Trade"
        assert s.expected_profit == "1.00% deviation"

    def test_discount_buys(self) -> None:
        token = make_quote(ASSET_XAUT, "XAUT", 3267.0)

        s = premium_suggestion(token, gold_spot(3300.0), 0.5)

        assert s is not None
        assert s.action == "BUY XAUT (Discount)"
        assert s.side is OrderSide.BUY
        assert s.product_id == "XAUT-USD"
        assert "discount" in s.reason

    def test_small_discount_to_spot_ignored(self) -> None:
        """PAXG 3280 against spot 3290 is about -0.30%, inside the band."""
        token = make_quote(ASSET_PAXG, "PAXG", 3280.0)
        assert premium_suggestion(token, gold_spot(3290.0), 1.0) is None

    def test_within_band(self) -> None:
        token = make_quote(ASSET_PAXG, "PAXG", 3320.0)
        assert premium_suggestion(token, gold_spot(3300.0), 0.5) is None


class TestHedgeRule:
    """Tests for the BTC/gold divergence rule."""

    def test_btc_crash_rotates_to_gold(self) -> None:
        btc = make_quote(ASSET_BTC, "BTC", 90000.0, change_24h=-5.0)

        s = hedge_suggestion(btc, gold_spot(change_24h=1.0))

        assert s is not None
        assert s.id == "hedge-btc-gold"
        assert s.category is SuggestionCategory.HEDGE
        assert s.action == "Rotate BTC → PAXG (Safety)"
        assert s.side is OrderSide.SELL
        assert s.size == "20% of holdings"
        assert s.confidence == 75
        assert s.button_text == "Rebalance"
        assert s.deep_link == trade_link("PAXG-BTC")
        assert s.edge_pct == pytest.approx(5.0)

    def test_btc_rally_rotates_to_crypto(self) -> None:
        btc = make_quote(ASSET_BTC, "BTC", 99000.0, change_24h=4.0)

        s = hedge_suggestion(btc, gold_spot(change_24h=-1.0))

        assert s is not None
        assert s.action == "Rotate PAXG → BTC (Growth)"
        assert s.side is OrderSide.BUY
        assert s.deep_link == trade_link("BTC-USD")

    def test_same_direction_no_hedge(self) -> None:
        btc = make_quote(ASSET_BTC, "BTC", 90000.0, change_24h=-10.0)
        assert hedge_suggestion(btc, gold_spot(change_24h=-1.0)) is None

    def test_magnitude_not_enough(self) -> None:
        """Exactly three times the gold move does not fire."""
        btc = make_quote(ASSET_BTC, "BTC", 90000.0, change_24h=-3.0)
        assert hedge_suggestion(btc, gold_spot(change_24h=1.0)) is None

    def test_flat_gold_no_hedge(self) -> None:
        """Zero gold change has no sign to oppose."""
        btc = make_quote(ASSET_BTC, "BTC", 90000.0, change_24h=-8.0)
        assert hedge_suggestion(btc, gold_spot(change_24h=0.0)) is None


class TestGenerateSuggestions:
    """Tests for generate_suggestions."""

    def test_rule_order(self) -> None:
        quotes = {
            ASSET_PAXG: make_quote(ASSET_PAXG, "PAXG", 3366.0),
            ASSET_XAUT: make_quote(ASSET_XAUT, "XAUT", 3300.0),
            ASSET_BTC: make_quote(ASSET_BTC, "BTC", 90000.0, change_24h=-6.0),
        }

        ids = [s.id for s in generate_suggestions(quotes, gold_spot(3300.0, 1.0), 0.5)]

        assert ids == ["arb-paxg-xaut", "premium-pax-gold", "hedge-btc-gold"]

    def test_quiet_market_empty(self, quotes: dict, spot: ReferenceSpot) -> None:
        assert generate_suggestions(quotes, spot, 0.5) == ()

    def test_missing_spot_skips_spot_rules(self) -> None:
        quotes = {
            ASSET_PAXG: make_quote(ASSET_PAXG, "PAXG", 3366.0),
            ASSET_XAUT: make_quote(ASSET_XAUT, "XAUT", 3300.0),
            ASSET_BTC: make_quote(ASSET_BTC, "BTC", 90000.0, change_24h=-6.0),
        }

        ids = [s.id for s in generate_suggestions(quotes, None, 0.5)]

        assert ids == ["arb-paxg-xaut"]

    def test_missing_xaut_skips_arb_only(self) -> None:
        quotes = {
            ASSET_PAXG: make_quote(ASSET_PAXG, "PAXG", 3366.0),
            ASSET_ETH: make_quote(ASSET_ETH, "ETH", 3800.0),
        }

        ids = [s.id for s in generate_suggestions(quotes, gold_spot(3300.0), 0.5)]

        assert ids == ["premium-pax-gold"]

    def test_empty_snapshot(self) -> None:
        assert generate_suggestions({}, None, 0.5) == ()


class TestAutoTradeCandidate:
    """Tests for pick_auto_trade_candidate."""

    def test_picks_highest_confidence_eligible(self) -> None:
        quotes = {
            ASSET_PAXG: make_quote(ASSET_PAXG, "PAXG", 3366.0),
            ASSET_XAUT: make_quote(ASSET_XAUT, "XAUT", 3300.0),
        }
        suggestions = generate_suggestions(quotes, gold_spot(3300.0), 0.5)

        candidate = pick_auto_trade_candidate(suggestions)

        assert candidate is not None
        assert candidate.id == "arb-paxg-xaut"

    def test_nothing_above_threshold(self) -> None:
        btc = make_quote(ASSET_BTC, "BTC", 90000.0, change_24h=-6.0)
        hedge = hedge_suggestion(btc, gold_spot(change_24h=1.0))
        assert hedge is not None

        assert pick_auto_trade_candidate([hedge]) is None
        assert pick_auto_trade_candidate([]) is None

"""
Trade suggestion rules.

Three independent rules run against the current snapshot, in order:

1. Arbitrage: PAXG vs XAUT spread beyond the fee haircut.
2. Premium/discount: each gold token vs spot gold.
3. Hedge: BTC and gold moving in opposite directions, BTC much harder.

A rule whose inputs are missing is skipped; the others still run.
"""

import logging
from collections.abc import Mapping, Sequence

from goldtrackr.config.constants import (
    ARB_CONFIDENCE,
    ARB_FEE_HAIRCUT_PCT,
    ARB_SPREAD_THRESHOLD_PCT,
    ASSET_BTC,
    ASSET_PAXG,
    ASSET_XAUT,
    AUTO_TRADE_MIN_CONFIDENCE,
    COINBASE_TRADE_URL,
    HEDGE_CONFIDENCE,
    HEDGE_MAGNITUDE_RATIO,
    HEDGE_SIZE_LABEL,
    PREMIUM_CONFIDENCE,
    PREMIUM_THRESHOLD_PCT,
)
from goldtrackr.core.types import (
    OrderSide,
    PriceQuote,
    ReferenceSpot,
    SuggestionCategory,
    TradeSuggestion,
)
from goldtrackr.utils.math import percent_change


logger = logging.getLogger(__name__)


def trade_link(product_id: str) -> str:
    """Exchange deep link for a product."""
    return f"{COINBASE_TRADE_URL}/{product_id}"


def _format_size(max_trade_size: float) -> str:
    return f"{max_trade_size:g}"


def arbitrage_suggestion(
    paxg: PriceQuote,
    xaut: PriceQuote,
    max_trade_size: float,
) -> TradeSuggestion | None:
    """
    PAXG/XAUT swap when the spread clears fees and slippage.

    Spread is PAXG relative to XAUT; positive means PAXG is pricier.
    """
    spread = percent_change(xaut.price, paxg.price)
    abs_spread = abs(spread)
    if abs_spread <= ARB_SPREAD_THRESHOLD_PCT:
        return None

    paxg_expensive = spread > 0
    profit_pct = abs_spread - ARB_FEE_HAIRCUT_PCT
    product_id = f"{paxg.symbol}-USD"

    return TradeSuggestion(
        id="arb-paxg-xaut",
        category=SuggestionCategory.ARB,
        action="SELL PAXG • BUY XAUT" if paxg_expensive else "BUY PAXG • SELL XAUT",
        size=f"{_format_size(max_trade_size)} oz equiv",
        expected_profit=f"{profit_pct:.2f}% (est. spread {abs_spread:.2f}%)",
        reason=(
            f"PAXG is {spread:.2f}% more expensive than XAUT."
            if paxg_expensive
            else f"PAXG is {abs_spread:.2f}% cheaper than XAUT."
        ),
        confidence=ARB_CONFIDENCE,
        product_id=product_id,
        side=OrderSide.SELL if paxg_expensive else OrderSide.BUY,
        button_text="Execute Swap",
        deep_link=trade_link(product_id),
        edge_pct=abs_spread,
        expected_profit_pct=profit_pct,
    )


def premium_suggestion(
    token: PriceQuote,
    spot: ReferenceSpot,
    max_trade_size: float,
) -> TradeSuggestion | None:
    """Sell a gold token at a premium to spot, buy it at a discount."""
    premium = percent_change(spot.price, token.price)
    abs_premium = abs(premium)
    if abs_premium <= PREMIUM_THRESHOLD_PCT:
        return None

    is_premium = premium > 0
    product_id = f"{token.symbol}-USD"

    return TradeSuggestion(
        id=f"premium-{token.id}",
        category=SuggestionCategory.PREMIUM,
        action=(
            f"SELL {token.symbol} (Premium)" if is_premium else f"BUY {token.symbol} (Discount)"
        ),
        size=f"{_format_size(max_trade_size)} oz",
        expected_profit=f"{abs_premium:.2f}% deviation",
        reason=(
            f"{token.symbol} is trading at a {premium:.2f}% "
            f"{'premium' if is_premium else 'discount'} to spot gold."
        ),
        confidence=PREMIUM_CONFIDENCE,
        product_id=product_id,
        side=OrderSide.SELL if is_premium else OrderSide.BUY,
        button_text="Go to Trade",
        deep_link=trade_link(product_id),
        edge_pct=abs_premium,
        expected_profit_pct=abs_premium,
    )


def hedge_suggestion(btc: PriceQuote, spot: ReferenceSpot) -> TradeSuggestion | None:
    """
    Rotate between BTC and gold on a sharp divergence.

    Fires when the 24h moves have strictly opposite signs and BTC moved
    more than three times as much as gold.
    """
    btc_change = btc.change_24h
    gold_change = spot.change_24h

    opposite = (btc_change > 0 > gold_change) or (btc_change < 0 < gold_change)
    if not opposite:
        return None
    if abs(btc_change) <= HEDGE_MAGNITUDE_RATIO * abs(gold_change):
        return None

    btc_down = btc_change < 0
    product_id = f"{btc.symbol}-USD"

    return TradeSuggestion(
        id="hedge-btc-gold",
        category=SuggestionCategory.HEDGE,
        action="Rotate BTC → PAXG (Safety)" if btc_down else "Rotate PAXG → BTC (Growth)",
        size=HEDGE_SIZE_LABEL,
        expected_profit="Risk Management",
        reason=(
            f"BTC dropped {btc_change:.1f}% while Gold held up. Good time to hedge."
            if btc_down
            else f"BTC rallying {btc_change:.1f}% vs Gold. Consider taking profits into crypto."
        ),
        confidence=HEDGE_CONFIDENCE,
        product_id=product_id,
        side=OrderSide.SELL if btc_down else OrderSide.BUY,
        button_text="Rebalance",
        deep_link=trade_link("PAXG-BTC" if btc_down else product_id),
        edge_pct=abs(btc_change),
    )


def generate_suggestions(
    quotes: Mapping[str, PriceQuote],
    spot: ReferenceSpot | None,
    max_trade_size: float,
) -> tuple[TradeSuggestion, ...]:
    """
    Run every rule against the snapshot.

    Args:
        quotes: Current quotes keyed by asset id.
        spot: Spot gold benchmark, or None if unknown.
        max_trade_size: Configured order size in ounces.

    Returns:
        Suggestions in rule order: arbitrage, PAXG premium, XAUT premium,
        hedge.
    """
    paxg = quotes.get(ASSET_PAXG)
    xaut = quotes.get(ASSET_XAUT)
    btc = quotes.get(ASSET_BTC)

    found: list[TradeSuggestion | None] = []

    if paxg is not None and xaut is not None:
        found.append(arbitrage_suggestion(paxg, xaut, max_trade_size))

    if spot is not None:
        for token in (paxg, xaut):
            if token is not None:
                found.append(premium_suggestion(token, spot, max_trade_size))
        if btc is not None:
            found.append(hedge_suggestion(btc, spot))

    suggestions = tuple(s for s in found if s is not None)
    if suggestions:
        logger.debug(f"Suggestions: {', '.join(s.id for s in suggestions)}")
    return suggestions


def pick_auto_trade_candidate(
    suggestions: Sequence[TradeSuggestion],
    min_confidence: int = AUTO_TRADE_MIN_CONFIDENCE,
) -> TradeSuggestion | None:
    """
    Highest-confidence suggestion eligible for automatic execution.

    Ties keep rule order.
    """
    eligible = [s for s in suggestions if s.confidence >= min_confidence]
    if not eligible:
        return None
    return max(eligible, key=lambda s: s.confidence)

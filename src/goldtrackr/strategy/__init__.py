"""Signal strategies: correlation, spread detection and trade suggestions."""

from goldtrackr.strategy.correlation import (
    compute_correlation_matrix,
    pearson_correlation,
    sparkline_prices,
)
from goldtrackr.strategy.spread import Cooldown, SpreadDetector, compute_spread
from goldtrackr.strategy.suggestions import generate_suggestions, pick_auto_trade_candidate


__all__ = [
    "Cooldown",
    "SpreadDetector",
    "compute_correlation_matrix",
    "compute_spread",
    "generate_suggestions",
    "pearson_correlation",
    "pick_auto_trade_candidate",
    "sparkline_prices",
]

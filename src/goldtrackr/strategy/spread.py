"""
PAXG/XAUT spread detection with a per-pair cool-down.

The detector raises at most one arbitrage alert per pair per cool-down
window, however many refresh cycles observe the spread, and raises again
once the window has passed if the spread is still out of range.
"""

import logging
from collections.abc import Callable, Mapping

from goldtrackr.config.constants import (
    ASSET_PAXG,
    ASSET_XAUT,
    PAXG_XAUT_PAIR_KEY,
    SPREAD_ALERT_COOLDOWN_MS,
    SPREAD_ALERT_THRESHOLD_PCT,
)
from goldtrackr.core.alerts import AlertLog
from goldtrackr.core.types import AlertCategory, AlertItem, PriceQuote
from goldtrackr.utils.time import get_timestamp_ms


logger = logging.getLogger(__name__)


def compute_spread(price_a: float, price_b: float) -> float:
    """
    Percentage spread of B relative to A.

    Returns 0 when A is 0.

    Example:
        >>> compute_spread(100.0, 101.0)
        1.0
    """
    if price_a == 0:
        return 0.0
    return (price_b - price_a) / price_a * 100.0


class Cooldown:
    """
    Keyed last-fire timestamps.

    A key that has never fired is ready immediately; afterwards it is
    ready again once more than `window_ms` has elapsed.
    """

    __slots__ = ("_window_ms", "_clock", "_last_fired")

    def __init__(
        self,
        window_ms: int,
        clock: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        """
        Initialize cool-down tracker.

        Args:
            window_ms: Quiet period after each fire of a key.
            clock: Epoch-ms time source.
        """
        if window_ms < 0:
            raise ValueError("window_ms must be non-negative")
        self._window_ms = window_ms
        self._clock = clock
        self._last_fired: dict[str, int] = {}

    def is_ready(self, key: str) -> bool:
        """Check whether `key` may fire now."""
        last = self._last_fired.get(key)
        if last is None:
            return True
        return self._clock() - last > self._window_ms

    def mark(self, key: str) -> None:
        """Record that `key` fired now."""
        self._last_fired[key] = self._clock()

    def try_acquire(self, key: str) -> bool:
        """
        Fire `key` if it is ready.

        Returns:
            True if the key was ready and is now marked.
        """
        if not self.is_ready(key):
            return False
        self.mark(key)
        return True

    def remaining_ms(self, key: str) -> int:
        """Milliseconds until `key` is ready again (0 if ready)."""
        last = self._last_fired.get(key)
        if last is None:
            return 0
        return max(0, self._window_ms - (self._clock() - last) + 1)

    def reset(self, key: str | None = None) -> None:
        """Forget one key, or every key."""
        if key is None:
            self._last_fired.clear()
        else:
            self._last_fired.pop(key, None)

    @property
    def window_ms(self) -> int:
        return self._window_ms


class SpreadDetector:
    """
    Watches the PAXG/XAUT spread and writes arbitrage alerts.

    Spread is XAUT relative to PAXG: negative means XAUT is cheaper.
    """

    def __init__(
        self,
        alerts: AlertLog,
        threshold_pct: float = SPREAD_ALERT_THRESHOLD_PCT,
        cooldown: Cooldown | None = None,
    ) -> None:
        """
        Initialize detector.

        Args:
            alerts: Log that receives raised alerts.
            threshold_pct: Absolute spread that must be exceeded.
            cooldown: Per-pair cool-down; defaults to 5 minutes.
        """
        self._alerts = alerts
        self._threshold_pct = threshold_pct
        self._cooldown = cooldown or Cooldown(SPREAD_ALERT_COOLDOWN_MS)
        self._last_spread: float | None = None
        self._alerts_raised = 0

    def observe(self, quotes: Mapping[str, PriceQuote]) -> AlertItem | None:
        """
        Evaluate the current quotes.

        Does nothing, cool-down included, when either quote is missing.

        Args:
            quotes: Current quotes keyed by asset id.

        Returns:
            The raised alert, or None.
        """
        paxg = quotes.get(ASSET_PAXG)
        xaut = quotes.get(ASSET_XAUT)
        if paxg is None or xaut is None:
            return None

        spread = compute_spread(paxg.price, xaut.price)
        self._last_spread = spread
        abs_spread = abs(spread)

        if abs_spread <= self._threshold_pct:
            return None

        if not self._cooldown.try_acquire(PAXG_XAUT_PAIR_KEY):
            logger.debug(
                f"Spread {abs_spread:.2f}% suppressed, cool-down "
                f"{self._cooldown.remaining_ms(PAXG_XAUT_PAIR_KEY)}ms left"
            )
            return None

        cheaper, pricier = ("XAUT", "PAXG") if spread < 0 else ("PAXG", "XAUT")
        alert = self._alerts.add(
            f"{cheaper} is {abs_spread:.2f}% cheaper than {pricier} - potential swap signal!",
            AlertCategory.ARBITRAGE,
            spread=abs_spread,
        )
        self._alerts_raised += 1
        logger.info(f"Arbitrage alert: {alert.message}")
        return alert

    @property
    def last_spread(self) -> float | None:
        """Spread from the most recent complete observation."""
        return self._last_spread

    @property
    def alerts_raised(self) -> int:
        return self._alerts_raised

    @property
    def cooldown(self) -> Cooldown:
        return self._cooldown

"""
Suggestion execution.

Turns a trade suggestion into a market order on the exchange selected in
the preferences. Only one order may be in flight at a time; a second
request while one is outstanding is refused rather than queued.
"""

import logging
from collections import deque
from collections.abc import Mapping

from goldtrackr.config.preferences import PreferencesStore
from goldtrackr.core.types import TradeSuggestion
from goldtrackr.exchange.client import DryRunSubmitter
from goldtrackr.exchange.models import OrderRequest, OrderResult, OrderSubmitter
from goldtrackr.telemetry.metrics import MetricsCollector
from goldtrackr.utils.time import LatencyTimer


logger = logging.getLogger(__name__)

HISTORY_SIZE = 50


class SuggestionExecutor:
    """
    Executes trade suggestions.

    Features:
    - Single-flight guard against duplicate submissions
    - Dry-run routing that never touches the network
    - Per-exchange submitter selection from live preferences
    """

    def __init__(
        self,
        preferences: PreferencesStore,
        submitters: Mapping[str, OrderSubmitter],
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize executor.

        Args:
            preferences: Live trading preferences (exchange, dry run, size).
            submitters: Exchange name -> live submitter.
            metrics: Optional metrics sink.
        """
        self._preferences = preferences
        self._submitters = dict(submitters)
        self._dry_run_submitters: dict[str, DryRunSubmitter] = {}
        self._metrics = metrics
        self._in_flight = False
        self._history: deque[OrderResult] = deque(maxlen=HISTORY_SIZE)

    def _dry_run_for(self, exchange: str) -> DryRunSubmitter:
        if exchange not in self._dry_run_submitters:
            self._dry_run_submitters[exchange] = DryRunSubmitter(exchange)
        return self._dry_run_submitters[exchange]

    def build_request(self, suggestion: TradeSuggestion) -> OrderRequest:
        """Order for a suggestion at the configured max trade size."""
        prefs = self._preferences.current
        return OrderRequest(
            product_id=suggestion.product_id,
            side=suggestion.side,
            base_size=prefs.max_trade_size,
            dry_run=prefs.dry_run,
        )

    async def execute(self, suggestion: TradeSuggestion) -> OrderResult:
        """
        Submit the order for a suggestion.

        Args:
            suggestion: Suggestion to act on.

        Returns:
            OrderResult; failures are reported, never raised.
        """
        prefs = self._preferences.current
        exchange = prefs.selected_exchange

        if self._in_flight:
            logger.warning(f"Refusing {suggestion.id}: another order is executing")
            return OrderResult.failure(
                exchange,
                suggestion.product_id,
                "Another order is already executing",
                dry_run=prefs.dry_run,
            )

        request = self.build_request(suggestion)
        submitter: OrderSubmitter | None = (
            self._dry_run_for(exchange) if request.dry_run else self._submitters.get(exchange)
        )
        if submitter is None:
            return self._finish(
                OrderResult.failure(
                    exchange, request.product_id, f"No submitter configured for {exchange}"
                )
            )

        logger.info(
            f"Executing {suggestion.id}: {request.side.value} {request.base_size_str} "
            f"{request.product_id} on {exchange}{' (dry run)' if request.dry_run else ''}"
        )

        self._in_flight = True
        try:
            with LatencyTimer() as timer:
                result = await submitter.submit(request)
        except Exception as e:
            logger.error(f"Execution error for {suggestion.id}: {e}")
            result = OrderResult.failure(exchange, request.product_id, str(e), request.dry_run)
        finally:
            self._in_flight = False

        if self._metrics:
            self._metrics.record_latency("order_submit", timer.latency_us)
        return self._finish(result)

    def _finish(self, result: OrderResult) -> OrderResult:
        self._history.append(result)
        if self._metrics:
            self._metrics.record_order(result.success, result.dry_run)

        if result.success:
            logger.info(f"Order ok: {result.order_id} on {result.exchange}")
        else:
            logger.warning(f"Order failed on {result.exchange}: {result.error}")
        return result

    @property
    def is_executing(self) -> bool:
        """Whether an order is currently in flight."""
        return self._in_flight

    @property
    def history(self) -> list[OrderResult]:
        """Recent results, oldest first."""
        return list(self._history)

    async def close(self) -> None:
        """Close every live submitter that holds a session."""
        for submitter in self._submitters.values():
            close = getattr(submitter, "close", None)
            if close is not None:
                await close()

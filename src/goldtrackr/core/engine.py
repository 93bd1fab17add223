"""
Main signal engine orchestrator.

Coordinates the feeds, the snapshot store, signal generation, portfolio,
preferences and order execution, and manages the polling lifecycle.
"""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator, Callable, Mapping
from contextlib import asynccontextmanager
from typing import Any

from pydantic import SecretStr

from goldtrackr.config.constants import (
    ALERT_LOG_CAPACITY,
    AUTO_TRADE_COOLDOWN_MS,
    AUTO_TRADE_MIN_CONFIDENCE,
    SPREAD_ALERT_COOLDOWN_MS,
    SPREAD_ALERT_THRESHOLD_PCT,
)
from goldtrackr.config.preferences import PreferencesStore, TradingPreferences
from goldtrackr.config.settings import Settings
from goldtrackr.core.alerts import AlertLog
from goldtrackr.core.event_bus import Event, EventBus, EventType
from goldtrackr.core.scheduler import PeriodicTask
from goldtrackr.core.types import (
    AlertItem,
    CorrelationMatrix,
    CorrelationPeriod,
    NewsItem,
    NewsSource,
    PortfolioValuation,
    QuoteSource,
    SpotSource,
    TradeSuggestion,
)
from goldtrackr.exchange.client import (
    EXCHANGE_COINBASE,
    EXCHANGE_KRAKEN,
    CoinbaseClient,
    KrakenClient,
)
from goldtrackr.exchange.models import OrderResult, OrderSubmitter
from goldtrackr.execution.executor import SuggestionExecutor
from goldtrackr.market.fallback import fallback_news, fallback_quotes, fallback_spot
from goldtrackr.market.feeds import CoinGeckoClient, MetalPriceClient, NewsFeed
from goldtrackr.market.snapshot import PriceSnapshotStore
from goldtrackr.portfolio.book import PortfolioBook
from goldtrackr.storage.state import JsonStateStore
from goldtrackr.strategy.correlation import compute_correlation_matrix
from goldtrackr.strategy.spread import Cooldown, SpreadDetector
from goldtrackr.strategy.suggestions import generate_suggestions, pick_auto_trade_candidate
from goldtrackr.telemetry.metrics import MetricsCollector
from goldtrackr.utils.time import LatencyTimer, get_timestamp_ms, ms_to_iso


logger = logging.getLogger(__name__)

ENGINE_SOURCE = "engine"


def _secret(value: SecretStr | None) -> str | None:
    return value.get_secret_value() if value is not None else None


def build_submitters(settings: Settings) -> dict[str, OrderSubmitter]:
    """
    Live order submitters for every supported exchange.

    Clients are created even without credentials; they then answer every
    order with a failed result.
    """
    return {
        EXCHANGE_KRAKEN: KrakenClient(
            api_key=_secret(settings.kraken_api_key),
            api_secret=_secret(settings.kraken_api_secret),
            timeout=settings.request_timeout,
        ),
        EXCHANGE_COINBASE: CoinbaseClient(
            key_name=_secret(settings.coinbase_key_name),
            private_key=_secret(settings.coinbase_private_key),
            timeout=settings.request_timeout,
        ),
    }


class DashboardEngine:
    """
    Signal engine orchestrator.

    Manages the complete lifecycle of:
    - Price, spot and news polling
    - Snapshot updates with stale-data fallback
    - Spread alerts and trade suggestions
    - Portfolio valuation and preferences
    - Manual and automatic order execution
    """

    def __init__(
        self,
        settings: Settings,
        quote_source: QuoteSource | None = None,
        spot_source: SpotSource | None = None,
        news_source: NewsSource | None = None,
        submitters: Mapping[str, OrderSubmitter] | None = None,
        clock: Callable[[], int] = get_timestamp_ms,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Application settings.
            quote_source: Crypto quote feed (default: CoinGecko).
            spot_source: Spot gold feed (default: metalpriceapi).
            news_source: Headline feed (default: static headlines).
            submitters: Exchange name -> live order submitter.
            clock: Epoch-ms time source shared by the stateful components.
        """
        self._settings = settings
        self._clock = clock
        self._running = False
        self._closed = False
        self._last_refresh_ok = False
        self._shutdown_event = asyncio.Event()

        # Feeds
        self._quote_source: QuoteSource = quote_source or CoinGeckoClient(
            api_key=_secret(settings.coingecko_api_key),
            timeout=settings.request_timeout,
            clock=clock,
        )
        self._spot_source: SpotSource = spot_source or MetalPriceClient(
            api_key=_secret(settings.metalprice_api_key),
            timeout=settings.request_timeout,
            clock=clock,
        )
        self._news_source: NewsSource = news_source or NewsFeed()

        # Infrastructure
        self._event_bus = EventBus()
        self._metrics = MetricsCollector()

        # State
        self._snapshot = PriceSnapshotStore(clock=clock)
        self._alerts = AlertLog(capacity=ALERT_LOG_CAPACITY, clock=clock)
        self._spread_detector = SpreadDetector(
            self._alerts,
            threshold_pct=SPREAD_ALERT_THRESHOLD_PCT,
            cooldown=Cooldown(SPREAD_ALERT_COOLDOWN_MS, clock=clock),
        )
        self._preferences = PreferencesStore(JsonStateStore(settings.preferences_path))
        self._portfolio = PortfolioBook(JsonStateStore(settings.portfolio_path))
        self._suggestions: tuple[TradeSuggestion, ...] = ()
        self._news: list[NewsItem] = []

        # Execution
        self._executor = SuggestionExecutor(
            preferences=self._preferences,
            submitters=submitters if submitters is not None else build_submitters(settings),
            metrics=self._metrics,
        )
        self._auto_trade_cooldown = Cooldown(AUTO_TRADE_COOLDOWN_MS, clock=clock)

        # Polling
        self._price_task = PeriodicTask(
            "prices", settings.price_refresh_interval, self._refresh_prices_tick
        )
        self._news_task = PeriodicTask(
            "news", settings.news_refresh_interval, self._refresh_news_tick
        )

    # =========================================================================
    # Refresh
    # =========================================================================

    async def _publish(self, event_type: EventType, payload: Any) -> None:
        await self._event_bus.publish(Event(event_type, payload, source=ENGINE_SOURCE))

    async def _report_failure(self, source: str, error: BaseException) -> None:
        logger.warning(f"{source} feed failed: {error}")
        self._metrics.increment_counter(f"{source}_feed_errors")
        await self._publish(EventType.FETCH_FAILED, {"source": source, "error": str(error)})

    async def _refresh_prices_tick(self) -> None:
        await self.refresh_prices()

    async def _refresh_news_tick(self) -> None:
        await self.refresh_news()

    async def refresh_prices(self) -> bool:
        """
        Fetch quotes and spot gold concurrently and re-run the signals.

        Whatever succeeded is applied. A failed quote fetch keeps the last
        snapshot and flags it stale; with no snapshot yet, the static
        fallback dataset is applied instead. Spot gold degrades the same way.

        Returns:
            True if the quote feed answered.
        """
        with LatencyTimer() as timer:
            quotes_result, spot_result = await asyncio.gather(
                self._quote_source.fetch_prices(),
                self._spot_source.fetch_reference_spot(),
                return_exceptions=True,
            )
        self._metrics.record_latency("price_fetch", timer.latency_us)

        for result in (quotes_result, spot_result):
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result

        used_fallback = False
        quotes_ok = not isinstance(quotes_result, Exception)

        if quotes_ok:
            self._snapshot.set_quotes(quotes_result)
        else:
            await self._report_failure("prices", quotes_result)
            if not self._snapshot.has_data:
                logger.info("No price snapshot yet, applying fallback dataset")
                self._snapshot.set_quotes(fallback_quotes())
                used_fallback = True
            self._snapshot.mark_error(f"Price feed unavailable: {quotes_result}")

        if isinstance(spot_result, Exception):
            await self._report_failure("spot", spot_result)
            if self._snapshot.spot is None:
                self._snapshot.set_spot(fallback_spot())
                used_fallback = True
            self._snapshot.mark_error(f"Spot gold feed unavailable: {spot_result}")
        else:
            self._snapshot.set_spot(spot_result)

        self._last_refresh_ok = quotes_ok
        self._metrics.record_refresh(quotes_ok, used_fallback)
        await self._publish(EventType.PRICES_UPDATED, self._snapshot.to_dict())
        await self._evaluate_signals()
        return quotes_ok

    async def trigger_price_refresh(self) -> bool:
        """
        Manual price refresh through the polling task.

        Refused while a scheduled or manual refresh is still fetching, so at
        most one price fetch is outstanding.

        Returns:
            True if a refresh ran, False if one was already in flight.
        """
        return await self._price_task.trigger()

    async def refresh_news(self) -> list[NewsItem]:
        """
        Fetch headlines.

        On failure the previous headlines are kept, or the static list is
        used if there are none.
        """
        try:
            news = await self._news_source.fetch_news()
        except Exception as e:
            await self._report_failure("news", e)
            news = self._news or fallback_news()

        self._news = list(news)
        await self._publish(EventType.NEWS_UPDATED, self._news)
        return self._news

    # =========================================================================
    # Signals
    # =========================================================================

    def _rebuild_suggestions(self) -> tuple[TradeSuggestion, ...]:
        self._suggestions = generate_suggestions(
            self._snapshot.quotes,
            self._snapshot.spot,
            self._preferences.current.max_trade_size,
        )
        return self._suggestions

    async def _evaluate_signals(self) -> None:
        """Spread detection, suggestions and the auto-trade policy."""
        alert = self._spread_detector.observe(self._snapshot.quotes)
        if alert is not None:
            self._metrics.record_alert()
            await self._publish(EventType.ALERT_RAISED, alert)

        suggestions = self._rebuild_suggestions()
        self._metrics.record_suggestions(len(suggestions))
        await self._publish(EventType.SUGGESTIONS_UPDATED, list(suggestions))

        if self._preferences.current.auto_trade_enabled:
            await self._auto_trade()

    async def _auto_trade(self) -> OrderResult | None:
        """Execute the best eligible suggestion once per cool-down window."""
        candidate = pick_auto_trade_candidate(self._suggestions, AUTO_TRADE_MIN_CONFIDENCE)
        if candidate is None:
            return None

        if not self._auto_trade_cooldown.try_acquire(candidate.id):
            logger.debug(
                f"Auto-trade {candidate.id} cooling down, "
                f"{self._auto_trade_cooldown.remaining_ms(candidate.id)}ms left"
            )
            return None

        logger.info(f"Auto-trading {candidate.id} (confidence {candidate.confidence})")
        return await self._execute(candidate)

    def correlations(self, period: CorrelationPeriod | str) -> CorrelationMatrix:
        """
        Correlation matrix for the current snapshot.

        Raises:
            ValueError: If `period` is unknown.
        """
        return compute_correlation_matrix(
            self._snapshot.quotes, self._snapshot.spot, period, now_ms=self._clock()
        )

    def get_suggestion(self, suggestion_id: str) -> TradeSuggestion | None:
        for suggestion in self._suggestions:
            if suggestion.id == suggestion_id:
                return suggestion
        return None

    # =========================================================================
    # Execution
    # =========================================================================

    async def _execute(self, suggestion: TradeSuggestion) -> OrderResult:
        result = await self._executor.execute(suggestion)
        event_type = EventType.ORDER_SUBMITTED if result.success else EventType.ORDER_FAILED
        await self._publish(event_type, result)
        return result

    async def execute_suggestion(self, suggestion_id: str) -> OrderResult | None:
        """
        Execute a current suggestion.

        Args:
            suggestion_id: Id of a suggestion from the latest refresh.

        Returns:
            Order result, or None if no such suggestion exists.
        """
        suggestion = self.get_suggestion(suggestion_id)
        if suggestion is None:
            logger.warning(f"Unknown suggestion: {suggestion_id}")
            return None
        return await self._execute(suggestion)

    # =========================================================================
    # Alerts, Portfolio & Preferences
    # =========================================================================

    def dismiss_alert(self, alert_id: str) -> bool:
        return self._alerts.dismiss(alert_id)

    def clear_alerts(self) -> None:
        self._alerts.clear()

    def portfolio_valuation(self) -> PortfolioValuation:
        return self._portfolio.value(self._snapshot)

    def update_preferences(self, changes: Mapping[str, Any]) -> TradingPreferences | None:
        """
        Apply a preferences update.

        Suggestions are rebuilt so their sizes follow the new trade size.

        Returns:
            New preferences, or None if the update was rejected.
        """
        updated = self._preferences.update(changes)
        if updated is not None and self._snapshot.has_data:
            self._rebuild_suggestions()
        return updated

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(self) -> None:
        """Start the polling loops."""
        if self._running:
            return

        logger.info(
            f"Starting engine: prices every {self._price_task.interval}s, "
            f"news every {self._news_task.interval}s"
        )
        self._running = True
        self._closed = False
        self._shutdown_event.clear()
        self._price_task.start()
        self._news_task.start()

    async def run(self) -> None:
        """Run until a shutdown signal or request."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.request_shutdown)

        try:
            await self.start()
            await self._shutdown_event.wait()
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.remove_signal_handler(sig)
            await self.shutdown()

    def request_shutdown(self) -> None:
        """Ask `run()` to return."""
        logger.info("Shutdown signal received")
        self._shutdown_event.set()

    async def shutdown(self) -> None:
        """Stop polling and release network resources."""
        if self._closed:
            return

        logger.info("Shutting down engine...")
        self._closed = True
        self._running = False
        self._shutdown_event.set()

        await self._price_task.stop()
        await self._news_task.stop()
        await self._publish(EventType.SHUTDOWN, None)

        for source in (self._quote_source, self._spot_source, self._news_source):
            close = getattr(source, "close", None)
            if close is not None:
                await close()
        await self._executor.close()

        logger.info("Engine shutdown complete")

    def status(self) -> dict[str, Any]:
        """Engine health summary."""
        prefs = self._preferences.current
        last_updated = self._snapshot.last_updated
        return {
            "running": self._running,
            "last_updated": last_updated,
            "last_updated_iso": ms_to_iso(last_updated) if last_updated is not None else None,
            "error": self._snapshot.error,
            "is_stale": self._snapshot.is_stale,
            "selected_exchange": prefs.selected_exchange,
            "dry_run": prefs.dry_run,
            "auto_trade_enabled": prefs.auto_trade_enabled,
            "credentials": {
                EXCHANGE_KRAKEN: self._settings.has_kraken_credentials,
                EXCHANGE_COINBASE: self._settings.has_coinbase_credentials,
            },
            "active_alerts": len(self._alerts.active),
            "executing": self._executor.is_executing,
            "tasks": {
                task.name: {
                    "tick_count": task.tick_count,
                    "failure_count": task.failure_count,
                    "last_run_ms": task.last_run_ms,
                }
                for task in (self._price_task, self._news_task)
            },
            "metrics": self._metrics.to_dict(),
        }

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def is_running(self) -> bool:
        """Check if engine is running."""
        return self._running

    @property
    def last_refresh_ok(self) -> bool:
        """Whether the most recent price refresh got an answer from the quote feed."""
        return self._last_refresh_ok

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def snapshot(self) -> PriceSnapshotStore:
        return self._snapshot

    @property
    def alerts(self) -> AlertLog:
        return self._alerts

    @property
    def active_alerts(self) -> list[AlertItem]:
        return self._alerts.active

    @property
    def suggestions(self) -> tuple[TradeSuggestion, ...]:
        """Suggestions from the latest refresh."""
        return self._suggestions

    @property
    def news(self) -> list[NewsItem]:
        return list(self._news)

    @property
    def spread_detector(self) -> SpreadDetector:
        return self._spread_detector

    @property
    def portfolio(self) -> PortfolioBook:
        return self._portfolio

    @property
    def preferences(self) -> TradingPreferences:
        return self._preferences.current

    @property
    def executor(self) -> SuggestionExecutor:
        return self._executor

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector."""
        return self._metrics


@asynccontextmanager
async def create_engine(settings: Settings, **kwargs: Any) -> AsyncIterator[DashboardEngine]:
    """
    Create and manage engine lifecycle.

    Usage:
        async with create_engine(settings) as engine:
            await engine.run()
    """
    engine = DashboardEngine(settings, **kwargs)

    try:
        yield engine
    finally:
        await engine.shutdown()

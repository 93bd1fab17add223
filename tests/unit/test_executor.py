"""
Unit tests for the suggestion executor.
"""

import asyncio

import pytest

from goldtrackr.config.constants import ASSET_PAXG, ASSET_XAUT
from goldtrackr.config.preferences import PreferencesStore
from goldtrackr.core.types import OrderSide, TradeSuggestion
from goldtrackr.execution.executor import SuggestionExecutor
from goldtrackr.strategy.suggestions import arbitrage_suggestion
from goldtrackr.telemetry.metrics import MetricsCollector
from tests.mocks import MockSubmitter
from tests.mocks.market import make_quote


@pytest.fixture
def suggestion() -> TradeSuggestion:
    paxg = make_quote(ASSET_PAXG, "PAXG", 3333.0)
    xaut = make_quote(ASSET_XAUT, "XAUT", 3300.0)
    result = arbitrage_suggestion(paxg, xaut, 0.5)
    assert result is not None
    return result


@pytest.fixture
def preferences() -> PreferencesStore:
    return PreferencesStore()


@pytest.fixture
def coinbase() -> MockSubmitter:
    return MockSubmitter("coinbase")


@pytest.fixture
def metrics() -> MetricsCollector:
    return MetricsCollector()


@pytest.fixture
def executor(
    preferences: PreferencesStore, coinbase: MockSubmitter, metrics: MetricsCollector
) -> SuggestionExecutor:
    return SuggestionExecutor(preferences, {"coinbase": coinbase}, metrics)


class TestSuggestionExecutor:
    """Tests for SuggestionExecutor."""

    def test_build_request_uses_preferences(
        self,
        executor: SuggestionExecutor,
        preferences: PreferencesStore,
        suggestion: TradeSuggestion,
    ) -> None:
        preferences.update({"max_trade_size": 1.25})

        request = executor.build_request(suggestion)

        assert request.product_id == "PAXG-USD"
        assert request.side is OrderSide.SELL
        assert request.base_size == 1.25
        assert request.base_size_str == "1.25"
        assert request.dry_run is True

    @pytest.mark.asyncio
    async def test_dry_run_never_calls_live_submitter(
        self,
        executor: SuggestionExecutor,
        coinbase: MockSubmitter,
        metrics: MetricsCollector,
        suggestion: TradeSuggestion,
    ) -> None:
        result = await executor.execute(suggestion)

        assert result.success is True
        assert result.dry_run is True
        assert result.order_id.startswith("dry-run-")
        assert result.message == "DRY RUN on COINBASE - no real order was placed"
        assert coinbase.requests == []
        assert metrics.signal_stats.dry_run_orders == 1
        assert executor.history == [result]

    @pytest.mark.asyncio
    async def test_live_order(
        self,
        executor: SuggestionExecutor,
        preferences: PreferencesStore,
        coinbase: MockSubmitter,
        metrics: MetricsCollector,
        suggestion: TradeSuggestion,
    ) -> None:
        preferences.update({"dry_run": False})

        result = await executor.execute(suggestion)

        assert result.success is True
        assert result.order_id == "mock-1"
        assert len(coinbase.requests) == 1
        assert coinbase.requests[0].dry_run is False
        assert metrics.signal_stats.orders_submitted == 1
        assert metrics.get_latency_stats("order_submit").count == 1

    @pytest.mark.asyncio
    async def test_concurrent_request_refused(
        self,
        executor: SuggestionExecutor,
        preferences: PreferencesStore,
        coinbase: MockSubmitter,
        suggestion: TradeSuggestion,
    ) -> None:
        preferences.update({"dry_run": False})
        coinbase.gate = asyncio.Event()

        first = asyncio.create_task(executor.execute(suggestion))
        await asyncio.sleep(0)
        assert executor.is_executing is True

        second = await executor.execute(suggestion)

        assert second.success is False
        assert second.error == "Another order is already executing"

        coinbase.gate.set()
        assert (await first).success is True
        assert executor.is_executing is False
        assert len(coinbase.requests) == 1

    @pytest.mark.asyncio
    async def test_missing_submitter(
        self,
        executor: SuggestionExecutor,
        preferences: PreferencesStore,
        suggestion: TradeSuggestion,
    ) -> None:
        preferences.update({"dry_run": False, "selected_exchange": "kraken"})

        result = await executor.execute(suggestion)

        assert result.success is False
        assert result.exchange == "kraken"
        assert result.error == "No submitter configured for kraken"

    @pytest.mark.asyncio
    async def test_dry_run_on_kraken_maps_pair(
        self,
        executor: SuggestionExecutor,
        preferences: PreferencesStore,
        suggestion: TradeSuggestion,
    ) -> None:
        preferences.update({"selected_exchange": "kraken"})

        result = await executor.execute(suggestion)

        assert result.success is True
        assert result.exchange == "kraken"
        assert result.exchange_pair == "PAXGUSD"

    @pytest.mark.asyncio
    async def test_rejection_reported(
        self,
        preferences: PreferencesStore,
        metrics: MetricsCollector,
        suggestion: TradeSuggestion,
    ) -> None:
        preferences.update({"dry_run": False})
        executor = SuggestionExecutor(
            preferences, {"coinbase": MockSubmitter(succeed=False)}, metrics
        )

        result = await executor.execute(suggestion)

        assert result.success is False
        assert result.error == "Insufficient funds"
        assert metrics.signal_stats.orders_failed == 1

    @pytest.mark.asyncio
    async def test_submitter_exception_becomes_failure(
        self,
        preferences: PreferencesStore,
        suggestion: TradeSuggestion,
    ) -> None:
        preferences.update({"dry_run": False})
        executor = SuggestionExecutor(
            preferences, {"coinbase": MockSubmitter(raise_error=RuntimeError("socket reset"))}
        )

        result = await executor.execute(suggestion)

        assert result.success is False
        assert result.error == "socket reset"
        assert executor.is_executing is False

    @pytest.mark.asyncio
    async def test_close_closes_live_submitters(
        self, executor: SuggestionExecutor, coinbase: MockSubmitter
    ) -> None:
        await executor.close()
        assert coinbase.closed is True

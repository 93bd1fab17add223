"""
Metrics collection for monitoring.

Tracks feed latencies, refresh outcomes, signal counts and order results
with in-memory storage. Rendered by the CLI reporter and exposed on the
dashboard status endpoint.
"""

import time
from collections import deque
from dataclasses import asdict, dataclass


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p95_us: int = 0
    p99_us: int = 0
    count: int = 0


@dataclass
class SignalStats:
    """Refresh, signal and order statistics."""

    refreshes_ok: int = 0
    refreshes_failed: int = 0
    fallback_used: int = 0
    alerts_raised: int = 0
    suggestions_generated: int = 0
    orders_submitted: int = 0
    orders_failed: int = 0
    dry_run_orders: int = 0

    @property
    def refresh_success_rate(self) -> float:
        """Share of refreshes where the price feed answered."""
        total = self.refreshes_ok + self.refreshes_failed
        return self.refreshes_ok / total if total > 0 else 0.0

    @property
    def order_success_rate(self) -> float:
        total = self.orders_submitted + self.orders_failed
        return self.orders_submitted / total if total > 0 else 0.0


class MetricsCollector:
    """
    Collects and aggregates runtime metrics.

    Features:
    - Rolling window latency tracking
    - Counter-based event tracking (feed errors per source and so on)
    - Signal and order statistics
    """

    def __init__(
        self,
        latency_window_size: int = 500,
    ) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._signal_stats = SignalStats()
        self._start_time = time.time()

    def record_latency(self, name: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "price_fetch", "order_submit").
            latency_us: Latency in microseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)

        self._latencies[name].append(latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """
        Increment a counter.

        Args:
            name: Counter name.
            value: Amount to increment.
        """
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def record_refresh(self, success: bool, used_fallback: bool = False) -> None:
        """
        Record a price refresh outcome.

        Args:
            success: Whether the quote feed answered.
            used_fallback: Whether the static dataset was applied.
        """
        if success:
            self._signal_stats.refreshes_ok += 1
        else:
            self._signal_stats.refreshes_failed += 1
        if used_fallback:
            self._signal_stats.fallback_used += 1

    def record_alert(self) -> None:
        self._signal_stats.alerts_raised += 1

    def record_suggestions(self, count: int) -> None:
        self._signal_stats.suggestions_generated += count

    def record_order(self, success: bool, dry_run: bool) -> None:
        """
        Record an order submission outcome.

        Args:
            success: Whether the submitter reported success.
            dry_run: Whether the order was simulated.
        """
        if success:
            self._signal_stats.orders_submitted += 1
        else:
            self._signal_stats.orders_failed += 1
        if dry_run:
            self._signal_stats.dry_run_orders += 1

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get latency statistics for a metric.

        Args:
            name: Metric name.

        Returns:
            LatencyStats with aggregated values.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p95_us=sorted_samples[int(n * 0.95)],
            p99_us=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    def get_all_latency_stats(self) -> dict[str, LatencyStats]:
        """Get latency stats for all metrics."""
        return {name: self.get_latency_stats(name) for name in self._latencies}

    @property
    def signal_stats(self) -> SignalStats:
        """Get signal statistics."""
        return self._signal_stats

    @property
    def uptime_seconds(self) -> float:
        """Get uptime in seconds."""
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, object]:
        """
        Export all metrics as a dict.

        Returns:
            Dict representation of all metrics.
        """
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: {
                    "min": stats.min_us,
                    "max": stats.max_us,
                    "avg": stats.avg_us,
                    "p50": stats.p50_us,
                    "p99": stats.p99_us,
                    "count": stats.count,
                }
                for name, stats in self.get_all_latency_stats().items()
            },
            "signals": {
                **asdict(self._signal_stats),
                "refresh_success_rate": self._signal_stats.refresh_success_rate,
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._signal_stats = SignalStats()
        self._start_time = time.time()

"""
CLI reporter for real-time status display.

Provides a terminal-based dashboard showing prices, the PAXG/XAUT spread,
trade suggestions, alerts, portfolio totals and feed health.
"""

import asyncio
import sys
from datetime import timedelta
from typing import TYPE_CHECKING, TextIO

from goldtrackr.config.constants import ASSET_BCH, ASSET_BTC, ASSET_ETH, ASSET_PAXG, ASSET_XAUT
from goldtrackr.utils.math import format_compact_usd, format_percent, format_price
from goldtrackr.utils.time import format_duration_us, format_time_ago


if TYPE_CHECKING:
    from goldtrackr.core.engine import DashboardEngine


DISPLAY_ASSETS = (ASSET_PAXG, ASSET_XAUT, ASSET_BTC, ASSET_ETH, ASSET_BCH)
MAX_ALERT_LINES = 3


class CLIReporter:
    """
    Real-time CLI dashboard for monitoring.

    Displays a formatted status panel with:
    - Mode and feed health
    - Latest prices and spot gold
    - PAXG/XAUT spread
    - Trade suggestions and active alerts
    - Portfolio totals
    """

    # Box drawing characters
    BOX_TL = "\u2554"  # ╔
    BOX_TR = "\u2557"  # ╗
    BOX_BL = "\u255a"  # ╚
    BOX_BR = "\u255d"  # ╝
    BOX_H = "\u2550"  # ═
    BOX_V = "\u2551"  # ║
    BOX_LT = "\u2560"  # ╠
    BOX_RT = "\u2563"  # ╣

    def __init__(
        self,
        engine: "DashboardEngine",
        width: int = 72,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize CLI reporter.

        Args:
            engine: Engine whose state is displayed.
            width: Dashboard width in characters.
            output: Output stream (default: stdout).
        """
        self._engine = engine
        self._width = width
        self._output = output or sys.stdout
        self._running = False
        self._task: asyncio.Task[None] | None = None

    def _format_uptime(self, seconds: float) -> str:
        """Format uptime as HH:MM:SS."""
        td = timedelta(seconds=int(seconds))
        hours, remainder = divmod(int(td.total_seconds()), 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def _pad(self, text: str, width: int) -> str:
        """Pad text to width."""
        return text.ljust(width)[:width]

    def _line(self, content: str) -> str:
        """Create a line with borders."""
        return f"{self.BOX_V}{self._pad(content, self._width - 2)}{self.BOX_V}"

    def _divider(self) -> str:
        """Create a horizontal divider."""
        return f"{self.BOX_LT}{self.BOX_H * (self._width - 2)}{self.BOX_RT}"

    def render(self) -> str:
        """
        Render the dashboard.

        Returns:
            Formatted dashboard string.
        """
        engine = self._engine
        snapshot = engine.snapshot
        prefs = engine.preferences
        metrics = engine.metrics

        dry_run_text = "DRY_RUN: ON " if prefs.dry_run else "DRY_RUN: OFF"
        auto_text = "AUTO: ON" if prefs.auto_trade_enabled else "AUTO: OFF"
        uptime = self._format_uptime(metrics.uptime_seconds)

        lines = []

        # Header
        lines.append(f"{self.BOX_TL}{self.BOX_H * (self._width - 2)}{self.BOX_TR}")
        header = (
            f"  GOLDTRACKR v1.0.0 | {prefs.selected_exchange.upper()} | "
            f"{dry_run_text} | {auto_text}"
        )
        lines.append(self._line(header))
        lines.append(self._divider())

        # Status row
        if snapshot.last_updated is None:
            updated = "never"
        else:
            updated = format_time_ago(snapshot.last_updated)
        feed = "STALE" if snapshot.is_stale else "LIVE"
        lines.append(self._line(f"  Uptime: {uptime}  |  Feed: {feed}  |  Updated: {updated}"))
        if snapshot.error:
            lines.append(self._line(f"  ! {snapshot.error}"))
        lines.append(self._divider())

        # Prices
        spot = snapshot.spot
        if spot is not None:
            lines.append(
                self._line(
                    f"  {'XAU':<6}{format_price(spot.price):>14}  "
                    f"{format_percent(spot.change_24h):>8}  {spot.unit}"
                )
            )
        for asset_id in DISPLAY_ASSETS:
            quote = snapshot.get(asset_id)
            if quote is None:
                continue
            volume = ""
            if quote.volume_24h is not None:
                volume = f"  vol {format_compact_usd(quote.volume_24h)}"
            lines.append(
                self._line(
                    f"  {quote.symbol:<6}{format_price(quote.price):>14}  "
                    f"{format_percent(quote.change_24h):>8}  7d {format_percent(quote.change_7d):>7}"
                    f"{volume}"
                )
            )

        spread = engine.spread_detector.last_spread
        spread_text = "---" if spread is None else format_percent(spread)
        lines.append(self._line(f"  PAXG/XAUT spread: {spread_text}"))
        lines.append(self._divider())

        # Suggestions
        suggestions = engine.suggestions
        lines.append(self._line(f"  SUGGESTIONS ({len(suggestions)})"))
        for suggestion in suggestions:
            lines.append(
                self._line(
                    f"  [{suggestion.confidence:>3}%] {suggestion.category.value:<8}"
                    f"{suggestion.action}"
                )
            )

        # Alerts
        alerts = engine.active_alerts
        lines.append(self._line(f"  ALERTS ({len(alerts)})"))
        for alert in alerts[:MAX_ALERT_LINES]:
            lines.append(self._line(f"  {format_time_ago(alert.timestamp):>8}  {alert.message}"))
        lines.append(self._divider())

        # Portfolio row
        valuation = engine.portfolio_valuation()
        pnl_sign = "+" if valuation.total_pnl >= 0 else ""
        lines.append(
            self._line(
                f"  Portfolio: {format_price(valuation.total_value)}  |  "
                f"P&L: {pnl_sign}{format_price(valuation.total_pnl)} "
                f"({format_percent(valuation.total_pnl_pct)})  |  "
                f"Gold {valuation.gold_allocation_pct:.0f}%"
            )
        )

        # Footer
        lines.append(f"{self.BOX_BL}{self.BOX_H * (self._width - 2)}{self.BOX_BR}")

        return "\n".join(lines)

    def display(self) -> None:
        """Display the dashboard once."""
        # Clear screen and move cursor to top
        self._output.write("\033[2J\033[H")
        self._output.write(self.render())
        self._output.write("\n")
        self._output.flush()

    async def run(self, interval: float = 1.0) -> None:
        """
        Run continuous display updates.

        Args:
            interval: Update interval in seconds.
        """
        self._running = True

        while self._running:
            self.display()
            await asyncio.sleep(interval)

    def start(self, interval: float = 1.0) -> asyncio.Task[None]:
        """Start the reporter as a background task."""
        self._task = asyncio.create_task(self.run(interval))
        return self._task

    def stop(self) -> None:
        """Stop the reporter."""
        self._running = False
        if self._task:
            self._task.cancel()

    def print_summary(self) -> None:
        """Print a final summary."""
        metrics = self._engine.metrics
        stats = metrics.signal_stats
        fetch = metrics.get_latency_stats("price_fetch")
        uptime = self._format_uptime(metrics.uptime_seconds)

        out = self._output
        out.write("\n" + "=" * 50 + "\n")
        out.write("  SESSION SUMMARY\n")
        out.write("=" * 50 + "\n")
        out.write(f"  Uptime: {uptime}\n\n")
        out.write("  FEEDS:\n")
        out.write(f"    Refreshes ok:     {stats.refreshes_ok:,}\n")
        out.write(f"    Refreshes failed: {stats.refreshes_failed:,}\n")
        out.write(f"    Fallback used:    {stats.fallback_used:,}\n")
        out.write(f"    Avg fetch:        {format_duration_us(int(fetch.avg_us))}\n\n")
        out.write("  SIGNALS:\n")
        out.write(f"    Alerts raised:    {stats.alerts_raised:,}\n")
        out.write(f"    Suggestions:      {stats.suggestions_generated:,}\n\n")
        out.write("  ORDERS:\n")
        out.write(f"    Submitted:        {stats.orders_submitted:,}\n")
        out.write(f"    Failed:           {stats.orders_failed:,}\n")
        out.write(f"    Dry run:          {stats.dry_run_orders:,}\n")
        out.write("=" * 50 + "\n")
        out.flush()


class SimpleReporter:
    """
    Simpler text-based reporter for logging.

    Outputs periodic status updates as log messages.
    """

    def __init__(self, engine: "DashboardEngine") -> None:
        """Initialize simple reporter."""
        self._engine = engine

    def get_status_line(self) -> str:
        """Get a single-line status update."""
        engine = self._engine
        stats = engine.metrics.signal_stats
        paxg = engine.snapshot.get(ASSET_PAXG)
        spread = engine.spread_detector.last_spread

        paxg_text = format_price(paxg.price) if paxg else "---"
        spread_text = "---" if spread is None else format_percent(spread)
        return (
            f"PAXG: {paxg_text} | Spread: {spread_text} | "
            f"Suggestions: {len(engine.suggestions)} | "
            f"Alerts: {len(engine.active_alerts)} | "
            f"Orders: {stats.orders_submitted}/{stats.orders_failed}"
        )

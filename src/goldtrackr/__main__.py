"""
Entry point for the GoldTrackr signal engine.

Usage:
    python -m goldtrackr           # CLI dashboard
    python -m goldtrackr --api     # JSON/WebSocket dashboard API
    goldtrackr                     # if installed via pip
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Coroutine
from typing import Any


logger = logging.getLogger("goldtrackr")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="goldtrackr", description="Gold signal engine")
    parser.add_argument(
        "--api",
        action="store_true",
        help="serve the dashboard API instead of the CLI panel",
    )
    parser.add_argument("--host", default=None, help="dashboard API host")
    parser.add_argument("--port", type=int, default=None, help="dashboard API port")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="override LOG_LEVEL",
    )
    return parser.parse_args(argv)


def _run(coro: Coroutine[Any, Any, int], use_uvloop: bool) -> int:
    if use_uvloop and sys.platform != "win32":
        import uvloop

        return uvloop.run(coro)
    return asyncio.run(coro)


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success).
    """
    from pydantic import ValidationError

    from goldtrackr import __version__
    from goldtrackr.config.settings import get_settings
    from goldtrackr.core.engine import DashboardEngine
    from goldtrackr.dashboard.server import serve
    from goldtrackr.telemetry.logger import setup_logging
    from goldtrackr.telemetry.reporter import CLIReporter

    args = _parse_args(argv)

    # Print banner
    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║     GOLDTRACKR SIGNAL ENGINE v{__version__:<26}      ║
║                                                               ║
║     Tokenized gold, crypto and spot gold signals              ║
╚═══════════════════════════════════════════════════════════════╝
    """
    )

    # Load settings
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Configuration error: {e}")
        print("\nCheck the values in your environment or .env file.")
        return 1

    queue_logger = setup_logging(
        level=args.log_level or settings.log_level,
        log_file=settings.log_file,
    )

    # Print configuration summary
    print("Configuration:")
    print(f"  Price refresh:  {settings.price_refresh_interval:.0f}s")
    print(f"  News refresh:   {settings.news_refresh_interval:.0f}s")
    print(f"  State dir:      {settings.state_dir}")
    print(f"  Kraken keys:    {'yes' if settings.has_kraken_credentials else 'no'}")
    print(f"  Coinbase keys:  {'yes' if settings.has_coinbase_credentials else 'no'}")
    print(f"  uvloop:         {'Enabled' if settings.use_uvloop else 'Disabled'}")
    print()

    async def run_engine() -> int:
        engine = DashboardEngine(settings)
        prefs = engine.preferences
        if not prefs.dry_run:
            print("WARNING: Live trading mode enabled!")
            print(f"    Real orders will be placed on {prefs.selected_exchange}.")
            print()

        if args.api:
            # The app's lifespan starts and stops the engine
            await serve(
                engine,
                host=args.host or settings.dashboard_host,
                port=args.port or settings.dashboard_port,
            )
            return 0

        reporter = CLIReporter(engine)
        try:
            reporter.start(interval=settings.report_interval)
            await engine.run()
            return 0

        except Exception as e:
            logger.exception(f"Fatal error: {e}")
            return 1

        finally:
            reporter.stop()
            await engine.shutdown()
            reporter.print_summary()

    try:
        return _run(run_engine(), settings.use_uvloop)
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 0
    finally:
        queue_logger.stop()


if __name__ == "__main__":
    sys.exit(main())

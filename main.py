"""
Depth Seller - Main Entry Point
Two order book feeds → depth-weighted prices → gated periodic sell

CLI Flags Reference (every flag overrides its SELLER_* env / .env value):
| Flag | Default | Description |
|------|---------|-------------|
| `--mode` | `paper` | Execution mode (paper, live) |
| `--reference-exchange` | `binance` | ccxt id of the reference (mark) venue |
| `--reference-symbol` | `SOL/USDT` | Reference instrument |
| `--executable-exchange` | `kraken` | ccxt id of the venue sells are placed on |
| `--executable-symbol` | `SOL/USD` | Executable instrument |
| `--trade-amount` | `1.0` | Size per sell, also the weighting depth |
| `--allowed-divergence` | `0.98` | Min executable/reference ratio, in (0, 1] |
| `--floor-threshold` | `1.0` | Never sell below this weighted bid |
| `--strategy` | `utilize-divergence` | or `disregard-divergence` |
| `--interval-secs` | `10` | Seconds between evaluations |
| `--max-staleness` | `None` | Skip when a feed is silent this long (seconds) |
| `--once` | `False` | Warm up, evaluate a single time and exit |
| `--timeout` | `None` | Stop after N minutes |
"""

import argparse
import asyncio
import logging
import signal
import sys
import time

# Try uvloop for performance
try:
    import uvloop

    asyncio.set_event_loop_policy(uvloop.EventLoopPolicy())
except ImportError:
    pass

from config import system as system_config
from core.clock import Clock
from core.exceptions import ConfigurationError
from core.execution import ExecutionDispatcher
from core.feed import FeedSide, FeedSubscription
from core.feed_state import FeedState
from core.observability import (
    bind_context,
    clear_context,
    configure_logging,
    start_metrics_server,
    stop_metrics_server,
)
from core.observability.metrics import bot_info
from core.settings import SellerSettings, build_settings, describe_settings, validate_settings
from core.trader import SellTrader
from decision.engine import DecisionEngine
from exchanges import CCXTBookSource, CCXTExecutionGateway, build_gateway

configure_logging(
    log_level=system_config.LOG_LEVEL,
    log_format=system_config.LOG_FORMAT,
    log_file=system_config.LOG_FILE or None,
)
logger = logging.getLogger("DepthSeller")

VERSION = "1.0.0"


def parse_args(argv=None):
    """Parse command line arguments. Unset flags stay None and fall back to config."""
    parser = argparse.ArgumentParser(description="Depth-weighted dual-feed seller")

    parser.add_argument("--mode", type=str, choices=["paper", "live"], help="Execution mode")
    parser.add_argument("--reference-exchange", type=str, help="ccxt id of the reference venue")
    parser.add_argument("--reference-symbol", type=str, help="Reference instrument (e.g. SOL/USDT)")
    parser.add_argument("--executable-exchange", type=str, help="ccxt id of the executable venue")
    parser.add_argument("--executable-symbol", type=str, help="Executable instrument (e.g. SOL/USD)")

    parser.add_argument("--trade-amount", type=float, help="Size of every sell (also the weighting depth)")
    parser.add_argument("--allowed-divergence", type=float, help="Minimum executable/reference ratio")
    parser.add_argument("--floor-threshold", type=float, help="Minimum executable weighted bid")
    parser.add_argument(
        "--strategy",
        type=str,
        choices=["utilize-divergence", "disregard-divergence"],
        help="Whether the divergence gate applies",
    )
    parser.add_argument("--interval-secs", type=float, help="Seconds between evaluations")
    parser.add_argument("--max-staleness", type=float, help="Max seconds without feed updates")

    parser.add_argument("--wallet", type=str, help="Wallet address forwarded with orders (overrides env)")
    parser.add_argument("--open-orders-address", type=str, help="Open orders account (overrides env)")
    parser.add_argument("--metrics-port", type=int, help="Prometheus port")
    parser.add_argument("--no-metrics", action="store_true", help="Do not start the metrics server")

    parser.add_argument("--once", action="store_true", help="Warm up, evaluate once and exit")
    parser.add_argument("--warmup", type=float, default=10.0, help="Seconds to let prices settle with --once")
    parser.add_argument("--timeout", type=int, default=None, help="Stop execution after N minutes")

    return parser.parse_args(argv)


def load_settings(args) -> SellerSettings:
    """Build and validate settings. Raises ConfigurationError."""
    return validate_settings(build_settings(args))


def build_health_check(feeds, dispatcher: ExecutionDispatcher, max_staleness=None):
    """/health report: degraded while any feed task is down."""

    def check():
        now = time.time()
        report = {"status": "ok", "executions": dispatcher.counter.value, "feeds": {}}
        for feed in feeds:
            snap = feed.state.snapshot()
            report["feeds"][feed.name] = {
                "symbol": feed.source.symbol,
                "running": feed.running,
                "value": snap.value,
                "age_secs": snap.age(now),
                "stale": feed.state.is_stale(max_staleness, now),
                "consecutive_failures": feed.consecutive_failures,
            }
            if not feed.running:
                report["status"] = "degraded"
        return report

    return check


async def run_seller(settings: SellerSettings, once: bool = False, warmup: float = 10.0, timeout_minutes=None) -> int:
    policy = settings.policy

    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def signal_handler():
        logger.info("🛑 Received shutdown signal")
        stop_event.set()

    try:
        loop.add_signal_handler(signal.SIGTERM, signal_handler)
        loop.add_signal_handler(signal.SIGINT, signal_handler)
    except NotImplementedError:
        # Signal handlers are not supported on Windows
        pass

    bind_context(reference=settings.reference.symbol, executable=settings.executable.symbol, mode=settings.mode)

    # 1. Feed states (one owner each)
    reference_state = FeedState("reference", settings.reference.symbol)
    executable_state = FeedState("executable", settings.executable.symbol)

    # 2. Feed subscriptions (depth = trade amount)
    reference_feed = FeedSubscription(
        CCXTBookSource(settings.reference.exchange_id, settings.reference.symbol, settings.orderbook_limit),
        reference_state,
        depth=policy.trade_amount,
        side=FeedSide.MID,
    )
    executable_feed = FeedSubscription(
        CCXTBookSource(settings.executable.exchange_id, settings.executable.symbol, settings.orderbook_limit),
        executable_state,
        depth=policy.trade_amount,
        side=FeedSide.BIDS,
    )

    # 3. Execution
    gateway = build_gateway(
        settings.mode, settings.executable.exchange_id, settings.executable.symbol, settings.account
    )
    engine = DecisionEngine(reference_state, executable_state, max_staleness=policy.max_staleness)
    dispatcher = ExecutionDispatcher(gateway)
    trader = SellTrader(engine, dispatcher, policy)
    clock = Clock(tick_size_seconds=policy.interval_secs)
    clock.add_iterator(trader)

    # 4. Metrics (non-fatal)
    if settings.metrics_enabled:
        try:
            await start_metrics_server(
                port=settings.metrics_port,
                health_check=build_health_check(
                    (reference_feed, executable_feed), dispatcher, policy.max_staleness
                ),
            )
            bot_info.info(
                {
                    "version": VERSION,
                    "mode": settings.mode,
                    "reference": f"{settings.reference.exchange_id}:{settings.reference.symbol}",
                    "executable": f"{settings.executable.exchange_id}:{settings.executable.symbol}",
                }
            )
        except Exception as e:
            logger.warning(f"⚠️ Failed to start metrics server: {e}")

    exit_code = 0
    try:
        if isinstance(gateway, CCXTExecutionGateway):
            logger.info("🏦 Connecting execution gateway...")
            await gateway.connect()

        logger.info("📡 Subscribing to reference orderbook...")
        await reference_feed.start()
        logger.info("📡 Subscribing to executable orderbook...")
        await executable_feed.start()
        logger.info("✅ Setup done...")

        if once:
            # Let the prices settle and make one evaluation
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=warmup)
            except asyncio.TimeoutError:
                await trader.start()
                await trader.tick(time.time())
                await trader.stop()
            return 0

        await clock.start()

        if timeout_minutes:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=timeout_minutes * 60)
            except asyncio.TimeoutError:
                logger.info(f"⏰ Timeout of {timeout_minutes} minutes reached")
        else:
            await stop_event.wait()

    except ConfigurationError as e:
        logger.critical(f"❌ Configuration error: {e}")
        exit_code = 1
    except Exception as e:
        logger.critical(f"❌ Startup failed: {e}", exc_info=True)
        exit_code = 1
    finally:
        logger.info("🛑 Shutting down...")
        await clock.stop()
        await reference_feed.stop()
        await executable_feed.stop()
        if isinstance(gateway, CCXTExecutionGateway):
            await gateway.close()
        await stop_metrics_server()
        clear_context()
        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                pass
        logger.info("👋 Bye")

    return exit_code


async def main(argv=None) -> int:
    """Main entry point for the depth seller."""
    args = parse_args(argv)

    try:
        settings = load_settings(args)
    except ConfigurationError as e:
        logger.critical(f"❌ Configuration error, refusing to start: {e}")
        return 1

    logger.info(describe_settings(settings))
    logger.info(f"🚀 Starting Depth Seller | Mode: {settings.mode}")

    return await run_seller(settings, once=args.once, warmup=args.warmup, timeout_minutes=args.timeout)


def run():
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()

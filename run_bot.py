#!/usr/bin/env python3
"""
Flash-loan arbitrage bot CLI.

Loads configuration from the environment (and .env), then serves the health
and trade endpoints while checking for opportunities every interval.

Usage:
    python3 run_bot.py
    python3 run_bot.py --port 8080
    python3 run_bot.py --once
    python3 run_bot.py --no-server
"""

import argparse
import asyncio
import sys
from typing import Optional

import uvicorn

import logging_config
from flash_arbitrage.bot import ArbitrageBot, build_bot
from flash_arbitrage.config_loader import load_pairs, load_settings
from flash_arbitrage.exceptions import ConfigurationError
from flash_arbitrage.utils import get_logger
from flash_arbitrage.version import get_version

logger = get_logger(__name__)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Flash-loan DEX arbitrage bot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Serve /health and /trades, check every CHECK_INTERVAL_SEC
  python3 run_bot.py

  # Single check over all pairs (for testing/CI)
  python3 run_bot.py --once

  # Periodic checks without the HTTP server
  python3 run_bot.py --no-server
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {get_version()}"
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Path to a .env file (default: nearest .env)",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single check, print the ledger stats and exit",
    )
    parser.add_argument(
        "--no-server",
        action="store_true",
        help="Run periodic checks without the HTTP server",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="HTTP port (overrides PORT)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (overrides LOG_LEVEL)",
    )

    return parser.parse_args(argv)


async def run_once(bot: ArbitrageBot) -> int:
    try:
        report = await bot.driver.tick()
    finally:
        await bot.close()

    stats = bot.ledger.stats()
    logger.info(
        f"Check finished: {len(bot.ledger)} trade(s) recorded, "
        f"{stats.successful_trades} successful, total profit {stats.total_profit:.8f}"
    )
    if report is None or report.has_failures:
        return 1
    return 0


async def run_without_server(bot: ArbitrageBot) -> int:
    try:
        await bot.driver.run_forever()
    finally:
        await bot.close()
    return 0


def main(argv: Optional[list] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    try:
        settings = load_settings(dotenv_path=args.env_file)
        level = (args.log_level or settings.log_level).upper()
        if level == "DEBUG":
            logging_config.setup_debug()
        else:
            logging_config.setup(level)
        pairs = load_pairs(settings)
        bot = build_bot(settings, pairs)
    except ConfigurationError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ Failed to start arbitrage bot: {e}", file=sys.stderr)
        return 1

    if args.once:
        return asyncio.run(run_once(bot))

    if args.no_server:
        try:
            return asyncio.run(run_without_server(bot))
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
            return 0

    from web_server import app, state

    state.attach(bot)
    port = args.port or settings.port
    logger.info(f"Server running on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port, log_config=None)
    return 0


if __name__ == "__main__":
    sys.exit(main())

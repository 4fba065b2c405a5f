"""
Logging configuration for cleaner output.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys


def setup(level=logging.INFO):
    """
    Configure root logging for the bot process.

    - Suppresses per-request logs from uvicorn
    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    - Keeps aiohttp client chatter at WARNING
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logging.getLogger("__main__").setLevel(level)

    # Module loggers from get_logger() carry their own handler
    package_logger = logging.getLogger("flash_arbitrage")
    package_logger.setLevel(level)
    package_logger.propagate = False
    for name, existing in logging.root.manager.loggerDict.items():
        if name.startswith("flash_arbitrage.") and isinstance(existing, logging.Logger):
            existing.setLevel(level)


def setup_debug():
    """
    Verbose logging for debugging.
    Shows everything including HTTP requests.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)

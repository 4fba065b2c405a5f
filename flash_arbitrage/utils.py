"""
Common utilities and helper functions for the arbitrage bot.

Timestamp handling, unit conversions and the structured logger factory.
"""

import logging
import math
from datetime import date, datetime, time as dt_time, timezone
from typing import Any, Dict, Optional, Union


# Timestamp utilities
def timestamp_to_iso(timestamp: float) -> str:
    """Convert Unix timestamp to ISO 8601 string."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


def iso_to_timestamp(iso_string: str) -> float:
    """Convert ISO 8601 string to Unix timestamp (naive strings are UTC)."""
    parsed = datetime.fromisoformat(iso_string.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


def parse_date_bound(value: str, end_of_day: bool = False) -> float:
    """
    Parse a date or datetime string into a Unix timestamp.

    A bare date (``2024-03-01``) maps to the start of that day, or to its
    last microsecond when ``end_of_day`` is set, so inclusive ranges cover
    whole days.

    Raises:
        ValueError: If the string is not a valid ISO 8601 date/datetime
    """
    value = value.strip()
    if len(value) == 10:
        day = date.fromisoformat(value)
        bound = dt_time.max if end_of_day else dt_time.min
        return datetime.combine(day, bound, tzinfo=timezone.utc).timestamp()
    return iso_to_timestamp(value)


def format_duration(seconds: float) -> str:
    """Format duration in seconds to human-readable string."""
    if seconds < 60:
        return f"{seconds:.2f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


# Math utilities
def percent_to_basis_points(percent: float) -> int:
    """Convert percent to whole basis points, rounding down (0.1% -> 10)."""
    return int(math.floor(percent * 100 + 1e-9))


def to_base_units(amount: float, decimals: int) -> int:
    """Convert a token amount to integer base units (lamports-style)."""
    return int(round(amount * (10**decimals)))


def from_base_units(raw: Union[int, str], decimals: int) -> float:
    """Convert integer base units back to a token amount."""
    return int(raw) / (10**decimals)


# Logging utilities
def get_logger(
    name: str,
    level: Union[str, int] = logging.INFO,
    extra: Optional[Dict[str, Any]] = None,
    minimal: bool = False,
) -> logging.Logger:
    """
    Get a structured logger with consistent formatting and extra context.

    Args:
        name: Logger name (typically __name__)
        level: Logging level
        extra: Additional context fields to include in all log messages
        minimal: If True, use simplified format (time + message only)

    Returns:
        Configured logger with structured output
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()

        if minimal:
            format_str = "%(asctime)s | %(message)s"
        else:
            format_str = (
                "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | " "%(message)s"
            )

        if extra:
            extra_fields = " | ".join([f"{k}=%(extra_{k})s" for k in extra.keys()])
            format_str = format_str.replace(
                " | %(message)s", f" | {extra_fields} | %(message)s"
            )

        formatter = logging.Formatter(format_str, datefmt="%H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

        if extra:
            logger = logging.LoggerAdapter(
                logger, {"extra_" + k: v for k, v in extra.items()}
            )

    return logger

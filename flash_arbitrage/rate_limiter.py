"""
Minimum-interval rate limiting between trades.
"""

from typing import Optional

from .interfaces import SystemTimeProvider, TimeProvider


class RateLimiter:
    """
    Enforces a minimum interval between initiated trades.

    ``try_acquire`` reads and advances the clock with no suspension point in
    between, so two opportunities found in the same cycle cannot both pass.
    A refused acquisition leaves the clock untouched.
    """

    def __init__(
        self, min_interval_ms: int, time_provider: Optional[TimeProvider] = None
    ):
        if min_interval_ms < 0:
            raise ValueError(f"min_interval_ms must be >= 0, got {min_interval_ms}")
        self.min_interval_ms = min_interval_ms
        self.time_provider = time_provider or SystemTimeProvider()
        self.last_trade_timestamp_ms: Optional[int] = None

    def try_acquire(self) -> bool:
        """Return True and mark a trade if the interval has elapsed."""
        now = self.time_provider.current_time_ms()
        if (
            self.last_trade_timestamp_ms is not None
            and now - self.last_trade_timestamp_ms < self.min_interval_ms
        ):
            return False
        self.last_trade_timestamp_ms = now
        return True

    def remaining_ms(self) -> int:
        """Milliseconds until the next trade is allowed (0 if allowed now)."""
        if self.last_trade_timestamp_ms is None:
            return 0
        elapsed = self.time_provider.current_time_ms() - self.last_trade_timestamp_ms
        return max(0, self.min_interval_ms - elapsed)

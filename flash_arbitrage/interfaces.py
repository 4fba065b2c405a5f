"""
Collaborator interfaces for the decision core.

Quote providers, the flash-loan provider and the trade executor are modelled
as protocols so any concrete venue or lending integration can be plugged in,
and the core can be tested with fakes. Time and randomness are injected the
same way.
"""

import random
import time
from typing import Optional, Protocol, runtime_checkable

from .constants import TradeSide
from .types import LegReceipt, Quote, TradingPair


@runtime_checkable
class QuoteProvider(Protocol):
    """Returns a price for token A -> token B, or None when no route exists."""

    name: str

    async def get_quote(
        self, input_mint: str, output_mint: str, amount: float, pair: TradingPair
    ) -> Optional[Quote]:
        """Quote ``amount`` of ``input_mint`` into ``output_mint``."""
        ...


@runtime_checkable
class Loan(Protocol):
    """Handle to an outstanding flash loan."""

    principal: float
    asset: str

    def interest_accrued(self) -> float:
        """Interest accrued so far; non-decreasing until repaid."""
        ...

    @property
    def repaid(self) -> bool:
        ...

    async def repay(self) -> None:
        """Repay principal plus interest. Must be called exactly once."""
        ...


@runtime_checkable
class LoanProvider(Protocol):
    """Issues flash loans."""

    async def borrow(self, amount: float, asset: str) -> Loan:
        ...


@runtime_checkable
class TradeExecutor(Protocol):
    """Submits single trade legs to a named venue."""

    async def execute_leg(
        self,
        pair: TradingPair,
        amount: float,
        venue: str,
        side: TradeSide,
        attempt: int = 1,
    ) -> LegReceipt:
        """Execute one leg of the given 1-based attempt; raises on failure."""
        ...


@runtime_checkable
class TimeProvider(Protocol):
    """Protocol for time-related operations."""

    def current_timestamp(self) -> float:
        """Get current Unix timestamp."""
        ...

    def current_time_ms(self) -> int:
        """Get current time in milliseconds."""
        ...


@runtime_checkable
class RandomProvider(Protocol):
    """Protocol for random number generation."""

    def random(self) -> float:
        """Generate random float between 0.0 and 1.0."""
        ...

    def uniform(self, a: float, b: float) -> float:
        """Generate random float between a and b."""
        ...


class SystemTimeProvider:
    """Production time provider using system time."""

    def current_timestamp(self) -> float:
        return time.time()

    def current_time_ms(self) -> int:
        return int(time.time() * 1000)


class DeterministicTimeProvider:
    """Deterministic time provider for testing."""

    def __init__(self, start_time: float = 1640995200.0):  # 2022-01-01
        self._current_time = start_time

    def current_timestamp(self) -> float:
        return self._current_time

    def current_time_ms(self) -> int:
        return int(self._current_time * 1000)

    def advance_time(self, seconds: float) -> None:
        """Manually advance time by specified seconds."""
        self._current_time += seconds

    def set_time(self, timestamp: float) -> None:
        """Set current time to specific timestamp."""
        self._current_time = timestamp


class DeterministicRandomProvider:
    """Seeded random provider for paper trading and tests."""

    def __init__(self, seed: int = 42):
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

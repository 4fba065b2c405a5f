"""
Paper trading collaborators.

Simulated quote source, flash-loan provider and trade executor. Used for paper
mode (live quotes, simulated loan and legs) and as deterministic fakes in
tests. Nothing here touches the network.
"""

import asyncio
import hashlib
import itertools
from typing import Dict, List, Optional, Tuple

from ..constants import DEFAULT_MAX_BORROW_RATE_BPS, DEFAULT_TRANSACTION_FEE, TradeSide
from ..exceptions import ExecutionError, LoanError
from ..interfaces import (
    DeterministicRandomProvider,
    RandomProvider,
    SystemTimeProvider,
    TimeProvider,
)
from ..opportunity import calculate_price_impact
from ..types import LegReceipt, Quote, TradingPair
from ..utils import get_logger

logger = get_logger(__name__)


class PaperQuoteProvider:
    """
    Quotes from a static price table.

    Attributes:
        name: Venue name reported on quotes
        prices: {(input_mint, output_mint): price}; missing keys mean no route
        size_impact_pct_per_unit: Simulated price impact per unit of input,
            in percent; the quoted output is reduced by that much
        jitter_pct: Max random price jitter in percent (0 disables)
    """

    def __init__(
        self,
        name: str,
        prices: Optional[Dict[Tuple[str, str], float]] = None,
        size_impact_pct_per_unit: float = 0.0,
        jitter_pct: float = 0.0,
        random_provider: Optional[RandomProvider] = None,
    ):
        self.name = name
        self.prices: Dict[Tuple[str, str], float] = dict(prices or {})
        self.size_impact_pct_per_unit = size_impact_pct_per_unit
        self.jitter_pct = jitter_pct
        self.random_provider = random_provider or DeterministicRandomProvider()
        self.calls = 0

    def remove_route(self, input_mint: str, output_mint: str) -> None:
        self.prices.pop((input_mint, output_mint), None)

    async def get_quote(
        self, input_mint: str, output_mint: str, amount: float, pair: TradingPair
    ) -> Optional[Quote]:
        self.calls += 1
        price = self.prices.get((input_mint, output_mint))
        if price is None:
            return None

        if self.jitter_pct:
            jitter = self.random_provider.uniform(-self.jitter_pct, self.jitter_pct)
            price *= 1 + jitter / 100

        impact_pct = min(self.size_impact_pct_per_unit * amount, 100.0)
        amount_out = amount * price * (1 - impact_pct / 100)
        return Quote(
            price=price,
            price_impact=calculate_price_impact(amount, amount_out, price),
            venue=self.name,
            amount_in=amount,
            amount_out=amount_out,
        )


class PaperLoan:
    """Simulated flash loan; interest is a flat fee on the principal."""

    def __init__(
        self,
        provider: "PaperLoanProvider",
        loan_id: int,
        principal: float,
        asset: str,
        fee_bps: float,
    ):
        self._provider = provider
        self.loan_id = loan_id
        self.principal = principal
        self.asset = asset
        self.fee_bps = fee_bps
        self._repaid = False
        self.repay_calls = 0

    def interest_accrued(self) -> float:
        return self.principal * self.fee_bps / 10000

    @property
    def repaid(self) -> bool:
        return self._repaid

    async def repay(self) -> None:
        self.repay_calls += 1
        if self._repaid:
            raise LoanError(
                f"loan {self.loan_id} already repaid",
                asset=self.asset,
                principal=self.principal,
            )
        self._repaid = True
        self._provider._on_repaid(self)
        logger.info(
            f"Repaid flash loan {self.loan_id}: {self.principal} {self.asset} "
            f"+ {self.interest_accrued():.8f} interest"
        )


class PaperLoanProvider:
    """
    Simulated flash-loan pool.

    Refuses a borrow while a previous loan is still outstanding, and when its
    fee exceeds ``max_borrow_rate_bps``.
    """

    loan_class = PaperLoan

    def __init__(
        self,
        fee_bps: float = 5.0,
        max_borrow_rate_bps: float = DEFAULT_MAX_BORROW_RATE_BPS,
    ):
        self.fee_bps = fee_bps
        self.max_borrow_rate_bps = max_borrow_rate_bps
        self.loans: List[PaperLoan] = []
        self.outstanding: Optional[PaperLoan] = None
        self._ids = itertools.count(1)

    async def borrow(self, amount: float, asset: str) -> PaperLoan:
        if amount <= 0:
            raise LoanError(f"principal must be > 0, got {amount}", asset=asset)
        if self.outstanding is not None:
            raise LoanError(
                f"loan {self.outstanding.loan_id} is still outstanding",
                asset=asset,
                principal=amount,
            )
        if self.fee_bps > self.max_borrow_rate_bps:
            raise LoanError(
                f"borrow rate {self.fee_bps}bps exceeds max {self.max_borrow_rate_bps}bps",
                asset=asset,
                principal=amount,
            )
        loan = self.loan_class(self, next(self._ids), amount, asset, self.fee_bps)
        self.loans.append(loan)
        self.outstanding = loan
        logger.info(f"Borrowed flash loan {loan.loan_id}: {amount} {asset}")
        return loan

    def _on_repaid(self, loan: PaperLoan) -> None:
        if self.outstanding is loan:
            self.outstanding = None


class PaperTradeExecutor:
    """
    Simulated leg execution.

    Each leg fails with probability ``failure_rate``; ``fail_next`` forces the
    next N legs to fail, which tests use to drive the retry path.
    """

    def __init__(
        self,
        program_id: str = "",
        failure_rate: float = 0.0,
        latency_sec: float = 0.0,
        fee: float = DEFAULT_TRANSACTION_FEE,
        random_provider: Optional[RandomProvider] = None,
        time_provider: Optional[TimeProvider] = None,
    ):
        self.program_id = program_id
        self.failure_rate = failure_rate
        self.latency_sec = latency_sec
        self.fee = fee
        self.random_provider = random_provider or DeterministicRandomProvider()
        self.time_provider = time_provider or SystemTimeProvider()
        self.fail_next = 0
        self.executed: List[LegReceipt] = []
        self.attempted = 0

    async def execute_leg(
        self,
        pair: TradingPair,
        amount: float,
        venue: str,
        side: TradeSide,
        attempt: int = 1,
    ) -> LegReceipt:
        self.attempted += 1
        if self.latency_sec:
            await asyncio.sleep(self.latency_sec)

        forced = self.fail_next > 0
        if forced:
            self.fail_next -= 1
        if forced or (
            self.failure_rate and self.random_provider.random() < self.failure_rate
        ):
            raise ExecutionError(
                f"simulated {side.value} failure on {venue}",
                venue=venue,
                side=side.value,
                attempt=attempt,
            )

        receipt = LegReceipt(
            venue=venue,
            side=side,
            amount=amount,
            signature=self._signature(pair, venue, side),
            fee=self.fee,
        )
        self.executed.append(receipt)
        logger.debug(
            f"[paper] {side.value} {amount} {pair.label} on {venue} "
            f"via {self.program_id or 'direct'}"
        )
        return receipt

    def _signature(self, pair: TradingPair, venue: str, side: TradeSide) -> str:
        seed = (
            f"{self.program_id}:{pair.label}:{venue}:{side.value}:"
            f"{self.time_provider.current_timestamp()}:{self.attempted}"
        )
        return hashlib.sha256(seed.encode()).hexdigest()

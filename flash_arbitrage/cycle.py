"""
Arbitrage cycle orchestration.

One ``run_once`` call walks the configured pairs in order. For each pair it
asks the OpportunityEvaluator for a signal, applies the rate limit and the
after-fees profit check, then runs the flash-loan bracketed trade:

    borrow -> (buy leg, sell leg) x up to max_retries -> repay -> ledger entry

Timed-out borrows are retried. Once a loan exists the repay step always runs
and is retried until it succeeds or the retries run out. Exactly one ledger
entry is written per opportunity that passed the rate limit.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from .constants import (
    DEFAULT_CALL_TIMEOUT_SEC,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TRANSACTION_FEE,
    LEGS_PER_TRADE,
    NO_PROFIT_AFTER_FEES,
    CycleState,
    TradeSide,
)
from .interfaces import (
    Loan,
    LoanProvider,
    SystemTimeProvider,
    TimeProvider,
    TradeExecutor,
)
from .ledger import TradeLedger
from .metrics import BotMetrics
from .opportunity import OpportunityEvaluator
from .rate_limiter import RateLimiter
from .types import (
    AttemptResult,
    CycleReport,
    Opportunity,
    PairOutcome,
    TradeLogEntry,
    TradingPair,
)
from .utils import get_logger

logger = get_logger(__name__)


@dataclass
class CycleContext:
    """
    Process-wide state passed into every cycle.

    Created once at startup and shared by reference: the rate-limit clock and
    the ledger live here rather than in module globals.
    """

    rate_limiter: RateLimiter
    ledger: TradeLedger
    time_provider: TimeProvider = field(default_factory=SystemTimeProvider)


@dataclass(frozen=True)
class ProfitEstimate:
    estimated_gas_cost: float
    potential_profit: float
    net_profit: float


def estimate_profit(
    price_a: float, price_b: float, amount: float, transaction_fee: float
) -> ProfitEstimate:
    """Net profit of trading ``amount`` across the spread, minus both legs' fees."""
    gas = transaction_fee * LEGS_PER_TRADE
    potential = abs(price_a - price_b) * amount
    return ProfitEstimate(
        estimated_gas_cost=gas, potential_profit=potential, net_profit=potential - gas
    )


class ArbitrageCycle:
    """
    Drives evaluation and execution for a sequence of pairs.

    A single lock serializes ``run_once``: a caller arriving while a cycle is
    in flight waits for it to finish, so loan and trade side effects never
    interleave.
    """

    def __init__(
        self,
        evaluator: OpportunityEvaluator,
        loan_provider: LoanProvider,
        executor: TradeExecutor,
        transaction_fee: float = DEFAULT_TRANSACTION_FEE,
        max_retries: int = DEFAULT_MAX_RETRIES,
        call_timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC,
        metrics: Optional[BotMetrics] = None,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        self.evaluator = evaluator
        self.loan_provider = loan_provider
        self.executor = executor
        self.transaction_fee = transaction_fee
        self.max_retries = max_retries
        self.call_timeout_sec = call_timeout_sec
        self.metrics = metrics
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    async def run_once(
        self, pairs: Sequence[TradingPair], context: CycleContext
    ) -> CycleReport:
        """
        Evaluate every pair once, in order.

        Errors on one pair are logged and recorded in its outcome; the
        remaining pairs are still processed. Failures that the periodic driver
        must count are exposed through ``CycleReport.has_failures``.
        """
        async with self._lock:
            report = CycleReport(started_at=context.time_provider.current_timestamp())
            for pair in pairs:
                outcome = PairOutcome(pair_label=pair.label)
                report.outcomes.append(outcome)
                try:
                    await self._process_pair(pair, context, outcome)
                except Exception as e:
                    outcome.error = str(e)
                    logger.error(
                        f"Error checking arbitrage for pair {pair.label}: {e}",
                        exc_info=True,
                    )
                if self.metrics:
                    self.metrics.record_pair_outcome(pair.label, outcome.state.value)
            report.finished_at = context.time_provider.current_timestamp()
            return report

    async def _process_pair(
        self, pair: TradingPair, context: CycleContext, outcome: PairOutcome
    ) -> None:
        evaluation = await self.evaluator.evaluate(pair, pair.trade_amount)
        outcome.state = CycleState.QUOTES_FETCHED

        if not isinstance(evaluation, Opportunity):
            outcome.state = CycleState.NO_OPPORTUNITY
            return

        if not context.rate_limiter.try_acquire():
            logger.info(
                f"Rate limit reached, skipping trade on {pair.label} "
                f"({context.rate_limiter.remaining_ms()}ms remaining)"
            )
            outcome.state = CycleState.SKIPPED
            return

        await self._execute_opportunity(evaluation, context, outcome)

    async def _execute_opportunity(
        self, opportunity: Opportunity, context: CycleContext, outcome: PairOutcome
    ) -> None:
        pair = opportunity.pair
        amount = opportunity.amount
        estimate = estimate_profit(
            opportunity.price_a, opportunity.price_b, amount, self.transaction_fee
        )

        pending: Dict[str, Any] = {
            "timestamp": context.time_provider.current_timestamp(),
            "successful": False,
            "token_pair_label": pair.label,
            "principal": amount,
            "quote_a": opportunity.price_a,
            "quote_b": opportunity.price_b,
        }

        try:
            if estimate.net_profit <= 0:
                logger.info(
                    f"No profit after fees on {pair.label} "
                    f"(potential={estimate.potential_profit:.8f}, "
                    f"gas={estimate.estimated_gas_cost:.8f}), skipping trade"
                )
                outcome.state = CycleState.PROFIT_CHECK_FAILED
                pending["error_message"] = NO_PROFIT_AFTER_FEES
                return

            outcome.state = CycleState.BORROWING
            try:
                loan = await self._borrow(pair, amount)
            except Exception as e:
                message = _describe(e, "borrow")
                logger.error(f"Flash loan for {pair.label} failed: {message}")
                outcome.state = CycleState.BORROW_FAILED
                outcome.error = message
                pending["error_message"] = message
                self._record_loan_event("borrow_failed")
                return

            self._record_loan_event("borrowed")
            pending["gas_fee"] = estimate.estimated_gas_cost
            try:
                pending["interest"] = loan.interest_accrued()
                outcome.state = CycleState.EXECUTING
                attempts = await self._run_attempts(opportunity)
                outcome.attempts = len(attempts)
                pending["interest"] = loan.interest_accrued()
            except Exception as e:
                pending["error_message"] = _describe(e, "execution")
                outcome.state = CycleState.REPAID_FAILURE
                raise
            finally:
                repay_error = await self._repay(loan, pair)

            final = attempts[-1]
            if final.success and repay_error is None:
                outcome.state = CycleState.REPAID_SUCCESS
                pending["successful"] = True
                pending["profit_loss"] = estimate.net_profit
                logger.info(
                    f"Arbitrage executed successfully on {pair.label}! "
                    f"Net profit: {estimate.net_profit:.8f}"
                )
                if self.metrics:
                    self.metrics.record_profit(estimate.net_profit)
            else:
                outcome.state = CycleState.REPAID_FAILURE
                message = final.error if not final.success else repay_error
                outcome.error = message
                pending["error_message"] = message
                logger.error(
                    f"Arbitrage on {pair.label} failed after {len(attempts)} "
                    f"attempt(s): {message}"
                )
        finally:
            entry = TradeLogEntry(**pending)
            context.ledger.append(entry)
            outcome.entry = entry

    async def _run_attempts(self, opportunity: Opportunity) -> List[AttemptResult]:
        """Run the two-leg sequence until it succeeds or retries run out."""
        attempts: List[AttemptResult] = []
        for number in range(1, self.max_retries + 1):
            result = await self._attempt(opportunity, number)
            attempts.append(result)
            if result.success:
                break
            logger.warning(
                f"Trade attempt {number}/{self.max_retries} failed "
                f"on {opportunity.pair.label}: {result.error}"
            )
            if self.metrics:
                self.metrics.record_leg_failure(opportunity.pair.label)
        return attempts

    async def _attempt(self, opportunity: Opportunity, number: int) -> AttemptResult:
        buy_venue, sell_venue = self.evaluator.venues_for(opportunity.direction)
        result = AttemptResult(attempt=number, success=False)
        for venue, side in ((buy_venue, TradeSide.BUY), (sell_venue, TradeSide.SELL)):
            started = time.monotonic()
            try:
                receipt = await asyncio.wait_for(
                    self.executor.execute_leg(
                        opportunity.pair, opportunity.amount, venue, side, attempt=number
                    ),
                    timeout=self.call_timeout_sec,
                )
            except Exception as e:
                result.error = _describe(e, f"{side.value} on {venue}")
                return result
            logger.debug(
                f"{side.value} on {venue} done in {time.monotonic() - started:.3f}s "
                f"(signature={receipt.signature})"
            )
            result.receipts.append(receipt)
        result.success = True
        return result

    async def _borrow(self, pair: TradingPair, amount: float) -> Loan:
        """Borrow, retrying timeouts up to ``max_retries`` times; refusals propagate."""
        number = 1
        while True:
            try:
                return await asyncio.wait_for(
                    self.loan_provider.borrow(amount, pair.token_a.mint),
                    timeout=self.call_timeout_sec,
                )
            except asyncio.TimeoutError:
                if number >= self.max_retries:
                    raise
                logger.warning(
                    f"Borrow attempt {number}/{self.max_retries} for {pair.label} timed out"
                )
                number += 1

    async def _repay(self, loan: Loan, pair: TradingPair) -> Optional[str]:
        """
        Repay with up to ``max_retries`` attempts.

        Stops at the first attempt that succeeds or leaves the loan repaid.
        Returns the last error message instead of raising.
        """
        message = None
        for number in range(1, self.max_retries + 1):
            try:
                await asyncio.wait_for(loan.repay(), timeout=self.call_timeout_sec)
            except Exception as e:
                if loan.repaid:
                    break
                message = _describe(e, "repay")
                logger.warning(
                    f"Repay attempt {number}/{self.max_retries} for {pair.label} "
                    f"failed: {message}"
                )
                continue
            break
        else:
            logger.error(
                f"Flash loan repayment for {pair.label} failed after "
                f"{self.max_retries} attempt(s): {message}"
            )
            self._record_loan_event("repay_failed")
            return message
        self._record_loan_event("repaid")
        return None

    def _record_loan_event(self, event: str) -> None:
        if self.metrics:
            self.metrics.record_loan_event(event)


def _describe(error: Exception, action: str) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return f"{action} timed out"
    return str(error) or f"{action} failed: {type(error).__name__}"

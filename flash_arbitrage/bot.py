"""
Assembly of the arbitrage bot from settings.

Wires quote sources, the flash-loan provider, the trade executor, the shared
cycle context and the periodic driver into one object the entry points use.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from .adapters import (
    JupiterQuoteProvider,
    PaperLoanProvider,
    PaperTradeExecutor,
    RaydiumQuoteProvider,
)
from .config_schema import BotSettings
from .cycle import ArbitrageCycle, CycleContext
from .driver import PeriodicDriver
from .interfaces import (
    LoanProvider,
    QuoteProvider,
    SystemTimeProvider,
    TimeProvider,
    TradeExecutor,
)
from .ledger import TradeLedger
from .metrics import BotMetrics
from .opportunity import OpportunityEvaluator
from .rate_limiter import RateLimiter
from .types import TradingPair
from .utils import get_logger
from .wallet import Wallet, load_wallet

logger = get_logger(__name__)


@dataclass
class ArbitrageBot:
    settings: BotSettings
    wallet: Wallet
    pairs: List[TradingPair]
    context: CycleContext
    cycle: ArbitrageCycle
    driver: PeriodicDriver
    metrics: BotMetrics
    quote_providers: List[QuoteProvider] = field(default_factory=list)

    @property
    def ledger(self) -> TradeLedger:
        return self.context.ledger

    async def close(self) -> None:
        """Stop the driver and release provider sessions."""
        self.driver.stop()
        for provider in self.quote_providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()


def build_bot(
    settings: BotSettings,
    pairs: List[TradingPair],
    quote_a: Optional[QuoteProvider] = None,
    quote_b: Optional[QuoteProvider] = None,
    loan_provider: Optional[LoanProvider] = None,
    executor: Optional[TradeExecutor] = None,
    time_provider: Optional[TimeProvider] = None,
    metrics: Optional[BotMetrics] = None,
) -> ArbitrageBot:
    """
    Build a ready-to-run bot.

    Defaults to live Jupiter/Raydium quotes with a simulated flash loan and
    simulated legs (paper mode). Any collaborator can be overridden.

    Raises:
        ConfigurationError: If the wallet secret cannot be loaded
    """
    wallet = load_wallet(settings.wallet_private_key.get_secret_value())
    time_provider = time_provider or SystemTimeProvider()
    metrics = metrics or BotMetrics()

    quote_a = quote_a or JupiterQuoteProvider(timeout_sec=settings.call_timeout_sec)
    quote_b = quote_b or RaydiumQuoteProvider(timeout_sec=settings.call_timeout_sec)
    loan_provider = loan_provider or PaperLoanProvider()
    executor = executor or PaperTradeExecutor(
        program_id=settings.program_id,
        fee=settings.transaction_fee,
        time_provider=time_provider,
    )

    context = CycleContext(
        rate_limiter=RateLimiter(settings.rate_limit_ms, time_provider),
        ledger=TradeLedger(csv_path=settings.trades_csv_path),
        time_provider=time_provider,
    )
    evaluator = OpportunityEvaluator(
        quote_a, quote_b, call_timeout_sec=settings.call_timeout_sec
    )
    cycle = ArbitrageCycle(
        evaluator,
        loan_provider,
        executor,
        transaction_fee=settings.transaction_fee,
        max_retries=settings.max_retries,
        call_timeout_sec=settings.call_timeout_sec,
        metrics=metrics,
    )
    driver = PeriodicDriver(
        cycle,
        pairs,
        context,
        interval_sec=settings.check_interval_sec,
        metrics=metrics,
    )

    logger.info(
        f"Arbitrage bot initialized: wallet={wallet.public_key} "
        f"program={settings.program_id} mode={settings.execution_mode.value} "
        f"pairs={[p.label for p in pairs]}"
    )
    return ArbitrageBot(
        settings=settings,
        wallet=wallet,
        pairs=pairs,
        context=context,
        cycle=cycle,
        driver=driver,
        metrics=metrics,
        quote_providers=[quote_a, quote_b],
    )

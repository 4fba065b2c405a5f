"""Shared fixtures for the arbitrage bot tests."""

import base58
import pytest
from solders.keypair import Keypair

from flash_arbitrage.adapters.paper import (
    PaperLoanProvider,
    PaperQuoteProvider,
    PaperTradeExecutor,
)
from flash_arbitrage.constants import SOL_MINT, USDC_MINT
from flash_arbitrage.cycle import ArbitrageCycle, CycleContext
from flash_arbitrage.interfaces import DeterministicTimeProvider
from flash_arbitrage.ledger import TradeLedger
from flash_arbitrage.opportunity import OpportunityEvaluator
from flash_arbitrage.rate_limiter import RateLimiter
from flash_arbitrage.types import TokenConfig, TradingPair

WALLET_SECRET = base58.b58encode(bytes(Keypair())).decode("ascii")


def make_pair(min_profit_percent=0.3, max_slippage=0.1, symbol_a="USDC", symbol_b="SOL"):
    return TradingPair(
        token_a=TokenConfig(mint=USDC_MINT, decimals=6, min_size=100, symbol=symbol_a),
        token_b=TokenConfig(mint=SOL_MINT, decimals=9, min_size=0.1, symbol=symbol_b),
        min_profit_percent=min_profit_percent,
        max_slippage=max_slippage,
    )


@pytest.fixture
def pair():
    return make_pair()


@pytest.fixture
def clock():
    return DeterministicTimeProvider(start_time=1700000000.0)


@pytest.fixture
def jupiter():
    return PaperQuoteProvider("jupiter", {(USDC_MINT, SOL_MINT): 20.10})


@pytest.fixture
def raydium():
    return PaperQuoteProvider("raydium", {(USDC_MINT, SOL_MINT): 20.00})


@pytest.fixture
def loans():
    return PaperLoanProvider(fee_bps=5)


@pytest.fixture
def executor(clock):
    return PaperTradeExecutor(program_id="test-program", time_provider=clock)


@pytest.fixture
def context(clock):
    return CycleContext(
        rate_limiter=RateLimiter(1000, clock), ledger=TradeLedger(), time_provider=clock
    )


@pytest.fixture
def cycle(jupiter, raydium, loans, executor):
    evaluator = OpportunityEvaluator(jupiter, raydium, call_timeout_sec=1.0)
    return ArbitrageCycle(
        evaluator,
        loans,
        executor,
        transaction_fee=0.000005,
        max_retries=3,
        call_timeout_sec=1.0,
    )


@pytest.fixture
def pair_factory():
    return make_pair

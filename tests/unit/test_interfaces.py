"""Tests for dependency injection interfaces."""

import time

import pytest
from flash_arbitrage.adapters import (
    JupiterQuoteProvider,
    PaperLoanProvider,
    PaperQuoteProvider,
    PaperTradeExecutor,
    RaydiumQuoteProvider,
)
from flash_arbitrage.constants import USDC_MINT
from flash_arbitrage.interfaces import (
    DeterministicRandomProvider,
    DeterministicTimeProvider,
    Loan,
    LoanProvider,
    QuoteProvider,
    RandomProvider,
    SystemTimeProvider,
    TimeProvider,
    TradeExecutor,
)


def test_system_time_provider():
    """Test SystemTimeProvider."""
    provider = SystemTimeProvider()

    ts1 = provider.current_timestamp()
    time.sleep(0.01)
    ts2 = provider.current_timestamp()
    assert ts2 > ts1

    ms = provider.current_time_ms()
    assert isinstance(ms, int)
    assert ms > 0


def test_deterministic_time_provider():
    """Test DeterministicTimeProvider."""
    provider = DeterministicTimeProvider(start_time=1000.0)

    assert provider.current_timestamp() == 1000.0
    assert provider.current_time_ms() == 1000000

    provider.advance_time(5.5)
    assert provider.current_timestamp() == 1005.5

    provider.set_time(2000.0)
    assert provider.current_time_ms() == 2000000


def test_deterministic_random_provider():
    """Same seed gives the same sequence."""
    first = DeterministicRandomProvider(seed=7)
    second = DeterministicRandomProvider(seed=7)

    assert [first.random() for _ in range(5)] == [second.random() for _ in range(5)]
    value = first.uniform(5.0, 10.0)
    assert 5.0 <= value <= 10.0


def test_time_and_random_protocols():
    """Providers satisfy their protocols."""
    assert isinstance(SystemTimeProvider(), TimeProvider)
    assert isinstance(DeterministicTimeProvider(), TimeProvider)
    assert isinstance(DeterministicRandomProvider(), RandomProvider)


def test_quote_providers_satisfy_protocol():
    """HTTP and paper quote sources are interchangeable."""
    for provider in (
        JupiterQuoteProvider(),
        RaydiumQuoteProvider(),
        PaperQuoteProvider("paper"),
    ):
        assert isinstance(provider, QuoteProvider)


def test_paper_collaborators_satisfy_protocols():
    """Paper loan pool and executor satisfy the collaborator protocols."""
    assert isinstance(PaperLoanProvider(), LoanProvider)
    assert isinstance(PaperTradeExecutor(), TradeExecutor)


@pytest.mark.asyncio
async def test_paper_loan_satisfies_protocol():
    """Borrowed paper loans satisfy the Loan protocol."""
    loan = await PaperLoanProvider().borrow(10, USDC_MINT)
    assert isinstance(loan, Loan)

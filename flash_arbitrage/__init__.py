"""
Flash-Loan DEX Arbitrage Bot.

Polls two Solana DEX price sources, compares quotes for configured token
pairs and, when the spread clears the threshold, executes a buy-low/sell-high
leg pair funded by a flash loan. Trade attempts are kept in an append-only
ledger served over HTTP.
"""

PROJECT_NAME = "flash-arbitrage"

from flash_arbitrage.version import __version__ as VERSION
from flash_arbitrage.cycle import ArbitrageCycle, CycleContext, estimate_profit
from flash_arbitrage.driver import PeriodicDriver
from flash_arbitrage.ledger import LedgerStats, TradeLedger
from flash_arbitrage.opportunity import (
    OpportunityEvaluator,
    calculate_price_impact,
    price_diff_percent,
)
from flash_arbitrage.rate_limiter import RateLimiter
from flash_arbitrage.types import (
    NoOpportunity,
    Opportunity,
    Quote,
    TokenConfig,
    TradeLogEntry,
    TradingPair,
)

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "ArbitrageCycle",
    "CycleContext",
    "estimate_profit",
    "PeriodicDriver",
    "LedgerStats",
    "TradeLedger",
    "OpportunityEvaluator",
    "calculate_price_impact",
    "price_diff_percent",
    "RateLimiter",
    "NoOpportunity",
    "Opportunity",
    "Quote",
    "TokenConfig",
    "TradeLogEntry",
    "TradingPair",
]

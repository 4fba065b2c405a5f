"""
Constants and enums for the flash-loan arbitrage bot.

Centralizes venue names, cycle states and the default trading parameters.
"""

from enum import Enum


class ExecutionMode(str, Enum):
    """Execution modes for the bot."""

    PAPER = "paper"


class Venue(str, Enum):
    """Price sources / trading venues."""

    JUPITER = "jupiter"
    RAYDIUM = "raydium"


class TradeSide(str, Enum):
    """Side of a single trade leg."""

    BUY = "buy"
    SELL = "sell"


class Direction(str, Enum):
    """Which venue the cheap leg is bought on."""

    BUY_ON_A = "buy_on_a"
    BUY_ON_B = "buy_on_b"


class CycleState(str, Enum):
    """Per-pair state within one ArbitrageCycle invocation."""

    IDLE = "idle"
    QUOTES_FETCHED = "quotes_fetched"
    NO_OPPORTUNITY = "no_opportunity"
    SKIPPED = "skipped"
    PROFIT_CHECK_FAILED = "profit_check_failed"
    BORROWING = "borrowing"
    BORROW_FAILED = "borrow_failed"
    EXECUTING = "executing"
    REPAID_SUCCESS = "repaid_success"
    REPAID_FAILURE = "repaid_failure"


TERMINAL_STATES = frozenset(
    {
        CycleState.NO_OPPORTUNITY,
        CycleState.SKIPPED,
        CycleState.PROFIT_CHECK_FAILED,
        CycleState.BORROW_FAILED,
        CycleState.REPAID_SUCCESS,
        CycleState.REPAID_FAILURE,
    }
)


# Trading defaults
DEFAULT_MAX_RETRIES = 3
DEFAULT_TRANSACTION_FEE = 0.000005  # SOL (5000 lamports)
DEFAULT_RATE_LIMIT_MS = 1000
DEFAULT_MIN_PROFIT_PERCENT = 0.5
DEFAULT_MAX_SLIPPAGE_PERCENT = 0.1
DEFAULT_CHECK_INTERVAL_SEC = 60.0
DEFAULT_CALL_TIMEOUT_SEC = 30.0
DEFAULT_MAX_BORROW_RATE_BPS = 5000  # 50%
LEGS_PER_TRADE = 2

# Health
HEALTH_STALE_AFTER_SEC = 15 * 60

# Network defaults
DEFAULT_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_PROGRAM_ID = "ArB1TR9ge5nP4r1M2ooHhqrFe1T8yLmxqGCqFJBvmdzz"
JUPITER_QUOTE_URL = "https://quote-api.jup.ag/v6/quote"
RAYDIUM_QUOTE_URL = "https://transaction-v1.raydium.io/compute/swap-base-in"

# Well-known mints
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
SOL_MINT = "So11111111111111111111111111111111111111112"

# Ledger
NO_PROFIT_AFTER_FEES = "no profit after fees"

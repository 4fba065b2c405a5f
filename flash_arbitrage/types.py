"""
Core data types for opportunity detection and trade execution.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

from .constants import TERMINAL_STATES, CycleState, Direction, TradeSide


@dataclass(frozen=True)
class TokenConfig:
    """
    A tradable token.

    Attributes:
        mint: Opaque mint identifier
        decimals: Decimal precision of the token
        min_size: Minimum trade size in token units
        symbol: Optional display symbol (e.g., "USDC")
    """

    mint: str
    decimals: int
    min_size: float
    symbol: Optional[str] = None

    def __post_init__(self):
        if self.decimals < 0:
            raise ValueError(f"decimals must be >= 0, got {self.decimals}")
        if self.min_size <= 0:
            raise ValueError(f"min_size must be > 0, got {self.min_size}")

    @property
    def label(self) -> str:
        return self.symbol or self.mint


@dataclass(frozen=True)
class TradingPair:
    """
    A configured token pair with its trading thresholds.

    Both thresholds are expressed in percent (0.5 means 0.5%).
    """

    token_a: TokenConfig
    token_b: TokenConfig
    min_profit_percent: float
    max_slippage: float

    def __post_init__(self):
        if self.min_profit_percent <= 0:
            raise ValueError(
                f"min_profit_percent must be > 0, got {self.min_profit_percent}"
            )
        if self.max_slippage <= 0:
            raise ValueError(f"max_slippage must be > 0, got {self.max_slippage}")

    @property
    def label(self) -> str:
        return f"{self.token_a.label}/{self.token_b.label}"

    @property
    def trade_amount(self) -> float:
        """Amount evaluated and traded per cycle (token A minimum size)."""
        return self.token_a.min_size


@dataclass(frozen=True)
class Quote:
    """
    A price quote for token A -> token B.

    Attributes:
        price: Units of token B per unit of token A
        price_impact: Price impact in percent
        venue: Name of the quoting venue
        amount_in: Input amount in token A units
        amount_out: Output amount in token B units
    """

    price: float
    price_impact: float
    venue: Optional[str] = None
    amount_in: Optional[float] = None
    amount_out: Optional[float] = None


@dataclass(frozen=True)
class Opportunity:
    """A spread large enough to act on."""

    pair: TradingPair
    direction: Direction
    price_a: float
    price_b: float
    price_diff_percent: float
    amount: float
    quote_a: Optional[Quote] = None
    quote_b: Optional[Quote] = None


@dataclass(frozen=True)
class NoOpportunity:
    """Evaluator declined the pair; ``reason`` says why."""

    pair: TradingPair
    reason: str
    price_diff_percent: Optional[float] = None


Evaluation = Union[Opportunity, NoOpportunity]


@dataclass(frozen=True)
class LegReceipt:
    """Result of a single executed trade leg."""

    venue: str
    side: TradeSide
    amount: float
    signature: Optional[str] = None
    fee: float = 0.0


@dataclass
class AttemptResult:
    """
    Outcome of one attempt at the two-leg sequence.

    A failed attempt carries the error message of the leg that failed; the
    receipts of any leg completed earlier in the same attempt are kept for
    logging only, the next attempt restarts both legs.
    """

    attempt: int
    success: bool
    receipts: List[LegReceipt] = field(default_factory=list)
    error: Optional[str] = None


@dataclass(frozen=True)
class TradeLogEntry:
    """
    One recorded trade attempt.

    Frozen: the ledger never edits an entry once appended.
    """

    timestamp: float
    successful: bool
    token_pair_label: str
    principal: float
    interest: Optional[float] = None
    gas_fee: Optional[float] = None
    profit_loss: Optional[float] = None
    quote_a: Optional[float] = None
    quote_b: Optional[float] = None
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PairOutcome:
    """How one pair ended within a cycle invocation."""

    pair_label: str
    state: CycleState = CycleState.IDLE
    entry: Optional[TradeLogEntry] = None
    attempts: int = 0
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        """True when the outcome must be signalled to the periodic driver."""
        if self.state not in TERMINAL_STATES:
            return True
        return self.state in (CycleState.REPAID_FAILURE, CycleState.BORROW_FAILED)


@dataclass
class CycleReport:
    """Summary of one ``ArbitrageCycle.run_once`` call."""

    started_at: float
    finished_at: Optional[float] = None
    outcomes: List[PairOutcome] = field(default_factory=list)

    @property
    def failures(self) -> List[PairOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def has_failures(self) -> bool:
        return bool(self.failures)

    @property
    def trades_attempted(self) -> int:
        return sum(1 for o in self.outcomes if o.attempts > 0)

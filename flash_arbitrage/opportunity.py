"""
Opportunity detection.

Fetches a quote from each venue for the same direction and amount, gates on
route availability and price impact, and reports an Opportunity when the
spread between the two venues exceeds the pair's minimum profit percent.

All percentages are plain percent (0.5 means 0.5%), never fractions or bps.
"""

import asyncio
from typing import Optional, Tuple

from .constants import DEFAULT_CALL_TIMEOUT_SEC, Direction
from .exceptions import QuoteError
from .interfaces import QuoteProvider
from .types import Evaluation, NoOpportunity, Opportunity, Quote, TradingPair
from .utils import get_logger

logger = get_logger(__name__)


def calculate_price_impact(amount: float, actual_out: float, price: float) -> float:
    """
    Price impact in percent of an execution against a reference price.

    ``|actual_out - amount * price| / (amount * price) * 100``

    Raises:
        ValueError: If the expected output is zero
    """
    expected_out = amount * price
    if expected_out == 0:
        raise ValueError("expected output is zero; amount and price must be > 0")
    return abs(actual_out - expected_out) / expected_out * 100


def price_diff_percent(price_a: float, price_b: float) -> float:
    """Spread between two prices relative to the lower one, in percent."""
    return abs(price_a - price_b) / min(price_a, price_b) * 100


def choose_direction(price_a: float, price_b: float) -> Direction:
    """Buy on the cheaper venue, sell on the more expensive one."""
    return Direction.BUY_ON_A if price_a < price_b else Direction.BUY_ON_B


class OpportunityEvaluator:
    """
    Decides whether a pair is worth trading right now.

    Provider failures, timeouts, missing routes and excessive price impact all
    resolve to NoOpportunity; none of them raise.
    """

    def __init__(
        self,
        provider_a: QuoteProvider,
        provider_b: QuoteProvider,
        call_timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC,
    ):
        self.provider_a = provider_a
        self.provider_b = provider_b
        self.call_timeout_sec = call_timeout_sec

    @property
    def venue_a(self) -> str:
        return self.provider_a.name

    @property
    def venue_b(self) -> str:
        return self.provider_b.name

    async def evaluate(
        self, pair: TradingPair, amount: Optional[float] = None
    ) -> Evaluation:
        """
        Evaluate ``pair`` for a trade of ``amount`` units of token A.

        Args:
            pair: Trading pair and thresholds
            amount: Trade size; defaults to the pair's token A minimum size

        Returns:
            Opportunity if the spread clears ``pair.min_profit_percent``,
            otherwise NoOpportunity with a reason
        """
        if amount is None:
            amount = pair.trade_amount

        quote_a, quote_b = await asyncio.gather(
            self._fetch_quote(self.provider_a, pair, amount),
            self._fetch_quote(self.provider_b, pair, amount),
        )

        for venue, quote in ((self.venue_a, quote_a), (self.venue_b, quote_b)):
            if quote is None:
                logger.debug(f"{pair.label}: no viable route on {venue}")
                return NoOpportunity(pair, f"no route on {venue}")
            if quote.price <= 0:
                logger.warning(f"{pair.label}: {venue} returned price {quote.price}")
                return NoOpportunity(pair, f"invalid price on {venue}")
            if quote.price_impact > pair.max_slippage:
                logger.info(
                    f"{pair.label}: high price impact on {venue}: "
                    f"{quote.price_impact:.4f}% > {pair.max_slippage}%"
                )
                return NoOpportunity(pair, f"price impact too high on {venue}")

        diff = price_diff_percent(quote_a.price, quote_b.price)
        if diff <= pair.min_profit_percent:
            logger.debug(
                f"{pair.label}: spread {diff:.4f}% <= {pair.min_profit_percent}%"
            )
            return NoOpportunity(pair, "spread below threshold", price_diff_percent=diff)

        direction = choose_direction(quote_a.price, quote_b.price)
        logger.info(
            f"{pair.label}: opportunity {direction.value} spread={diff:.4f}% "
            f"{self.venue_a}={quote_a.price:.8f} {self.venue_b}={quote_b.price:.8f}"
        )
        return Opportunity(
            pair=pair,
            direction=direction,
            price_a=quote_a.price,
            price_b=quote_b.price,
            price_diff_percent=diff,
            amount=amount,
            quote_a=quote_a,
            quote_b=quote_b,
        )

    def venues_for(self, direction: Direction) -> Tuple[str, str]:
        """Return (buy venue, sell venue) for a direction."""
        if direction is Direction.BUY_ON_A:
            return self.venue_a, self.venue_b
        return self.venue_b, self.venue_a

    async def _fetch_quote(
        self, provider: QuoteProvider, pair: TradingPair, amount: float
    ) -> Optional[Quote]:
        try:
            return await asyncio.wait_for(
                provider.get_quote(
                    pair.token_a.mint, pair.token_b.mint, amount, pair
                ),
                timeout=self.call_timeout_sec,
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"{pair.label}: quote from {provider.name} timed out "
                f"after {self.call_timeout_sec}s"
            )
        except QuoteError as e:
            logger.warning(f"{pair.label}: quote from {provider.name} failed: {e}")
        except Exception as e:
            logger.error(
                f"{pair.label}: unexpected error quoting on {provider.name}: {e}",
                exc_info=True,
            )
        return None

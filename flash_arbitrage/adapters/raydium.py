"""
Raydium quote source (trade API ``compute/swap-base-in``).
"""

from typing import Any, Dict, Optional

from ..constants import RAYDIUM_QUOTE_URL, Venue
from ..exceptions import QuoteError
from ..types import Quote, TradingPair
from ..utils import from_base_units, get_logger
from .base import HttpQuoteProvider

logger = get_logger(__name__)


class RaydiumQuoteProvider(HttpQuoteProvider):
    """
    Swap-base-in quote from Raydium.

    Raydium reports ``priceImpactPct`` already in percent.
    """

    name = Venue.RAYDIUM.value

    def __init__(self, base_url: str = RAYDIUM_QUOTE_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    def build_params(
        self, input_mint: str, output_mint: str, raw_amount: int, slippage_bps: int
    ) -> Dict[str, Any]:
        return {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(raw_amount),
            "slippageBps": str(slippage_bps),
            "txVersion": "V0",
        }

    def parse_response(
        self, status: int, payload: Any, pair: TradingPair
    ) -> Optional[Quote]:
        if not isinstance(payload, dict):
            raise QuoteError(
                f"unexpected raydium payload: {payload!r}", venue=self.name, pair=pair.label
            )

        if status != 200:
            raise QuoteError(
                f"raydium error (HTTP {status}): {payload.get('msg')}",
                venue=self.name,
                pair=pair.label,
            )
        if not payload.get("success"):
            logger.debug(f"{pair.label}: raydium has no route ({payload.get('msg')})")
            return None

        data = payload.get("data") or {}
        try:
            amount_in = from_base_units(data["inputAmount"], pair.token_a.decimals)
            amount_out = from_base_units(data["outputAmount"], pair.token_b.decimals)
            impact_pct = float(data.get("priceImpactPct") or 0)
        except (KeyError, TypeError, ValueError) as e:
            raise QuoteError(
                f"malformed raydium quote: {e}", venue=self.name, pair=pair.label
            ) from e

        if amount_in <= 0 or amount_out <= 0:
            return None

        return Quote(
            price=amount_out / amount_in,
            price_impact=abs(impact_pct),
            venue=self.name,
            amount_in=amount_in,
            amount_out=amount_out,
        )

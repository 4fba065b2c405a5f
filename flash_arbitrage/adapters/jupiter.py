"""
Jupiter aggregator quote source (v6 quote API).
"""

from typing import Any, Dict, Optional

from ..constants import JUPITER_QUOTE_URL, Venue
from ..exceptions import QuoteError
from ..types import Quote, TradingPair
from ..utils import from_base_units, get_logger
from .base import HttpQuoteProvider

logger = get_logger(__name__)

NO_ROUTE_CODES = {"COULD_NOT_FIND_ANY_ROUTE", "NO_ROUTES_FOUND", "TOKEN_NOT_TRADABLE"}


class JupiterQuoteProvider(HttpQuoteProvider):
    """
    Best-route quote from Jupiter.

    ``priceImpactPct`` is reported as a fraction (0.001 = 0.1%) and is
    converted to percent here.
    """

    name = Venue.JUPITER.value

    def __init__(self, base_url: str = JUPITER_QUOTE_URL, **kwargs):
        super().__init__(base_url, **kwargs)

    def build_params(
        self, input_mint: str, output_mint: str, raw_amount: int, slippage_bps: int
    ) -> Dict[str, Any]:
        return {
            "inputMint": input_mint,
            "outputMint": output_mint,
            "amount": str(raw_amount),
            "slippageBps": str(slippage_bps),
            "restrictIntermediateTokens": "true",
        }

    def parse_response(
        self, status: int, payload: Any, pair: TradingPair
    ) -> Optional[Quote]:
        if not isinstance(payload, dict):
            raise QuoteError(
                f"unexpected jupiter payload: {payload!r}", venue=self.name, pair=pair.label
            )

        if status != 200 or "error" in payload:
            if payload.get("errorCode") in NO_ROUTE_CODES or status in (400, 404):
                logger.debug(f"{pair.label}: jupiter has no route ({payload.get('error')})")
                return None
            raise QuoteError(
                f"jupiter error (HTTP {status}): {payload.get('error')}",
                venue=self.name,
                pair=pair.label,
            )

        try:
            amount_in = from_base_units(payload["inAmount"], pair.token_a.decimals)
            amount_out = from_base_units(payload["outAmount"], pair.token_b.decimals)
            impact_pct = float(payload.get("priceImpactPct") or 0) * 100
        except (KeyError, TypeError, ValueError) as e:
            raise QuoteError(
                f"malformed jupiter quote: {e}", venue=self.name, pair=pair.label
            ) from e

        if amount_in <= 0 or amount_out <= 0 or payload.get("routePlan") == []:
            return None

        return Quote(
            price=amount_out / amount_in,
            price_impact=abs(impact_pct),
            venue=self.name,
            amount_in=amount_in,
            amount_out=amount_out,
        )

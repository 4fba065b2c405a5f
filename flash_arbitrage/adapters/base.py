"""
Base class for HTTP quote sources.

Subclasses build the venue's query parameters and translate its JSON answer
into a Quote; session handling and transport errors live here.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import aiohttp

from ..constants import DEFAULT_CALL_TIMEOUT_SEC
from ..exceptions import NetworkError, QuoteError
from ..types import Quote, TradingPair
from ..utils import get_logger, percent_to_basis_points, to_base_units

logger = get_logger(__name__)


class HttpQuoteProvider(ABC):
    """
    Quote provider backed by a JSON-over-HTTP API.

    Can be used as an async context manager; otherwise the session is created
    lazily and must be released with ``close``.
    """

    name = "http"

    def __init__(
        self,
        base_url: str,
        timeout_sec: float = DEFAULT_CALL_TIMEOUT_SEC,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.base_url = base_url
        self.timeout = aiohttp.ClientTimeout(total=timeout_sec)
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def get_quote(
        self, input_mint: str, output_mint: str, amount: float, pair: TradingPair
    ) -> Optional[Quote]:
        params = self.build_params(
            input_mint,
            output_mint,
            to_base_units(amount, pair.token_a.decimals),
            percent_to_basis_points(pair.max_slippage),
        )
        status, payload = await self._get_json(params, pair)
        return self.parse_response(status, payload, pair)

    async def _get_json(self, params: Dict[str, Any], pair: TradingPair):
        session = self._ensure_session()
        try:
            async with session.get(self.base_url, params=params) as response:
                if response.status >= 500:
                    raise NetworkError(
                        f"{self.name} returned HTTP {response.status}",
                        endpoint=self.base_url,
                        status_code=response.status,
                    )
                payload = await response.json(content_type=None)
                return response.status, payload
        except aiohttp.ClientError as e:
            raise QuoteError(
                f"{self.name} request failed: {e}", venue=self.name, pair=pair.label
            ) from e
        except NetworkError as e:
            raise QuoteError(str(e), venue=self.name, pair=pair.label) from e

    @abstractmethod
    def build_params(
        self, input_mint: str, output_mint: str, raw_amount: int, slippage_bps: int
    ) -> Dict[str, Any]:
        """Query parameters for a quote request."""

    @abstractmethod
    def parse_response(
        self, status: int, payload: Any, pair: TradingPair
    ) -> Optional[Quote]:
        """Translate the venue's JSON answer; None means no route."""

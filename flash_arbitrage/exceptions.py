"""
Exception hierarchy for the flash-loan arbitrage bot.

Expected outcomes (no route, high price impact, unprofitable after fees) are
not exceptions; these types cover configuration, collaborator and execution
failures only.
"""

from typing import Any, Dict, Optional


class FlashArbitrageError(Exception):
    """Base exception for all arbitrage bot errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(FlashArbitrageError):
    """Raised when configuration is missing or invalid. Fatal at startup."""

    pass


class ValidationError(FlashArbitrageError):
    """Raised when validation of runtime data fails."""

    pass


class QuoteError(FlashArbitrageError):
    """Raised when a quote provider fails to answer."""

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        pair: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.venue = venue
        self.pair = pair


class LoanError(FlashArbitrageError):
    """Raised when borrowing or repaying a flash loan fails."""

    def __init__(
        self,
        message: str,
        asset: Optional[str] = None,
        principal: Optional[float] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.asset = asset
        self.principal = principal


class ExecutionError(FlashArbitrageError):
    """Raised when a trade leg fails to execute."""

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        side: Optional[str] = None,
        attempt: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.venue = venue
        self.side = side
        self.attempt = attempt


class NetworkError(FlashArbitrageError):
    """Raised when network or connectivity issues occur."""

    def __init__(
        self,
        message: str,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.endpoint = endpoint
        self.status_code = status_code

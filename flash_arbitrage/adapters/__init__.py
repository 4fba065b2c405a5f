"""
Venue and collaborator adapters.
"""

from .jupiter import JupiterQuoteProvider
from .paper import PaperLoan, PaperLoanProvider, PaperQuoteProvider, PaperTradeExecutor
from .raydium import RaydiumQuoteProvider

__all__ = [
    "JupiterQuoteProvider",
    "RaydiumQuoteProvider",
    "PaperQuoteProvider",
    "PaperLoan",
    "PaperLoanProvider",
    "PaperTradeExecutor",
]

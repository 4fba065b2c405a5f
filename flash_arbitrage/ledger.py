"""
Append-only trade ledger with summary statistics and CSV export.
"""

import csv
import io
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .exceptions import ValidationError
from .types import TradeLogEntry
from .utils import get_logger, timestamp_to_iso

logger = get_logger(__name__)

CSV_COLUMNS = [f.name for f in fields(TradeLogEntry)]


@dataclass(frozen=True)
class LedgerStats:
    """
    Summary statistics over the ledger.

    ``average_profit_on_success`` is None when there are no successful
    entries.
    """

    total_trades: int
    successful_trades: int
    total_profit: float
    average_profit_on_success: Optional[float]
    total_gas_fees: float
    total_interest: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalTrades": self.total_trades,
            "successfulTrades": self.successful_trades,
            "totalProfit": self.total_profit,
            "averageProfitOnSuccess": self.average_profit_on_success,
            "totalGasFees": self.total_gas_fees,
            "totalInterest": self.total_interest,
        }


def to_csv(entries: Iterable[TradeLogEntry]) -> str:
    """Render entries as CSV text with a header row; timestamps as ISO 8601."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS)
    writer.writeheader()
    for entry in entries:
        row = entry.to_dict()
        row["timestamp"] = timestamp_to_iso(entry.timestamp)
        writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return buffer.getvalue()


class TradeLedger:
    """
    In-memory record of trade attempts in insertion order.

    ``append`` is the only mutator. When ``csv_path`` is set the whole ledger
    is rewritten to that file after every append; failures to write are
    logged and otherwise ignored.
    """

    def __init__(self, csv_path: Optional[Union[str, Path]] = None):
        self._entries: List[TradeLogEntry] = []
        self.csv_path = Path(csv_path) if csv_path else None

    def __len__(self) -> int:
        return len(self._entries)

    def append(self, entry: TradeLogEntry) -> None:
        if not isinstance(entry, TradeLogEntry):
            raise ValidationError(
                f"expected TradeLogEntry, got {type(entry).__name__}"
            )
        self._entries.append(entry)
        if self.csv_path is not None:
            self._mirror_to_csv()

    def all(self) -> List[TradeLogEntry]:
        """All entries in insertion order (a copy; entries are frozen)."""
        return list(self._entries)

    def between(self, start: float, end: float) -> List[TradeLogEntry]:
        """Entries with ``start <= timestamp <= end``."""
        return [e for e in self._entries if start <= e.timestamp <= end]

    def stats(self) -> LedgerStats:
        successful = [e for e in self._entries if e.successful]
        total_profit = sum(e.profit_loss or 0.0 for e in self._entries)

        average = None
        if successful:
            average = sum(e.profit_loss or 0.0 for e in successful) / len(successful)

        return LedgerStats(
            total_trades=len(self._entries),
            successful_trades=len(successful),
            total_profit=total_profit,
            average_profit_on_success=average,
            total_gas_fees=sum(e.gas_fee or 0.0 for e in self._entries),
            total_interest=sum(e.interest or 0.0 for e in self._entries),
        )

    def _mirror_to_csv(self) -> None:
        try:
            self.csv_path.parent.mkdir(parents=True, exist_ok=True)
            self.csv_path.write_text(to_csv(self._entries), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to mirror trades to {self.csv_path}: {e}")


def entry_to_record(entry: TradeLogEntry) -> Dict[str, Any]:
    """JSON record for the HTTP API (camelCase keys, ISO timestamp)."""
    return {
        "timestamp": timestamp_to_iso(entry.timestamp),
        "successful": entry.successful,
        "tokenPair": entry.token_pair_label,
        "principal": entry.principal,
        "interest": entry.interest,
        "gasFee": entry.gas_fee,
        "profitLoss": entry.profit_loss,
        "quoteA": entry.quote_a,
        "quoteB": entry.quote_b,
        "errorMessage": entry.error_message,
    }

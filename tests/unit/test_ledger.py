"""
Unit tests for flash_arbitrage.ledger
"""

import csv
import io

import pytest

from flash_arbitrage.exceptions import ValidationError
from flash_arbitrage.ledger import (
    CSV_COLUMNS,
    TradeLedger,
    entry_to_record,
    to_csv,
)
from flash_arbitrage.types import TradeLogEntry
from flash_arbitrage.utils import iso_to_timestamp


def _entry(timestamp=1700000000.0, successful=True, profit=1.0, **kwargs):
    values = dict(
        timestamp=timestamp,
        successful=successful,
        token_pair_label="USDC/SOL",
        principal=100.0,
        interest=0.05,
        gas_fee=0.00001,
        profit_loss=profit if successful else None,
        quote_a=20.10,
        quote_b=20.00,
        error_message=None if successful else "simulated buy failure on raydium",
    )
    values.update(kwargs)
    return TradeLogEntry(**values)


class TestTradeLedgerStats:
    def test_empty_ledger(self):
        stats = TradeLedger().stats()
        assert stats.total_trades == 0
        assert stats.successful_trades == 0
        assert stats.total_profit == 0.0
        assert stats.average_profit_on_success is None

    def test_mixed_entries(self):
        ledger = TradeLedger()
        ledger.append(_entry(profit=2.0))
        ledger.append(_entry(profit=4.0))
        ledger.append(_entry(successful=False))

        stats = ledger.stats()
        assert stats.total_trades == 3
        assert stats.successful_trades == 2
        assert stats.total_profit == pytest.approx(6.0)
        assert stats.average_profit_on_success == pytest.approx(3.0)
        assert stats.total_gas_fees == pytest.approx(0.00003)
        assert stats.total_interest == pytest.approx(0.15)

    def test_average_is_none_without_successes(self):
        ledger = TradeLedger()
        ledger.append(_entry(successful=False))
        assert ledger.stats().average_profit_on_success is None

    def test_missing_fee_fields_count_as_zero(self):
        ledger = TradeLedger()
        ledger.append(
            _entry(successful=False, interest=None, gas_fee=None, error_message="x")
        )
        stats = ledger.stats()
        assert stats.total_gas_fees == 0.0
        assert stats.total_interest == 0.0

    def test_stats_to_dict_keys(self):
        data = TradeLedger().stats().to_dict()
        assert set(data) == {
            "totalTrades",
            "successfulTrades",
            "totalProfit",
            "averageProfitOnSuccess",
            "totalGasFees",
            "totalInterest",
        }


class TestTradeLedgerEntries:
    def test_insertion_order_preserved(self):
        ledger = TradeLedger()
        for ts in (3.0, 1.0, 2.0):
            ledger.append(_entry(timestamp=ts))
        assert [e.timestamp for e in ledger.all()] == [3.0, 1.0, 2.0]
        assert len(ledger) == 3

    def test_all_returns_a_copy(self):
        ledger = TradeLedger()
        ledger.append(_entry())
        snapshot = ledger.all()
        snapshot.clear()
        assert len(ledger) == 1

    def test_reads_do_not_change_stats(self):
        ledger = TradeLedger()
        ledger.append(_entry(profit=2.0))
        ledger.append(_entry(successful=False))

        before = ledger.stats()
        ledger.all()
        ledger.between(0, 2e9)
        assert ledger.stats() == before

    def test_append_rejects_other_types(self):
        with pytest.raises(ValidationError):
            TradeLedger().append({"successful": True})

    def test_between_is_inclusive(self):
        ledger = TradeLedger()
        for ts in (100.0, 200.0, 300.0, 400.0):
            ledger.append(_entry(timestamp=ts))
        assert [e.timestamp for e in ledger.between(200.0, 300.0)] == [200.0, 300.0]
        assert ledger.between(401.0, 500.0) == []


class TestCsvExport:
    def test_header_only_for_empty_ledger(self):
        rows = list(csv.reader(io.StringIO(to_csv([]))))
        assert rows == [CSV_COLUMNS]

    def test_rows_use_iso_timestamps_and_blank_nones(self):
        text = to_csv([_entry(successful=False, timestamp=1700000000.0)])
        rows = list(csv.DictReader(io.StringIO(text)))

        assert len(rows) == 1
        row = rows[0]
        assert iso_to_timestamp(row["timestamp"]) == 1700000000.0
        assert row["successful"] == "False"
        assert row["profit_loss"] == ""
        assert row["error_message"] == "simulated buy failure on raydium"

    def test_csv_mirror_rewritten_on_append(self, tmp_path):
        path = tmp_path / "out" / "trades.csv"
        ledger = TradeLedger(csv_path=path)
        ledger.append(_entry())
        ledger.append(_entry(successful=False))

        rows = list(csv.DictReader(io.StringIO(path.read_text())))
        assert len(rows) == 2

    def test_csv_mirror_failure_does_not_raise(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        ledger = TradeLedger(csv_path=blocker / "trades.csv")

        ledger.append(_entry())

        assert len(ledger) == 1


class TestEntryToRecord:
    def test_camel_case_record(self):
        record = entry_to_record(_entry())
        assert record["tokenPair"] == "USDC/SOL"
        assert record["profitLoss"] == 1.0
        assert record["gasFee"] == 0.00001
        assert record["errorMessage"] is None
        assert record["timestamp"].startswith("2023-11-14T22:13:20")

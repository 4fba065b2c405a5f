"""
Tests for the HTTP endpoints: health, trade ledger JSON/stats, CSV exports
and Prometheus metrics.
"""

import sys
from pathlib import Path

# Add parent directory to path before imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio  # noqa: E402
import csv  # noqa: E402
import io  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from flash_arbitrage.adapters import (  # noqa: E402
    PaperLoanProvider,
    PaperQuoteProvider,
    PaperTradeExecutor,
)
from flash_arbitrage.bot import build_bot  # noqa: E402
from flash_arbitrage.config_loader import default_pairs, load_settings  # noqa: E402
from flash_arbitrage.constants import SOL_MINT, USDC_MINT  # noqa: E402
from flash_arbitrage.interfaces import DeterministicTimeProvider  # noqa: E402
from web_server import app, state  # noqa: E402

from conftest import WALLET_SECRET  # noqa: E402


@pytest.fixture
def client():
    """Test client fixture"""
    return TestClient(app)


@pytest.fixture
def clock():
    return DeterministicTimeProvider(start_time=1700000000.0)


@pytest.fixture
def bot(clock):
    """Paper bot attached to the server state; detached after the test"""
    settings = load_settings(
        {"WALLET_PRIVATE_KEY": WALLET_SECRET, "MIN_PROFIT_PERCENT": "0.3"}
    )
    bot = build_bot(
        settings,
        default_pairs(settings),
        quote_a=PaperQuoteProvider("jupiter", {(USDC_MINT, SOL_MINT): 20.10}),
        quote_b=PaperQuoteProvider("raydium", {(USDC_MINT, SOL_MINT): 20.00}),
        loan_provider=PaperLoanProvider(),
        executor=PaperTradeExecutor(time_provider=clock),
        time_provider=clock,
    )
    state.attach(bot, autostart=False)
    yield bot
    state.detach()


def _run_check(bot):
    return asyncio.run(bot.driver.tick())


def _csv_rows(text):
    return list(csv.DictReader(io.StringIO(text)))


class TestHealthEndpoint:
    """Test GET /health"""

    def test_unhealthy_without_bot(self, client):
        response = client.get("/health")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["metrics"]["totalChecks"] == 0
        assert data["metrics"]["lastCheckTime"] is None

    def test_unhealthy_before_first_check(self, client, bot):
        assert client.get("/health").json()["status"] == "unhealthy"

    def test_healthy_after_check(self, client, bot, clock):
        _run_check(bot)
        clock.advance_time(30)

        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["metrics"]["totalChecks"] == 1
        assert data["metrics"]["successfulTrades"] == 1
        assert data["metrics"]["failedTrades"] == 0
        assert data["metrics"]["uptime"] == pytest.approx(30)
        assert data["metrics"]["lastCheckTime"].startswith("2023-11-14T22:13:20")

    def test_unhealthy_after_fifteen_minutes(self, client, bot, clock):
        _run_check(bot)
        clock.advance_time(901)
        assert client.get("/health").json()["status"] == "unhealthy"


class TestTradesEndpoints:
    """Test GET /trades and /trade-stats"""

    def test_requires_bot(self, client):
        assert client.get("/trades").status_code == 503
        assert client.get("/trade-stats").status_code == 503

    def test_empty_ledger(self, client, bot):
        assert client.get("/trades").json() == []

        stats = client.get("/trade-stats").json()
        assert stats["totalTrades"] == 0
        assert stats["averageProfitOnSuccess"] is None

    def test_trade_recorded(self, client, bot):
        _run_check(bot)

        trades = client.get("/trades").json()
        assert len(trades) == 1
        trade = trades[0]
        assert trade["successful"] is True
        assert trade["tokenPair"] == "USDC/SOL"
        assert trade["principal"] == 100
        assert trade["quoteA"] == 20.10
        assert trade["quoteB"] == 20.00
        assert trade["profitLoss"] == pytest.approx(9.99999)
        assert trade["errorMessage"] is None

        stats = client.get("/trade-stats").json()
        assert stats["totalTrades"] == 1
        assert stats["successfulTrades"] == 1
        assert stats["totalProfit"] == pytest.approx(9.99999)
        assert stats["averageProfitOnSuccess"] == pytest.approx(9.99999)
        assert stats["totalGasFees"] == pytest.approx(0.00001)
        assert stats["totalInterest"] == pytest.approx(0.05)

    def test_failed_trade_recorded(self, client, bot):
        bot.cycle.executor.fail_next = 3
        _run_check(bot)

        trade = client.get("/trades").json()[0]
        assert trade["successful"] is False
        assert trade["errorMessage"] == "simulated buy failure on raydium"
        assert client.get("/health").json()["metrics"]["failedTrades"] == 1


class TestExportEndpoints:
    """Test CSV exports"""

    def test_export_all(self, client, bot):
        _run_check(bot)

        response = client.get("/export-trades")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert 'filename="trades.csv"' in response.headers["content-disposition"]

        rows = _csv_rows(response.text)
        assert len(rows) == 1
        assert rows[0]["token_pair_label"] == "USDC/SOL"

    def test_export_range_includes_whole_days(self, client, bot):
        _run_check(bot)

        response = client.get("/export-trades/2023-11-14/2023-11-14")
        assert response.status_code == 200
        assert len(_csv_rows(response.text)) == 1
        assert "trades_2023-11-14_2023-11-14.csv" in response.headers[
            "content-disposition"
        ]

    def test_export_range_outside_trades(self, client, bot):
        _run_check(bot)

        response = client.get("/export-trades/2023-11-15/2023-11-20")
        assert response.status_code == 200
        assert _csv_rows(response.text) == []
        assert response.text.startswith("timestamp,")

    def test_export_range_invalid_date(self, client, bot):
        assert client.get("/export-trades/yesterday/2023-11-20").status_code == 400

    def test_export_range_reversed(self, client, bot):
        assert client.get("/export-trades/2023-11-20/2023-11-14").status_code == 400


class TestMetricsEndpoint:
    """Test GET /metrics"""

    def test_prometheus_exposition(self, client, bot):
        _run_check(bot)

        response = client.get("/metrics")
        assert response.status_code == 200
        assert "flash_arbitrage_checks_total" in response.text
        assert 'state="repaid_success"' in response.text


class TestLifecycle:
    """Test startup/shutdown hooks"""

    def test_driver_started_and_stopped(self, bot):
        state.autostart = True
        with TestClient(app) as client:
            assert state.driver_task is not None
            assert client.get("/health").status_code == 200

        assert state.driver_task is None
        assert bot.driver._stop_event.is_set()

#!/usr/bin/env python3
"""
FastAPI Web Server for the Flash-Loan Arbitrage Bot
Reports liveness and serves the trade ledger (JSON, stats and CSV export)
"""

import asyncio
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from flash_arbitrage.bot import ArbitrageBot
from flash_arbitrage.ledger import entry_to_record, to_csv
from flash_arbitrage.utils import get_logger, parse_date_bound
from flash_arbitrage.version import __version__

logger = get_logger(__name__)

app = FastAPI(title="Flash Arbitrage Bot", version=__version__)


# Pydantic models for API responses
class HealthMetrics(BaseModel):
    lastCheckTime: Optional[str]
    totalChecks: int
    successfulTrades: int
    failedTrades: int
    uptime: float


class HealthResponse(BaseModel):
    status: str
    metrics: HealthMetrics


class TradeRecord(BaseModel):
    timestamp: str
    successful: bool
    tokenPair: str
    principal: float
    interest: Optional[float] = None
    gasFee: Optional[float] = None
    profitLoss: Optional[float] = None
    quoteA: Optional[float] = None
    quoteB: Optional[float] = None
    errorMessage: Optional[str] = None


class TradeStats(BaseModel):
    totalTrades: int
    successfulTrades: int
    totalProfit: float
    averageProfitOnSuccess: Optional[float]
    totalGasFees: float
    totalInterest: float


# Global state manager
class BotState:
    def __init__(self):
        self.bot: Optional[ArbitrageBot] = None
        self.driver_task: Optional[asyncio.Task] = None
        self.autostart = True

    def attach(self, bot: ArbitrageBot, autostart: bool = True) -> None:
        self.bot = bot
        self.autostart = autostart

    def detach(self) -> None:
        self.bot = None
        self.driver_task = None

    def require_bot(self) -> ArbitrageBot:
        if self.bot is None:
            raise HTTPException(status_code=503, detail="bot not initialized")
        return self.bot


state = BotState()


def _csv_response(content: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# API Endpoints
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Healthy iff a check completed within the last 15 minutes"""
    if state.bot is None:
        return HealthResponse(
            status="unhealthy",
            metrics=HealthMetrics(
                lastCheckTime=None,
                totalChecks=0,
                successfulTrades=0,
                failedTrades=0,
                uptime=0.0,
            ),
        )
    return state.bot.driver.health_snapshot()


@app.get("/trades", response_model=List[TradeRecord])
async def get_trades():
    """All ledger entries in insertion order"""
    bot = state.require_bot()
    return [entry_to_record(e) for e in bot.ledger.all()]


@app.get("/trade-stats", response_model=TradeStats)
async def get_trade_stats():
    """Summary statistics over the ledger"""
    bot = state.require_bot()
    return bot.ledger.stats().to_dict()


@app.get("/export-trades")
async def export_trades():
    """CSV download of every ledger entry"""
    bot = state.require_bot()
    return _csv_response(to_csv(bot.ledger.all()), "trades.csv")


@app.get("/export-trades/{start_date}/{end_date}")
async def export_trades_range(start_date: str, end_date: str):
    """CSV download of entries with timestamp in [start_date, end_date]"""
    bot = state.require_bot()
    try:
        start = parse_date_bound(start_date)
        end = parse_date_bound(end_date, end_of_day=True)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid date: {e}")
    if start > end:
        raise HTTPException(status_code=400, detail="start_date is after end_date")

    entries = bot.ledger.between(start, end)
    filename = f"trades_{start_date[:10]}_{end_date[:10]}.csv"
    return _csv_response(to_csv(entries), filename)


@app.get("/metrics")
async def metrics():
    """Prometheus exposition of the bot counters"""
    bot = state.require_bot()
    return Response(content=bot.metrics.render(), media_type=bot.metrics.content_type)


@app.on_event("startup")
async def startup_event():
    """Start the periodic checks when a bot is attached"""
    if state.bot is not None and state.autostart and state.driver_task is None:
        state.driver_task = asyncio.create_task(state.bot.driver.run_forever())
        logger.info("Arbitrage driver started")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop the periodic checks and release provider sessions"""
    if state.bot is None:
        return
    state.bot.driver.stop()
    if state.driver_task is not None:
        try:
            await asyncio.wait_for(state.driver_task, timeout=5)
        except asyncio.TimeoutError:
            logger.warning("Driver did not stop in time; cancelled")
        state.driver_task = None
    await state.bot.close()
    logger.info("Arbitrage driver stopped")

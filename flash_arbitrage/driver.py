"""
Periodic driver for the arbitrage cycle.

Invokes ``ArbitrageCycle.run_once`` on a fixed interval, counts successful
and failed checks for the health endpoint, and never lets a failing check stop
the schedule.
"""

import asyncio
import time
from typing import Any, Dict, Optional, Sequence

from .constants import DEFAULT_CHECK_INTERVAL_SEC, HEALTH_STALE_AFTER_SEC
from .cycle import ArbitrageCycle, CycleContext
from .metrics import BotMetrics
from .types import CycleReport, TradingPair
from .utils import format_duration, get_logger, timestamp_to_iso

logger = get_logger(__name__)


class PeriodicDriver:
    """
    Fixed-interval scheduler around one ArbitrageCycle.

    Ticks are never overlapped: if a check runs past its slot, the missed
    ticks are dropped and the next one is aligned to the original schedule.

    Counters:
        total_checks: checks started
        successful_checks: checks that finished without a failure signal
        failed_checks: checks that reported a failed trade or raised
    """

    def __init__(
        self,
        cycle: ArbitrageCycle,
        pairs: Sequence[TradingPair],
        context: CycleContext,
        interval_sec: float = DEFAULT_CHECK_INTERVAL_SEC,
        metrics: Optional[BotMetrics] = None,
    ):
        if interval_sec <= 0:
            raise ValueError(f"interval_sec must be > 0, got {interval_sec}")
        self.cycle = cycle
        self.pairs = list(pairs)
        self.context = context
        self.interval_sec = interval_sec
        self.metrics = metrics

        self.started_at = context.time_provider.current_timestamp()
        self.last_check_time: Optional[float] = None
        self.last_completed_time: Optional[float] = None
        self.total_checks = 0
        self.successful_checks = 0
        self.failed_checks = 0
        self.last_report: Optional[CycleReport] = None

        self._stop_event = asyncio.Event()

    async def tick(self) -> Optional[CycleReport]:
        """
        Run one check over all pairs.

        Returns the cycle report, or None if the check raised. Never raises
        except for cancellation.
        """
        now = self.context.time_provider.current_timestamp()
        self.last_check_time = now
        self.total_checks += 1
        started = time.monotonic()

        try:
            report = await self.cycle.run_once(self.pairs, self.context)
        except Exception as e:
            self.failed_checks += 1
            logger.error(f"Error in arbitrage check: {e}", exc_info=True)
            self._record_check("failed", started)
            return None

        self.last_report = report
        self.last_completed_time = self.context.time_provider.current_timestamp()

        if report.has_failures:
            self.failed_checks += 1
            for outcome in report.failures:
                logger.error(
                    f"Check #{self.total_checks}: {outcome.pair_label} ended in "
                    f"{outcome.state.value} after {outcome.attempts} attempt(s): "
                    f"{outcome.error}"
                )
            self._record_check("failed", started)
        else:
            self.successful_checks += 1
            logger.debug(
                f"Check #{self.total_checks} finished: "
                f"{report.trades_attempted} trade(s) attempted"
            )
            self._record_check("ok", started)
        return report

    async def run_forever(self) -> None:
        """Tick every ``interval_sec`` until ``stop`` is called."""
        logger.info(
            f"Starting arbitrage checks every {self.interval_sec}s "
            f"over {len(self.pairs)} pair(s)"
        )
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while not self._stop_event.is_set():
            await self.tick()

            next_tick += self.interval_sec
            now = loop.time()
            if now > next_tick:
                skipped = int((now - next_tick) // self.interval_sec) + 1
                logger.warning(
                    f"Check overran its interval; skipping {skipped} tick(s)"
                )
                next_tick += skipped * self.interval_sec

            try:
                await asyncio.wait_for(
                    self._stop_event.wait(), timeout=max(0.0, next_tick - now)
                )
            except asyncio.TimeoutError:
                pass

        uptime = self.context.time_provider.current_timestamp() - self.started_at
        logger.info(
            f"Arbitrage checks stopped after {self.total_checks} check(s), "
            f"uptime {format_duration(uptime)}"
        )

    def stop(self) -> None:
        self._stop_event.set()

    def is_healthy(self, now: Optional[float] = None) -> bool:
        """True if a check completed within the staleness window."""
        if self.last_completed_time is None:
            return False
        if now is None:
            now = self.context.time_provider.current_timestamp()
        return now - self.last_completed_time < HEALTH_STALE_AFTER_SEC

    def health_snapshot(self) -> Dict[str, Any]:
        now = self.context.time_provider.current_timestamp()
        return {
            "status": "healthy" if self.is_healthy(now) else "unhealthy",
            "metrics": {
                "lastCheckTime": (
                    timestamp_to_iso(self.last_check_time)
                    if self.last_check_time is not None
                    else None
                ),
                "totalChecks": self.total_checks,
                "successfulTrades": self.successful_checks,
                "failedTrades": self.failed_checks,
                "uptime": now - self.started_at,
            },
        }

    def _record_check(self, result: str, started: float) -> None:
        if self.metrics:
            self.metrics.record_check(
                result,
                time.monotonic() - started,
                self.context.time_provider.current_timestamp(),
            )

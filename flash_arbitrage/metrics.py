"""
Prometheus metrics for the arbitrage bot.

Counters and gauges for periodic checks, evaluated pairs, trade outcomes,
leg retries and cumulative profit. Exposed through the web server's
``/metrics`` endpoint.
"""

import threading
from typing import Any, Dict, Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

from .utils import get_logger

logger = get_logger(__name__)


class BotMetrics:
    """
    Metrics collection for the opportunity loop.

    Uses a private registry by default so several instances (tests, multiple
    apps in one process) never collide on metric names.
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()
        self._initialize_metrics()
        self._lock = threading.RLock()

    def _initialize_metrics(self):
        # === CHECK METRICS ===
        self.checks_total = Counter(
            "flash_arbitrage_checks_total",
            "Periodic opportunity checks by result",
            ["result"],
            registry=self.registry,
        )

        self.check_duration_seconds = Histogram(
            "flash_arbitrage_check_duration_seconds",
            "Duration of one full check over all pairs",
            buckets=[0.1, 0.5, 1, 2, 5, 10, 30, 60],
            registry=self.registry,
        )

        self.last_check_timestamp = Gauge(
            "flash_arbitrage_last_check_timestamp",
            "Unix timestamp of the last completed check",
            registry=self.registry,
        )

        # === PAIR METRICS ===
        self.pair_outcomes_total = Counter(
            "flash_arbitrage_pair_outcomes_total",
            "Terminal state reached per evaluated pair",
            ["pair", "state"],
            registry=self.registry,
        )

        # === EXECUTION METRICS ===
        self.leg_failures_total = Counter(
            "flash_arbitrage_leg_failures_total",
            "Failed two-leg attempts (each one triggers a retry or gives up)",
            ["pair"],
            registry=self.registry,
        )

        self.loans_total = Counter(
            "flash_arbitrage_loans_total",
            "Flash loan lifecycle events",
            ["event"],
            registry=self.registry,
        )

        # === P&L METRICS ===
        self.total_profit = Gauge(
            "flash_arbitrage_total_profit",
            "Cumulative net profit of successful trades",
            registry=self.registry,
        )

    def record_check(self, result: str, duration_sec: float, timestamp: float):
        with self._lock:
            self.checks_total.labels(result=result).inc()
            self.check_duration_seconds.observe(duration_sec)
            self.last_check_timestamp.set(timestamp)

    def record_pair_outcome(self, pair: str, state: str):
        self.pair_outcomes_total.labels(pair=pair, state=state).inc()

    def record_leg_failure(self, pair: str):
        self.leg_failures_total.labels(pair=pair).inc()

    def record_loan_event(self, event: str):
        self.loans_total.labels(event=event).inc()

    def record_profit(self, profit: float):
        with self._lock:
            self.total_profit.inc(profit)

    def render(self) -> bytes:
        """Prometheus text exposition of this registry."""
        return generate_latest(self.registry)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Plain-dict view of the headline numbers."""
        return {
            "checks_ok": self.registry.get_sample_value(
                "flash_arbitrage_checks_total", {"result": "ok"}
            )
            or 0.0,
            "checks_failed": self.registry.get_sample_value(
                "flash_arbitrage_checks_total", {"result": "failed"}
            )
            or 0.0,
            "total_profit": self.registry.get_sample_value(
                "flash_arbitrage_total_profit"
            )
            or 0.0,
        }

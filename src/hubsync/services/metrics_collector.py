"""Local operational metrics reported to the hub."""

from collections.abc import Callable
from datetime import datetime, timedelta

import psutil

from src.hubsync.models.base import utc_now
from src.hubsync.schemas.hub import InstanceMetrics


class InstanceMetricsCollector:
    """Accumulates request and transaction counters between two snapshots.

    Response time and error rate cover the interval since the previous
    snapshot; transactions count since midnight UTC; active users are the
    distinct users seen within ``active_user_window``.
    """

    def __init__(
        self,
        active_user_window: timedelta = timedelta(minutes=15),
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.active_user_window = active_user_window
        self._clock = clock
        self._process = psutil.Process()
        self._user_last_seen: dict[str, datetime] = {}
        self._day = clock().date()
        self._transactions_today = 0
        self._reset_interval()

    def _reset_interval(self) -> None:
        self._requests = 0
        self._failed_requests = 0
        self._total_response_ms = 0.0

    def _roll_day(self, now: datetime) -> None:
        if now.date() != self._day:
            self._day = now.date()
            self._transactions_today = 0

    def record_request(
        self, duration_ms: float, failed: bool = False, user_id: str | None = None
    ) -> None:
        now = self._clock()
        self._requests += 1
        self._total_response_ms += duration_ms
        if failed:
            self._failed_requests += 1
        if user_id:
            self._user_last_seen[user_id] = now

    def record_transaction(self, count: int = 1) -> None:
        """Count business transactions (declarations, payments, ...) processed today."""
        self._roll_day(self._clock())
        self._transactions_today += count

    def active_users(self, now: datetime | None = None) -> int:
        now = now or self._clock()
        cutoff = now - self.active_user_window
        self._user_last_seen = {u: t for u, t in self._user_last_seen.items() if t >= cutoff}
        return len(self._user_last_seen)

    def snapshot(self) -> InstanceMetrics:
        """Build the metrics payload and start a new interval."""
        now = self._clock()
        self._roll_day(now)
        avg_response = self._total_response_ms / self._requests if self._requests else 0.0
        error_rate = 100.0 * self._failed_requests / self._requests if self._requests else 0.0
        metrics = InstanceMetrics(
            timestamp=now,
            active_users=self.active_users(now),
            transactions_today=self._transactions_today,
            avg_response_time=round(avg_response, 2),
            error_rate=round(error_rate, 2),
            memory_usage=round(self._process.memory_percent(), 2),
            cpu_usage=round(self._process.cpu_percent(interval=None), 2),
        )
        self._reset_interval()
        return metrics

"""Tests for the instance metrics collector."""

import pytest

from src.hubsync.services.metrics_collector import InstanceMetricsCollector
from tests.helpers import FakeClock

pytestmark = pytest.mark.unit


def test_snapshot_averages_interval(clock: FakeClock):
    collector = InstanceMetricsCollector(clock=clock)
    collector.record_request(100.0)
    collector.record_request(200.0, failed=True)

    metrics = collector.snapshot()

    assert metrics.timestamp == clock.now
    assert metrics.avg_response_time == 150.0
    assert metrics.error_rate == 50.0
    assert 0 <= metrics.memory_usage <= 100


def test_snapshot_starts_new_interval(clock: FakeClock):
    collector = InstanceMetricsCollector(clock=clock)
    collector.record_request(100.0, failed=True)
    collector.snapshot()

    metrics = collector.snapshot()

    assert metrics.avg_response_time == 0.0
    assert metrics.error_rate == 0.0


def test_active_users_sliding_window(clock: FakeClock):
    collector = InstanceMetricsCollector(clock=clock)
    collector.record_request(10.0, user_id="alice")
    clock.advance(10 * 60)
    collector.record_request(10.0, user_id="bob")
    collector.record_request(10.0, user_id="bob")

    assert collector.active_users() == 2

    clock.advance(10 * 60)
    assert collector.active_users() == 1


def test_transactions_reset_at_midnight(clock: FakeClock):
    collector = InstanceMetricsCollector(clock=clock)
    collector.record_transaction()
    collector.record_transaction(4)

    assert collector.snapshot().transactions_today == 5

    clock.advance(24 * 3600)
    assert collector.snapshot().transactions_today == 0

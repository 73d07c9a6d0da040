"""Tests for observability metrics."""

import pytest

from devvoice.metrics import MetricsCollector, get_metrics_collector


@pytest.fixture
def collector() -> MetricsCollector:
    return MetricsCollector()


def test_record_turn(collector):
    collector.record_turn("RUN_TESTS", "executed")
    collector.record_turn("RUN_TESTS", "refused")
    collector.record_turn("HELP", "ok")

    snapshot = collector.get_snapshot()

    assert snapshot["intent_counts"] == {"RUN_TESTS": 2, "HELP": 1}
    assert snapshot["status_counts"] == {"executed": 1, "refused": 1, "ok": 1}


def test_record_confirmation(collector):
    collector.record_confirmation("confirmed")
    collector.record_confirmation("cancelled")
    collector.record_confirmation("confirmed")

    assert collector.get_snapshot()["confirmation_outcomes"] == {"confirmed": 2, "cancelled": 1}


def test_execution_latency_percentiles(collector):
    for seconds in [0.1, 0.2, 0.3, 0.4, 1.0]:
        collector.record_execution(seconds, success=seconds < 1.0)

    latency = collector.get_snapshot()["execution_latency_ms"]

    assert latency["count"] == 5
    assert latency["p50"] == pytest.approx(300.0)
    assert latency["p95"] == pytest.approx(1000.0)
    assert collector.get_snapshot()["execution_failures"] == 1


def test_empty_snapshot(collector):
    snapshot = collector.get_snapshot()

    assert snapshot["execution_latency_ms"] == {"p50": None, "p95": None, "count": 0}
    assert snapshot["execution_failures"] == 0


def test_reset(collector):
    collector.record_turn("HELP", "ok")
    collector.record_execution(0.5, success=False)

    collector.reset()

    assert collector.get_snapshot()["intent_counts"] == {}
    assert collector.get_snapshot()["execution_failures"] == 0


def test_global_collector_is_shared():
    assert get_metrics_collector() is get_metrics_collector()

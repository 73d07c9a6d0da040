"""In-process metrics for voice turns.

Best-effort: each process keeps its own counters, nothing is exported.
"""

import threading
from dataclasses import dataclass, field
from typing import Any


def _percentile(sorted_values: list[float], percentile: float) -> float | None:
    if not sorted_values:
        return None
    index = int(len(sorted_values) * percentile)
    return sorted_values[min(index, len(sorted_values) - 1)]


@dataclass
class MetricsCollector:
    """Thread-safe counters for turns, confirmations and executions."""

    intent_counts: dict[str, int] = field(default_factory=dict)
    status_counts: dict[str, int] = field(default_factory=dict)
    # confirmed / cancelled / expired
    confirmation_outcomes: dict[str, int] = field(default_factory=dict)
    execution_latencies_ms: list[float] = field(default_factory=list)
    execution_failures: int = 0

    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def record_turn(self, intent: str, status: str) -> None:
        """Count one completed turn by intent and outcome status."""
        with self._lock:
            self.intent_counts[intent] = self.intent_counts.get(intent, 0) + 1
            self.status_counts[status] = self.status_counts.get(status, 0) + 1

    def record_confirmation(self, outcome: str) -> None:
        with self._lock:
            self.confirmation_outcomes[outcome] = self.confirmation_outcomes.get(outcome, 0) + 1

    def record_execution(self, duration_seconds: float, success: bool) -> None:
        with self._lock:
            self.execution_latencies_ms.append(duration_seconds * 1000.0)
            if not success:
                self.execution_failures += 1

    def get_snapshot(self) -> dict[str, Any]:
        """Get a copy of all counters with execution latency percentiles."""
        with self._lock:
            latencies = sorted(self.execution_latencies_ms)
            return {
                "intent_counts": dict(self.intent_counts),
                "status_counts": dict(self.status_counts),
                "confirmation_outcomes": dict(self.confirmation_outcomes),
                "execution_latency_ms": {
                    "p50": _percentile(latencies, 0.5),
                    "p95": _percentile(latencies, 0.95),
                    "count": len(latencies),
                },
                "execution_failures": self.execution_failures,
            }

    def reset(self) -> None:
        with self._lock:
            self.intent_counts.clear()
            self.status_counts.clear()
            self.confirmation_outcomes.clear()
            self.execution_latencies_ms.clear()
            self.execution_failures = 0


_metrics_collector: MetricsCollector | None = None
_metrics_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Get or create the process-wide metrics collector."""
    global _metrics_collector
    with _metrics_lock:
        if _metrics_collector is None:
            _metrics_collector = MetricsCollector()
        return _metrics_collector

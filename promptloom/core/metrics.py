# Copyright (c) 2026 promptloom Contributors. All Rights Reserved.

"""
Metrics — Process-local counters for catalog, composition and lint activity.

Names recorded by promptloom:

  counters    documents_loaded, documents_failed, catalog_reloads,
              compositions, lint_runs, http_requests
  gauges      documents_indexed, lint_findings
  histograms  compose_ms, http_ms

Exposed through ``GET /health`` and ``GET /api/metrics``. Nothing is
persisted; a restart starts from zero.
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Deque, Dict

# Most recent observations kept per histogram.
HISTOGRAM_WINDOW = 1000


def _summarize(values: Deque[float]) -> Dict[str, float]:
    ordered = sorted(values)
    p95 = ordered[min(len(ordered) - 1, int(len(ordered) * 0.95))]
    return {
        "count": len(ordered),
        "avg": round(sum(ordered) / len(ordered), 2),
        "min": round(ordered[0], 2),
        "max": round(ordered[-1], 2),
        "p95": round(p95, 2),
    }


class Metrics:
    """Counters, gauges and windowed timing histograms held in memory."""

    def __init__(self, window: int = HISTOGRAM_WINDOW):
        self._window = window
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._histograms: Dict[str, Deque[float]] = {}
        self._start_time = time.time()

    # ── Counters ────────────────────────────────────────────────

    def inc(self, name: str, amount: int = 1) -> None:
        self._counters[name] += amount

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    # ── Gauges ──────────────────────────────────────────────────

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def get_gauge(self, name: str) -> float:
        return self._gauges.get(name, 0.0)

    # ── Histograms ──────────────────────────────────────────────

    def observe(self, name: str, value: float) -> None:
        """Record a timing in ms; only the last ``window`` values are kept."""
        if name not in self._histograms:
            self._histograms[name] = deque(maxlen=self._window)
        self._histograms[name].append(value)

    def reset(self) -> None:
        """Drop every series (uptime keeps counting)."""
        self._counters.clear()
        self._gauges.clear()
        self._histograms.clear()

    # ── Export ──────────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "uptime_seconds": round(time.time() - self._start_time, 1),
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
        }
        for name, values in self._histograms.items():
            if values:
                result[f"histogram_{name}"] = _summarize(values)
        return result


loom_metrics = Metrics()

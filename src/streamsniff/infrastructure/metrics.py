"""In-memory extraction metrics.

Counters are plain integers mutated on the event loop, so no locks are
needed.  Durations use ``time.perf_counter_ns()``.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass, field

import psutil


@dataclass
class ExtractionStats:
    """Accumulated statistics over all extraction requests."""

    requests: int = 0
    successes: int = 0
    cache_hits: int = 0
    retries: int = 0
    timeouts: int = 0
    browser_errors: int = 0
    failures: dict[str, int] = field(default_factory=dict)
    total_duration_ns: int = 0

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable summary."""
        avg_ms = (
            round(self.total_duration_ns / self.requests / 1_000_000, 1)
            if self.requests
            else 0.0
        )
        return {
            "requests": self.requests,
            "successes": self.successes,
            "cache_hits": self.cache_hits,
            "retries": self.retries,
            "timeouts": self.timeouts,
            "browser_errors": self.browser_errors,
            "failures": dict(sorted(self.failures.items())),
            "avg_duration_ms": avg_ms,
        }


@dataclass
class MetricsCollector:
    """Central in-memory metrics collector."""

    _extraction: ExtractionStats = field(default_factory=ExtractionStats)
    _start_ns: int = field(default_factory=time.perf_counter_ns)

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record_extraction(
        self,
        duration_ns: int,
        *,
        success: bool,
        error_kind: str | None = None,
        cache_hit: bool = False,
    ) -> None:
        """Record one finished extraction request."""
        stats = self._extraction
        stats.requests += 1
        stats.total_duration_ns += duration_ns
        if cache_hit:
            stats.cache_hits += 1
        if success:
            stats.successes += 1
            return
        kind = error_kind or "extraction_failed"
        stats.failures[kind] = stats.failures.get(kind, 0) + 1
        if kind == "extraction_timeout":
            stats.timeouts += 1

    def record_retry(self) -> None:
        self._extraction.retries += 1

    def record_browser_error(self) -> None:
        self._extraction.browser_errors += 1

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> dict[str, object]:
        """Return a JSON-serializable snapshot of all metrics."""
        uptime_ns = time.perf_counter_ns() - self._start_ns
        return {
            "uptime_seconds": round(uptime_ns / 1_000_000_000, 1),
            "extraction": self._extraction.snapshot(),
        }


def process_memory() -> dict[str, float]:
    """Resident and virtual memory of this process, in MiB."""
    info = psutil.Process(os.getpid()).memory_info()
    return {
        "rss_mb": round(info.rss / (1024 * 1024), 1),
        "vms_mb": round(info.vms / (1024 * 1024), 1),
    }

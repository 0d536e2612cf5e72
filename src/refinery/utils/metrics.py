"""
In-memory metrics for the extraction pipeline.

Counts extracted documents and keeps per-stage latency statistics for
the lifetime of the process. Nothing is exported anywhere; callers read
a snapshot or a printable summary.
"""

import threading
import time
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import ClassVar, Iterator

from refinery.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class TimingStats:
    """Running latency statistics for one metric."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float = float("inf")
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count > 0 else 0.0

    def record(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "count": self.count,
            "total_ms": round(self.total_ms, 2),
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms, 2) if self.count > 0 else 0.0,
            "max_ms": round(self.max_ms, 2),
        }


@dataclass
class Metrics:
    """
    Process-wide counters and latency statistics.

    Lock-guarded so extractors running in threads can share it.

    Example:
        >>> Metrics.get().increment("documents_extracted")
        >>> print(Metrics.get().summary())
    """

    _counters: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    _timings: dict[str, TimingStats] = field(default_factory=lambda: defaultdict(TimingStats))
    _lock: threading.Lock = field(default_factory=threading.Lock)

    _instance: ClassVar["Metrics | None"] = None

    @classmethod
    def get(cls) -> "Metrics":
        """The shared instance, created on first use."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Clear all counters and timings."""
        if cls._instance is not None:
            with cls._instance._lock:
                cls._instance._counters.clear()
                cls._instance._timings.clear()

    def increment(self, name: str, value: int = 1) -> int:
        """Add to a counter and return its new value."""
        with self._lock:
            self._counters[name] += value
            return self._counters[name]

    def get_counter(self, name: str) -> int:
        with self._lock:
            return self._counters.get(name, 0)

    def observe(self, name: str, duration_ms: float) -> None:
        with self._lock:
            self._timings[name].record(duration_ms)

    def get_timing(self, name: str) -> TimingStats | None:
        """A copy of a metric's statistics, or None if never observed."""
        with self._lock:
            stats = self._timings.get(name)
            if stats is None:
                return None
            return TimingStats(
                count=stats.count,
                total_ms=stats.total_ms,
                min_ms=stats.min_ms,
                max_ms=stats.max_ms,
            )

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "counters": dict(self._counters),
                "timings": {name: stats.to_dict() for name, stats in self._timings.items()},
            }

    def summary(self) -> str:
        """Human-readable listing of every counter and timing."""
        snap = self.snapshot()
        lines = ["=== Metrics Summary ==="]

        if snap["counters"]:
            lines.append("\nCounters:")
            for name, value in sorted(snap["counters"].items()):
                lines.append(f"  {name}: {value:,}")

        if snap["timings"]:
            lines.append("\nTimings:")
            for name, stats in sorted(snap["timings"].items()):
                lines.append(
                    f"  {name}: {stats['count']} calls, "
                    f"avg={stats['avg_ms']:.1f}ms, "
                    f"min={stats['min_ms']:.1f}ms, "
                    f"max={stats['max_ms']:.1f}ms"
                )

        return "\n".join(lines)


def increment_documents_extracted(count: int = 1) -> None:
    Metrics.get().increment("documents_extracted", count)


def observe_stage_latency(stage: str, duration_ms: float) -> None:
    Metrics.get().observe(f"stage.{stage}_ms", duration_ms)


@contextmanager
def time_stage(stage: str, timings: dict[str, float] | None = None) -> Iterator[None]:
    """
    Time a pipeline stage.

    Records into the global metrics and, when given, into ``timings``
    under the bare stage name. Failed stages are recorded too.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        observe_stage_latency(stage, duration_ms)
        if timings is not None:
            timings[stage] = duration_ms
        logger.debug(f"Stage {stage} took {duration_ms:.2f}ms")

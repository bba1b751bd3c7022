"""
Response-Time Metrics.

Services time their operations through an injected :class:`MetricsSink`
so tests and multiple desks never share samples.  The default sink keeps
samples in memory and compares averages against the configured
per-operation thresholds.
"""

from __future__ import annotations

import threading
import time
from collections import defaultdict
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Generator, Optional, Protocol, runtime_checkable

from pydantic import BaseModel

from teller.logger import StructuredLogger

__all__ = [
    "InMemoryMetricsSink",
    "MetricsSink",
    "OperationReport",
    "track",
]


@runtime_checkable
class MetricsSink(Protocol):
    """Anything that accepts duration samples and knows its thresholds."""

    def record(self, operation: str, duration_ms: float) -> None: ...  # noqa: E704

    def threshold_for(self, operation: str) -> Optional[float]: ...  # noqa: E704


class OperationReport(BaseModel):
    operation: str
    count: int
    average_duration_ms: float
    threshold_ms: Optional[float] = None
    within_threshold: bool


class InMemoryMetricsSink:
    """Thread-safe, per-instance sample store.

    Parameters
    ----------
    thresholds:
        Operation name to maximum acceptable average duration (ms).
        Usually ``AppConfig.PERFORMANCE_THRESHOLDS_MS``.
    """

    def __init__(self, thresholds: Optional[Mapping[str, float]] = None) -> None:
        self._thresholds: dict[str, float] = dict(thresholds or {})
        self._samples: dict[str, list[float]] = defaultdict(list)
        self._lock = threading.Lock()

    def record(self, operation: str, duration_ms: float) -> None:
        with self._lock:
            self._samples[operation].append(duration_ms)

    def threshold_for(self, operation: str) -> Optional[float]:
        return self._thresholds.get(operation)

    def samples(self, operation: str) -> list[float]:
        with self._lock:
            return list(self._samples.get(operation, []))

    def average_duration(self, operation: str) -> Optional[float]:
        """Mean duration in ms, or ``None`` when nothing was recorded."""
        samples = self.samples(operation)
        if not samples:
            return None
        return sum(samples) / len(samples)

    def is_within_threshold(self, operation: str) -> bool:
        """``True`` when no threshold is set, no data exists, or the mean is under it."""
        threshold = self.threshold_for(operation)
        if threshold is None:
            return True
        average = self.average_duration(operation)
        if average is None:
            return True
        return average <= threshold

    def report(self) -> list[OperationReport]:
        with self._lock:
            operations = list(self._samples)
        return [
            OperationReport(
                operation=operation,
                count=len(self.samples(operation)),
                average_duration_ms=self.average_duration(operation) or 0.0,
                threshold_ms=self.threshold_for(operation),
                within_threshold=self.is_within_threshold(operation),
            )
            for operation in operations
        ]

    def clear(self) -> None:
        with self._lock:
            self._samples.clear()


@contextmanager
def track(
    sink: MetricsSink,
    operation: str,
    logger: Optional[StructuredLogger] = None,
) -> Generator[None, None, None]:
    """Time the enclosed block and record it on *sink*.

    The sample is recorded whether the block succeeds or raises.  When
    the duration exceeds the operation's threshold a warning is logged.

    Example::

        with track(metrics, "customer_search", logger):
            response = search_service.search(filters)
    """
    started = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - started) * 1000.0
        sink.record(operation, duration_ms)
        threshold = sink.threshold_for(operation)
        if logger is not None and threshold is not None and duration_ms > threshold:
            logger.warning(
                "Performance threshold exceeded for %s: %.2fms (threshold: %.0fms)",
                operation,
                duration_ms,
                threshold,
            )

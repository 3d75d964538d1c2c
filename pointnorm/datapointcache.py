"""Thread-safe cache of data points with periodic removal of unused entries."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Generic, Mapping, Optional, TypeVar

from .pdata import (
    ExponentialHistogramDataPoint,
    HistogramDataPoint,
    Metric,
    MonitoredResource,
    NumberDataPoint,
    SummaryDataPoint,
    value_as_string,
)

GC_INTERVAL = 20 * 60.0
"""Default seconds between garbage collection passes."""

P = TypeVar("P")


@dataclass
class _Entry(Generic[P]):
    point: P
    used: bool = True


class _Store(Generic[P]):
    """One kind of point, keyed by identifier and guarded by a lock."""

    def __init__(self) -> None:
        self._entries: dict[str, _Entry[P]] = {}
        self._lock = threading.Lock()

    def get(self, identifier: str) -> Optional[P]:
        with self._lock:
            entry = self._entries.get(identifier)
            if entry is None:
                return None
            entry.used = True
            return entry.point

    def set(self, identifier: str, point: P) -> None:
        with self._lock:
            self._entries[identifier] = _Entry(point)

    def sweep(self) -> None:
        with self._lock:
            for key, entry in list(self._entries.items()):
                if entry.used:
                    entry.used = False
                else:
                    del self._entries[key]


class Cache:
    """Caches points by identifier.

    Each garbage collection pass marks entries as unused; entries that were
    not read or written since the previous pass are removed.
    """

    def __init__(self) -> None:
        self._numbers: _Store[NumberDataPoint] = _Store()
        self._summaries: _Store[SummaryDataPoint] = _Store()
        self._histograms: _Store[HistogramDataPoint] = _Store()
        self._exponential_histograms: _Store[ExponentialHistogramDataPoint] = _Store()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def __enter__(self) -> Cache:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def running(self) -> bool:
        """Whether background garbage collection is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self, interval: float = GC_INTERVAL) -> None:
        """Start collecting garbage every ``interval`` seconds in the background."""
        if self._thread is not None:
            raise RuntimeError("garbage collection already started")
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._run, args=(interval,), name="datapoint-cache-gc", daemon=True
        )
        self._thread.start()

    def _run(self, interval: float) -> None:
        while not self._stop.wait(interval):
            self.collect_garbage()

    def close(self) -> None:
        """Stop background garbage collection."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def collect_garbage(self) -> None:
        """Run one garbage collection pass over every kind of point."""
        for store in (self._numbers, self._summaries, self._histograms, self._exponential_histograms):
            store.sweep()

    def get_number_data_point(self, identifier: str) -> Optional[NumberDataPoint]:
        return self._numbers.get(identifier)

    def set_number_data_point(self, identifier: str, point: NumberDataPoint) -> None:
        self._numbers.set(identifier, point)

    def get_summary_data_point(self, identifier: str) -> Optional[SummaryDataPoint]:
        return self._summaries.get(identifier)

    def set_summary_data_point(self, identifier: str, point: SummaryDataPoint) -> None:
        self._summaries.set(identifier, point)

    def get_histogram_data_point(self, identifier: str) -> Optional[HistogramDataPoint]:
        return self._histograms.get(identifier)

    def set_histogram_data_point(self, identifier: str, point: HistogramDataPoint) -> None:
        self._histograms.set(identifier, point)

    def get_exponential_histogram_data_point(
        self, identifier: str
    ) -> Optional[ExponentialHistogramDataPoint]:
        return self._exponential_histograms.get(identifier)

    def set_exponential_histogram_data_point(
        self, identifier: str, point: ExponentialHistogramDataPoint
    ) -> None:
        self._exponential_histograms.set(identifier, point)


def _format_labels(labels: Optional[Mapping[str, str]]) -> str:
    pairs = " ".join(f"{key}:{value}" for key, value in sorted((labels or {}).items()))
    return f"map[{pairs}]"


def identifier(
    resource: Optional[MonitoredResource],
    extra_labels: Optional[Mapping[str, str]],
    metric: Metric,
    attributes: Mapping[str, Any],
) -> str:
    """Return the unique string identifier of a metric's time series."""
    parts = []
    if resource is not None:
        parts.append(_format_labels(resource.labels))
    parts.append(f" - {_format_labels(extra_labels)}")
    parts.append(f" - {metric.name} -")
    attribute_ids = sorted(f"{key}={value_as_string(value)}" for key, value in attributes.items())
    if attribute_ids:
        parts.append(" " + " ".join(attribute_ids))
    return "".join(parts)
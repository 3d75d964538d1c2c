"""Normalizer that rebases cumulative points against a cached start point."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from .datapointcache import GC_INTERVAL, Cache
from .pdata import (
    Buckets,
    ExponentialHistogramDataPoint,
    HistogramDataPoint,
    Normalizer,
    NumberDataPoint,
    NumberValueType,
    SummaryDataPoint,
)

RESET_OFFSET_NS = 1_000_000
"""Assumed distance in nanoseconds between a detected reset and the point after it."""

_OLDER_THAN_RESET = "data point being processed older than last recorded reset, will not be emitted"


def _format_timestamp(nanos: int) -> str:
    seconds, remainder = divmod(nanos, 1_000_000_000)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    fraction = f".{remainder:09d}".rstrip("0") if remainder else ""
    return f"{moment:%Y-%m-%d %H:%M:%S}{fraction} +0000 UTC"


def _is_reset(point: Any) -> bool:
    """A point whose start is not before its timestamp marks an explicit reset."""
    return not point.start_timestamp < point.timestamp


def _is_first_or_reset(point: Any) -> bool:
    return point.start_timestamp == 0 or _is_reset(point)


class StandardNormalizer(Normalizer):
    """Normalizes cumulative points that lack a start time or follow a reset.

    The first point without a start time, or a reset point, is cached and
    dropped. Later points have the cached point subtracted before they are
    returned. Later resets are detected and given a fresh start time without
    changing their value.
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        gc_interval: float = GC_INTERVAL,
    ) -> None:
        self._log = logger if logger is not None else logging.getLogger(__name__)
        self._start_cache = Cache()
        self._previous_cache = Cache()
        self._start_cache.start(gc_interval)
        self._previous_cache.start(gc_interval)

    def __enter__(self) -> StandardNormalizer:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Stop the background garbage collection of both caches."""
        self._start_cache.close()
        self._previous_cache.close()

    def _log_stale(self, start: Any, point: Any) -> None:
        self._log.info(
            "%s (lastRecordedReset=%s, dataPoint=%s)",
            _OLDER_THAN_RESET,
            _format_timestamp(start.timestamp),
            _format_timestamp(point.timestamp),
        )

    # Exponential histograms

    def normalize_exponential_histogram_data_point(
        self, point: ExponentialHistogramDataPoint, identifier: str
    ) -> Optional[ExponentialHistogramDataPoint]:
        start = self._start_cache.get_exponential_histogram_data_point(identifier)
        if start is None:
            if _is_first_or_reset(point):
                self._start_cache.set_exponential_histogram_data_point(identifier, point)
                self._previous_cache.set_exponential_histogram_data_point(identifier, point)
                return None
            return point

        # Histograms of different scales cannot be compared; treat it as a reset.
        if point.scale != start.scale:
            self._start_cache.set_exponential_histogram_data_point(identifier, point)
            self._previous_cache.set_exponential_histogram_data_point(identifier, point)
            return None

        previous = self._previous_cache.get_exponential_histogram_data_point(identifier)
        if previous is None:
            previous = start
        if _is_reset(point) or (point.start_timestamp == 0 and _summary_like_less(point, previous)):
            new_point = point.copy()
            new_point.start_timestamp = point.timestamp - RESET_OFFSET_NS
            self._previous_cache.set_exponential_histogram_data_point(identifier, new_point)
            zero_point = ExponentialHistogramDataPoint(
                timestamp=new_point.start_timestamp, scale=new_point.scale
            )
            self._start_cache.set_exponential_histogram_data_point(identifier, zero_point)
            return new_point
        if not start.timestamp < point.timestamp:
            self._log_stale(start, point)
            return None
        new_point = _subtract_exponential_histogram(point, start)
        self._previous_cache.set_exponential_histogram_data_point(identifier, new_point)
        return new_point

    # Explicit-bucket histograms

    def normalize_histogram_data_point(
        self, point: HistogramDataPoint, identifier: str
    ) -> Optional[HistogramDataPoint]:
        start = self._start_cache.get_histogram_data_point(identifier)
        if start is None:
            if _is_first_or_reset(point):
                self._start_cache.set_histogram_data_point(identifier, point)
                self._previous_cache.set_histogram_data_point(identifier, point)
                return None
            return point

        # The bucket layout changed, so points can no longer be compared.
        if list(point.explicit_bounds) != list(start.explicit_bounds):
            self._start_cache.set_histogram_data_point(identifier, point)
            self._previous_cache.set_histogram_data_point(identifier, point)
            return None

        previous = self._previous_cache.get_histogram_data_point(identifier)
        if previous is None:
            previous = start
        if _is_reset(point) or (point.start_timestamp == 0 and _summary_like_less(point, previous)):
            new_point = point.copy()
            new_point.start_timestamp = point.timestamp - RESET_OFFSET_NS
            self._previous_cache.set_histogram_data_point(identifier, new_point)
            zero_point = HistogramDataPoint(
                timestamp=new_point.start_timestamp,
                explicit_bounds=list(new_point.explicit_bounds),
                bucket_counts=[0] * len(new_point.bucket_counts),
            )
            self._start_cache.set_histogram_data_point(identifier, zero_point)
            return new_point
        if not start.timestamp < point.timestamp:
            self._log_stale(start, point)
            return None
        new_point = _subtract_histogram(point, start)
        self._previous_cache.set_histogram_data_point(identifier, new_point)
        return new_point

    # Numbers

    def normalize_number_data_point(
        self, point: NumberDataPoint, identifier: str
    ) -> Optional[NumberDataPoint]:
        start = self._start_cache.get_number_data_point(identifier)
        if start is None:
            if _is_first_or_reset(point):
                self._start_cache.set_number_data_point(identifier, point)
                self._previous_cache.set_number_data_point(identifier, point)
                return None
            return point

        previous = self._previous_cache.get_number_data_point(identifier)
        if previous is None:
            previous = start
        if _is_reset(point) or (point.start_timestamp == 0 and _number_less(point, previous)):
            new_point = point.copy()
            new_point.start_timestamp = point.timestamp - RESET_OFFSET_NS
            self._previous_cache.set_number_data_point(identifier, new_point)
            zero_point = NumberDataPoint(timestamp=new_point.start_timestamp)
            self._start_cache.set_number_data_point(identifier, zero_point)
            return new_point
        if not start.timestamp < point.timestamp:
            self._log_stale(start, point)
            return None
        new_point = _subtract_number(point, start)
        self._previous_cache.set_number_data_point(identifier, new_point)
        return new_point

    # Summaries

    def normalize_summary_data_point(
        self, point: SummaryDataPoint, identifier: str
    ) -> Optional[SummaryDataPoint]:
        start = self._start_cache.get_summary_data_point(identifier)
        if start is None:
            if _is_first_or_reset(point):
                self._start_cache.set_summary_data_point(identifier, point)
                self._previous_cache.set_summary_data_point(identifier, point)
                return None
            return point

        previous = self._previous_cache.get_summary_data_point(identifier)
        if previous is None:
            previous = start
        if _is_reset(point) or (point.start_timestamp == 0 and _summary_like_less(point, previous)):
            new_point = point.copy()
            new_point.start_timestamp = point.timestamp - RESET_OFFSET_NS
            self._previous_cache.set_summary_data_point(identifier, new_point)
            zero_point = SummaryDataPoint(timestamp=new_point.start_timestamp)
            self._start_cache.set_summary_data_point(identifier, zero_point)
            return new_point
        if not start.timestamp < point.timestamp:
            self._log_stale(start, point)
            return None
        new_point = point.copy()
        new_point.start_timestamp = start.timestamp
        new_point.count = point.count - start.count
        new_point.sum = point.sum - start.sum
        self._previous_cache.set_summary_data_point(identifier, new_point)
        return new_point


def _summary_like_less(a: Any, b: Any) -> bool:
    """Whether ``a`` is below ``b`` by count or sum."""
    return a.count < b.count or a.sum < b.sum


def _number_less(a: NumberDataPoint, b: NumberDataPoint) -> bool:
    if a.value_type is NumberValueType.INT:
        return a.int_value < b.int_value
    if a.value_type is NumberValueType.DOUBLE:
        return a.double_value < b.double_value
    return False


def _subtract_number(a: NumberDataPoint, b: NumberDataPoint) -> NumberDataPoint:
    new_point = a.copy()
    new_point.start_timestamp = b.timestamp
    if new_point.value_type is NumberValueType.INT:
        new_point.value = a.int_value - b.int_value
    elif new_point.value_type is NumberValueType.DOUBLE:
        new_point.value = a.double_value - b.double_value
    return new_point


def _subtract_histogram(a: HistogramDataPoint, b: HistogramDataPoint) -> HistogramDataPoint:
    if len(b.bucket_counts) < len(a.bucket_counts):
        raise ValueError("start point has fewer buckets than the point being normalized")
    new_point = a.copy()
    new_point.start_timestamp = b.timestamp
    new_point.count = a.count - b.count
    new_point.sum = a.sum - b.sum
    new_point.bucket_counts = [x - y for x, y in zip(a.bucket_counts, b.bucket_counts)]
    return new_point


def _subtract_buckets(a: Buckets, b: Buckets) -> list[int]:
    offset_diff = a.offset - b.offset
    result = []
    for position, count in enumerate(a.bucket_counts):
        other = position + offset_diff
        if 0 <= other < len(b.bucket_counts):
            result.append(count - b.bucket_counts[other])
        else:
            result.append(count)
    return result


def _subtract_exponential_histogram(
    a: ExponentialHistogramDataPoint, b: ExponentialHistogramDataPoint
) -> ExponentialHistogramDataPoint:
    new_point = a.copy()
    new_point.start_timestamp = b.timestamp
    new_point.count = a.count - b.count
    new_point.sum = a.sum - b.sum
    new_point.zero_count = a.zero_count - b.zero_count
    new_point.positive.bucket_counts = _subtract_buckets(a.positive, b.positive)
    new_point.negative.bucket_counts = _subtract_buckets(a.negative, b.negative)
    return new_point
"""Builders for OpenCensus-style metrics, used to make test data."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Sequence, Union


class MetricDescriptorType(Enum):
    UNSPECIFIED = 0
    GAUGE_INT64 = 1
    GAUGE_DOUBLE = 2
    GAUGE_DISTRIBUTION = 3
    CUMULATIVE_INT64 = 4
    CUMULATIVE_DOUBLE = 5
    CUMULATIVE_DISTRIBUTION = 6
    SUMMARY = 7


@dataclass
class LabelKey:
    key: str
    description: str = ""


@dataclass
class LabelValue:
    value: str
    has_value: bool = False


@dataclass
class MetricDescriptor:
    name: str
    description: str = ""
    unit: str = ""
    type: MetricDescriptorType = MetricDescriptorType.UNSPECIFIED
    label_keys: list[LabelKey] = field(default_factory=list)


@dataclass
class DistributionBucket:
    count: int = 0


@dataclass
class DistributionValue:
    """A distribution with explicit bucket bounds."""

    count: int = 0
    sum: float = 0.0
    bounds: list[float] = field(default_factory=list)
    buckets: list[DistributionBucket] = field(default_factory=list)
    sum_of_squared_deviation: float = 0.0


@dataclass
class ValueAtPercentile:
    percentile: float
    value: float


@dataclass
class SummaryValue:
    count: int = 0
    sum: float = 0.0
    percentile_values: list[ValueAtPercentile] = field(default_factory=list)


@dataclass
class Point:
    timestamp: datetime
    value: Union[int, float, DistributionValue, SummaryValue]


@dataclass
class TimeSeries:
    start_timestamp: Optional[datetime] = None
    label_values: list[LabelValue] = field(default_factory=list)
    points: list[Point] = field(default_factory=list)


@dataclass
class OCMetric:
    metric_descriptor: MetricDescriptor
    timeseries: list[TimeSeries] = field(default_factory=list)


def _metric(
    metric_type: MetricDescriptorType,
    name: str,
    keys: Sequence[str],
    series: Sequence[TimeSeries],
) -> OCMetric:
    descriptor = MetricDescriptor(
        name=name,
        description="metrics description",
        unit="",
        type=metric_type,
        label_keys=[LabelKey(key, "description: " + key) for key in keys],
    )
    return OCMetric(metric_descriptor=descriptor, timeseries=list(series))


def gauge(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a double gauge metric from the given time series."""
    return _metric(MetricDescriptorType.GAUGE_DOUBLE, name, keys, args)


def gauge_int(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create an int64 gauge metric from the given time series."""
    return _metric(MetricDescriptorType.GAUGE_INT64, name, keys, args)


def gauge_dist(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a distribution gauge metric from the given time series."""
    return _metric(MetricDescriptorType.GAUGE_DISTRIBUTION, name, keys, args)


def cumulative(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a cumulative double metric from the given time series."""
    return _metric(MetricDescriptorType.CUMULATIVE_DOUBLE, name, keys, args)


def cumulative_int(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a cumulative int64 metric from the given time series."""
    return _metric(MetricDescriptorType.CUMULATIVE_INT64, name, keys, args)


def cumulative_dist(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a cumulative distribution metric from the given time series."""
    return _metric(MetricDescriptorType.CUMULATIVE_DISTRIBUTION, name, keys, args)


def summary(name: str, keys: Sequence[str], *args: TimeSeries) -> OCMetric:
    """Create a summary metric from the given time series."""
    return _metric(MetricDescriptorType.SUMMARY, name, keys, args)


def timeseries(start: datetime, vals: Sequence[str], point: Point) -> TimeSeries:
    """Create a time series with one point; ``vals`` pair up with the metric's label keys."""
    return TimeSeries(
        start_timestamp=start,
        label_values=[LabelValue(value, has_value=True) for value in vals],
        points=[point],
    )


def double(ts: datetime, value: float) -> Point:
    """Create a double point."""
    return Point(timestamp=ts, value=value)


def dist_pt(ts: datetime, bounds: Sequence[float], counts: Sequence[int]) -> Point:
    """Create a distribution point.

    The sum is estimated from the lower bound of each bucket, so the first
    bucket contributes nothing.
    """
    if len(counts) > len(bounds) + 1:
        raise ValueError("more bucket counts than bucket bounds allow")
    total = sum(count * bound for count, bound in zip(counts[1:], bounds))
    value = DistributionValue(
        count=sum(counts),
        sum=total,
        bounds=list(bounds),
        buckets=[DistributionBucket(count) for count in counts],
    )
    return Point(timestamp=ts, value=value)


def summ_pt(
    ts: datetime,
    count: int,
    total: float,
    percent: Sequence[float],
    vals: Sequence[float],
) -> Point:
    """Create a summary point; ``vals`` hold the value at each percentile."""
    if len(vals) < len(percent):
        raise ValueError("fewer values than percentiles")
    value = SummaryValue(
        count=count,
        sum=total,
        percentile_values=[ValueAtPercentile(p, v) for p, v in zip(percent, vals)],
    )
    return Point(timestamp=ts, value=value)
"""Conversion of collector metric data into SDK metric data.

Lets the SDK exporter be tested with the same data as the collector exporter.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional, Union

from .pdata import (
    AggregationTemporality,
    Gauge,
    Histogram,
    Metric,
    MetricType,
    Metrics,
    NumberDataPoint,
    NumberValueType,
    ScopeMetrics,
    Sum,
    value_as_string,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class Temporality(Enum):
    """How SDK aggregations relate over time."""

    UNDEFINED = 0
    CUMULATIVE = 1
    DELTA = 2


@dataclass
class SdkDataPoint:
    attributes: dict[str, Any] = field(default_factory=dict)
    start_time: datetime = _EPOCH
    time: datetime = _EPOCH
    value: Union[int, float] = 0


@dataclass
class SdkHistogramDataPoint:
    attributes: dict[str, Any] = field(default_factory=dict)
    start_time: datetime = _EPOCH
    time: datetime = _EPOCH
    count: int = 0
    sum: float = 0.0
    bounds: list[float] = field(default_factory=list)
    bucket_counts: list[int] = field(default_factory=list)


@dataclass
class SdkGauge:
    data_points: list[SdkDataPoint] = field(default_factory=list)


@dataclass
class SdkSum:
    temporality: Temporality = Temporality.UNDEFINED
    is_monotonic: bool = False
    data_points: list[SdkDataPoint] = field(default_factory=list)


@dataclass
class SdkHistogram:
    temporality: Temporality = Temporality.UNDEFINED
    data_points: list[SdkHistogramDataPoint] = field(default_factory=list)


@dataclass
class SdkMetrics:
    name: str = ""
    description: str = ""
    unit: str = ""
    data: Union[SdkGauge, SdkSum, SdkHistogram, None] = None


@dataclass
class SdkScope:
    name: str = ""
    version: str = ""


@dataclass
class SdkScopeMetrics:
    scope: SdkScope = field(default_factory=SdkScope)
    metrics: list[SdkMetrics] = field(default_factory=list)


@dataclass
class SdkResourceMetrics:
    resource: dict[str, Any] = field(default_factory=dict)
    scope_metrics: list[SdkScopeMetrics] = field(default_factory=list)


def _as_time(nanos: int) -> datetime:
    return _EPOCH + timedelta(microseconds=nanos // 1000)


def _convert_attributes(attributes: dict[str, Any]) -> dict[str, Any]:
    converted = {}
    for key, value in attributes.items():
        if isinstance(value, (str, bool, int, float)):
            converted[key] = value
        else:
            converted[key] = value_as_string(value)
    return converted


def _convert_temporality(temporality: AggregationTemporality) -> Temporality:
    if temporality is AggregationTemporality.DELTA:
        return Temporality.DELTA
    if temporality is AggregationTemporality.CUMULATIVE:
        return Temporality.CUMULATIVE
    return Temporality.UNDEFINED


def _convert_number_points(points: list[NumberDataPoint], as_float: bool) -> list[SdkDataPoint]:
    return [
        SdkDataPoint(
            attributes=_convert_attributes(point.attributes),
            start_time=_as_time(point.start_timestamp),
            time=_as_time(point.timestamp),
            value=point.double_value if as_float else point.int_value,
        )
        for point in points
    ]


def _value_kind(points: list[NumberDataPoint]) -> Optional[bool]:
    """True for floats, False for integers, None when the kind is unknown."""
    if not points:
        return None
    value_type = points[0].value_type
    if value_type is NumberValueType.DOUBLE:
        return True
    if value_type is NumberValueType.INT:
        return False
    return None


def _convert_gauge(gauge: Gauge) -> Optional[SdkGauge]:
    as_float = _value_kind(gauge.data_points)
    if as_float is None:
        return None
    return SdkGauge(data_points=_convert_number_points(gauge.data_points, as_float))


def _convert_sum(total: Sum) -> Optional[SdkSum]:
    as_float = _value_kind(total.data_points)
    if as_float is None:
        return None
    return SdkSum(
        temporality=_convert_temporality(total.aggregation_temporality),
        is_monotonic=total.is_monotonic,
        data_points=_convert_number_points(total.data_points, as_float),
    )


def _convert_histogram(histogram: Histogram) -> Optional[SdkHistogram]:
    if not histogram.data_points:
        return None
    return SdkHistogram(
        temporality=_convert_temporality(histogram.aggregation_temporality),
        data_points=[
            SdkHistogramDataPoint(
                attributes=_convert_attributes(point.attributes),
                start_time=_as_time(point.start_timestamp),
                time=_as_time(point.timestamp),
                count=point.count,
                sum=point.sum,
                bounds=list(point.explicit_bounds),
                bucket_counts=list(point.bucket_counts),
            )
            for point in histogram.data_points
        ],
    )


def _convert_metric(metric: Metric) -> SdkMetrics:
    metric_type = metric.type()
    if metric_type in (MetricType.SUMMARY, MetricType.EXPONENTIAL_HISTOGRAM):
        # Not supported by the SDK; left as an empty entry in its place.
        return SdkMetrics()
    converted = SdkMetrics(name=metric.name, description=metric.description, unit=metric.unit)
    if metric_type is MetricType.GAUGE:
        converted.data = _convert_gauge(metric.data)
    elif metric_type is MetricType.SUM:
        converted.data = _convert_sum(metric.data)
    elif metric_type is MetricType.HISTOGRAM:
        converted.data = _convert_histogram(metric.data)
    return converted


def _convert_scope_metrics(scope_metrics: ScopeMetrics) -> SdkScopeMetrics:
    return SdkScopeMetrics(
        scope=SdkScope(name=scope_metrics.scope.name, version=scope_metrics.scope.version),
        metrics=[_convert_metric(metric) for metric in scope_metrics.metrics],
    )


def convert_resource_metrics(metrics: Metrics) -> list[SdkResourceMetrics]:
    """Convert collector metrics to one SDK resource-metrics entry per resource.

    Summary and exponential histogram metrics have no SDK form; each leaves an
    empty ``SdkMetrics`` in its place.
    """
    return [
        SdkResourceMetrics(
            resource=_convert_attributes(resource_metrics.resource_attributes),
            scope_metrics=[_convert_scope_metrics(sm) for sm in resource_metrics.scope_metrics],
        )
        for resource_metrics in metrics.resource_metrics
    ]
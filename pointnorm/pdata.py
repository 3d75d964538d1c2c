"""In-memory metric data model used by the normalizers and caches.

Timestamps are integers counting nanoseconds since the Unix epoch; a value
of zero means "not set".
"""

from __future__ import annotations

import abc
import base64
import copy as _copy
import json
import math
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union


class MetricType(Enum):
    """Kind of data a metric carries."""

    EMPTY = 0
    GAUGE = 1
    SUM = 2
    HISTOGRAM = 3
    EXPONENTIAL_HISTOGRAM = 4
    SUMMARY = 5


class NumberValueType(Enum):
    """Kind of value held by a number data point."""

    EMPTY = 0
    INT = 1
    DOUBLE = 2


class AggregationTemporality(Enum):
    """How values of a sum or histogram relate over time."""

    UNSPECIFIED = 0
    DELTA = 1
    CUMULATIVE = 2


@dataclass
class NumberDataPoint:
    """A single integer or floating point measurement."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    value: Union[int, float, None] = None

    @property
    def value_type(self) -> NumberValueType:
        if self.value is None:
            return NumberValueType.EMPTY
        if isinstance(self.value, int):
            return NumberValueType.INT
        return NumberValueType.DOUBLE

    @property
    def int_value(self) -> int:
        """The integer value, or 0 when the point does not hold one."""
        return self.value if self.value_type is NumberValueType.INT else 0

    @property
    def double_value(self) -> float:
        """The floating point value, or 0.0 when the point does not hold one."""
        return self.value if self.value_type is NumberValueType.DOUBLE else 0.0

    def copy(self) -> NumberDataPoint:
        return _copy.deepcopy(self)


@dataclass
class HistogramDataPoint:
    """A histogram with explicit bucket boundaries."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    count: int = 0
    sum: float = 0.0
    explicit_bounds: list[float] = field(default_factory=list)
    bucket_counts: list[int] = field(default_factory=list)

    def copy(self) -> HistogramDataPoint:
        return _copy.deepcopy(self)


@dataclass
class Buckets:
    """One side (positive or negative) of an exponential histogram."""

    offset: int = 0
    bucket_counts: list[int] = field(default_factory=list)

    def copy(self) -> Buckets:
        return _copy.deepcopy(self)


@dataclass
class ExponentialHistogramDataPoint:
    """A histogram with exponentially sized buckets."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    count: int = 0
    sum: float = 0.0
    scale: int = 0
    zero_count: int = 0
    positive: Buckets = field(default_factory=Buckets)
    negative: Buckets = field(default_factory=Buckets)

    def copy(self) -> ExponentialHistogramDataPoint:
        return _copy.deepcopy(self)


@dataclass
class ValueAtQuantile:
    """A quantile of a summary and its value."""

    quantile: float = 0.0
    value: float = 0.0


@dataclass
class SummaryDataPoint:
    """Count, sum and quantiles of a distribution."""

    attributes: dict[str, Any] = field(default_factory=dict)
    start_timestamp: int = 0
    timestamp: int = 0
    count: int = 0
    sum: float = 0.0
    quantile_values: list[ValueAtQuantile] = field(default_factory=list)

    def copy(self) -> SummaryDataPoint:
        return _copy.deepcopy(self)


@dataclass
class Gauge:
    data_points: list[NumberDataPoint] = field(default_factory=list)


@dataclass
class Sum:
    data_points: list[NumberDataPoint] = field(default_factory=list)
    aggregation_temporality: AggregationTemporality = AggregationTemporality.UNSPECIFIED
    is_monotonic: bool = False


@dataclass
class Histogram:
    data_points: list[HistogramDataPoint] = field(default_factory=list)
    aggregation_temporality: AggregationTemporality = AggregationTemporality.UNSPECIFIED


@dataclass
class ExponentialHistogram:
    data_points: list[ExponentialHistogramDataPoint] = field(default_factory=list)
    aggregation_temporality: AggregationTemporality = AggregationTemporality.UNSPECIFIED


@dataclass
class Summary:
    data_points: list[SummaryDataPoint] = field(default_factory=list)


_TYPE_BY_DATA = (
    (Gauge, MetricType.GAUGE),
    (Sum, MetricType.SUM),
    (Histogram, MetricType.HISTOGRAM),
    (ExponentialHistogram, MetricType.EXPONENTIAL_HISTOGRAM),
    (Summary, MetricType.SUMMARY),
)


@dataclass
class Metric:
    """A named metric and its data."""

    name: str = ""
    description: str = ""
    unit: str = ""
    data: Union[Gauge, Sum, Histogram, ExponentialHistogram, Summary, None] = None

    def type(self) -> MetricType:
        """The kind of data this metric holds."""
        for data_class, metric_type in _TYPE_BY_DATA:
            if isinstance(self.data, data_class):
                return metric_type
        return MetricType.EMPTY


@dataclass
class Scope:
    name: str = ""
    version: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class ScopeMetrics:
    scope: Scope = field(default_factory=Scope)
    metrics: list[Metric] = field(default_factory=list)


@dataclass
class ResourceMetrics:
    resource_attributes: dict[str, Any] = field(default_factory=dict)
    scope_metrics: list[ScopeMetrics] = field(default_factory=list)


@dataclass
class Metrics:
    resource_metrics: list[ResourceMetrics] = field(default_factory=list)


@dataclass
class MonitoredResource:
    """A monitored resource: its type and identifying labels."""

    type: str = ""
    labels: dict[str, str] = field(default_factory=dict)


class Normalizer(abc.ABC):
    """Normalizes data points whose start time is unknown.

    Each method returns the normalized point, or None if the point is to be dropped.
    """

    @abc.abstractmethod
    def normalize_exponential_histogram_data_point(
        self, point: ExponentialHistogramDataPoint, identifier: str
    ) -> Optional[ExponentialHistogramDataPoint]:
        """Normalize an exponential histogram point."""

    @abc.abstractmethod
    def normalize_histogram_data_point(
        self, point: HistogramDataPoint, identifier: str
    ) -> Optional[HistogramDataPoint]:
        """Normalize a cumulative histogram point."""

    @abc.abstractmethod
    def normalize_number_data_point(
        self, point: NumberDataPoint, identifier: str
    ) -> Optional[NumberDataPoint]:
        """Normalize a cumulative, monotonic sum point."""

    @abc.abstractmethod
    def normalize_summary_data_point(
        self, point: SummaryDataPoint, identifier: str
    ) -> Optional[SummaryDataPoint]:
        """Normalize a summary point."""


def _float_as_string(number: float) -> str:
    if math.isnan(number):
        return "json: unsupported value: NaN"
    if math.isinf(number):
        return "json: unsupported value: " + ("+Inf" if number > 0 else "-Inf")
    digits = Decimal(repr(number)).normalize()
    magnitude = abs(number)
    if magnitude != 0 and (magnitude < 1e-6 or magnitude >= 1e21):
        return format(digits, "e")
    return format(digits, "f")


def value_as_string(value: Any) -> str:
    """Render an attribute value as text."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _float_as_string(value)
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    raise TypeError(f"unsupported attribute value type: {type(value).__name__}")
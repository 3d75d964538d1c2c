import pytest

from pointnorm.disabled_normalizer import DisabledNormalizer
from pointnorm.pdata import (
    Buckets,
    ExponentialHistogramDataPoint,
    HistogramDataPoint,
    NumberDataPoint,
    SummaryDataPoint,
    ValueAtQuantile,
)
from pointnorm.standard_normalizer import RESET_OFFSET_NS

T0 = 1_600_000_000_000_000_000
T1 = T0 + 5_000_000_000


def _number(start, ts):
    return NumberDataPoint(attributes={"a": "b"}, start_timestamp=start, timestamp=ts, value=7)


def _histogram(start, ts):
    return HistogramDataPoint(
        start_timestamp=start,
        timestamp=ts,
        count=3,
        sum=4.5,
        explicit_bounds=[1.0, 2.0],
        bucket_counts=[1, 1, 1],
    )


def _exponential(start, ts):
    return ExponentialHistogramDataPoint(
        start_timestamp=start,
        timestamp=ts,
        count=5,
        sum=9.0,
        scale=2,
        zero_count=1,
        positive=Buckets(offset=1, bucket_counts=[1, 2]),
        negative=Buckets(offset=0, bucket_counts=[1]),
    )


def _summary(start, ts):
    return SummaryDataPoint(
        start_timestamp=start,
        timestamp=ts,
        count=4,
        sum=10.0,
        quantile_values=[ValueAtQuantile(0.5, 2.0)],
    )


CASES = [
    ("normalize_number_data_point", _number),
    ("normalize_histogram_data_point", _histogram),
    ("normalize_exponential_histogram_data_point", _exponential),
    ("normalize_summary_data_point", _summary),
]


@pytest.mark.parametrize("method, make", CASES)
def test_valid_point_is_returned_unchanged(method, make):
    point = make(T0, T1)
    result = getattr(DisabledNormalizer(), method)(point, "id")
    assert result is point
    assert result.start_timestamp == T0


@pytest.mark.parametrize("method, make", CASES)
def test_zero_start_is_treated_as_reset(method, make):
    point = make(0, T1)
    result = getattr(DisabledNormalizer(), method)(point, "id")
    assert result is not None
    assert result.start_timestamp == 0 or result.start_timestamp == T1 - RESET_OFFSET_NS
    # zero start is before the timestamp, so the point passes through
    assert result is point


@pytest.mark.parametrize("method, make", CASES)
def test_reset_point_gets_start_before_timestamp(method, make):
    point = make(T1, T1)
    original = point.copy()
    result = getattr(DisabledNormalizer(), method)(point, "id")
    assert result.start_timestamp == T1 - RESET_OFFSET_NS
    assert result.timestamp == T1
    assert point == original


@pytest.mark.parametrize("method, make", CASES)
def test_start_after_timestamp_is_reset(method, make):
    point = make(T1 + 10, T1)
    result = getattr(DisabledNormalizer(), method)(point, "id")
    assert result is not point
    assert result.start_timestamp < result.timestamp
    assert point.start_timestamp == T1 + 10


def test_reset_keeps_values():
    point = _exponential(T1, T1)
    result = DisabledNormalizer().normalize_exponential_histogram_data_point(point, "id")
    assert result.count == point.count
    assert result.positive == point.positive
    assert result.negative == point.negative
    assert result.positive is not point.positive


def test_repeated_calls_are_independent():
    normalizer = DisabledNormalizer()
    first = normalizer.normalize_number_data_point(_number(T1, T1), "same")
    second = normalizer.normalize_number_data_point(_number(T0, T1), "same")
    assert first.value == 7
    assert second.start_timestamp == T0
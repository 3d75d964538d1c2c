from datetime import datetime, timezone

import pytest

from pointnorm.ocmetrics import (
    DistributionValue,
    MetricDescriptorType,
    SummaryValue,
    cumulative,
    cumulative_dist,
    cumulative_int,
    dist_pt,
    double,
    gauge,
    gauge_dist,
    gauge_int,
    summ_pt,
    summary,
    timeseries,
)

T0 = datetime(2021, 1, 1, tzinfo=timezone.utc)
T1 = datetime(2021, 1, 1, 0, 1, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "builder, expected",
    [
        (gauge, MetricDescriptorType.GAUGE_DOUBLE),
        (gauge_int, MetricDescriptorType.GAUGE_INT64),
        (gauge_dist, MetricDescriptorType.GAUGE_DISTRIBUTION),
        (cumulative, MetricDescriptorType.CUMULATIVE_DOUBLE),
        (cumulative_int, MetricDescriptorType.CUMULATIVE_INT64),
        (cumulative_dist, MetricDescriptorType.CUMULATIVE_DISTRIBUTION),
        (summary, MetricDescriptorType.SUMMARY),
    ],
)
def test_builders_set_type(builder, expected):
    metric = builder("m", ["k"])
    assert metric.metric_descriptor.type is expected
    assert metric.metric_descriptor.name == "m"


def test_descriptor_fixed_texts():
    metric = gauge("m", ["k1", "k2"])
    descriptor = metric.metric_descriptor
    assert descriptor.description == "metrics description"
    assert descriptor.unit == ""
    assert [key.key for key in descriptor.label_keys] == ["k1", "k2"]
    assert [key.description for key in descriptor.label_keys] == ["description: k1", "description: k2"]


def test_timeseries_are_kept_in_order():
    first = timeseries(T0, ["a"], double(T1, 1.0))
    second = timeseries(T0, ["b"], double(T1, 2.0))
    metric = cumulative("m", ["k"], first, second)
    assert metric.timeseries == [first, second]


def test_timeseries_label_values_and_point():
    point = double(T1, 3.5)
    series = timeseries(T0, ["x", "y"], point)
    assert series.start_timestamp == T0
    assert [v.value for v in series.label_values] == ["x", "y"]
    assert all(v.has_value for v in series.label_values)
    assert series.points == [point]


def test_double_point():
    point = double(T1, 3.5)
    assert point.timestamp == T1
    assert point.value == 3.5


def test_dist_pt_worked_example():
    bounds = [0.1, 0.2, 0.4]
    counts = [2, 3, 7, 9]
    point = dist_pt(T1, bounds, counts)
    value = point.value
    assert isinstance(value, DistributionValue)
    assert value.count == 21
    assert value.sum == pytest.approx(5.3)
    assert value.bounds == bounds
    assert [bucket.count for bucket in value.buckets] == counts
    assert value.sum_of_squared_deviation == 0.0


def test_dist_pt_rejects_too_many_counts():
    with pytest.raises(ValueError):
        dist_pt(T1, [1.0], [1, 2, 3])


def test_summ_pt():
    point = summ_pt(T1, 10, 42.5, [50.0, 90.0], [1.5, 3.5])
    value = point.value
    assert isinstance(value, SummaryValue)
    assert value.count == 10
    assert value.sum == 42.5
    assert [(p.percentile, p.value) for p in value.percentile_values] == [(50.0, 1.5), (90.0, 3.5)]


def test_summ_pt_rejects_missing_values():
    with pytest.raises(ValueError):
        summ_pt(T1, 1, 1.0, [50.0, 90.0], [1.0])
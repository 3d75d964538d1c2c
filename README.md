# pointnorm

Normalization of cumulative metric data points whose start time is missing,
or which follow an explicit reset.

A cumulative counter that arrives without a start time cannot be reported
as is. `pointnorm` remembers the first such point for each time series, drops
it, and subtracts it from every later point. The values that come out therefore
count from a known start. Resets are detected and given a fresh start time one
millisecond before the point.

Timestamps are integer nanoseconds since the Unix epoch. Zero means "unset".

## Installing

```
pip install pointnorm
```

The package has no runtime dependencies.

## Modules

- `pointnorm.pdata` is the metric data model. It holds:
  - the data points `NumberDataPoint`, `HistogramDataPoint`,
    `ExponentialHistogramDataPoint` (with positive and negative `Buckets`) and
    `SummaryDataPoint`, each with a `copy()` method;
  - the containers `Gauge`, `Sum`, `Histogram`, `ExponentialHistogram`,
    `Summary`, `Metric`, `ScopeMetrics`, `ResourceMetrics` and `Metrics`;
  - `MonitoredResource`;
  - the enums `MetricType`, `NumberValueType` and `AggregationTemporality`;
  - the abstract `Normalizer` interface;
  - `value_as_string()`, which renders an attribute value as text.

  The kind of a `NumberDataPoint` is taken from its `value`: an `int`, a
  `float`, or `None` for an empty point.
- `pointnorm.standard_normalizer.StandardNormalizer` caches start points and
  subtracts them from later points. It also handles resets and changes of
  bucket layout or scale. A point that is to be dropped comes back as `None`.
  Points older than the last recorded reset are dropped and logged at INFO
  level. The normalizer runs background garbage collection of unused series:
  call `close()`, or use it as a context manager.
- `pointnorm.disabled_normalizer.DisabledNormalizer` passes every point
  through. A point whose start time is not before its timestamp gets a start
  time one millisecond before the timestamp, on a copy of the point.
- `pointnorm.datapointcache` provides:
  - `Cache`, a thread-safe store of points by identifier. `collect_garbage()`
    marks entries unused and removes entries that went unused since the
    previous pass. `start(interval)` runs that pass in a background thread and
    `close()` stops it.
  - `identifier()`, which builds a stable key for a time series from a
    monitored resource, extra labels, a metric and point attributes.
- `pointnorm.conversion.convert_resource_metrics` turns `Metrics` into
  SDK-shaped records: `SdkResourceMetrics`, `SdkScopeMetrics`, `SdkMetrics`,
  `SdkGauge`, `SdkSum` and `SdkHistogram`. Summary and exponential histogram
  metrics have no SDK form, and each leaves an empty `SdkMetrics` in its place.
- `pointnorm.ocmetrics` has builders for census-style metrics, which are handy
  for test data:
  - the metric builders `gauge`, `gauge_int`, `gauge_dist`, `cumulative`,
    `cumulative_int`, `cumulative_dist` and `summary`;
  - `timeseries`, which builds a time series;
  - the point builders `double`, `dist_pt` and `summ_pt`.
- `pointnorm.logsutil.ExporterConfig` holds entry and request size limits for
  log export.

## Example

```python
from pointnorm.pdata import NumberDataPoint
from pointnorm.standard_normalizer import StandardNormalizer

with StandardNormalizer() as normalizer:
    series = "my-counter"

    first = NumberDataPoint(timestamp=1_000_000_000, value=10)
    # The first point without a start time is cached and dropped.
    assert normalizer.normalize_number_data_point(first, series) is None

    later = NumberDataPoint(timestamp=2_000_000_000, value=25)
    point = normalizer.normalize_number_data_point(later, series)
    assert point.int_value == 15
    assert point.start_timestamp == 1_000_000_000
```

## What it does not do

`pointnorm` only transforms data in memory. It does not do any of the
following:

- receive or send metrics, logs or traces;
- talk to any monitoring service;
- provide a command-line program.

`logsutil.ExporterConfig` only holds size limits. Nothing in the package
splits log entries or requests.

## Running the tests

```
pip install -e ".[test]"
pytest
```
"""Normalization of cumulative metric data points with unknown or reset start times."""

__version__ = "0.1.0"

__all__ = [
    "conversion",
    "datapointcache",
    "disabled_normalizer",
    "logsutil",
    "ocmetrics",
    "pdata",
    "standard_normalizer",
]
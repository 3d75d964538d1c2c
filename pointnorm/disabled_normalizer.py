"""Normalizer that passes points through, only repairing explicit resets."""

from __future__ import annotations

from typing import Optional, TypeVar, Union

from .pdata import (
    ExponentialHistogramDataPoint,
    HistogramDataPoint,
    Normalizer,
    NumberDataPoint,
    SummaryDataPoint,
)
from .standard_normalizer import RESET_OFFSET_NS

_Point = TypeVar(
    "_Point",
    bound=Union[
        NumberDataPoint,
        HistogramDataPoint,
        ExponentialHistogramDataPoint,
        SummaryDataPoint,
    ],
)


def _repair_reset(point: _Point) -> _Point:
    """Give an explicit reset point a start time just before its timestamp.

    The input point is never modified; a changed copy is returned instead.
    """
    if point.start_timestamp < point.timestamp:
        return point
    new_point = point.copy()
    new_point.start_timestamp = point.timestamp - RESET_OFFSET_NS
    return new_point


class DisabledNormalizer(Normalizer):
    """Performs no normalization.

    Useful when standard normalization uses too much memory. Explicit reset
    points, whose start time is not before their timestamp, get a start time
    one millisecond before the timestamp so that they are valid; every point
    is kept.
    """

    def normalize_exponential_histogram_data_point(
        self, point: ExponentialHistogramDataPoint, identifier: str
    ) -> Optional[ExponentialHistogramDataPoint]:
        return _repair_reset(point)

    def normalize_histogram_data_point(
        self, point: HistogramDataPoint, identifier: str
    ) -> Optional[HistogramDataPoint]:
        return _repair_reset(point)

    def normalize_number_data_point(
        self, point: NumberDataPoint, identifier: str
    ) -> Optional[NumberDataPoint]:
        return _repair_reset(point)

    def normalize_summary_data_point(
        self, point: SummaryDataPoint, identifier: str
    ) -> Optional[SummaryDataPoint]:
        return _repair_reset(point)
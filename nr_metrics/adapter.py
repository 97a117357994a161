"""Converts SDK data points into New Relic Count, Gauge and Summary records"""
from typing import Any, Dict, Hashable, List, Mapping
from .attributes import merge_attributes
from .models import (
    Count,
    DataPoint,
    DoublePoint,
    Gauge,
    InstrumentKind,
    LongPoint,
    Metric,
    MetricDescriptor,
    Summary,
    SummaryPoint,
)
from .time_tracker import TimeTracker
from logging_config import get_logger

logger = get_logger(__name__)

NANOS_PER_MILLI = 1_000_000
MIN_PERCENTILE = 0.0
MAX_PERCENTILE = 100.0


class PointConversionError(ValueError):
    """A single data point could not be converted"""


class UnsupportedInstrumentKindError(PointConversionError):
    """No conversion rule exists for the instrument kind"""


class MissingPercentileBoundaryError(PointConversionError):
    """A summary point has no 0th or 100th percentile sample"""

    def __init__(self, metric_name: str, percentile: float):
        super().__init__(f"missing percentile boundary {percentile} for summary '{metric_name}'")
        self.metric_name = metric_name
        self.percentile = percentile


def nanos_to_millis(nanos: int) -> int:
    return nanos // NANOS_PER_MILLI


def stream_key(name: str, labels: Mapping[str, Any]) -> Hashable:
    """Identity of a metric stream: metric name plus its label set"""
    return (name, tuple(sorted((key, repr(value)) for key, value in labels.items())))


class MetricPointAdapter:
    """Builds output metrics for one data point, dispatching on instrument kind"""

    def __init__(self, time_tracker: TimeTracker):
        self.time_tracker = time_tracker
        self._builders = {
            InstrumentKind.MONOTONIC_LONG: self._build_count,
            InstrumentKind.MONOTONIC_DOUBLE: self._build_count,
            InstrumentKind.NON_MONOTONIC_LONG: self._build_gauge,
            InstrumentKind.NON_MONOTONIC_DOUBLE: self._build_gauge,
            InstrumentKind.SUMMARY: self._build_summary,
        }

    def build_metrics_from_point(
        self,
        descriptor: MetricDescriptor,
        instrument_kind: InstrumentKind,
        common_attributes: Dict[str, Any],
        point: DataPoint,
    ) -> List[Metric]:
        """Convert one point into zero or one metric.

        Point labels override common attributes; descriptor labels are not
        exported. common_attributes is never modified.
        """
        builder = self._builders.get(instrument_kind)
        if builder is None:
            raise UnsupportedInstrumentKindError(f"Unsupported instrument kind: {instrument_kind}")

        attributes = merge_attributes(common_attributes, point.labels)
        metric = builder(descriptor, point, attributes)
        return [metric] if metric is not None else []

    def _build_count(self, descriptor: MetricDescriptor, point: DataPoint, attributes: Dict[str, Any]) -> Count:
        self._check_point_type(descriptor, point, (LongPoint, DoublePoint))

        key = stream_key(descriptor.name, point.labels)
        start_nanos = self.time_tracker.get_previous_time(key)
        self.time_tracker.record_stream(key, point.timestamp_nanos)

        return Count(
            name=descriptor.name,
            value=point.value,
            start_time_ms=nanos_to_millis(start_nanos),
            end_time_ms=nanos_to_millis(point.timestamp_nanos),
            attributes=attributes,
        )

    def _build_gauge(self, descriptor: MetricDescriptor, point: DataPoint, attributes: Dict[str, Any]) -> Gauge:
        self._check_point_type(descriptor, point, (LongPoint, DoublePoint))
        return Gauge(
            name=descriptor.name,
            value=point.value,
            timestamp_ms=nanos_to_millis(point.timestamp_nanos),
            attributes=attributes,
        )

    def _build_summary(self, descriptor: MetricDescriptor, point: DataPoint, attributes: Dict[str, Any]) -> Summary:
        self._check_point_type(descriptor, point, (SummaryPoint,))
        return Summary(
            name=descriptor.name,
            count=point.count,
            sum=point.sum,
            min=self._value_at(descriptor, point, MIN_PERCENTILE),
            max=self._value_at(descriptor, point, MAX_PERCENTILE),
            start_time_ms=nanos_to_millis(point.start_nanos),
            end_time_ms=nanos_to_millis(point.end_nanos),
            attributes=attributes,
        )

    @staticmethod
    def _value_at(descriptor: MetricDescriptor, point: SummaryPoint, percentile: float) -> float:
        for sample in point.percentile_values:
            if sample.percentile == percentile:
                return sample.value
        raise MissingPercentileBoundaryError(descriptor.name, percentile)

    @staticmethod
    def _check_point_type(descriptor: MetricDescriptor, point: DataPoint, expected: tuple) -> None:
        if not isinstance(point, expected):
            raise PointConversionError(
                f"Point of type {type(point).__name__} cannot be converted for metric '{descriptor.name}'"
            )

"""Maps OpenTelemetry SDK MetricsData onto metric streams for the adapter"""
from typing import Iterator, List, Optional, Tuple
from opentelemetry.sdk.metrics.export import (
    ExponentialHistogram,
    Gauge as SdkGauge,
    Histogram,
    MetricsData,
    Sum,
)
from opentelemetry.sdk.resources import Resource
from .models import (
    DataPoint,
    DoublePoint,
    InstrumentKind,
    LongPoint,
    MetricDescriptor,
    MetricStream,
    SummaryPoint,
    ValueAtPercentile,
)
from logging_config import get_logger

logger = get_logger(__name__)


def streams_from_metrics_data(metrics_data: MetricsData) -> Iterator[Tuple[Optional[Resource], MetricStream]]:
    """Yield (resource, stream) for every metric in an SDK collection"""
    for resource_metrics in metrics_data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                stream = _to_stream(metric, scope_metrics.scope)
                if stream is not None:
                    yield resource_metrics.resource, stream


def _to_stream(metric, scope) -> Optional[MetricStream]:
    data = metric.data
    if isinstance(data, (Sum, SdkGauge)):
        points = [_number_point(point) for point in data.data_points]
        monotonic = isinstance(data, Sum) and data.is_monotonic
        kind = _number_kind(points, monotonic)
    elif isinstance(data, (Histogram, ExponentialHistogram)):
        points = [_summary_point(point) for point in data.data_points]
        kind = InstrumentKind.SUMMARY
    else:
        logger.warning("Skipping unsupported SDK metric data", metric_name=metric.name,
                       data_type=type(data).__name__)
        return None

    descriptor = MetricDescriptor(
        name=metric.name,
        description=metric.description or "",
        unit=metric.unit or "1",
        instrument_kind=kind,
    )
    return MetricStream(descriptor=descriptor, instrument_kind=kind, points=points, library_info=scope)


def _number_kind(points: List[DataPoint], monotonic: bool) -> InstrumentKind:
    is_long = bool(points) and isinstance(points[0], LongPoint)
    if monotonic:
        return InstrumentKind.MONOTONIC_LONG if is_long else InstrumentKind.MONOTONIC_DOUBLE
    return InstrumentKind.NON_MONOTONIC_LONG if is_long else InstrumentKind.NON_MONOTONIC_DOUBLE


def _number_point(point) -> DataPoint:
    labels = dict(point.attributes or {})
    start = point.start_time_unix_nano or 0
    if isinstance(point.value, int) and not isinstance(point.value, bool):
        return LongPoint(timestamp_nanos=point.time_unix_nano, value=point.value,
                         labels=labels, start_nanos=start)
    return DoublePoint(timestamp_nanos=point.time_unix_nano, value=float(point.value),
                       labels=labels, start_nanos=start)


def _summary_point(point) -> SummaryPoint:
    # Histograms only keep min and max, which become the percentile boundaries
    return SummaryPoint(
        start_nanos=point.start_time_unix_nano or 0,
        end_nanos=point.time_unix_nano,
        count=point.count,
        sum=float(point.sum),
        percentile_values=(
            ValueAtPercentile(0.0, float(point.min)),
            ValueAtPercentile(100.0, float(point.max)),
        ),
        labels=dict(point.attributes or {}),
    )

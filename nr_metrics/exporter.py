"""Export cycle: converts metric streams and hands them to a sender"""
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple
from opentelemetry.sdk.metrics import (
    Counter,
    Histogram,
    ObservableCounter,
    ObservableGauge,
    ObservableUpDownCounter,
    UpDownCounter,
)
from opentelemetry.sdk.metrics.export import (
    AggregationTemporality,
    MetricExporter as SdkMetricExporter,
    MetricExportResult,
    MetricsData,
)
from .adapter import MetricPointAdapter
from .attributes import add_resource_attributes, populate_library_info
from .models import Metric, MetricStream
from .sdk_bridge import streams_from_metrics_data
from .senders import MetricSender
from .time_tracker import TimeTracker
from logging_config import get_logger, log_error, log_export_cycle

logger = get_logger(__name__)


class ExportResult(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class ConversionResult:
    """Metrics converted in one cycle and the number of points that failed"""
    metrics: List[Metric] = field(default_factory=list)
    failed_points: int = 0


class MetricExporter:
    """Runs export cycles: attribute layering, point conversion, delivery"""

    def __init__(self,
                 sender: MetricSender,
                 common_attributes: Optional[Dict[str, Any]] = None,
                 time_tracker: Optional[TimeTracker] = None,
                 adapter: Optional[MetricPointAdapter] = None):
        self.sender = sender
        self.common_attributes = dict(common_attributes or {})
        self.time_tracker = time_tracker or TimeTracker()
        self.adapter = adapter or MetricPointAdapter(self.time_tracker)
        self._cycle_lock = threading.Lock()
        self._shutdown = False

    def convert(self, metric_streams: Iterable[MetricStream], resource: Optional[Any] = None) -> ConversionResult:
        """Convert every point of every stream; a bad point never stops the batch"""
        result = ConversionResult()

        for stream in metric_streams:
            attributes = add_resource_attributes(
                populate_library_info(self.common_attributes, stream.library_info),
                resource
            )
            for point in stream.points:
                try:
                    result.metrics.extend(self.adapter.build_metrics_from_point(
                        stream.descriptor, stream.instrument_kind, attributes, point
                    ))
                except Exception as e:
                    result.failed_points += 1
                    log_error(logger, e, {
                        "metric_name": stream.descriptor.name,
                        "instrument_kind": str(stream.instrument_kind),
                        "point_type": type(point).__name__,
                    })

        return result

    def export(self, metric_streams: Iterable[MetricStream], resource: Optional[Any] = None) -> ExportResult:
        """Run one export cycle for streams sharing a single resource"""
        return self.export_groups([(resource, metric_streams)])

    def export_groups(self, groups: Iterable[Tuple[Optional[Any], Iterable[MetricStream]]]) -> ExportResult:
        """Run one export cycle over (resource, streams) groups.

        Every group is converted before the combined batch is sent, and the
        interval boundary advances once for the whole cycle.
        """
        with self._cycle_lock:
            if self._shutdown:
                logger.warning("Export called after shutdown", event_type="export_after_shutdown")
                return ExportResult.FAILURE

            start_time = time.time()
            conversion = ConversionResult()
            try:
                for resource, metric_streams in groups:
                    group_result = self.convert(metric_streams, resource)
                    conversion.metrics.extend(group_result.metrics)
                    conversion.failed_points += group_result.failed_points
            finally:
                self.time_tracker.tick()

            outcome = self._send(conversion.metrics)
            log_export_cycle(logger, len(conversion.metrics), conversion.failed_points, time.time() - start_time)
            return outcome

    def _send(self, metrics: List[Metric]) -> ExportResult:
        if not metrics:
            return ExportResult.SUCCESS

        try:
            self.sender.send_batch(metrics)
        except Exception as e:
            logger.error(
                "Failed to send metric batch",
                metric_count=len(metrics),
                error=str(e),
                error_type=type(e).__name__,
                event_type="send_error"
            )
            return ExportResult.FAILURE
        return ExportResult.SUCCESS

    def shutdown(self) -> None:
        with self._cycle_lock:
            if self._shutdown:
                return
            self._shutdown = True
        self.sender.shutdown()
        logger.info("Metric exporter shutdown")

    def is_shutdown(self) -> bool:
        return self._shutdown


# Counters report per-interval amounts; the adapter sends values as-is
DELTA_TEMPORALITY = {
    Counter: AggregationTemporality.DELTA,
    UpDownCounter: AggregationTemporality.CUMULATIVE,
    Histogram: AggregationTemporality.DELTA,
    ObservableCounter: AggregationTemporality.DELTA,
    ObservableUpDownCounter: AggregationTemporality.CUMULATIVE,
    ObservableGauge: AggregationTemporality.CUMULATIVE,
}


class OpenTelemetryMetricExporter(SdkMetricExporter):
    """OpenTelemetry SDK exporter for use with PeriodicExportingMetricReader"""

    def __init__(self, exporter: MetricExporter):
        super().__init__(preferred_temporality=DELTA_TEMPORALITY)
        self.exporter = exporter

    def export(self, metrics_data: MetricsData, timeout_millis: float = 10_000, **kwargs) -> MetricExportResult:
        if self.exporter.export_groups(_group_by_resource(metrics_data)) == ExportResult.FAILURE:
            return MetricExportResult.FAILURE
        return MetricExportResult.SUCCESS

    def force_flush(self, timeout_millis: float = 10_000) -> bool:
        return True

    def shutdown(self, timeout_millis: float = 30_000, **kwargs) -> None:
        self.exporter.shutdown()


def _group_by_resource(metrics_data: MetricsData):
    grouped = []
    for resource, stream in streams_from_metrics_data(metrics_data):
        if grouped and grouped[-1][0] is resource:
            grouped[-1][1].append(stream)
        else:
            grouped.append((resource, [stream]))
    return grouped

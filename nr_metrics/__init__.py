"""Adapts OpenTelemetry metric data points into New Relic metric records"""
from .adapter import (
    MetricPointAdapter,
    MissingPercentileBoundaryError,
    PointConversionError,
    UnsupportedInstrumentKindError,
)
from .exporter import ExportResult, MetricExporter, OpenTelemetryMetricExporter
from .factory import ExporterFactory
from .models import (
    Count,
    DoublePoint,
    Gauge,
    InstrumentKind,
    LongPoint,
    MetricDescriptor,
    MetricStream,
    Summary,
    SummaryPoint,
    ValueAtPercentile,
)
from .senders import LoggingMetricSender, MetricSender, SenderSettings
from .time_tracker import TimeTracker

__all__ = [
    'Count',
    'DoublePoint',
    'ExportResult',
    'ExporterFactory',
    'Gauge',
    'InstrumentKind',
    'LoggingMetricSender',
    'LongPoint',
    'MetricDescriptor',
    'MetricExporter',
    'MetricPointAdapter',
    'MetricSender',
    'MetricStream',
    'MissingPercentileBoundaryError',
    'OpenTelemetryMetricExporter',
    'PointConversionError',
    'SenderSettings',
    'Summary',
    'SummaryPoint',
    'TimeTracker',
    'UnsupportedInstrumentKindError',
    'ValueAtPercentile',
]

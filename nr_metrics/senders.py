"""Sender interface for converted metrics and a logging implementation"""
import abc
from dataclasses import dataclass
from typing import List, Optional
from .models import Count, Gauge, Metric, Summary
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SenderSettings:
    """Settings a sending client needs; assembled once from configuration"""
    api_key: str = ""
    enable_audit_logging: bool = False
    uri_override: Optional[str] = None


class MetricSender(abc.ABC):
    """Client that delivers converted metrics (batching, auth, retries, HTTP)"""

    @abc.abstractmethod
    def send_batch(self, metrics: List[Metric]) -> None:
        """Deliver one batch of metrics"""
        pass

    def shutdown(self) -> None:
        """Release client resources"""
        pass


class LoggingMetricSender(MetricSender):
    """Writes batches to the structured log instead of the network"""

    def __init__(self, settings: Optional[SenderSettings] = None):
        self.settings = settings or SenderSettings()
        self.batches_sent = 0

    def send_batch(self, metrics: List[Metric]) -> None:
        self.batches_sent += 1
        logger.info(
            "Metric batch ready",
            metric_count=len(metrics),
            endpoint=self.settings.uri_override or "default",
            event_type="metric_batch"
        )
        if self.settings.enable_audit_logging:
            for metric in metrics:
                logger.debug("Audit metric", event_type="metric_audit", **describe_metric(metric))

    def shutdown(self) -> None:
        logger.info("Logging sender shutdown", batches_sent=self.batches_sent)


def describe_metric(metric: Metric) -> dict:
    """Flatten a metric record into log-friendly fields"""
    fields = {"metric_name": metric.name, "attributes": dict(metric.attributes)}
    if isinstance(metric, Count):
        fields.update(metric_type="count", value=metric.value,
                      start_time_ms=metric.start_time_ms, end_time_ms=metric.end_time_ms)
    elif isinstance(metric, Gauge):
        fields.update(metric_type="gauge", value=metric.value, timestamp_ms=metric.timestamp_ms)
    elif isinstance(metric, Summary):
        fields.update(metric_type="summary", count=metric.count, sum=metric.sum,
                      min=metric.min, max=metric.max,
                      start_time_ms=metric.start_time_ms, end_time_ms=metric.end_time_ms)
    return fields

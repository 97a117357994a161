"""Factory for building a configured metric exporter"""
from typing import Callable, Optional
from config import Config
from .attributes import (
    COLLECTOR_NAME,
    COLLECTOR_NAME_VALUE,
    INSTRUMENTATION_PROVIDER,
    INSTRUMENTATION_PROVIDER_VALUE,
)
from .exporter import MetricExporter, OpenTelemetryMetricExporter
from .senders import LoggingMetricSender, MetricSender, SenderSettings
from logging_config import get_logger

logger = get_logger(__name__)

SenderFactory = Callable[[SenderSettings], MetricSender]


class ExporterFactory:
    """Creates exporters from configuration"""

    @staticmethod
    def create_exporter(config: Config, sender_factory: Optional[SenderFactory] = None) -> MetricExporter:
        """Create a MetricExporter with the configured service name and sender"""
        settings = config.sender_settings()
        sender = (sender_factory or LoggingMetricSender)(settings)

        common_attributes = config.get_common_attributes()
        common_attributes[INSTRUMENTATION_PROVIDER] = INSTRUMENTATION_PROVIDER_VALUE
        common_attributes[COLLECTOR_NAME] = COLLECTOR_NAME_VALUE

        logger.info(
            "Metric exporter created",
            service_name=config.service_name,
            audit_logging=settings.enable_audit_logging,
            uri_override=settings.uri_override,
            sender=type(sender).__name__,
            event_type="exporter_setup"
        )
        return MetricExporter(sender, common_attributes)

    @staticmethod
    def create_sdk_exporter(config: Config, sender_factory: Optional[SenderFactory] = None) -> OpenTelemetryMetricExporter:
        """Create an exporter that plugs into the OpenTelemetry SDK metric readers"""
        return OpenTelemetryMetricExporter(ExporterFactory.create_exporter(config, sender_factory))

#!/usr/bin/env python3
"""Example entry point: records a counter and exports it through the New Relic adapter"""
import sys
import time
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from config import Config
from nr_metrics.factory import ExporterFactory
from logging_config import setup_structured_logging, get_logger, log_exporter_startup, log_error


def main(iterations: int = 20):
    """Record work on a counter and a histogram and let the periodic reader export them"""
    try:
        config = Config()

        setup_structured_logging(config)
        logger = get_logger(__name__)
        log_exporter_startup(logger, config)

        exporter = ExporterFactory.create_sdk_exporter(config)
        reader = PeriodicExportingMetricReader(
            exporter,
            export_interval_millis=config.export_interval_millis
        )
        provider = MeterProvider(
            resource=Resource.create(config.get_common_attributes()),
            metric_readers=[reader]
        )

        meter = provider.get_meter("sample-app", "1.0")
        work_counter = meter.create_counter("workCounter", unit="one", description="Counting all the work")
        work_latency = meter.create_histogram("workLatency", unit="ms", description="Work latency")

        for i in range(iterations):
            started = time.time()
            time.sleep(0.5)
            work_counter.add(1, {"workName": "testWork"})
            work_latency.record((time.time() - started) * 1000, {"workName": "testWork"})

        # Flushes the last interval through the exporter
        provider.shutdown()

    except Exception as e:
        logger = get_logger(__name__)
        log_error(logger, e, {"component": "main", "phase": "export"})
        sys.exit(1)


if __name__ == '__main__':
    main()

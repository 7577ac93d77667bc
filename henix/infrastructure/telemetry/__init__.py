"""
henix Telemetry Infrastructure

Optional OTLP export of one span and one duration sample per deployment
attempt. Needs the `telemetry` extra; without it everything is a no-op.
"""

from henix.infrastructure.telemetry.otel_exporter import (
    OTELConfig,
    OTELExporter,
    create_exporter,
)

__all__ = ["OTELConfig", "OTELExporter", "create_exporter"]

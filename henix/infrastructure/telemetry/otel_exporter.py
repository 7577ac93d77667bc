"""
OpenTelemetry Exporter for henix

Architectural Intent:
- One tracing span per deployment attempt, tagged with node and identifier
- Attempt durations and outcomes recorded as metrics
- Exports to any OTLP-compatible backend when an endpoint is configured

Security:
- Endpoint defaults to empty string (must be explicitly configured)
- Non-localhost http:// endpoints rejected unless insecure=True
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Any
from urllib.parse import urlparse
import logging
from datetime import datetime, UTC

logger = logging.getLogger(__name__)


@dataclass
class OTELConfig:
    endpoint: str = ""
    service_name: str = "henix"
    insecure: bool = False

    def __post_init__(self) -> None:
        if self.endpoint:
            parsed = urlparse(self.endpoint)
            is_localhost = parsed.hostname in ("localhost", "127.0.0.1", "::1")
            if parsed.scheme == "http" and not is_localhost and not self.insecure:
                raise ValueError(
                    f"Non-localhost HTTP endpoint '{self.endpoint}' requires "
                    "insecure=True or use https://."
                )


class OTELExporter:
    """
    OpenTelemetry exporter for deployment runs.

    Metrics are always buffered locally; they are forwarded to the SDK only
    once `initialize()` succeeded.
    """

    def __init__(self, config: OTELConfig):
        self.config = config
        self._initialized = False
        self._metrics_buffer: list[dict[str, Any]] = []
        self._meter: Any = None
        self._histograms: dict[str, Any] = {}

    @property
    def enabled(self) -> bool:
        return self._initialized

    @property
    def buffered_metrics(self) -> list[dict[str, Any]]:
        return list(self._metrics_buffer)

    def initialize(self) -> None:
        """Initialize OpenTelemetry SDK and exporters."""
        if not self.config.endpoint:
            logger.debug("OTEL endpoint not configured, telemetry disabled")
            return

        try:
            from opentelemetry import trace, metrics
            from opentelemetry.sdk.trace import TracerProvider
            from opentelemetry.sdk.trace.export import BatchSpanProcessor
            from opentelemetry.sdk.resources import Resource, SERVICE_NAME
            from opentelemetry.sdk.metrics import MeterProvider
            from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
                OTLPSpanExporter,
            )
            from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import (
                OTLPMetricExporter,
            )
        except ImportError:
            logger.warning(
                "OpenTelemetry SDK not installed (pip install henix[telemetry]), "
                "telemetry disabled"
            )
            return

        resource = Resource(attributes={SERVICE_NAME: self.config.service_name})

        tracer_provider = TracerProvider(resource=resource)
        tracer_provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(endpoint=self.config.endpoint, insecure=self.config.insecure)
            )
        )
        trace.set_tracer_provider(tracer_provider)

        reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(endpoint=self.config.endpoint, insecure=self.config.insecure)
        )
        metrics.set_meter_provider(MeterProvider(resource=resource, metric_readers=[reader]))
        self._meter = metrics.get_meter(__name__)
        self._initialized = True
        logger.info("Exporting telemetry to %s", self.config.endpoint)

    def _get_histogram(self, name: str, unit: str = "") -> Any:
        if name not in self._histograms and self._meter:
            self._histograms[name] = self._meter.create_histogram(name, unit=unit)
        return self._histograms.get(name)

    def record_metric(
        self,
        name: str,
        value: float,
        unit: str = "",
        attributes: Optional[dict[str, str]] = None,
    ) -> None:
        self._metrics_buffer.append(
            {
                "name": name,
                "value": value,
                "unit": unit,
                "attributes": attributes or {},
                "timestamp": datetime.now(UTC).isoformat(),
            }
        )

        if self._initialized:
            histogram = self._get_histogram(name, unit)
            if histogram:
                histogram.record(value, attributes=attributes or {})

    def record_attempt(self, node: str, state: str, duration_s: float) -> None:
        """Record the duration and terminal state of one attempt."""
        self.record_metric(
            "henix.attempt.duration",
            duration_s,
            unit="s",
            attributes={"node": node, "state": state},
        )

    def start_span(
        self,
        name: str,
        attributes: Optional[dict[str, str]] = None,
    ) -> Optional[Any]:
        if not self._initialized:
            return None

        from opentelemetry import trace

        tracer = trace.get_tracer(__name__)
        return tracer.start_span(name, attributes=attributes or {})

    def end_span(self, span: Any, error: Optional[str] = None) -> None:
        if span is None:
            return
        if error:
            from opentelemetry.trace import Status, StatusCode

            span.set_status(Status(StatusCode.ERROR, error))
        span.end()


def create_exporter(
    endpoint: Optional[str] = None,
    insecure: bool = False,
    service_name: str = "henix",
) -> OTELExporter:
    """Factory function to create and initialize an exporter."""
    exporter = OTELExporter(
        OTELConfig(endpoint=endpoint or "", service_name=service_name, insecure=insecure)
    )
    exporter.initialize()
    return exporter

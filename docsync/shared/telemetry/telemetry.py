"""OpenTelemetry setup for one open store.

The tracer provider is labelled with the store's backends so spans from a
Firestore-backed store and a memory-backed one are told apart. Redis is
only instrumented when the notifier actually talks to Redis.
"""

from __future__ import annotations

import logging
import threading

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from docsync.core.config import TELEMETRY_EXPORTERS, Settings

logger = logging.getLogger(__name__)


def _build_exporter(kind: str, otlp_endpoint: str | None) -> SpanExporter | None:
    if kind == "none":
        return None
    if kind == "otlp":
        if not otlp_endpoint:
            raise ValueError("telemetry_exporter 'otlp' needs telemetry_otlp_endpoint")
        return OTLPSpanExporter(
            endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
        )
    if kind == "console":
        return ConsoleSpanExporter()
    raise ValueError(f"telemetry_exporter must be one of {TELEMETRY_EXPORTERS}, got: {kind!r}")


class TelemetryConfig:
    """Tracer provider and instrumentations for a store runtime.

    Args:
        settings: Source of service name/version, environment, exporter,
            sampling and the backends recorded on the resource.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.resource = Resource.create(
            {
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                "deployment.environment": settings.telemetry_environment,
                "docsync.driver_backend": settings.driver_backend,
                "docsync.notifier_backend": settings.notifier_backend,
            }
        )
        self.tracer_provider: TracerProvider | None = None
        self._instrumented: list[str] = []

    @property
    def instrumented(self) -> list[str]:
        """Names of the instrumentations installed by start()."""
        return list(self._instrumented)

    def start(self) -> TracerProvider:
        """Install the global tracer provider and the instrumentations.

        Raises:
            ValueError: Unknown exporter, or otlp without an endpoint.
        """
        exporter = _build_exporter(
            self.settings.telemetry_exporter, self.settings.telemetry_otlp_endpoint
        )
        provider = TracerProvider(
            resource=self.resource,
            sampler=TraceIdRatioBased(self.settings.telemetry_sample_rate),
        )
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        self.tracer_provider = provider

        LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=False)
        self._instrumented.append("logging")
        if self.settings.notifier_backend == "redis":
            RedisInstrumentor().instrument(tracer_provider=provider)
            self._instrumented.append("redis")

        logger.info(
            "Tracing started (exporter=%s, driver=%s, notifier=%s)",
            self.settings.telemetry_exporter,
            self.settings.driver_backend,
            self.settings.notifier_backend,
        )
        return provider

    def shutdown(self) -> None:
        """Remove instrumentations and flush pending spans."""
        if "redis" in self._instrumented:
            RedisInstrumentor().uninstrument()
        if "logging" in self._instrumented:
            LoggingInstrumentor().uninstrument()
        self._instrumented.clear()
        if self.tracer_provider is not None:
            self.tracer_provider.shutdown()
            self.tracer_provider = None
            logger.info("Tracing stopped")


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Telemetry of the currently open store, if tracing is enabled."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    """Set (or clear, with None) the current telemetry instance."""
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry

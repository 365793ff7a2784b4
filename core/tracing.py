import os

import structlog
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

log = structlog.get_logger(__name__)

TRACER_NAME = "paypal-checkout"


def init_tracer(service_name: str = TRACER_NAME, endpoint: str | None = None):
    """Install a tracer provider exporting dispatch spans over OTLP.

    DISABLE_TRACING switches to the console exporter.
    """
    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if os.getenv("DISABLE_TRACING", "").lower() in {"1", "true", "yes"}:
        exporter = ConsoleSpanExporter()
    else:
        try:
            exporter = OTLPSpanExporter(endpoint=endpoint)
        except Exception as exc:  # pragma: no cover
            log.warning("OTLP exporter unavailable, tracing disabled", error=str(exc))
            exporter = ConsoleSpanExporter()

    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    return provider


def get_tracer():
    """Tracer for dispatch spans; a no-op until init_tracer() has run."""
    return trace.get_tracer(TRACER_NAME)

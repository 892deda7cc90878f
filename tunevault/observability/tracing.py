import os

from flask import Flask

from tunevault import __version__

try:
    from opentelemetry import trace
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    from opentelemetry.instrumentation.flask import FlaskInstrumentor
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
except ImportError:  # pragma: no cover - optional dependency (otel extra)
    FlaskInstrumentor = None  # type: ignore

try:
    from opentelemetry.instrumentation.botocore import BotocoreInstrumentor
except ImportError:  # pragma: no cover - optional dependency (otel extra)
    BotocoreInstrumentor = None  # type: ignore

# Probes and scrapes would drown out the catalog traffic
EXCLUDED_URLS = "healthz,readyz,metrics"


def init_tracing(app: Flask) -> bool:
    """Instrument Flask (and S3 calls) when an OTLP endpoint is configured.

    Returns True when tracing was switched on.
    """
    if FlaskInstrumentor is None:  # pragma: no cover - optional dependency
        return False

    endpoint = app.config.get("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv(
        "OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    if not endpoint:
        return False

    headers = app.config.get("OTEL_EXPORTER_OTLP_HEADERS") or os.getenv(
        "OTEL_EXPORTER_OTLP_HEADERS"
    )

    resource = Resource.create(
        {
            "service.name": app.config.get("OTEL_SERVICE_NAME", "tunevault"),
            "service.version": __version__,
        }
    )

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(
        endpoint=endpoint,
        headers=headers,
        insecure=app.config.get("OTEL_EXPORTER_OTLP_INSECURE", True),
    )
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FlaskInstrumentor().instrument_app(app, excluded_urls=EXCLUDED_URLS)
    if BotocoreInstrumentor is not None:
        BotocoreInstrumentor().instrument(tracer_provider=provider)
    return True

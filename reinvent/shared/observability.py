# reinvent/shared/observability.py
import logging
from typing import Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

from reinvent.shared.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def setup_observability(app: FastAPI, config: Optional[Settings] = None) -> bool:
    """
    Configures OpenTelemetry for the application.

    1. Sets the Global Tracer Provider.
    2. Configures the OTLP exporter (plus console spans in DEBUG).
    3. Auto-instruments the FastAPI application to trace all HTTP requests.

    Does nothing unless OTEL_EXPORTER_OTLP_ENDPOINT is configured; returns
    whether tracing export was enabled.
    """
    config = config or default_settings
    if not config.OTEL_EXPORTER_OTLP_ENDPOINT:
        logger.info("Telemetry disabled: No OTEL_EXPORTER_OTLP_ENDPOINT configured.")
        return False

    resource = Resource.create(attributes={
        "service.name": config.OTEL_SERVICE_NAME,
        "deployment.environment": config.APP_ENV.value,
        "service.version": config.APP_VERSION,
    })

    provider = TracerProvider(resource=resource)
    exporter = OTLPSpanExporter(endpoint=f"{config.OTEL_EXPORTER_OTLP_ENDPOINT}/v1/traces")
    provider.add_span_processor(BatchSpanProcessor(exporter))

    if config.DEBUG:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider)
    return True


def get_tracer(name: str):
    """
    Utility to get a tracer for manual instrumentation in Use Cases.
    Usage:
        tracer = get_tracer(__name__)
        with tracer.start_as_current_span("use_case.simulate"):
            ...
    """
    return trace.get_tracer(name)

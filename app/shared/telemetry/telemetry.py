"""OpenTelemetry tracing for the onboarding service.

``init_telemetry`` runs once from the lifespan when ``TELEMETRY_ENABLED`` is
set; ``shutdown_telemetry`` flushes pending spans on exit.
"""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Polled by load balancers.
_UNTRACED_URLS = "/api/v1/health"

_provider: TracerProvider | None = None


def _span_exporter(settings: Settings) -> SpanExporter | None:
    """Exporter for TELEMETRY_EXPORTER; None means spans are sampled but not shipped."""
    if settings.telemetry_exporter == "none":
        return None
    endpoint = settings.telemetry_otlp_endpoint
    if settings.telemetry_exporter == "otlp":
        if endpoint:
            return OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
        logger.warning("TELEMETRY_OTLP_ENDPOINT not set; falling back to console exporter")
    return ConsoleSpanExporter()


def get_tracer_provider() -> TracerProvider | None:
    """Provider installed by init_telemetry, or None before startup / when disabled."""
    return _provider


def init_telemetry(app: FastAPI, settings: Settings) -> TracerProvider | None:
    """Install a tracer provider and instrument FastAPI, logging and the SQL engine.

    Returns None (and installs nothing) when telemetry is disabled.
    """
    global _provider
    if not settings.telemetry_enabled:
        return None

    provider = TracerProvider(
        resource=Resource(
            attributes={
                SERVICE_NAME: settings.app_name,
                SERVICE_VERSION: settings.app_version,
                "deployment.environment": settings.telemetry_environment,
            }
        ),
        sampler=TraceIdRatioBased(settings.telemetry_sample_rate),
    )
    exporter = _span_exporter(settings)
    if exporter is not None:
        provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)
    _provider = provider

    FastAPIInstrumentor.instrument_app(
        app, tracer_provider=provider, excluded_urls=_UNTRACED_URLS
    )
    LoggingInstrumentor().instrument(tracer_provider=provider, set_logging_format=True)

    from app.infrastructure.persistence import database

    database._ensure_engine()
    if database.engine is not None:
        SQLAlchemyInstrumentor().instrument(
            engine=database.engine.sync_engine,
            tracer_provider=provider,
            enable_commenter=True,
        )

    logger.info(
        "Tracing enabled: service=%s exporter=%s sample_rate=%s",
        settings.app_name,
        settings.telemetry_exporter,
        settings.telemetry_sample_rate,
    )
    return provider


def shutdown_telemetry() -> None:
    """Flush and stop the tracer provider, if one was installed."""
    global _provider
    if _provider is None:
        return
    _provider.shutdown()
    _provider = None
    logger.info("Telemetry shutdown complete")

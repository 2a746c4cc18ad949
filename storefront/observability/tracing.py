"""
OpenTelemetry tracing setup.

- TracerProvider with service resource attributes
- Correlation ID tagging on every span started during a request
- Console exporter for local debugging, OTLP exporter when an endpoint is configured
"""
from __future__ import annotations

from typing import Optional

from opentelemetry import trace
from opentelemetry.context import Context
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import Span, SpanProcessor, TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SimpleSpanProcessor

from storefront.config import Settings, get_settings
from storefront.observability.correlation import get_correlation_id

CORRELATION_ID_ATTRIBUTE = "correlation.id"

_PROVIDER: TracerProvider | None = None


class CorrelationIdSpanProcessor(SpanProcessor):
    """Tags each span with the correlation ID active when it starts."""

    def on_start(self, span: Span, parent_context: Optional[Context] = None) -> None:
        correlation_id = get_correlation_id()
        if correlation_id:
            span.set_attribute(CORRELATION_ID_ATTRIBUTE, correlation_id)


def setup_tracing(settings: Settings | None = None) -> TracerProvider:
    """
    Configure OpenTelemetry tracing.

    The global tracer provider can only be set once per process, so repeated
    calls return the provider created by the first one.

    Args:
        settings: Application settings (defaults to ``get_settings()``)

    Returns:
        Configured TracerProvider
    """
    global _PROVIDER
    if _PROVIDER is not None:
        return _PROVIDER

    settings = settings or get_settings()
    resource = Resource.create({
        SERVICE_NAME: settings.service_name,
        SERVICE_VERSION: settings.service_version,
        "deployment.environment": settings.environment,
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(CorrelationIdSpanProcessor())

    if settings.trace_console_export:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))

    if settings.otlp_endpoint:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))

    trace.set_tracer_provider(provider)
    _PROVIDER = provider
    return provider


def shutdown_tracing() -> None:
    """Flush pending spans and stop exporters."""
    if _PROVIDER is not None:
        _PROVIDER.shutdown()


def get_tracer(name: str) -> trace.Tracer:
    return trace.get_tracer(name)


def get_current_trace_id() -> Optional[str]:
    """
    Get the current trace ID as a hex string.

    Returns:
        32-character hex trace ID, or None if not in a span
    """
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return None
    return format(ctx.trace_id, "032x")


def get_current_span_id() -> Optional[str]:
    """
    Get the current span ID as a hex string.

    Returns:
        16-character hex span ID, or None if not in a span
    """
    ctx = trace.get_current_span().get_span_context()
    if not ctx.is_valid:
        return None
    return format(ctx.span_id, "016x")

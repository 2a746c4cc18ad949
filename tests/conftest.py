from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable

import pytest
from httpx import ASGITransport, AsyncClient
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from storefront.config import get_settings
from storefront.db.repositories import set_order_repository, set_product_repository
from storefront.main import app
from storefront.observability.logging import configure_logging
from storefront.observability.metrics import reset_metrics
from storefront.observability.tracing import setup_tracing


@pytest.fixture(scope="session")
def span_exporter() -> InMemorySpanExporter:
    # The global tracer provider is process-wide; attach the capture exporter once.
    configure_logging(logging.INFO)
    exporter = InMemorySpanExporter()
    setup_tracing().add_span_processor(SimpleSpanProcessor(exporter))
    return exporter


@pytest.fixture(autouse=True)
def test_environment(monkeypatch: pytest.MonkeyPatch, span_exporter: InMemorySpanExporter) -> None:
    monkeypatch.setenv("STORE_LATENCY_SCALE", "0")
    monkeypatch.setenv("ORDER_STORE_FAILURE_RATE", "0")
    monkeypatch.setenv("PRODUCT_STORE_FAILURE_RATE", "0")
    get_settings.cache_clear()

    set_order_repository(None)
    set_product_repository(None)
    reset_metrics()
    span_exporter.clear()

    yield

    set_order_repository(None)
    set_product_repository(None)
    get_settings.cache_clear()


@pytest.fixture
def log_events(caplog: pytest.LogCaptureFixture) -> Callable[[], list[dict]]:
    """Structured events logged during the test (structlog keeps the event dict on ``record.msg``)."""
    caplog.set_level(logging.INFO)

    def _events() -> list[dict]:
        events = []
        for record in caplog.records:
            if isinstance(record.msg, dict):
                events.append({**record.msg, "level": record.levelname.lower()})
        return events

    return _events


@pytest.fixture
async def api_client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

tracer = trace.get_tracer("storefront.services")


@contextmanager
def repository_span(name: str, **attributes: Any) -> Iterator[Span]:
    """Child span around a single store call; tagged ``repository.success`` when it returns."""
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        yield span
        span.set_attribute("repository.success", True)


def mark_failed(span: Span, exc: BaseException) -> None:
    # The exception itself is recorded by the span context manager as it propagates.
    span.set_attribute("error", True)
    span.set_attribute("error.message", str(exc))
    span.set_status(Status(StatusCode.ERROR, str(exc)))

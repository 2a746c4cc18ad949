from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog


CORRELATION_ID_HEADER = "X-Correlation-Id"
CORRELATION_ID_LOG_KEY = "correlation_id"

# Each request task runs in its own copy of the context, so values never leak
# between concurrent requests.
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def resolve_correlation_id(header_value: str | None) -> tuple[str, bool]:
    """Return ``(correlation_id, generated)`` for an inbound header value.

    A present, non-blank header is used verbatim; anything else gets a fresh id.
    """

    if header_value is not None and header_value.strip():
        return header_value, False
    return generate_correlation_id(), True


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """Make ``correlation_id`` the current id and a field on every log event.

    Both the context variable and the structlog binding are restored on exit.
    """

    token = _correlation_id.set(correlation_id)
    try:
        with structlog.contextvars.bound_contextvars(**{CORRELATION_ID_LOG_KEY: correlation_id}):
            yield correlation_id
    finally:
        _correlation_id.reset(token)

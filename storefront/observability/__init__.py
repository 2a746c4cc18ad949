"""Request-scoped observability: correlation IDs, structlog JSON logs, OpenTelemetry spans.

Every log event and span emitted while a request is in flight carries that
request's correlation ID, plus an in-memory metrics snapshot for local development.
"""

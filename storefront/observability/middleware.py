from __future__ import annotations

from contextlib import nullcontext
from time import perf_counter
from typing import Any, Callable, ContextManager

import structlog
from opentelemetry import trace
from opentelemetry.trace import Span, SpanKind, Status, StatusCode
from starlette.datastructures import Headers, MutableHeaders
from starlette.responses import PlainTextResponse

from storefront.config import get_settings
from storefront.observability.correlation import correlation_scope, resolve_correlation_id
from storefront.observability.metrics import get_metrics


tracer = trace.get_tracer(__name__)
logger = structlog.get_logger("correlation")
access_logger = structlog.get_logger("access")


def _is_health_path(path: str | None) -> bool:
    return bool(path) and (path == "/health" or path.startswith("/health/"))


def access_log_level(path: str | None, status_code: int, elapsed_ms: float, failed: bool, slow_ms: float) -> str:
    if _is_health_path(path):
        return "debug"
    if failed or status_code >= 500:
        return "error"
    if status_code >= 400 or elapsed_ms > slow_ms:
        return "warning"
    return "info"


class CorrelationIdMiddleware:
    """Adds the correlation ID context, a server span, access logs, and basic HTTP metrics."""

    def __init__(self, app: Callable[..., Any], header_name: str | None = None) -> None:
        self.app = app
        self.header_name = header_name or get_settings().correlation_header
        # Avoid self-observing the observability endpoint.
        self._excluded_metric_paths = {"/api/metrics"}

    def _server_span(self, method: str | None, path: str | None) -> ContextManager[Span | None]:
        if _is_health_path(path):
            return nullcontext(None)
        return tracer.start_as_current_span(
            f"{method} {path}",
            kind=SpanKind.SERVER,
            attributes={"http.request.method": method or "", "url.path": path or ""},
        )

    async def __call__(self, scope: dict[str, Any], receive: Callable[..., Any], send: Callable[..., Any]) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        correlation_id, generated = resolve_correlation_id(Headers(scope=scope).get(self.header_name))
        get_metrics().observe_correlation_id(generated=generated)

        path = scope.get("path")
        method = scope.get("method")
        header_name = self.header_name

        with correlation_scope(correlation_id), structlog.contextvars.bound_contextvars(path=path, method=method):
            logger.debug("correlation_id.resolved", generated=generated)

            with self._server_span(method, path) as span:
                start = perf_counter()
                status_code: int = 500
                response_started = False
                failed = False

                async def send_wrapper(message: dict[str, Any]) -> None:
                    nonlocal status_code, response_started

                    # Last point where headers can still change.
                    if message.get("type") == "http.response.start":
                        response_started = True
                        status_code = int(message.get("status", 500))
                        headers = MutableHeaders(scope=message)
                        if header_name not in headers:
                            headers[header_name] = correlation_id

                    await send(message)

                try:
                    await self.app(scope, receive, send_wrapper)
                except Exception as exc:
                    failed = True
                    if response_started:
                        raise
                    # Answer here; the outer error middleware would send the 500 without our header.
                    logger.exception("http_request.unhandled_error")
                    if span is not None:
                        span.record_exception(exc)
                    await PlainTextResponse("Internal Server Error", status_code=500)(scope, receive, send_wrapper)
                finally:
                    elapsed_ms = (perf_counter() - start) * 1000.0

                    if span is not None:
                        span.set_attribute("http.response.status_code", status_code)
                        if status_code >= 500:
                            span.set_status(Status(StatusCode.ERROR))

                    # Update metrics first so they update even if logging misbehaves.
                    if path not in self._excluded_metric_paths:
                        get_metrics().observe_http_request(elapsed_ms=elapsed_ms)

                    level = access_log_level(path, status_code, elapsed_ms, failed, get_settings().slow_request_ms)
                    getattr(access_logger, level)(
                        "http_request",
                        status_code=status_code,
                        elapsed_ms=round(elapsed_ms, 2),
                    )

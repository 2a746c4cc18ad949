import structlog
from fastapi import FastAPI

from storefront.api.health import router as health_router
from storefront.api.metrics import router as metrics_router
from storefront.api.orders import router as orders_router
from storefront.api.products import router as products_router
from storefront.config import get_settings
from storefront.observability.logging import configure_logging
from storefront.observability.middleware import CorrelationIdMiddleware
from storefront.observability.tracing import setup_tracing, shutdown_tracing


app = FastAPI(title="Storefront", version="0.1.0")
app.add_middleware(CorrelationIdMiddleware)
app.include_router(orders_router)
app.include_router(products_router)
app.include_router(health_router)
app.include_router(metrics_router)


@app.on_event("startup")
def _startup() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    setup_tracing(settings)
    structlog.get_logger("storefront").info(
        "app.startup",
        version=settings.service_version,
        environment=settings.environment,
    )


@app.on_event("shutdown")
def _shutdown() -> None:
    structlog.get_logger("storefront").info("app.shutdown")
    shutdown_tracing()

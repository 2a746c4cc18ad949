from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from storefront.observability.correlation import CORRELATION_ID_HEADER


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    service_name: str = Field(default="storefront", alias="SERVICE_NAME")
    service_version: str = Field(default="0.1.0", alias="SERVICE_VERSION")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    correlation_header: str = Field(default=CORRELATION_ID_HEADER, alias="CORRELATION_HEADER")

    otlp_endpoint: str = Field(default="", alias="OTEL_EXPORTER_OTLP_ENDPOINT")
    trace_console_export: bool = Field(default=False, alias="TRACE_CONSOLE_EXPORT")

    store_latency_scale: float = Field(default=1.0, ge=0.0, alias="STORE_LATENCY_SCALE")
    order_store_failure_rate: float = Field(default=0.10, ge=0.0, le=1.0, alias="ORDER_STORE_FAILURE_RATE")
    product_store_failure_rate: float = Field(default=0.05, ge=0.0, le=1.0, alias="PRODUCT_STORE_FAILURE_RATE")

    slow_request_ms: float = Field(default=1000.0, alias="SLOW_REQUEST_MS")
    enable_metrics_endpoint: bool = Field(default=True, alias="ENABLE_METRICS_ENDPOINT")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

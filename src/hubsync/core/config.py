from functools import lru_cache
from urllib.parse import urlparse

from pydantic import ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "GUCE Hub Sync"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True  # Set to False in production

    # Tenant registry (hub backend)
    tenant_api_url: str = "http://localhost:8080"
    tenant_api_timeout_seconds: float = 30.0

    # Retry for idempotent requests (GET/PUT/DELETE) on transient failures
    http_retry_attempts: int = 3
    http_retry_delay: float = 1.0  # First backoff, doubled on each attempt
    http_retry_max_delay: float = 10.0

    # Deployment tracking
    deployment_poll_interval_seconds: float = 3.0
    deployment_progress_increment: int = 15
    deployment_progress_cap: int = 90  # 100 is reserved for a confirmed RUNNING

    # Hub link (instance side)
    hub_link_enabled: bool = False
    hub_url: str = "http://localhost:8080"
    tenant_code: str = "DEFAULT"
    hub_api_key: str = ""
    hub_request_timeout_seconds: float = 10.0
    heartbeat_interval_seconds: float = 60.0
    metrics_interval_multiplier: int = 5  # Metrics push every N heartbeats
    instance_version: str = "1.0.0"
    active_user_window_seconds: int = 900

    # Notifications
    notifications_enabled: bool = True
    notifications_url: str | None = None  # If not set, notifications are logged but not sent

    # Shutdown
    shutdown_grace_period: int = 30

    # CORS
    cors_origins: list[str] = ["http://localhost:4200"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    @field_validator("tenant_api_url", "hub_url", "notifications_url")
    @classmethod
    def validate_http_url(cls, v: str | None, info: ValidationInfo) -> str | None:
        if v is None:
            return v
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"{info.field_name.upper()} must be an http(s) URL, got '{v}'")
        return v.rstrip("/")

    @field_validator("tenant_code")
    @classmethod
    def validate_tenant_code(cls, v: str) -> str:
        code = v.strip().upper()
        if not code:
            raise ValueError("TENANT_CODE must not be empty")
        return code

    @field_validator("deployment_progress_increment")
    @classmethod
    def validate_progress_increment(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("DEPLOYMENT_PROGRESS_INCREMENT must be positive")
        return v

    @field_validator("deployment_progress_cap")
    @classmethod
    def validate_progress_cap(cls, v: int) -> int:
        if not 0 < v < 100:
            raise ValueError(
                "DEPLOYMENT_PROGRESS_CAP must be between 1 and 99; "
                "100% is only reported once the tenant is RUNNING"
            )
        return v

    @field_validator("http_retry_attempts", "metrics_interval_multiplier")
    @classmethod
    def validate_at_least_one(cls, v: int, info: ValidationInfo) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name.upper()} must be at least 1")
        return v

    @field_validator(
        "deployment_poll_interval_seconds",
        "heartbeat_interval_seconds",
        "tenant_api_timeout_seconds",
        "hub_request_timeout_seconds",
    )
    @classmethod
    def validate_positive_seconds(cls, v: float, info: ValidationInfo) -> float:
        if v <= 0:
            raise ValueError(f"{info.field_name.upper()} must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()

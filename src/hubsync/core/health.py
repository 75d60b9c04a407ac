"""Health check endpoint and Prometheus metrics."""

import secrets
import time
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from prometheus_fastapi_instrumentator import Instrumentator

from src.hubsync.core.config import get_settings
from src.hubsync.core.shutdown import request_tracker

# Health check caching
_health_cache: dict[str, Any] | None = None
_health_cache_time: float = 0
HEALTH_CACHE_TTL = 10  # seconds


def reset_health_cache() -> None:
    """Reset health cache (for testing)."""
    global _health_cache, _health_cache_time
    _health_cache = None
    _health_cache_time = 0


def setup_health_endpoint(app: FastAPI) -> None:
    """Configure the health check endpoint.

    The hub link is optional: a disconnected hub makes the instance
    "degraded" but it keeps serving (HTTP 200).
    """

    @app.get("/health")
    async def health(request: Request) -> JSONResponse:
        global _health_cache, _health_cache_time

        now = time.time()

        if request_tracker.is_shutting_down:
            return JSONResponse(
                content={
                    "status": "draining",
                    "in_flight_requests": request_tracker.in_flight_count,
                    "message": "Server is shutting down",
                },
                status_code=503,
            )

        if _health_cache and (now - _health_cache_time) < HEALTH_CACHE_TTL:
            cached_response = _health_cache.copy()
            cached_response["cached"] = True
            cached_response["cache_age_seconds"] = round(now - _health_cache_time, 1)
            return JSONResponse(content=cached_response)

        health_status: dict[str, Any] = {
            "status": "healthy",
            "hub": "not_configured",
            "deployment_tracking": "idle",
            "cached": False,
            "timestamp": now,
        }

        hub_link = request.app.state.hub_link
        if hub_link is not None:
            connection = hub_link.status
            if connection.connected:
                health_status["hub"] = "connected"
                health_status["hub_version"] = connection.hub_version
            else:
                health_status["hub"] = f"disconnected: {connection.error or 'not checked yet'}"
                health_status["status"] = "degraded"
            if connection.last_sync is not None:
                health_status["hub_last_sync"] = connection.last_sync.isoformat()

        reconciler = request.app.state.reconciler
        if reconciler.current is not None:
            health_status["deployment_tracking"] = reconciler.current.status.value

        _health_cache = health_status
        _health_cache_time = now

        return JSONResponse(content=health_status)


def setup_metrics(app: FastAPI) -> None:
    """Configure Prometheus metrics with optional API key protection."""
    settings = get_settings()
    instrumentator = Instrumentator().instrument(app)

    if settings.metrics_api_key:
        api_key_header = APIKeyHeader(name="X-Metrics-Key", auto_error=False)

        async def verify_metrics_key(
            api_key: str | None = Depends(api_key_header),
        ) -> None:
            if (
                api_key is None
                or settings.metrics_api_key is None
                or not secrets.compare_digest(api_key, settings.metrics_api_key)
            ):
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Invalid or missing metrics API key",
                )

        instrumentator.expose(app, endpoint="/metrics", dependencies=[Depends(verify_metrics_key)])
    else:
        instrumentator.expose(app, endpoint="/metrics")

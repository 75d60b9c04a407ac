import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from asgi_correlation_id import CorrelationIdMiddleware, correlation_id
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import RequestResponseEndpoint

from src.hubsync.api.v1.router import api_router
from src.hubsync.clients.hub import HubClient
from src.hubsync.clients.tenant_registry import TenantRegistryClient
from src.hubsync.core.config import Settings, get_settings
from src.hubsync.core.exceptions import setup_exception_handlers
from src.hubsync.core.health import setup_health_endpoint, setup_metrics
from src.hubsync.core.logging import (
    bind_request_context,
    bind_tenant_context,
    clear_request_context,
    get_logger,
    setup_logging,
    unbind_tenant_context,
)
from src.hubsync.core.notifications import NotificationRelay
from src.hubsync.core.shutdown import request_tracker
from src.hubsync.services.deployment_reconciler import DeploymentReconciler
from src.hubsync.services.hub_link import HubLink

logger = get_logger(__name__)

UNTRACKED_PATHS = ("/health", "/metrics")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan - startup and shutdown."""
    settings = get_settings()
    setup_logging(settings.debug)
    logger.info("Starting service", app_name=settings.app_name, env=settings.app_env)

    hub_link: HubLink | None = app.state.hub_link
    if hub_link is not None:
        bind_tenant_context(settings.tenant_code)
        await hub_link.initialize_connection()

    yield

    request_tracker.start_shutdown()
    drained = await request_tracker.wait_for_drain(timeout=settings.shutdown_grace_period)
    if not drained:
        logger.warning(
            "Requests still in flight at shutdown",
            in_flight_requests=request_tracker.in_flight_count,
        )

    logger.info("Closing connections...")
    await app.state.reconciler.aclose()
    if app.state.relay is not None:
        await app.state.relay.aclose()
    if hub_link is not None:
        await hub_link.aclose()
        await hub_link.client.aclose()
    await app.state.registry.aclose()
    logger.info("Shutdown complete")
    unbind_tenant_context()


OPENAPI_TAGS = [
    {"name": "tenants", "description": "Tenant lifecycle on the hub backend"},
    {"name": "deployments", "description": "Progress of the tracked deployment"},
    {"name": "hub", "description": "Instance link to the central hub"},
]


def build_components(app: FastAPI, settings: Settings) -> None:
    """Create the long-lived clients and services and store them on ``app.state``."""
    registry = TenantRegistryClient.from_settings(settings)
    reconciler = DeploymentReconciler.from_settings(registry, settings)

    hub_link = None
    if settings.hub_link_enabled:
        hub_link = HubLink.from_settings(HubClient.from_settings(settings), settings)

    relay = None
    if settings.notifications_enabled:
        relay = NotificationRelay.from_settings(settings)
        relay.attach(reconciler)

    app.state.registry = registry
    app.state.reconciler = reconciler
    app.state.hub_link = hub_link
    app.state.relay = relay


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="GUCE hub administration and instance synchronization API",
        version="0.1.0",
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
        openapi_url="/openapi.json" if settings.enable_openapi else None,
    )

    build_components(app, settings)
    setup_exception_handlers(app)

    @app.middleware("http")
    async def logging_context_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Bind request_id to log context for all requests."""
        clear_request_context()
        bind_request_context(correlation_id.get())
        if settings.hub_link_enabled:
            bind_tenant_context(settings.tenant_code)
        try:
            response = await call_next(request)
            return response
        finally:
            clear_request_context()

    @app.middleware("http")
    async def track_requests_middleware(
        request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        """Track in-flight requests and feed the instance metrics reported to the hub."""
        if request.url.path in UNTRACKED_PATHS:
            return await call_next(request)

        hub_link: HubLink | None = request.app.state.hub_link
        started = time.perf_counter()
        async with request_tracker.track_request():
            response = await call_next(request)
        if hub_link is not None:
            hub_link.collector.record_request(
                (time.perf_counter() - started) * 1000,
                failed=response.status_code >= 500,
                user_id=request.headers.get("X-User-Id"),
            )
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Authorization", "Content-Type", "X-Tenant-Code", "X-Request-ID"],
    )

    # Last added runs first: the correlation ID must exist before the logging context binds it
    app.add_middleware(CorrelationIdMiddleware)

    app.include_router(api_router)

    setup_metrics(app)
    setup_health_endpoint(app)

    return app


app = create_app()

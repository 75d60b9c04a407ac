"""Integration test fixtures: the ASGI app wired to in-memory remote services.

The registry and hub are served by httpx.MockTransport handlers, so these
tests need no network. Lifespan is not run; components are swapped on
``app.state`` directly.
"""

from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.hubsync.clients.hub import HubClient
from src.hubsync.clients.tenant_registry import TenantRegistryClient
from src.hubsync.core.health import reset_health_cache
from src.hubsync.main import create_app
from src.hubsync.models.enums import TenantStatus
from src.hubsync.services.deployment_reconciler import DeploymentReconciler
from src.hubsync.services.hub_link import HubLink
from src.hubsync.services.metrics_collector import InstanceMetricsCollector
from tests.factories import TenantRecordFactory
from tests.helpers import FakeClock


class RegistryBackend:
    """In-memory stand-in for the hub backend's /api/v1/tenants API."""

    def __init__(self) -> None:
        self.tenants: dict[str, dict[str, Any]] = {}
        self.fail_with: int | None = None
        self.requests: list[httpx.Request] = []

    def add(self, status: TenantStatus = TenantStatus.PENDING, **kwargs: Any) -> dict[str, Any]:
        tenant = TenantRecordFactory.build(status=status, **kwargs).to_wire()
        self.tenants[tenant["id"]] = tenant
        return tenant

    def set_status(self, tenant_id: str, status: TenantStatus) -> None:
        self.tenants[tenant_id]["status"] = status.value

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={"message": "backend failure"})

        parts = request.url.path.removeprefix("/api/v1/tenants").strip("/").split("/")
        if parts == [""]:
            return httpx.Response(200, json=list(self.tenants.values()))

        tenant = self.tenants.get(parts[0])
        if tenant is None:
            return httpx.Response(404, json={"message": "Tenant not found"})
        if len(parts) == 1:
            return httpx.Response(200, json=tenant)

        action = parts[1]
        if action == "deploy":
            tenant["status"] = TenantStatus.PROVISIONING.value
            return httpx.Response(202)
        if action in ("start", "restart"):
            tenant["status"] = TenantStatus.RUNNING.value
        elif action == "stop":
            tenant["status"] = TenantStatus.STOPPED.value
        elif action == "maintenance":
            enabled = request.url.params["enabled"] == "true"
            tenant["status"] = (TenantStatus.MAINTENANCE if enabled else TenantStatus.RUNNING).value
        return httpx.Response(200, json=tenant)


class HubBackend:
    """In-memory stand-in for the central hub."""

    def __init__(self) -> None:
        self.up = True
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.up:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if path == "/api/v1/health":
            return httpx.Response(200, json={"status": "UP", "version": "2.1.0"})
        if path.endswith("/config/updates"):
            return httpx.Response(
                200,
                json={"hasUpdates": True, "modules": [{"name": "E_FORCE", "enabled": True}]},
            )
        if path == "/api/v1/templates/procedures":
            return httpx.Response(
                200, json=[{"id": "p-1", "code": "IMP-01", "name": "Import", "version": 3}]
            )
        if path.endswith("/update-request"):
            return httpx.Response(200, json={"requestId": "req-1", "status": "PENDING"})
        if path.endswith("/license"):
            return httpx.Response(200, json={"valid": True, "modules": ["E_FORCE"], "maxUsers": 100})
        return httpx.Response(202)


@pytest.fixture(autouse=True)
def clear_health_cache():
    reset_health_cache()
    yield
    reset_health_cache()


@pytest.fixture
def registry_backend() -> RegistryBackend:
    return RegistryBackend()


@pytest.fixture
def hub_backend() -> HubBackend:
    return HubBackend()


@pytest.fixture
async def app(
    registry_backend: RegistryBackend, hub_backend: HubBackend, clock: FakeClock
) -> AsyncGenerator[FastAPI]:
    app = create_app()
    await app.state.registry.aclose()

    registry = TenantRegistryClient(
        "http://registry.test", transport=httpx.MockTransport(registry_backend), retry_delay=0
    )
    reconciler = DeploymentReconciler(registry, poll_interval=60, clock=clock)
    hub_link = HubLink(
        HubClient("http://hub.test", "CM", "key", transport=httpx.MockTransport(hub_backend), retry_delay=0),
        InstanceMetricsCollector(clock=clock),
        clock=clock,
    )

    app.state.registry = registry
    app.state.reconciler = reconciler
    app.state.hub_link = hub_link
    if app.state.relay is not None:
        app.state.relay.detach()
        app.state.relay.attach(reconciler)

    yield app

    await reconciler.aclose()
    if app.state.relay is not None:
        await app.state.relay.aclose()
    await hub_link.aclose()
    await hub_link.client.aclose()
    await registry.aclose()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

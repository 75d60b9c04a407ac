"""Client for the hub's tenant registry (``/api/v1/tenants``)."""

from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from src.hubsync.clients.base import ApiClient
from src.hubsync.core.config import Settings
from src.hubsync.schemas.tenant import HubStats, TenantMetrics, TenantModule, TenantRecord

TENANTS_PATH = "/api/v1/tenants"


class TenantReader(Protocol):
    """What the deployment reconciler needs from the registry."""

    async def get_tenant(self, tenant_id: str) -> TenantRecord: ...


class TenantRegistryClient(ApiClient):
    """Request/response access to tenant records owned by the hub backend."""

    service_name = "tenant-registry"

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "TenantRegistryClient":
        return cls(
            settings.tenant_api_url,
            headers={"Content-Type": "application/json"},
            timeout=settings.tenant_api_timeout_seconds,
            retry_attempts=settings.http_retry_attempts,
            retry_delay=settings.http_retry_delay,
            retry_max_delay=settings.http_retry_max_delay,
            transport=transport,
        )

    async def list_tenants(self) -> list[TenantRecord]:
        response = await self.request("GET", TENANTS_PATH)
        return self.parse_list(response, TenantRecord)

    async def get_tenant(self, tenant_id: str) -> TenantRecord:
        response = await self.request("GET", f"{TENANTS_PATH}/{tenant_id}")
        return self.parse(response, TenantRecord)

    async def get_tenant_by_code(self, code: str) -> TenantRecord:
        response = await self.request("GET", f"{TENANTS_PATH}/code/{code}")
        return self.parse(response, TenantRecord)

    async def create_tenant(self, request: Mapping[str, Any]) -> TenantRecord:
        """Create a tenant from a wizard payload (``tenant``, ``technical``, ``modules``, ...)."""
        response = await self.request("POST", TENANTS_PATH, json=dict(request))
        return self.parse(response, TenantRecord)

    async def update_tenant(self, tenant_id: str, changes: Mapping[str, Any]) -> TenantRecord:
        """Update mutable tenant fields. ``code`` is immutable and is stripped."""
        body = {k: v for k, v in changes.items() if k != "code"}
        response = await self.request("PUT", f"{TENANTS_PATH}/{tenant_id}", json=body)
        return self.parse(response, TenantRecord)

    async def delete_tenant(self, tenant_id: str) -> None:
        await self.request("DELETE", f"{TENANTS_PATH}/{tenant_id}")

    async def deploy(self, tenant_id: str) -> None:
        """Trigger provisioning. Progress is observed through later ``get_tenant`` calls."""
        await self.request("POST", f"{TENANTS_PATH}/{tenant_id}/deploy", json={})

    async def start(self, tenant_id: str) -> TenantRecord:
        return await self._lifecycle_action(tenant_id, "start")

    async def stop(self, tenant_id: str) -> TenantRecord:
        return await self._lifecycle_action(tenant_id, "stop")

    async def restart(self, tenant_id: str) -> TenantRecord:
        return await self._lifecycle_action(tenant_id, "restart")

    async def set_maintenance(self, tenant_id: str, enabled: bool) -> TenantRecord:
        response = await self.request(
            "POST",
            f"{TENANTS_PATH}/{tenant_id}/maintenance",
            params={"enabled": "true" if enabled else "false"},
        )
        return self.parse(response, TenantRecord)

    async def get_metrics(self, tenant_id: str) -> TenantMetrics:
        response = await self.request("GET", f"{TENANTS_PATH}/{tenant_id}/metrics")
        return self.parse(response, TenantMetrics)

    async def update_modules(self, tenant_id: str, modules: list[TenantModule]) -> TenantRecord:
        response = await self.request(
            "PUT",
            f"{TENANTS_PATH}/{tenant_id}/modules",
            json=[m.to_wire() for m in modules],
        )
        return self.parse(response, TenantRecord)

    async def get_hub_stats(self) -> HubStats:
        response = await self.request("GET", f"{TENANTS_PATH}/stats")
        return self.parse(response, HubStats)

    async def _lifecycle_action(self, tenant_id: str, action: str) -> TenantRecord:
        response = await self.request("POST", f"{TENANTS_PATH}/{tenant_id}/{action}", json={})
        return self.parse(response, TenantRecord)

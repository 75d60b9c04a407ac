"""Raw instance-to-hub API calls.

Every method raises RemoteServiceError on failure; the fallback policy for
each call lives in HubLink, not here.
"""

from typing import Any

import httpx

from src.hubsync.clients.base import ApiClient
from src.hubsync.core.config import Settings
from src.hubsync.schemas.hub import (
    ConfigurationUpdate,
    HubEvent,
    HubHealthResponse,
    InstanceMetrics,
    InstanceStatus,
    LicenseInfo,
    ProcedureTemplate,
    ReferentialSync,
    UpdateRequest,
    UpdateResponse,
)


class HubClient(ApiClient):
    """Authenticated client for one tenant instance talking to the hub."""

    service_name = "hub"

    def __init__(self, base_url: str, tenant_code: str, api_key: str, **kwargs: Any) -> None:
        headers = {
            "Content-Type": "application/json",
            "X-Tenant-Code": tenant_code,
            "X-Hub-Api-Key": api_key,
        }
        super().__init__(base_url, headers=headers, **kwargs)
        self.tenant_code = tenant_code

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HubClient":
        return cls(
            settings.hub_url,
            settings.tenant_code,
            settings.hub_api_key,
            timeout=settings.hub_request_timeout_seconds,
            retry_attempts=settings.http_retry_attempts,
            retry_delay=settings.http_retry_delay,
            retry_max_delay=settings.http_retry_max_delay,
            transport=transport,
        )

    @property
    def _instance_path(self) -> str:
        return f"/api/v1/instances/{self.tenant_code}"

    async def health(self) -> HubHealthResponse:
        # Heartbeat keeps its own rhythm: no immediate retry
        response = await self.request("GET", "/api/v1/health", retry=False)
        return self.parse(response, HubHealthResponse)

    async def post_status(self, status: InstanceStatus) -> None:
        await self.request("POST", f"{self._instance_path}/status", json=status.to_wire())

    async def post_metrics(self, metrics: InstanceMetrics) -> None:
        await self.request("POST", f"{self._instance_path}/metrics", json=metrics.to_wire())

    async def post_event(self, event: HubEvent) -> None:
        await self.request("POST", f"{self._instance_path}/events", json=event.to_wire())

    async def get_configuration_updates(self) -> ConfigurationUpdate:
        response = await self.request("GET", f"{self._instance_path}/config/updates")
        return self.parse(response, ConfigurationUpdate)

    async def get_procedure_templates(self) -> list[ProcedureTemplate]:
        response = await self.request("GET", "/api/v1/templates/procedures")
        return self.parse_list(response, ProcedureTemplate)

    async def get_referentials(self) -> ReferentialSync:
        response = await self.request(
            "GET",
            "/api/v1/referentials/sync",
            params={"tenantCode": self.tenant_code},
        )
        return self.parse(response, ReferentialSync)

    async def get_license(self) -> LicenseInfo:
        response = await self.request("GET", f"{self._instance_path}/license")
        return self.parse(response, LicenseInfo)

    async def post_update_request(self, update: UpdateRequest) -> UpdateResponse:
        response = await self.request(
            "POST", f"{self._instance_path}/update-request", json=update.to_wire()
        )
        return self.parse(response, UpdateResponse)

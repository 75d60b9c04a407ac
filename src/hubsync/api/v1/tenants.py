"""Tenant lifecycle endpoints (hub side)."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from src.hubsync.api.dependencies import ReconcilerDep, RegistryDep
from src.hubsync.core.logging import bind_tenant_context
from src.hubsync.schemas.deployment import DeploymentStatus
from src.hubsync.schemas.tenant import HubStats, TenantMetrics, TenantModule, TenantRecord

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.get("", response_model=list[TenantRecord])
async def list_tenants(registry: RegistryDep) -> list[TenantRecord]:
    return await registry.list_tenants()


@router.get("/stats", response_model=HubStats)
async def get_hub_stats(registry: RegistryDep) -> HubStats:
    return await registry.get_hub_stats()


@router.get(
    "/code/{code}",
    response_model=TenantRecord,
    responses={404: {"description": "Tenant not found"}},
)
async def get_tenant_by_code(code: str, registry: RegistryDep) -> TenantRecord:
    return await registry.get_tenant_by_code(code)


@router.get(
    "/{tenant_id}",
    response_model=TenantRecord,
    responses={404: {"description": "Tenant not found"}},
)
async def get_tenant(tenant_id: str, registry: RegistryDep) -> TenantRecord:
    return await registry.get_tenant(tenant_id)


@router.get("/{tenant_id}/metrics", response_model=TenantMetrics)
async def get_tenant_metrics(tenant_id: str, registry: RegistryDep) -> TenantMetrics:
    return await registry.get_metrics(tenant_id)


@router.put("/{tenant_id}/modules", response_model=TenantRecord)
async def update_tenant_modules(
    tenant_id: str, modules: list[TenantModule], registry: RegistryDep
) -> TenantRecord:
    return await registry.update_modules(tenant_id, modules)


@router.post(
    "/{tenant_id}/deploy",
    response_model=DeploymentStatus,
    status_code=status.HTTP_202_ACCEPTED,
    responses={
        202: {"description": "Deployment triggered, progress tracking started"},
        404: {"description": "Tenant not found"},
    },
)
async def deploy_tenant(
    tenant_id: str, registry: RegistryDep, reconciler: ReconcilerDep
) -> DeploymentStatus:
    """
    Trigger a deployment and start tracking it.

    Returns immediately with the initial status. Poll /deployments/current for progress.
    Any deployment tracked before is replaced.
    """
    bind_tenant_context(None, tenant_id)
    await registry.deploy(tenant_id)
    return reconciler.start_tracking(tenant_id)


@router.post("/{tenant_id}/start", response_model=TenantRecord)
async def start_tenant(tenant_id: str, registry: RegistryDep) -> TenantRecord:
    return await registry.start(tenant_id)


@router.post("/{tenant_id}/stop", response_model=TenantRecord)
async def stop_tenant(tenant_id: str, registry: RegistryDep) -> TenantRecord:
    return await registry.stop(tenant_id)


@router.post("/{tenant_id}/restart", response_model=TenantRecord)
async def restart_tenant(tenant_id: str, registry: RegistryDep) -> TenantRecord:
    return await registry.restart(tenant_id)


@router.post("/{tenant_id}/maintenance", response_model=TenantRecord)
async def set_tenant_maintenance(
    tenant_id: str,
    registry: RegistryDep,
    enabled: Annotated[bool, Query()] = True,
) -> TenantRecord:
    return await registry.set_maintenance(tenant_id, enabled)

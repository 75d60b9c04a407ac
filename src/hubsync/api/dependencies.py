"""FastAPI dependencies for the components owned by the application.

Components live on ``app.state`` (created in ``create_app``), so tests can
replace any of them without touching module globals.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from src.hubsync.clients.tenant_registry import TenantRegistryClient
from src.hubsync.services.deployment_reconciler import DeploymentReconciler
from src.hubsync.services.hub_link import HubLink


def get_registry(request: Request) -> TenantRegistryClient:
    return request.app.state.registry


def get_reconciler(request: Request) -> DeploymentReconciler:
    return request.app.state.reconciler


def get_hub_link(request: Request) -> HubLink:
    """Get the hub link, or 503 when this process does not run one."""
    hub_link: HubLink | None = request.app.state.hub_link
    if hub_link is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Hub link is not enabled on this instance",
        )
    return hub_link


RegistryDep = Annotated[TenantRegistryClient, Depends(get_registry)]
ReconcilerDep = Annotated[DeploymentReconciler, Depends(get_reconciler)]
HubLinkDep = Annotated[HubLink, Depends(get_hub_link)]

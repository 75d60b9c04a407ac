"""Instance-side hub link endpoints."""

from fastapi import APIRouter, status

from src.hubsync.api.dependencies import HubLinkDep
from src.hubsync.schemas.hub import (
    ConfigurationUpdate,
    HubConnectionStatus,
    HubEvent,
    LicenseInfo,
    ProcedureTemplate,
    ReferentialSync,
    UpdateRequest,
    UpdateResponse,
)

router = APIRouter(prefix="/hub", tags=["hub"])


@router.get("/connection", response_model=HubConnectionStatus)
async def get_connection(hub_link: HubLinkDep) -> HubConnectionStatus:
    return hub_link.status


@router.post("/connection/check", response_model=HubConnectionStatus)
async def check_connection(hub_link: HubLinkDep) -> HubConnectionStatus:
    """Run a heartbeat now instead of waiting for the next tick."""
    await hub_link.check_hub_connection()
    return hub_link.status


@router.get("/config-updates", response_model=ConfigurationUpdate)
async def get_configuration_updates(hub_link: HubLinkDep) -> ConfigurationUpdate:
    return await hub_link.fetch_configuration_updates()


@router.get("/templates", response_model=list[ProcedureTemplate])
async def get_procedure_templates(hub_link: HubLinkDep) -> list[ProcedureTemplate]:
    return await hub_link.sync_procedure_templates()


@router.get("/referentials", response_model=ReferentialSync)
async def get_referentials(hub_link: HubLinkDep) -> ReferentialSync:
    return await hub_link.sync_referentials()


@router.get("/license", response_model=LicenseInfo)
async def get_license(hub_link: HubLinkDep) -> LicenseInfo:
    return await hub_link.get_license_info()


@router.post("/events", status_code=status.HTTP_202_ACCEPTED)
async def log_event(event: HubEvent, hub_link: HubLinkDep) -> None:
    await hub_link.log_event(event)


@router.post(
    "/update-request",
    response_model=UpdateResponse,
    responses={502: {"description": "Hub refused the request"}, 503: {"description": "Hub unreachable"}},
)
async def request_update(update: UpdateRequest, hub_link: HubLinkDep) -> UpdateResponse:
    return await hub_link.request_update(update)

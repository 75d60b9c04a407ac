"""Tracked deployment endpoints."""

from fastapi import APIRouter, HTTPException, status

from src.hubsync.api.dependencies import ReconcilerDep
from src.hubsync.schemas.deployment import DeploymentStatus

router = APIRouter(prefix="/deployments", tags=["deployments"])


@router.get(
    "/current",
    response_model=DeploymentStatus,
    responses={404: {"description": "No deployment is being tracked"}},
)
async def get_current_deployment(reconciler: ReconcilerDep) -> DeploymentStatus:
    current = reconciler.current
    if current is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No deployment is being tracked",
        )
    return current


@router.delete("/current", status_code=status.HTTP_204_NO_CONTENT)
async def clear_current_deployment(reconciler: ReconcilerDep) -> None:
    """Stop watching the current deployment. The server-side deployment keeps running."""
    reconciler.clear_tracking()

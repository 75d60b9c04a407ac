from fastapi import APIRouter

from src.hubsync.api.v1 import deployments, hub, tenants

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(tenants.router)
api_router.include_router(deployments.router)
api_router.include_router(hub.router)

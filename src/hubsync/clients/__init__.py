"""HTTP clients for the hub backend."""

from src.hubsync.clients.base import IDEMPOTENT_METHODS, ApiClient
from src.hubsync.clients.hub import HubClient
from src.hubsync.clients.tenant_registry import TenantReader, TenantRegistryClient

__all__ = [
    "IDEMPOTENT_METHODS",
    "ApiClient",
    "HubClient",
    "TenantReader",
    "TenantRegistryClient",
]

"""Payloads exchanged between a tenant instance and the hub."""

from datetime import datetime
from typing import Any

from pydantic import Field

from src.hubsync.models.enums import (
    InstanceState,
    ServiceState,
    UpdateRequestStatus,
    UpdateType,
)
from src.hubsync.schemas.base import FrozenWireModel, WireModel


class HubConnectionStatus(FrozenWireModel):
    """Connectivity of this instance to the hub.

    ``last_sync`` is the last successful exchange and is never reset on failure.
    """

    connected: bool = False
    last_sync: datetime | None = None
    hub_version: str | None = None
    error: str | None = None


class HubHealthResponse(WireModel):
    status: str
    version: str | None = None
    timestamp: str | None = None


class ServiceStatus(WireModel):
    name: str
    status: ServiceState
    response_time: float | None = None


class InstanceStatus(WireModel):
    status: InstanceState
    version: str
    uptime: float
    services: list[ServiceStatus] = Field(default_factory=list)


class InstanceMetrics(WireModel):
    timestamp: datetime
    active_users: int
    transactions_today: int
    avg_response_time: float
    error_rate: float
    memory_usage: float
    cpu_usage: float = 0


class ModuleConfig(WireModel):
    name: str
    enabled: bool
    version: str | None = None


class FeatureFlag(WireModel):
    name: str
    enabled: bool


class ConfigurationUpdate(WireModel):
    has_updates: bool = False
    modules: list[ModuleConfig] | None = None
    features: list[FeatureFlag] | None = None
    referentials: list[str] | None = None


class ProcedureTemplate(WireModel):
    id: str
    code: str
    name: str
    version: int
    category: str | None = None
    last_updated: str | None = None


class ReferentialSync(WireModel):
    countries: list[Any] = Field(default_factory=list)
    currencies: list[Any] = Field(default_factory=list)
    hs_code: list[Any] = Field(default_factory=list)
    last_updated: str | None = None


class HubEvent(WireModel):
    type: str
    action: str
    user_id: str | None = None
    details: dict[str, Any] | None = None
    timestamp: str | None = None


class UpdateRequest(WireModel):
    type: UpdateType
    details: dict[str, Any] = Field(default_factory=dict)


class UpdateResponse(WireModel):
    request_id: str
    status: UpdateRequestStatus
    estimated_time: str | None = None


class LicenseInfo(WireModel):
    valid: bool
    expires_at: str | None = None
    modules: list[str] = Field(default_factory=list)
    max_users: int = -1

    @classmethod
    def permissive(cls) -> "LicenseInfo":
        """Fail-open licence used when the hub cannot be reached.

        A hub outage must never lock operators out of their own instance, so an
        unreachable licence server means "valid, unlimited".
        """
        return cls(valid=True, expires_at=None, modules=[], max_users=-1)

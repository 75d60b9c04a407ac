from datetime import datetime
from typing import Any

from pydantic import Field, field_validator

from src.hubsync.models.enums import HealthStatus, ServiceState, TenantStatus
from src.hubsync.schemas.base import WireModel


class TenantModule(WireModel):
    name: str
    enabled: bool = False
    features: list[str] = Field(default_factory=list)


class TenantInfrastructure(WireModel):
    provider: str | None = None
    region: str | None = None
    kubernetes_version: str | None = None
    node_count: int | None = None
    database_type: str | None = None
    database_size: str | None = None
    storage_size: str | None = None


class ServiceHealth(WireModel):
    name: str
    status: ServiceState
    response_time: float | None = None
    last_error: str | None = None


class TenantHealth(WireModel):
    status: HealthStatus
    last_check: datetime | None = None
    uptime: float = 0
    services: list[ServiceHealth] = Field(default_factory=list)


class TenantRecord(WireModel):
    """Tenant as returned by ``GET /api/v1/tenants/{id}``.

    Owned by the backend; the hub only ever holds a cached read-mostly copy.
    """

    id: str
    code: str
    name: str
    short_name: str | None = None
    domain: str | None = None
    country: str | None = None
    logo: str | None = None
    primary_color: str | None = None
    secondary_color: str | None = None
    timezone: str | None = None
    locale: str | None = None
    currency: str | None = None
    status: TenantStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    modules: list[TenantModule] = Field(default_factory=list)
    infrastructure: TenantInfrastructure | None = None
    health: TenantHealth | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        # Backend ids are UUIDs; keep them as opaque strings.
        return str(v)

    @property
    def enabled_modules(self) -> set[str]:
        return {m.name for m in self.modules if m.enabled}


class UsageLimit(WireModel):
    usage: float = 0
    limit: float = 0


class NetworkUsage(WireModel):
    inbound: float = 0
    outbound: float = 0


class TransactionCounts(WireModel):
    today: int = 0
    this_week: int = 0
    this_month: int = 0


class TenantMetrics(WireModel):
    """Operational metrics for one tenant (``GET /api/v1/tenants/{id}/metrics``)."""

    tenant_id: str
    cpu: UsageLimit = Field(default_factory=UsageLimit)
    memory: UsageLimit = Field(default_factory=UsageLimit)
    storage: UsageLimit = Field(default_factory=UsageLimit)
    network: NetworkUsage = Field(default_factory=NetworkUsage)
    transactions: TransactionCounts = Field(default_factory=TransactionCounts)
    active_users: int = 0
    response_time: float = 0

    @field_validator("tenant_id", mode="before")
    @classmethod
    def coerce_tenant_id(cls, v: Any) -> str:
        return str(v)


class HubStats(WireModel):
    """Fleet-wide counters (``GET /api/v1/tenants/stats``)."""

    total_tenants: int = 0
    running_tenants: int = 0
    stopped_tenants: int = 0
    error_tenants: int = 0
    healthy_tenants: int = 0
    degraded_tenants: int = 0
    total_active_users: int = 0
    total_transactions: int = 0
    last_updated: datetime | None = None

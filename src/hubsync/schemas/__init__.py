from src.hubsync.schemas.deployment import DeploymentStatus, DeploymentStep
from src.hubsync.schemas.hub import (
    ConfigurationUpdate,
    FeatureFlag,
    HubConnectionStatus,
    HubEvent,
    HubHealthResponse,
    InstanceMetrics,
    InstanceStatus,
    LicenseInfo,
    ModuleConfig,
    ProcedureTemplate,
    ReferentialSync,
    ServiceStatus,
    UpdateRequest,
    UpdateResponse,
)
from src.hubsync.schemas.notification import NotificationCreate
from src.hubsync.schemas.tenant import (
    HubStats,
    ServiceHealth,
    TenantHealth,
    TenantInfrastructure,
    TenantMetrics,
    TenantModule,
    TenantRecord,
)

__all__ = [
    # Deployment
    "DeploymentStatus",
    "DeploymentStep",
    # Hub link
    "ConfigurationUpdate",
    "FeatureFlag",
    "HubConnectionStatus",
    "HubEvent",
    "HubHealthResponse",
    "InstanceMetrics",
    "InstanceStatus",
    "LicenseInfo",
    "ModuleConfig",
    "ProcedureTemplate",
    "ReferentialSync",
    "ServiceStatus",
    "UpdateRequest",
    "UpdateResponse",
    # Notifications
    "NotificationCreate",
    # Tenant
    "HubStats",
    "ServiceHealth",
    "TenantHealth",
    "TenantInfrastructure",
    "TenantMetrics",
    "TenantModule",
    "TenantRecord",
]

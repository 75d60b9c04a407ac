"""Model exports.

Import from here: `from src.hubsync.models import TenantStatus, STEP_CATALOG`
"""

from src.hubsync.models.base import utc_now
from src.hubsync.models.enums import (
    DeploymentState,
    HealthStatus,
    InstanceState,
    NotificationLevel,
    NotificationType,
    ServiceState,
    StepStatus,
    TenantStatus,
    UpdateRequestStatus,
    UpdateType,
)
from src.hubsync.models.steps import (
    STEP_CATALOG,
    STEP_CATALOG_VERSION,
    StepDefinition,
    step_index_for,
    step_width,
)

__all__ = [
    # Enums
    "DeploymentState",
    "HealthStatus",
    "InstanceState",
    "NotificationLevel",
    "NotificationType",
    "ServiceState",
    "StepStatus",
    "TenantStatus",
    "UpdateRequestStatus",
    "UpdateType",
    # Step catalog
    "STEP_CATALOG",
    "STEP_CATALOG_VERSION",
    "StepDefinition",
    "step_index_for",
    "step_width",
    # Helpers
    "utc_now",
]

"""Shared status vocabulary for tenants, deployments and hub connectivity."""

from enum import Enum


class TenantStatus(str, Enum):
    """Lifecycle status of a tenant instance, as reported by the hub backend.

    Values the backend adds later decode as UNKNOWN instead of failing the
    whole record.
    """

    PENDING = "PENDING"
    PROVISIONING = "PROVISIONING"
    DEPLOYING = "DEPLOYING"
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    ERROR = "ERROR"
    MAINTENANCE = "MAINTENANCE"
    TERMINATED = "TERMINATED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value: object) -> "TenantStatus":
        return cls.UNKNOWN


class DeploymentState(str, Enum):
    """Overall state of a tracked deployment."""

    PENDING = "PENDING"
    PROVISIONING = "PROVISIONING"
    DEPLOYING = "DEPLOYING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

    @property
    def is_terminal(self) -> bool:
        return self in (DeploymentState.COMPLETED, DeploymentState.FAILED)


class StepStatus(str, Enum):
    """Status of a single deployment step."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class HealthStatus(str, Enum):
    """Aggregated tenant health."""

    HEALTHY = "HEALTHY"
    DEGRADED = "DEGRADED"
    UNHEALTHY = "UNHEALTHY"


class ServiceState(str, Enum):
    """Status of one service inside a tenant or instance."""

    UP = "UP"
    DOWN = "DOWN"
    DEGRADED = "DEGRADED"


class InstanceState(str, Enum):
    """Status an instance reports about itself to the hub."""

    RUNNING = "RUNNING"
    MAINTENANCE = "MAINTENANCE"
    ERROR = "ERROR"


class UpdateType(str, Enum):
    """Kind of update an instance may request from the hub."""

    MODULES = "MODULES"
    CONFIG = "CONFIG"
    VERSION = "VERSION"


class UpdateRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class NotificationType(str, Enum):
    TENANT_STATUS = "TENANT_STATUS"
    TENANT_DEPLOYMENT = "TENANT_DEPLOYMENT"


class NotificationLevel(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"

from datetime import datetime

from pydantic import Field

from src.hubsync.models.enums import DeploymentState, StepStatus
from src.hubsync.models.steps import STEP_CATALOG, StepDefinition
from src.hubsync.schemas.base import FrozenWireModel


class DeploymentStep(FrozenWireModel):
    id: str
    label: str
    status: StepStatus = StepStatus.PENDING
    error: str | None = None


class DeploymentStatus(FrozenWireModel):
    """Progress view of one tenant deployment, as tracked by the hub.

    Instances are immutable: each reconciliation tick publishes a new one.
    """

    tenant_id: str
    status: DeploymentState
    progress: int = Field(ge=0, le=100)
    current_step: str
    steps: tuple[DeploymentStep, ...]
    started_at: datetime
    completed_at: datetime | None = None
    error: str | None = None

    @classmethod
    def initial(
        cls,
        tenant_id: str,
        started_at: datetime,
        catalog: tuple[StepDefinition, ...] = STEP_CATALOG,
    ) -> "DeploymentStatus":
        """Fresh status for a deployment that was just triggered."""
        return cls(
            tenant_id=tenant_id,
            status=DeploymentState.PROVISIONING,
            progress=0,
            current_step=catalog[0].id,
            steps=tuple(DeploymentStep(id=s.id, label=s.label) for s in catalog),
            started_at=started_at,
        )

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def step_statuses(self) -> tuple[StepStatus, ...]:
        return tuple(step.status for step in self.steps)

"""Synthetic deployment progress.

The backend only reports a coarse tenant status. This module turns one
observation of that status into the fine-grained progress shown to operators,
without any I/O, so the mapping can be tested on its own.
"""

from dataclasses import dataclass

from src.hubsync.models.enums import DeploymentState, StepStatus, TenantStatus
from src.hubsync.models.steps import STEP_CATALOG, StepDefinition, step_index_for

DEFAULT_PROGRESS_INCREMENT = 15
DEFAULT_PROGRESS_CAP = 90

DEPLOYMENT_FAILED_MESSAGE = "Deployment failed: the tenant reported an ERROR status"


@dataclass(frozen=True)
class ProgressUpdate:
    """Result of one reconciliation tick.

    ``step_statuses`` and ``current_step`` are None when the steps must be left
    as last observed (failed deployments).
    """

    state: DeploymentState
    progress: int
    step_statuses: tuple[StepStatus, ...] | None = None
    current_step: str | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state.is_terminal


def step_statuses_for(
    index: int, catalog: tuple[StepDefinition, ...] = STEP_CATALOG
) -> tuple[StepStatus, ...]:
    """Steps before ``index`` completed, ``index`` running, the rest pending."""
    return tuple(
        StepStatus.COMPLETED if i < index else StepStatus.RUNNING if i == index else StepStatus.PENDING
        for i in range(len(catalog))
    )


def interpolate_progress(
    remote_status: TenantStatus,
    prior_progress: int,
    *,
    increment: int = DEFAULT_PROGRESS_INCREMENT,
    cap: int = DEFAULT_PROGRESS_CAP,
    catalog: tuple[StepDefinition, ...] = STEP_CATALOG,
) -> ProgressUpdate | None:
    """Map an observed tenant status onto deployment progress.

    Args:
        remote_status: Status reported by the registry this tick.
        prior_progress: Progress held before this tick.
        increment: Points added per PROVISIONING observation.
        cap: Ceiling while still provisioning; 100 is reserved for RUNNING.
        catalog: Ordered step catalog.

    Returns:
        The new progress view, or None when the observation carries no new
        information (any status other than RUNNING, ERROR or PROVISIONING).

    The active step is derived from the progress held when the tick began, so
    the step list trails the percentage by one tick: three PROVISIONING
    observations give 15, 30, 45 with the first step completed and the second
    running.
    """
    if remote_status == TenantStatus.RUNNING:
        return ProgressUpdate(
            state=DeploymentState.COMPLETED,
            progress=100,
            step_statuses=tuple(StepStatus.COMPLETED for _ in catalog),
            current_step=catalog[-1].id,
        )

    if remote_status == TenantStatus.ERROR:
        return ProgressUpdate(
            state=DeploymentState.FAILED,
            progress=prior_progress,
            error=DEPLOYMENT_FAILED_MESSAGE,
        )

    if remote_status == TenantStatus.PROVISIONING:
        index = step_index_for(prior_progress, catalog)
        progress = max(prior_progress, min(prior_progress + increment, cap))
        return ProgressUpdate(
            state=DeploymentState.PROVISIONING,
            progress=progress,
            step_statuses=step_statuses_for(index, catalog),
            current_step=catalog[index].id,
        )

    return None

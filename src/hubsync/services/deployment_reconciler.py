"""Hub-side deployment tracking.

After an operator triggers a deploy, the reconciler polls the tenant registry
and turns the coarse tenant status into a step-by-step DeploymentStatus that
UI observers (and the notification relay) subscribe to.

One reconciler belongs to one hub session and tracks at most one deployment
at a time. Each call to ``start_tracking`` opens a new generation; a poll
whose generation is no longer current discards its result, which is how a
clear (or a restart) wins over a request that is still in flight.
"""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Any

from src.hubsync.clients.tenant_registry import TenantReader
from src.hubsync.core.config import Settings
from src.hubsync.core.exceptions import RemoteServiceError
from src.hubsync.core.logging import get_logger
from src.hubsync.core.streams import StatusStream
from src.hubsync.models.base import utc_now
from src.hubsync.models.enums import DeploymentState
from src.hubsync.models.steps import STEP_CATALOG, StepDefinition
from src.hubsync.schemas.deployment import DeploymentStatus
from src.hubsync.schemas.tenant import TenantRecord
from src.hubsync.services.progress import (
    DEFAULT_PROGRESS_CAP,
    DEFAULT_PROGRESS_INCREMENT,
    ProgressUpdate,
    interpolate_progress,
)

logger = get_logger(__name__)


class DeploymentReconciler:
    """Polls the registry and publishes synthetic deployment progress."""

    def __init__(
        self,
        registry: TenantReader,
        *,
        poll_interval: float = 3.0,
        progress_increment: int = DEFAULT_PROGRESS_INCREMENT,
        progress_cap: int = DEFAULT_PROGRESS_CAP,
        catalog: tuple[StepDefinition, ...] = STEP_CATALOG,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.registry = registry
        self.poll_interval = poll_interval
        self.progress_increment = progress_increment
        self.progress_cap = progress_cap
        self.catalog = catalog
        self._clock = clock

        self.deployment: StatusStream[DeploymentStatus | None] = StatusStream(
            None, name="deployment"
        )
        self.latest_tenant: StatusStream[TenantRecord | None] = StatusStream(None, name="tenant")

        self._generation = 0
        self._tasks: set[asyncio.Task[None]] = set()

    @classmethod
    def from_settings(cls, registry: TenantReader, settings: Settings) -> "DeploymentReconciler":
        return cls(
            registry,
            poll_interval=settings.deployment_poll_interval_seconds,
            progress_increment=settings.deployment_progress_increment,
            progress_cap=settings.deployment_progress_cap,
        )

    @property
    def current(self) -> DeploymentStatus | None:
        """The live DeploymentStatus, or None when nothing is tracked."""
        return self.deployment.value

    @property
    def is_polling(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start_tracking(self, tenant_id: str, *, poll: bool = True) -> DeploymentStatus:
        """Start tracking a deployment that was just triggered.

        Any previously tracked deployment is discarded, even for the same
        tenant; the new one starts from zero.

        Args:
            tenant_id: Tenant that was told to deploy.
            poll: Start the background polling loop (requires a running event loop).

        Returns:
            The freshly initialized DeploymentStatus.
        """
        self._generation += 1
        status = DeploymentStatus.initial(tenant_id, self._clock(), self.catalog)
        self.deployment.publish(status)
        logger.info("Deployment tracking started", tenant_id=tenant_id)

        if poll:
            task = asyncio.create_task(
                self._poll_loop(self._generation), name=f"deployment-poll-{tenant_id}"
            )
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
        return status

    def clear_tracking(self) -> None:
        """Stop observing the current deployment and drop its status.

        Safe to call at any time and any number of times. Nothing is cancelled
        on the server; the loop simply stops looking.
        """
        self._generation += 1
        current = self.deployment.value
        if current is not None:
            logger.info("Deployment tracking cleared", tenant_id=current.tenant_id)
            self.deployment.publish(None)

    async def poll_once(self, generation: int | None = None) -> bool:
        """Run one reconciliation tick.

        Args:
            generation: Tracking generation the caller belongs to. Defaults to
                the current one.

        Returns:
            True if polling should continue, False once tracking is cleared,
            terminal, or the fetch failed.
        """
        if generation is None:
            generation = self._generation

        status = self._live(generation)
        if status is None or status.is_terminal:
            return False

        try:
            tenant = await self.registry.get_tenant(status.tenant_id)
        except RemoteServiceError as e:
            # No information this tick; keep the last status visible, do not mark FAILED
            if self._live(generation) is not None:
                logger.warning(
                    "Deployment poll failed, tracking stopped",
                    tenant_id=status.tenant_id,
                    error=str(e),
                )
            return False

        # Cleared or restarted while the request was in flight
        status = self._live(generation)
        if status is None or status.is_terminal:
            return False

        self.latest_tenant.publish(tenant)
        update = interpolate_progress(
            tenant.status,
            status.progress,
            increment=self.progress_increment,
            cap=self.progress_cap,
            catalog=self.catalog,
        )
        if update is None:
            logger.debug(
                "No progress change", tenant_id=status.tenant_id, remote_status=tenant.status
            )
            return True

        new_status = self._apply(status, update)
        self.deployment.publish(new_status)

        if new_status.status == DeploymentState.COMPLETED:
            logger.info("Deployment completed", tenant_id=status.tenant_id)
        elif new_status.status == DeploymentState.FAILED:
            logger.warning("Deployment failed", tenant_id=status.tenant_id, error=new_status.error)
        return not update.is_terminal

    async def aclose(self) -> None:
        """Stop every polling loop. Used on process teardown."""
        self._generation += 1
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    async def _poll_loop(self, generation: int) -> None:
        while True:
            await asyncio.sleep(self.poll_interval)
            try:
                keep_polling = await self.poll_once(generation)
            except Exception as e:
                logger.exception("Deployment poll crashed, tracking stopped", error=str(e))
                return
            if not keep_polling:
                return

    def _live(self, generation: int) -> DeploymentStatus | None:
        if generation != self._generation:
            return None
        return self.deployment.value

    def _apply(self, status: DeploymentStatus, update: ProgressUpdate) -> DeploymentStatus:
        changes: dict[str, Any] = {"status": update.state, "progress": update.progress}
        if update.step_statuses is not None:
            changes["steps"] = tuple(
                step.model_copy(update={"status": step_status})
                for step, step_status in zip(status.steps, update.step_statuses, strict=True)
            )
        if update.current_step is not None:
            changes["current_step"] = update.current_step
        if update.state == DeploymentState.COMPLETED:
            changes["completed_at"] = self._clock()
        if update.error is not None:
            changes["error"] = update.error
        return status.model_copy(update=changes)

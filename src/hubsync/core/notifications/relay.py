"""Operator notifications derived from deployment and tenant status changes."""

import asyncio
from collections.abc import Callable
from datetime import datetime
from typing import Protocol

import httpx

from src.hubsync.clients.base import ApiClient
from src.hubsync.core.config import Settings
from src.hubsync.core.exceptions import RemoteServiceError
from src.hubsync.core.logging import get_logger
from src.hubsync.models.enums import (
    DeploymentState,
    NotificationLevel,
    NotificationType,
    TenantStatus,
)
from src.hubsync.models.steps import STEP_CATALOG, StepDefinition
from src.hubsync.schemas.deployment import DeploymentStatus
from src.hubsync.schemas.notification import NotificationCreate
from src.hubsync.schemas.tenant import TenantRecord
from src.hubsync.services.deployment_reconciler import DeploymentReconciler

logger = get_logger(__name__)

NOTIFICATIONS_PATH = "/api/v1/notifications"

TENANT_SOURCE = "TENANT_MANAGER"
DEPLOYMENT_SOURCE = "DEPLOYMENT_SERVICE"

STATUS_LABELS = {
    TenantStatus.RUNNING: "is now running",
    TenantStatus.STOPPED: "has been stopped",
    TenantStatus.ERROR: "is in error",
    TenantStatus.MAINTENANCE: "is in maintenance",
    TenantStatus.DEPLOYING: "is being deployed",
    TenantStatus.TERMINATED: "has been terminated",
}

STATUS_LEVELS = {
    TenantStatus.ERROR: NotificationLevel.ERROR,
    TenantStatus.STOPPED: NotificationLevel.WARNING,
    TenantStatus.MAINTENANCE: NotificationLevel.WARNING,
    TenantStatus.TERMINATED: NotificationLevel.WARNING,
}


class NotificationSink(Protocol):
    async def send(self, notification: NotificationCreate) -> None: ...


class HttpNotificationSink(ApiClient):
    """Posts notifications to the hub notification service."""

    service_name = "notifications"

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "HttpNotificationSink":
        if settings.notifications_url is None:
            raise ValueError("NOTIFICATIONS_URL is not configured")
        return cls(
            settings.notifications_url,
            timeout=settings.tenant_api_timeout_seconds,
            retry_attempts=settings.http_retry_attempts,
            retry_delay=settings.http_retry_delay,
            retry_max_delay=settings.http_retry_max_delay,
            transport=transport,
        )

    async def send(self, notification: NotificationCreate) -> None:
        await self.request("POST", NOTIFICATIONS_PATH, json=notification.to_wire())


class LoggingNotificationSink:
    """Dev sink: logs notifications instead of sending them."""

    async def send(self, notification: NotificationCreate) -> None:
        logger.info(
            "NOTIFICATIONS_URL not set - notification not sent",
            notification_type=notification.type,
            level=notification.level,
            title=notification.title,
            message=notification.message,
            tenant_id=notification.tenant_id,
        )


def tenant_status_notification(
    tenant_id: str,
    tenant_code: str,
    status: TenantStatus,
    level: NotificationLevel | None = None,
) -> NotificationCreate:
    label = STATUS_LABELS.get(status, status.value)
    return NotificationCreate(
        type=NotificationType.TENANT_STATUS,
        level=level or STATUS_LEVELS.get(status, NotificationLevel.INFO),
        title=f"Instance {tenant_code}",
        message=f"Instance {tenant_code} {label}",
        tenant_id=tenant_id,
        source=TENANT_SOURCE,
        icon="apartment",
        action_url=f"/tenants/{tenant_id}/overview",
        action_label="View instance",
    )


def deployment_notification(
    tenant_id: str,
    tenant_code: str,
    progress: int,
    step: str,
) -> NotificationCreate:
    done = progress == 100
    return NotificationCreate(
        type=NotificationType.TENANT_DEPLOYMENT,
        level=NotificationLevel.SUCCESS if done else NotificationLevel.INFO,
        title=f"Deployment {tenant_code}",
        message="Deployment completed successfully" if done else f"{step} ({progress}%)",
        tenant_id=tenant_id,
        source=DEPLOYMENT_SOURCE,
        icon="rocket_launch",
        data={"progress": progress, "step": step},
    )


def deployment_failed_notification(
    tenant_id: str, tenant_code: str, error: str | None
) -> NotificationCreate:
    return NotificationCreate(
        type=NotificationType.TENANT_DEPLOYMENT,
        level=NotificationLevel.ERROR,
        title=f"Deployment {tenant_code}",
        message=error or "Deployment failed",
        tenant_id=tenant_id,
        source=DEPLOYMENT_SOURCE,
        icon="rocket_launch",
        action_url=f"/tenants/{tenant_id}/overview",
        action_label="View instance",
    )


class NotificationRelay:
    """Turns reconciler stream updates into notifications.

    Listeners run synchronously inside ``publish``; delivery is scheduled as
    a task on the running loop so a slow sink never blocks the poll loop.
    """

    def __init__(
        self,
        sink: NotificationSink,
        catalog: tuple[StepDefinition, ...] = STEP_CATALOG,
    ) -> None:
        self.sink = sink
        self._step_labels = {step.id: step.label for step in catalog}
        self._tenant_codes: dict[str, str] = {}
        self._tenant_statuses: dict[str, TenantStatus] = {}
        self._tracked: tuple[str, datetime] | None = None
        self._last_progress = 0
        self._failed_reported = False
        self._pending: set[asyncio.Task[None]] = set()
        self._unsubscribers: list[Callable[[], None]] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "NotificationRelay":
        sink: NotificationSink
        if settings.notifications_url:
            sink = HttpNotificationSink.from_settings(settings)
        else:
            sink = LoggingNotificationSink()
        return cls(sink)

    def attach(self, reconciler: DeploymentReconciler) -> None:
        """Subscribe to the reconciler's tenant and deployment streams."""
        self._unsubscribers.append(reconciler.latest_tenant.subscribe(self._on_tenant))
        self._unsubscribers.append(reconciler.deployment.subscribe(self._on_deployment))

    def detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers.clear()

    async def notify_tenant_status(
        self,
        tenant_id: str,
        tenant_code: str,
        status: TenantStatus,
        level: NotificationLevel | None = None,
    ) -> None:
        await self.deliver(tenant_status_notification(tenant_id, tenant_code, status, level))

    async def notify_deployment(
        self, tenant_id: str, tenant_code: str, progress: int, step: str
    ) -> None:
        await self.deliver(deployment_notification(tenant_id, tenant_code, progress, step))

    async def deliver(self, notification: NotificationCreate) -> None:
        try:
            await self.sink.send(notification)
        except RemoteServiceError as e:
            logger.warning(
                "Failed to deliver notification",
                notification_type=notification.type,
                tenant_id=notification.tenant_id,
                error=str(e),
            )
        except Exception as e:
            logger.exception(
                "Notification sink crashed",
                notification_type=notification.type,
                tenant_id=notification.tenant_id,
                error=str(e),
            )

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def aclose(self) -> None:
        self.detach()
        await self.drain()
        close = getattr(self.sink, "aclose", None)
        if close is not None:
            await close()

    def _code_for(self, tenant_id: str) -> str:
        return self._tenant_codes.get(tenant_id, tenant_id)

    def _schedule(self, notification: NotificationCreate) -> None:
        task = asyncio.create_task(self.deliver(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _on_tenant(self, tenant: TenantRecord | None) -> None:
        if tenant is None or tenant.status == TenantStatus.UNKNOWN:
            return
        self._tenant_codes[tenant.id] = tenant.code
        previous = self._tenant_statuses.get(tenant.id)
        self._tenant_statuses[tenant.id] = tenant.status
        # First sighting is a baseline, not a change
        if previous is None or previous == tenant.status:
            return
        self._schedule(tenant_status_notification(tenant.id, tenant.code, tenant.status))

    def _on_deployment(self, status: DeploymentStatus | None) -> None:
        if status is None:
            self._tracked = None
            return
        key = (status.tenant_id, status.started_at)
        if key != self._tracked:
            # A new deployment: its initial status is the baseline
            self._tracked = key
            self._last_progress = status.progress
            self._failed_reported = False
            return

        code = self._code_for(status.tenant_id)
        if status.status == DeploymentState.FAILED:
            if not self._failed_reported:
                self._failed_reported = True
                self._schedule(deployment_failed_notification(status.tenant_id, code, status.error))
            return

        if status.progress > self._last_progress:
            self._last_progress = status.progress
            step = self._step_labels.get(status.current_step or "", status.current_step or "")
            self._schedule(deployment_notification(status.tenant_id, code, status.progress, step))

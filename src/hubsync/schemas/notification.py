from typing import Any

from src.hubsync.models.enums import NotificationLevel, NotificationType
from src.hubsync.schemas.base import WireModel


class NotificationCreate(WireModel):
    """Body of ``POST /api/v1/notifications`` on the hub."""

    type: NotificationType
    level: NotificationLevel = NotificationLevel.INFO
    title: str
    message: str
    tenant_id: str | None = None
    source: str
    icon: str | None = None
    action_url: str | None = None
    action_label: str | None = None
    data: dict[str, Any] | None = None

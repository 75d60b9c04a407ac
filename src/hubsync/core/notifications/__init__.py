"""Notification relay and delivery sinks."""

from src.hubsync.core.notifications.relay import (
    HttpNotificationSink,
    LoggingNotificationSink,
    NotificationRelay,
    NotificationSink,
    deployment_failed_notification,
    deployment_notification,
    tenant_status_notification,
)

__all__ = [
    "HttpNotificationSink",
    "LoggingNotificationSink",
    "NotificationRelay",
    "NotificationSink",
    "deployment_failed_notification",
    "deployment_notification",
    "tenant_status_notification",
]

"""Tests for the notification relay."""

import httpx
import pytest

from src.hubsync.core.exceptions import TransientRemoteError
from src.hubsync.core.notifications import (
    HttpNotificationSink,
    NotificationRelay,
    deployment_notification,
    tenant_status_notification,
)
from src.hubsync.models.enums import NotificationLevel, NotificationType, TenantStatus
from src.hubsync.services.deployment_reconciler import DeploymentReconciler
from tests.helpers import FakeClock, FakeTenantRegistry, RecordingSink, RecordingTransport

pytestmark = pytest.mark.unit

PROV = TenantStatus.PROVISIONING


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def reconciler(fake_registry: FakeTenantRegistry, clock: FakeClock) -> DeploymentReconciler:
    return DeploymentReconciler(fake_registry, clock=clock)


@pytest.fixture
def relay(sink: RecordingSink, reconciler: DeploymentReconciler) -> NotificationRelay:
    relay = NotificationRelay(sink)
    relay.attach(reconciler)
    return relay


def of_type(sink: RecordingSink, notification_type: NotificationType):
    return [n for n in sink.sent if n.type == notification_type]


class TestBuilders:
    def test_tenant_status_notification(self):
        notification = tenant_status_notification("t-1", "CM", TenantStatus.STOPPED)

        assert notification.type == NotificationType.TENANT_STATUS
        assert notification.level == NotificationLevel.WARNING
        assert notification.title == "Instance CM"
        assert notification.message == "Instance CM has been stopped"
        assert notification.source == "TENANT_MANAGER"
        assert notification.action_url == "/tenants/t-1/overview"

    def test_tenant_status_level_override(self):
        notification = tenant_status_notification(
            "t-1", "CM", TenantStatus.RUNNING, NotificationLevel.SUCCESS
        )
        assert notification.level == NotificationLevel.SUCCESS

    def test_deployment_progress_notification(self):
        notification = deployment_notification("t-1", "CM", 45, "Keycloak realm")

        assert notification.level == NotificationLevel.INFO
        assert notification.message == "Keycloak realm (45%)"
        assert notification.data == {"progress": 45, "step": "Keycloak realm"}
        assert notification.icon == "rocket_launch"

    def test_deployment_completed_notification(self):
        notification = deployment_notification("t-1", "CM", 100, "Routing")

        assert notification.level == NotificationLevel.SUCCESS
        assert notification.message == "Deployment completed successfully"


class TestRelay:
    async def test_progress_and_completion(self, relay, reconciler, fake_registry, sink):
        fake_registry.respond(PROV, PROV, PROV, TenantStatus.RUNNING)
        reconciler.start_tracking("t-1", poll=False)

        for _ in range(4):
            await reconciler.poll_once()
        await relay.drain()

        deployments = of_type(sink, NotificationType.TENANT_DEPLOYMENT)
        assert [n.message for n in deployments] == [
            "Database (15%)",
            "Database (30%)",
            "Keycloak realm (45%)",
            "Deployment completed successfully",
        ]
        assert deployments[-1].level == NotificationLevel.SUCCESS
        assert all(n.title == "Deployment CM" for n in deployments)

        statuses = of_type(sink, NotificationType.TENANT_STATUS)
        assert [n.message for n in statuses] == ["Instance CM is now running"]

    async def test_capped_progress_does_not_repeat(self, relay, reconciler, fake_registry, sink):
        fake_registry.respond(PROV)
        reconciler.start_tracking("t-1", poll=False)

        for _ in range(10):
            await reconciler.poll_once()
        await relay.drain()

        progress = [n.data["progress"] for n in of_type(sink, NotificationType.TENANT_DEPLOYMENT)]
        assert progress == [15, 30, 45, 60, 75, 90]

    async def test_failure_notified_once(self, relay, reconciler, fake_registry, sink):
        fake_registry.respond(PROV, TenantStatus.ERROR)
        reconciler.start_tracking("t-1", poll=False)

        for _ in range(3):
            await reconciler.poll_once()
        await relay.drain()

        failures = [n for n in sink.sent if n.level == NotificationLevel.ERROR]
        assert {n.type for n in failures} == {
            NotificationType.TENANT_DEPLOYMENT,
            NotificationType.TENANT_STATUS,
        }
        assert len(failures) == 2

    async def test_new_deployment_starts_new_baseline(
        self, relay, reconciler, fake_registry, sink, clock
    ):
        fake_registry.respond(PROV)
        reconciler.start_tracking("t-1", poll=False)
        await reconciler.poll_once()
        await reconciler.poll_once()

        reconciler.clear_tracking()
        clock.advance(30)
        reconciler.start_tracking("t-1", poll=False)
        await reconciler.poll_once()
        await relay.drain()

        progress = [n.data["progress"] for n in of_type(sink, NotificationType.TENANT_DEPLOYMENT)]
        assert progress == [15, 30, 15]

    async def test_delivery_failure_is_swallowed(self, reconciler, fake_registry):
        sink = RecordingSink(error=TransientRemoteError("notifications", "down", 503))
        relay = NotificationRelay(sink)
        relay.attach(reconciler)
        fake_registry.respond(PROV)
        reconciler.start_tracking("t-1", poll=False)

        await reconciler.poll_once()
        await relay.drain()

        assert sink.sent == []

    async def test_unknown_status_is_ignored_and_termination_notified(
        self, relay, reconciler, fake_registry, sink
    ):
        fake_registry.respond(PROV, TenantStatus.UNKNOWN, TenantStatus.TERMINATED)
        reconciler.start_tracking("t-1", poll=False)

        for _ in range(3):
            assert await reconciler.poll_once() is True
        await relay.drain()

        statuses = of_type(sink, NotificationType.TENANT_STATUS)
        assert [(n.level, n.message) for n in statuses] == [
            (NotificationLevel.WARNING, "Instance CM has been terminated")
        ]

    async def test_unexpected_sink_error_is_swallowed(self):
        relay = NotificationRelay(RecordingSink(error=RuntimeError("sink crashed")))

        await relay.deliver(tenant_status_notification("t-1", "CM", TenantStatus.STOPPED))

        assert relay.sink.sent == []

    async def test_detach_stops_notifications(self, relay, reconciler, fake_registry, sink):
        relay.detach()
        fake_registry.respond(PROV)
        reconciler.start_tracking("t-1", poll=False)

        await reconciler.poll_once()
        await relay.drain()

        assert sink.sent == []
        assert reconciler.deployment.subscriber_count == 0


async def test_http_sink_posts_to_notification_service():
    transport = RecordingTransport(lambda r: httpx.Response(201))
    sink = HttpNotificationSink("http://notify.test", transport=transport, retry_delay=0)

    await sink.send(tenant_status_notification("t-1", "CM", TenantStatus.RUNNING))
    await sink.aclose()

    request = transport.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/api/v1/notifications"
    body = transport.json_body()
    assert body["type"] == "TENANT_STATUS"
    assert body["tenantId"] == "t-1"
    assert body["actionUrl"] == "/tenants/t-1/overview"

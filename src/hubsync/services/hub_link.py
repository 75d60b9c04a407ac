"""Instance-side link to the central hub.

Keeps a running tenant instance in touch with the hub on two independent
rhythms (heartbeat every P, metrics push every 5*P) and offers on-demand
pulls and pushes. A hub outage must never take the instance down, so every
operation except ``request_update`` resolves to a safe value instead of
raising:

=============================  =========================================
operation                      on failure
=============================  =========================================
send_instance_status           logged, swallowed
send_metrics / log_event       logged, swallowed
fetch_configuration_updates    ConfigurationUpdate(has_updates=False)
sync_procedure_templates       []
sync_referentials              empty collections, last_updated None
get_license_info               LicenseInfo.permissive() (fail-open)
request_update                 raises RemoteServiceError
=============================  =========================================
"""

from collections.abc import Callable
from datetime import datetime, timedelta

from src.hubsync.clients.hub import HubClient
from src.hubsync.core.config import Settings
from src.hubsync.core.exceptions import RemoteServiceError
from src.hubsync.core.logging import get_logger
from src.hubsync.core.streams import StatusStream
from src.hubsync.core.tasks import PeriodicTask
from src.hubsync.models.base import utc_now
from src.hubsync.schemas.hub import (
    ConfigurationUpdate,
    HubConnectionStatus,
    HubEvent,
    InstanceMetrics,
    InstanceStatus,
    LicenseInfo,
    ProcedureTemplate,
    ReferentialSync,
    UpdateRequest,
    UpdateResponse,
)
from src.hubsync.services.metrics_collector import InstanceMetricsCollector

logger = get_logger(__name__)


class HubLink:
    """Heartbeat, metrics push and configuration pulls for one instance."""

    def __init__(
        self,
        client: HubClient,
        collector: InstanceMetricsCollector | None = None,
        *,
        heartbeat_interval: float = 60.0,
        metrics_interval_multiplier: int = 5,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.client = client
        self.collector = collector or InstanceMetricsCollector(clock=clock)
        self._clock = clock

        self.connection: StatusStream[HubConnectionStatus] = StatusStream(
            HubConnectionStatus(), name="hub-connection"
        )
        self._heartbeat = PeriodicTask(
            "hub-heartbeat", heartbeat_interval, self.check_hub_connection
        )
        self._metrics = PeriodicTask(
            "hub-metrics",
            heartbeat_interval * metrics_interval_multiplier,
            self.collect_and_send_metrics,
        )

    @classmethod
    def from_settings(cls, client: HubClient, settings: Settings) -> "HubLink":
        collector = InstanceMetricsCollector(
            active_user_window=timedelta(seconds=settings.active_user_window_seconds)
        )
        return cls(
            client,
            collector,
            heartbeat_interval=settings.heartbeat_interval_seconds,
            metrics_interval_multiplier=settings.metrics_interval_multiplier,
        )

    @property
    def status(self) -> HubConnectionStatus:
        return self.connection.value

    @property
    def is_running(self) -> bool:
        return self._heartbeat.is_running and self._metrics.is_running

    @property
    def heartbeat_interval(self) -> float:
        return self._heartbeat.interval

    @property
    def metrics_interval(self) -> float:
        return self._metrics.interval

    async def initialize_connection(self) -> bool:
        """Check the hub once, then start the heartbeat and metrics tasks.

        The tasks start even when the first check fails, so an instance booted
        during a hub outage reconnects on a later heartbeat.

        Returns:
            Whether the initial check reached the hub.
        """
        connected = await self.check_hub_connection()
        self._heartbeat.start()
        self._metrics.start()
        logger.info("Hub link initialized", connected=connected, hub_url=self.client.base_url)
        return connected

    async def aclose(self) -> None:
        """Stop both periodic tasks. Only called on process shutdown."""
        await self._heartbeat.stop()
        await self._metrics.stop()

    async def check_hub_connection(self) -> bool:
        """Heartbeat tick: call the hub health endpoint and update the connection status.

        On failure only ``last_sync`` keeps its last known value; the hub
        version is unknown until the next successful check.
        """
        previous = self.connection.value
        try:
            health = await self.client.health()
        except RemoteServiceError as e:
            if previous.connected:
                logger.warning("Hub connection lost", error=str(e))
            else:
                logger.debug("Hub still unreachable", error=str(e))
            self.connection.publish(
                previous.model_copy(
                    update={"connected": False, "hub_version": None, "error": str(e)}
                )
            )
            return False

        if not previous.connected:
            logger.info("Hub connection established", hub_version=health.version)
        self.connection.publish(
            HubConnectionStatus(
                connected=True,
                last_sync=self._clock(),
                hub_version=health.version,
                error=None,
            )
        )
        return True

    async def collect_and_send_metrics(self) -> None:
        """Metrics tick: snapshot local counters and push them (best effort)."""
        try:
            metrics = self.collector.snapshot()
        except Exception as e:
            logger.warning("Failed to collect instance metrics", error=str(e))
            return
        await self.send_metrics(metrics)

    async def send_instance_status(self, status: InstanceStatus) -> None:
        try:
            await self.client.post_status(status)
        except RemoteServiceError as e:
            logger.error("Failed to send instance status", error=str(e))

    async def send_metrics(self, metrics: InstanceMetrics) -> None:
        try:
            await self.client.post_metrics(metrics)
        except RemoteServiceError as e:
            logger.error("Failed to send metrics", error=str(e))

    async def log_event(self, event: HubEvent) -> None:
        """Relay an audit event to the hub's central audit log."""
        if event.timestamp is None:
            event = event.model_copy(update={"timestamp": self._clock().isoformat()})
        try:
            await self.client.post_event(event)
        except RemoteServiceError as e:
            logger.warning("Failed to log event to hub", event_type=event.type, error=str(e))

    async def fetch_configuration_updates(self) -> ConfigurationUpdate:
        try:
            return await self.client.get_configuration_updates()
        except RemoteServiceError as e:
            logger.warning("Failed to fetch config updates", error=str(e))
            return ConfigurationUpdate(has_updates=False)

    async def sync_procedure_templates(self) -> list[ProcedureTemplate]:
        try:
            return await self.client.get_procedure_templates()
        except RemoteServiceError as e:
            logger.error("Failed to sync procedure templates", error=str(e))
            return []

    async def sync_referentials(self) -> ReferentialSync:
        try:
            return await self.client.get_referentials()
        except RemoteServiceError as e:
            logger.error("Failed to sync referentials", error=str(e))
            return ReferentialSync(countries=[], currencies=[], hs_code=[], last_updated=None)

    async def get_license_info(self) -> LicenseInfo:
        try:
            return await self.client.get_license()
        except RemoteServiceError as e:
            logger.warning("License check failed, using permissive default", error=str(e))
            return LicenseInfo.permissive()

    async def request_update(self, update: UpdateRequest) -> UpdateResponse:
        """Ask the hub for a modules/config/version update.

        Raises:
            RemoteServiceError: The request could not be delivered or was refused.
        """
        response = await self.client.post_update_request(update)
        logger.info(
            "Update requested",
            update_type=update.type,
            request_id=response.request_id,
            status=response.status,
        )
        return response

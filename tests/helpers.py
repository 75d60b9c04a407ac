"""Test doubles shared by unit and integration tests."""

import asyncio
import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from src.hubsync.core.exceptions import RemoteServiceError, TransientRemoteError
from src.hubsync.models.enums import TenantStatus
from src.hubsync.schemas.notification import NotificationCreate
from src.hubsync.schemas.tenant import TenantRecord
from tests.factories import TenantRecordFactory


class FakeClock:
    """Callable clock whose time only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 15, 8, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


class FakeTenantRegistry:
    """TenantReader returning scripted statuses, one per ``get_tenant`` call.

    The last scripted entry repeats once the script is exhausted. An entry may
    be an exception instance, which is raised instead.
    Set ``gate`` to hold ``get_tenant`` in flight until the event is set.
    """

    def __init__(self, code: str = "CM") -> None:
        self.code = code
        self.script: list[TenantStatus | Exception] = []
        self.calls: list[str] = []
        self.gate: asyncio.Event | None = None
        self.entered = asyncio.Event()

    def respond(self, *entries: TenantStatus | Exception) -> "FakeTenantRegistry":
        self.script.extend(entries)
        return self

    async def get_tenant(self, tenant_id: str) -> TenantRecord:
        self.calls.append(tenant_id)
        self.entered.set()
        if self.gate is not None:
            await self.gate.wait()
        entry = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(entry, Exception):
            raise entry
        return TenantRecordFactory.build(id=tenant_id, code=self.code, status=entry)


def transient_error() -> RemoteServiceError:
    return TransientRemoteError("tenant-registry", "GET /api/v1/tenants/t-1 returned 503", 503)


class RecordingSink:
    """NotificationSink that keeps what it was given."""

    def __init__(self, error: Exception | None = None) -> None:
        self.sent: list[NotificationCreate] = []
        self.error = error

    async def send(self, notification: NotificationCreate) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append(notification)


Handler = Callable[[httpx.Request], httpx.Response]


class RecordingTransport(httpx.MockTransport):
    """MockTransport that records every request it serves."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        def _handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_handler)

    def json_body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

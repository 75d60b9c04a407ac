"""Root test fixtures shared across all test types.

Integration-specific fixtures (ASGI app and client) are in tests/integration/conftest.py.
"""

import os

# Configure the environment before any app imports
os.environ.setdefault("APP_ENV", "testing")
os.environ["HUB_LINK_ENABLED"] = "false"
os.environ["HTTP_RETRY_DELAY"] = "0"
os.environ.pop("NOTIFICATIONS_URL", None)

# ruff: noqa: E402 - Imports must be after env var setup
from collections.abc import Generator

import pytest

from src.hubsync.core.config import get_settings
from src.hubsync.core.shutdown import request_tracker
from tests.helpers import FakeClock, FakeTenantRegistry

# Clear settings cache to ensure test environment variables are picked up
get_settings.cache_clear()


@pytest.fixture
def clock() -> FakeClock:
    """Controllable UTC clock, starting at 2024-01-15 08:00:00."""
    return FakeClock()


@pytest.fixture
def fake_registry() -> FakeTenantRegistry:
    return FakeTenantRegistry()


@pytest.fixture(autouse=True)
def reset_request_tracker() -> Generator[None]:
    request_tracker.reset()
    yield
    request_tracker.reset()

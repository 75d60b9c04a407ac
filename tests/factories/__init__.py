"""Test data factories using polyfactory."""

from tests.factories.base import BaseFactory, generate_id, utc_now
from tests.factories.tenant import TenantModuleFactory, TenantRecordFactory

__all__ = [
    "BaseFactory",
    "TenantModuleFactory",
    "TenantRecordFactory",
    "generate_id",
    "utc_now",
]

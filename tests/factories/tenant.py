"""Tenant factories for test data generation."""

from polyfactory import Use

from src.hubsync.models.enums import TenantStatus
from src.hubsync.schemas.tenant import TenantModule, TenantRecord
from tests.factories.base import BaseFactory, generate_id, utc_now


class TenantModuleFactory(BaseFactory[TenantModule]):
    __model__ = TenantModule

    name = "E_FORCE"
    enabled = True
    features = Use(list)


class TenantRecordFactory(BaseFactory[TenantRecord]):
    """Factory for generating TenantRecord test data."""

    __model__ = TenantRecord

    id = Use(generate_id)
    code = Use(lambda: f"T{generate_id()[-4:].upper()}")
    name = Use(lambda: f"Test Tenant {generate_id()[-8:]}")
    status = TenantStatus.RUNNING
    created_at = Use(utc_now)
    modules = Use(list)
    infrastructure = None
    health = None

    @classmethod
    def provisioning(cls, **kwargs):
        """Create a tenant that is still being provisioned."""
        return cls.build(status=TenantStatus.PROVISIONING, **kwargs)

    @classmethod
    def running(cls, **kwargs):
        return cls.build(status=TenantStatus.RUNNING, **kwargs)

    @classmethod
    def failed(cls, **kwargs):
        """Create a tenant whose deployment ended in ERROR."""
        return cls.build(status=TenantStatus.ERROR, **kwargs)

"""Base factory configuration for polyfactory."""

from datetime import UTC, datetime
from typing import TypeVar
from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory
from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


def utc_now() -> datetime:
    """Generate current UTC time (aware, as the backend sends it)."""
    return datetime.now(UTC)


def generate_id() -> str:
    """Generate a backend-style UUID string id."""
    return str(uuid4())


class BaseFactory(ModelFactory[T]):
    """Base factory with common configuration for all wire models.

    Optional fields are left unset unless a factory or a test fills them.
    """

    __is_base_factory__ = True
    __allow_none_optionals__ = True
    __use_defaults__ = True

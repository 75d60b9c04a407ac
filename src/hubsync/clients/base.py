"""Shared async HTTP client with error mapping and bounded retry."""

from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from src.hubsync.core.exceptions import (
    InvalidResponseError,
    RemoteServiceError,
    TransientRemoteError,
    error_for_status,
)
from src.hubsync.core.logging import get_logger

logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)

# POST/PATCH are never retried: the remote may have applied them already.
IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "OPTIONS", "PUT", "DELETE"})


class ApiClient:
    """Thin wrapper over ``httpx.AsyncClient`` for one remote service.

    Every failure surfaces as a RemoteServiceError subclass. Idempotent requests
    are retried with exponential backoff on TransientRemoteError only.
    """

    service_name = "remote"

    def __init__(
        self,
        base_url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        retry_max_delay: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url
        self.retry_attempts = retry_attempts
        self.retry_delay = retry_delay
        self.retry_max_delay = retry_max_delay
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        retry: bool | None = None,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        Args:
            method: HTTP method.
            path: Path relative to the client's base URL.
            params: Query parameters.
            json: JSON body.
            retry: Force retry on or off. Defaults to on for idempotent methods.

        Raises:
            TransientRemoteError: Transport failure or retryable status, after retries.
            RemoteNotFoundError: The remote answered 404.
            RemoteServiceError: Any other error status.
        """
        method = method.upper()
        should_retry = method in IDEMPOTENT_METHODS if retry is None else retry
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_attempts if should_retry else 1),
            wait=wait_exponential(multiplier=self.retry_delay, max=self.retry_max_delay),
            retry=retry_if_exception_type(TransientRemoteError),
            before_sleep=self._log_retry,
            reraise=True,
        )
        return await retrying(self._send, method, path, params=params, json=json)

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None,
        json: Any,
    ) -> httpx.Response:
        try:
            response = await self._client.request(method, path, params=params, json=json)
        except httpx.TransportError as e:
            raise TransientRemoteError(
                self.service_name, f"{method} {path} failed: {type(e).__name__}: {e}"
            ) from e
        except httpx.RequestError as e:
            raise RemoteServiceError(self.service_name, f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise error_for_status(
                self.service_name,
                response.status_code,
                f"{method} {path} returned {response.status_code}",
            )
        return response

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Retrying remote call",
            service=self.service_name,
            attempt=retry_state.attempt_number,
            max_attempts=self.retry_attempts,
            error=str(error),
        )

    def parse(self, response: httpx.Response, model: type[M]) -> M:
        """Decode a JSON body into ``model``."""
        try:
            return model.model_validate(response.json())
        except ValueError as e:
            raise InvalidResponseError(
                self.service_name, f"Invalid {model.__name__} payload: {e}"
            ) from e

    def parse_list(self, response: httpx.Response, model: type[M]) -> list[M]:
        """Decode a JSON array body into a list of ``model``."""
        try:
            return TypeAdapter(list[model]).validate_python(response.json())  # type: ignore[valid-type]
        except ValueError as e:
            raise InvalidResponseError(
                self.service_name, f"Invalid {model.__name__} list payload: {e}"
            ) from e

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

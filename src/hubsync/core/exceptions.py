"""Error taxonomy for remote calls and the HTTP handlers that render it.

Three families of failure cross the hub boundary:

- transient transport errors (timeouts, refused connections, 5xx, 408, 429),
  the only ones worth retrying;
- remote request errors (other 4xx, undecodable payloads), which a retry
  would only repeat;
- terminal domain states (a tenant in ERROR), which are not exceptions at all
  and are surfaced through DeploymentStatus instead.
"""

from asgi_correlation_id import correlation_id
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.hubsync.core.logging import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429})


class HubSyncError(Exception):
    """Base class for errors raised by this package."""


class RemoteServiceError(HubSyncError):
    """A call to a remote service failed."""

    def __init__(self, service: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message
        self.status_code = status_code


class TransientRemoteError(RemoteServiceError):
    """Failure that may succeed if the same request is sent again."""


class RemoteNotFoundError(RemoteServiceError):
    """The remote resource does not exist (HTTP 404)."""


class InvalidResponseError(RemoteServiceError):
    """The remote answered, but the payload could not be decoded or validated."""


def is_retryable_status(status_code: int) -> bool:
    return status_code >= 500 or status_code in RETRYABLE_STATUS_CODES


def error_for_status(service: str, status_code: int, message: str) -> RemoteServiceError:
    """Build the error class matching an HTTP status."""
    if status_code == 404:
        return RemoteNotFoundError(service, message, status_code)
    if is_retryable_status(status_code):
        return TransientRemoteError(service, message, status_code)
    return RemoteServiceError(service, message, status_code)


def _error_body(detail: object) -> dict[str, object]:
    return {"detail": detail, "request_id": correlation_id.get()}


def setup_exception_handlers(app: FastAPI) -> None:
    """Configure exception handlers that include request_id in responses."""

    @app.exception_handler(StarletteHTTPException)
    async def starlette_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))

    @app.exception_handler(RemoteServiceError)
    async def remote_service_exception_handler(
        request: Request, exc: RemoteServiceError
    ) -> JSONResponse:
        if isinstance(exc, RemoteNotFoundError):
            status_code = status.HTTP_404_NOT_FOUND
        elif isinstance(exc, TransientRemoteError):
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        else:
            status_code = status.HTTP_502_BAD_GATEWAY
        logger.warning(
            "Remote service call failed",
            service=exc.service,
            remote_status=exc.status_code,
            error=exc.message,
            path=request.url.path,
        )
        return JSONResponse(status_code=status_code, content=_error_body(str(exc)))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        request_id = correlation_id.get()
        logger.exception(
            "Unhandled exception",
            exc_info=exc,
            request_id=request_id,
            path=request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "request_id": request_id,
            },
        )

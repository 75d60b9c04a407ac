"""Structured logging for the hub sync service.

Every event carries the component logger name and, once bound, the request
correlation id and the tenant the process acts for, so heartbeat, polling and
request logs from one instance can be filtered together.
"""

import logging
import sys

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars, unbind_contextvars

# Outbound clients log every request; the poll and heartbeat loops would flood INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_logging(debug: bool = False) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        debug: Colored console output at DEBUG level. Otherwise JSON lines at
            INFO, with tracebacks rendered into the ``exception`` field.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=log_level)

    processors: list[structlog.typing.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]
    if debug:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))
    else:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    """Bind the request correlation id to all subsequent log calls."""
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_tenant_context(tenant_code: str | None, tenant_id: str | None = None) -> None:
    """Bind the tenant this process (or request) is acting for.

    Args:
        tenant_code: Short tenant code, e.g. 'CM'.
        tenant_id: Optional registry id of the tenant.
    """
    if tenant_code:
        bind_contextvars(tenant_code=tenant_code)
    if tenant_id:
        bind_contextvars(tenant_id=tenant_id)


def unbind_tenant_context() -> None:
    unbind_contextvars("tenant_code", "tenant_id")


def clear_request_context() -> None:
    clear_contextvars()

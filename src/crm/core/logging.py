"""Structured logging with structlog.

Request handlers bind the request id and the acting user once; services add
the process they are working on, so every line of a transition can be traced
back to the request and the process it touched.
"""

import logging
import sys
from uuid import UUID

import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

# Libraries that are chatty at INFO
_QUIET_LOGGERS = ("sqlalchemy.engine", "aiosqlite", "asyncpg", "httpx", "httpcore")


def setup_logging(debug: bool = False) -> None:
    """Configure stdlib logging and structlog.

    Args:
        debug: Console rendering at DEBUG level when True, JSON lines at INFO otherwise.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if debug else logging.INFO,
    )

    renderer: structlog.typing.Processor = (
        structlog.dev.ConsoleRenderer(colors=True)
        if debug
        else structlog.processors.JSONRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(request_id: str | None) -> None:
    """Attach the correlation id of the current request, if there is one."""
    if request_id:
        bind_contextvars(request_id=request_id)


def bind_actor_context(actor_id: str) -> None:
    """Attach the subject of the verified bearer token."""
    bind_contextvars(actor_id=actor_id)


def bind_process_context(process_id: UUID, process_type: str | None = None) -> None:
    """Attach the process a service call is operating on."""
    bind_contextvars(process_id=str(process_id))
    if process_type is not None:
        bind_contextvars(process_type=process_type)


def clear_request_context() -> None:
    """Drop everything bound for the current request."""
    clear_contextvars()

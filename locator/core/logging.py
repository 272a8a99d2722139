"""Structured logging setup for the locator service.

Every module logs through structlog. Log lines are JSON in deployments and
key-value or console text under test. Request correlation IDs bound by the
correlation middleware are merged into every line of that request.
"""

from logging import (
    CRITICAL,
    DEBUG,
    ERROR,
    INFO,
    WARNING,
    Handler,
    StreamHandler,
    getLogger,
)
from typing import cast

import structlog
from structlog import contextvars, dev, processors, stdlib
from structlog.stdlib import BoundLogger
from structlog.types import Processor

LOG_LEVELS: dict[str, int] = {
    "debug": DEBUG,
    "info": INFO,
    "warning": WARNING,
    "error": ERROR,
    "critical": CRITICAL,
}

# Loggers whose handlers are replaced on every configure_logging call
MANAGED_LOGGERS = ("", "locator")


def _shared_processors() -> list[Processor]:
    return [
        contextvars.merge_contextvars,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
        processors.dict_tracebacks,
    ]


def configure_logging(
    testing: bool = False, level: str = "info", json_logs: bool = True
) -> None:
    """Configure structlog and the stdlib handlers it writes through.

    Args:
        testing: Use readable renderers instead of JSON
        level: Name of the minimum level to emit, unknown names mean ``info``
        json_logs: Render JSON lines outside of tests
    """
    log_level = LOG_LEVELS.get(level.lower(), INFO)
    render_json = json_logs and not testing
    shared = _shared_processors()

    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared,
            processors.format_exc_info,
            processors.JSONRenderer() if render_json else processors.KeyValueRenderer(),
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler: Handler = StreamHandler()
    handler.setLevel(log_level)
    handler.setFormatter(
        stdlib.ProcessorFormatter(
            processor=processors.JSONRenderer() if render_json else dev.ConsoleRenderer(),
            foreign_pre_chain=shared,
        )
    )

    for name in MANAGED_LOGGERS:
        target = getLogger(name)
        target.setLevel(log_level)
        target.handlers = [handler]


def get_logger(name: str | None = None) -> BoundLogger:
    """Get a structured logger, named after the calling module when given."""
    if name is None:
        return cast(BoundLogger, structlog.get_logger())
    return cast(BoundLogger, structlog.get_logger(name))


def get_request_logger(request_id: str | None = None) -> BoundLogger:
    """Get a logger bound to a request ID.

    Args:
        request_id: Correlation ID of the request, if known

    Returns:
        Logger that adds ``request_id`` to every line
    """
    logger = get_logger()
    if request_id:
        logger = logger.bind(request_id=request_id)
    return logger

"""Logging configuration module."""

from logging import (
    CRITICAL,
    DEBUG,
    ERROR,
    INFO,
    WARNING,
    Handler,
    Logger,
    StreamHandler,
    getLogger,
)
from typing import cast

import structlog
from structlog import contextvars, dev, processors, stdlib
from structlog.processors import JSONRenderer, TimeStamper, dict_tracebacks
from structlog.stdlib import BoundLogger
from structlog.typing import Processor

# Define log levels
LOG_LEVELS: dict[str, int] = {
    "debug": DEBUG,
    "info": INFO,
    "warning": WARNING,
    "error": ERROR,
    "critical": CRITICAL,
}


def configure_logging(
    testing: bool = False, level: str = "INFO", json_logs: bool = True
) -> None:
    """Configure structured logging for the application.

    Args:
        testing: Whether the application is running in test mode
        level: Log level name, case-insensitive
        json_logs: Render JSON lines instead of console output
    """
    log_level = LOG_LEVELS.get(level.lower(), INFO)
    use_json = json_logs and not testing

    root_logger: Logger = getLogger()
    root_logger.setLevel(log_level)

    app_logger: Logger = getLogger("geocache")
    app_logger.setLevel(log_level)

    handler: Handler = StreamHandler()
    handler.setLevel(log_level)

    shared_processors: list[Processor] = [
        contextvars.merge_contextvars,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
    ]

    # Structured tracebacks only suit the JSON renderer; the console
    # renderer formats exc_info itself
    if use_json:
        structlog_tail: list[Processor] = [dict_tracebacks, JSONRenderer()]
        foreign_chain: list[Processor] = [*shared_processors, dict_tracebacks]
        record_renderer: Processor = JSONRenderer()
    else:
        structlog_tail = [processors.format_exc_info, processors.KeyValueRenderer()]
        foreign_chain = list(shared_processors)
        record_renderer = dev.ConsoleRenderer()

    structlog.configure(
        processors=[stdlib.filter_by_level, *shared_processors, *structlog_tail],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = stdlib.ProcessorFormatter(
        processor=record_renderer,
        foreign_pre_chain=foreign_chain,
    )
    handler.setFormatter(formatter)

    # Clear existing handlers to prevent duplicates
    root_logger.handlers = []
    app_logger.handlers = []

    root_logger.addHandler(handler)
    app_logger.propagate = False
    app_logger.addHandler(handler)


def get_logger() -> BoundLogger:
    """Get a configured logger instance.

    Returns:
        A structured logger instance.
    """
    return cast(BoundLogger, structlog.get_logger())


def get_request_logger(request_id: str | None = None) -> BoundLogger:
    """Get a logger with request context.

    Args:
        request_id: Optional request ID to bind to logger

    Returns:
        Configured logger with request context
    """
    logger: BoundLogger = get_logger()
    if request_id:
        logger = logger.bind(request_id=request_id)
    return logger

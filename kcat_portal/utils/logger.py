"""Application-wide structured logging helpers."""

import logging
import sys
from typing import Any

import structlog


def configure_logging(level: str = "INFO", *, json: bool = True) -> None:
    """Route structlog through stdlib logging on stderr.

    JSON lines by default; `json=False` gives the human console renderer
    used by the CLI so logs don't drown the result tables.
    """
    logging.basicConfig(level=level, stream=sys.stderr, format="%(message)s")
    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if json
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(*args: Any, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(*args, **kwargs)


def bound_operation(**values: Any):
    """Attach fields (operation name, slot) to every log line inside the block."""
    return structlog.contextvars.bound_contextvars(**values)

"""
Structured logging for the Screenshop Engine.

Everything goes through structlog on top of stdlib logging so that third
party loggers (uvicorn, httpx, anthropic) share the same stream. Output is
JSON unless LOG_FORMAT=console, which is easier to read while developing.
"""
import logging
import sys

import structlog

from config import settings


def _renderer(log_format: str):
    if log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def setup_logging(level: str = settings.LOG_LEVEL, log_format: str = settings.LOG_FORMAT):
    """Configure structlog and return the service logger"""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(log_level)
    # The SDK's HTTP client logs every request at INFO
    logging.getLogger("httpx").setLevel(max(log_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(log_format.lower()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger("screenshop")


logger = setup_logging()

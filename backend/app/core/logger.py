import logging
import os
import sys

import structlog


def _resolve_level(env: str, override: str | None) -> int:
    if override:
        return getattr(logging, override.upper(), logging.INFO)
    if env in ("development", "testing"):
        return logging.DEBUG
    return logging.INFO


def configure_logging(env: str | None = None, level: str | None = None) -> None:
    """
    Route stdlib logging and structlog through the same stdout stream.

    Production renders one JSON document per line; every other
    environment gets the human readable console renderer.
    """
    env = env or os.getenv("APP_ENV", "development")
    log_level = _resolve_level(env, level or os.getenv("LOG_LEVEL"))

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if env == "production"
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )

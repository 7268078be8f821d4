"""Observability infrastructure: structured logging setup."""

from docproof.infrastructure.observability.logging import (
    DEFAULT_LOG_LEVEL,
    LOG_LEVEL_ENV,
    configure_structlog,
    get_logger_for_service,
)

__all__: list[str] = [
    "DEFAULT_LOG_LEVEL",
    "LOG_LEVEL_ENV",
    "configure_structlog",
    "get_logger_for_service",
]

"""structlog setup for docproof processes.

Two renderings share one processor chain:

- production: one JSON object per line, for log shippers
- anything else: colored key=value console lines

A registration entry in production looks like:

    {"event": "registration_completed", "level": "info",
     "timestamp": "2026-01-15T10:00:00.000000Z", "correlation_id": "...",
     "service": "RegistrationCoordinator", "component": "registry",
     "digest": "9f86d0...", "tx_reference": "0x..."}

Usage:
    from docproof.infrastructure.observability import configure_structlog

    configure_structlog(environment="production")
    structlog.get_logger().info("sweep_started", page_size=100)
"""

import logging
import os
from typing import cast

import structlog
from structlog.typing import Processor

from docproof.application.observability.correlation import correlation_id_processor

LOG_LEVEL_ENV = "LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"
PRODUCTION = "production"


def _get_log_level() -> int:
    """Resolve LOG_LEVEL to a logging level, INFO when unset or unknown."""
    name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        cast(Processor, correlation_id_processor),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(environment: str) -> Processor:
    if environment == PRODUCTION:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_structlog(environment: str = PRODUCTION) -> None:
    """Install the docproof processor chain. Call once per process.

    Args:
        environment: "production" renders JSON lines; any other value
            renders console output.
    """
    structlog.configure(
        processors=[*_shared_processors(), _renderer(environment)],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger_for_service(
    service_name: str, component: str = "registry"
) -> structlog.BoundLogger:
    """Logger pre-bound with service and component, as LoggingMixin binds them."""
    return structlog.get_logger().bind(service=service_name, component=component)

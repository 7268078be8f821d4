"""Bootstrap wiring for logging configuration.

Entry points call configure_logging() once before anything logs. The
renderer follows DOCPROOF_ENVIRONMENT ("production" renders JSON lines,
anything else renders colored console output); the level follows
LOG_LEVEL.
"""

from __future__ import annotations

import os

from docproof.infrastructure.observability import configure_structlog

ENVIRONMENT_VAR = "DOCPROOF_ENVIRONMENT"
DEFAULT_ENVIRONMENT = "production"


def get_environment() -> str:
    return os.environ.get(ENVIRONMENT_VAR, DEFAULT_ENVIRONMENT).strip().lower()


def configure_logging(environment: str | None = None) -> str:
    """Configure structlog for the given or configured environment.

    Returns:
        The environment name that was applied.
    """
    resolved = environment or get_environment()
    configure_structlog(environment=resolved)
    return resolved


__all__ = ["configure_logging", "get_environment"]

"""Shared logging behavior for docproof application services.

Every coordinator logs through a logger bound with its class name and a
component ("registry", "addressing", "reconciliation"). Each public
operation then derives a scoped logger carrying the operation name, the
caller's correlation id and the digest it works on:

    class RegistrationCoordinator(LoggingMixin):
        def __init__(self, ...) -> None:
            ...
            self._init_logger()

        async def register(self, request):
            log = self._log_operation("register", digest=digest.hex)
            log.info("registration_started")
"""

import structlog

from docproof.application.observability.correlation import get_correlation_id

DEFAULT_COMPONENT = "registry"


class LoggingMixin:
    """Adds `_log` and `_log_operation()` to a service class."""

    _log: structlog.BoundLogger

    def _init_logger(self, component: str = DEFAULT_COMPONENT) -> None:
        """Bind the service logger. Call from __init__."""
        self._log = structlog.get_logger().bind(
            service=type(self).__name__,
            component=component,
        )

    def _log_operation(self, operation: str, **context: object) -> structlog.BoundLogger:
        """Return a logger scoped to one call of `operation`.

        The correlation id is read at call time, so concurrent requests on
        one service instance each log under their own id.
        """
        return self._log.bind(
            operation=operation,
            correlation_id=get_correlation_id(),
            **context,
        )

"""Correlation ids that tie one register/verify/sweep call's log lines together.

The id is held in a ContextVar, so each asyncio task sees the id of the
request it serves. Whatever accepts the request calls set_correlation_id()
(with an incoming id or generate_correlation_id()) before invoking a
coordinator; LoggingMixin binds it per operation and
correlation_id_processor stamps it on entries logged elsewhere.
"""

from contextvars import ContextVar
from typing import Any
from uuid import uuid4

_correlation_id: ContextVar[str] = ContextVar("docproof_correlation_id", default="")


def generate_correlation_id() -> str:
    return uuid4().hex


def get_correlation_id() -> str:
    """Current id, or "" outside any request."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


def correlation_id_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor; an id already bound on the entry is kept."""
    current = get_correlation_id()
    if current and "correlation_id" not in event_dict:
        event_dict["correlation_id"] = current
    return event_dict

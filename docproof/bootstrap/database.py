"""Engine and session factory for the PostgreSQL document index.

The index is backed by PostgreSQL only when DATABASE_URL is set; any of
the usual URL spellings is accepted and rewritten for the asyncpg driver.
SQLALCHEMY_ECHO=1 logs the emitted SQL.

Usage:
    from docproof.bootstrap.database import get_session_factory

    index = PostgresDocumentIndex(get_session_factory())
"""

from __future__ import annotations

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from structlog import get_logger

from docproof.config._env import _get_bool_env

logger = get_logger()

DATABASE_URL_ENV = "DATABASE_URL"
SQLALCHEMY_ECHO_ENV = "SQLALCHEMY_ECHO"
ASYNC_SCHEME = "postgresql+asyncpg://"

# Schemes rewritten to the asyncpg driver
_SYNC_SCHEMES = ("postgresql+psycopg2://", "postgresql://", "postgres://")

_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def is_database_configured() -> bool:
    return bool(os.environ.get(DATABASE_URL_ENV))


def to_async_url(url: str) -> str:
    """Rewrite a PostgreSQL URL for asyncpg; a bare user@host/db gets the scheme added."""
    if url.startswith(ASYNC_SCHEME):
        return url
    for scheme in _SYNC_SCHEMES:
        if url.startswith(scheme):
            return ASYNC_SCHEME + url[len(scheme) :]
    return ASYNC_SCHEME + url


def mask_password(url: str) -> str:
    """Replace the password in user:password@host with ***."""
    if "@" not in url:
        return url
    credentials, host = url.rsplit("@", 1)
    scheme, sep, userinfo = credentials.rpartition("//")
    if ":" not in userinfo:
        return url
    user = userinfo.split(":", 1)[0]
    return f"{scheme}{sep}{user}:***@{host}"


def get_database_url() -> str:
    """DATABASE_URL in asyncpg form.

    Raises:
        ValueError: If DATABASE_URL is not set.
    """
    url = os.environ.get(DATABASE_URL_ENV)
    if not url:
        raise ValueError(
            f"{DATABASE_URL_ENV} environment variable not set; "
            "it is required for the PostgreSQL document index"
        )
    return to_async_url(url)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Create the engine on first call and return the shared session factory.

    Raises:
        ValueError: If DATABASE_URL is not set.
    """
    global _engine, _session_factory

    if _session_factory is None:
        url = get_database_url()
        logger.info("creating_database_engine", url=mask_password(url))
        _engine = create_async_engine(
            url,
            echo=_get_bool_env(SQLALCHEMY_ECHO_ENV, False),
            pool_pre_ping=True,
        )
        _session_factory = async_sessionmaker(
            bind=_engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


async def close_database_engine() -> None:
    """Dispose of the engine; the next get_session_factory() builds a new one."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("database_engine_closed")
    _engine = None
    _session_factory = None


def reset_database_bootstrap() -> None:
    """Forget the engine without disposing it (tests only)."""
    global _engine, _session_factory
    _engine = None
    _session_factory = None

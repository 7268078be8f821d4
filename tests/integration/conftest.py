"""
Integration test configuration with testcontainers.

This module provides a session-scoped PostgreSQL 16 container and
per-test fixtures over it:
- The container is started once per test session (scope="session")
- The documents table is truncated before each test
- The container is automatically cleaned up after all tests complete

Usage:
    @pytest.mark.integration
    async def test_example(postgres_index: PostgresDocumentIndex) -> None:
        ...

Note: Docker must be running for these fixtures to work.
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from testcontainers.postgres import PostgresContainer

from docproof.bootstrap.database import to_async_url
from docproof.infrastructure.adapters.persistence import PostgresDocumentIndex


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer, None, None]:
    """Session-scoped PostgreSQL 16 container.

    The container is started once and reused across all integration tests.
    """
    with PostgresContainer("postgres:16-alpine") as postgres:
        yield postgres


@pytest.fixture(scope="session")
def postgres_async_url(postgres_container: PostgresContainer) -> str:
    """Get the asyncpg connection URL for the container.

    testcontainers returns a psycopg2 URL by default.

    Returns:
        postgresql+asyncpg:// URL string
    """
    return to_async_url(postgres_container.get_connection_url())


@pytest.fixture
async def session_factory(
    postgres_async_url: str,
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Per-test session factory over an empty documents table."""
    engine = create_async_engine(postgres_async_url, echo=False)
    factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    await PostgresDocumentIndex(factory).create_schema()
    async with factory() as session, session.begin():
        await session.execute(text("TRUNCATE TABLE documents"))

    yield factory

    await engine.dispose()


@pytest.fixture
def postgres_index(
    session_factory: async_sessionmaker[AsyncSession],
) -> PostgresDocumentIndex:
    return PostgresDocumentIndex(session_factory)

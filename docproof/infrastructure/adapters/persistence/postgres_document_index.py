"""PostgreSQL implementation of DocumentIndexProtocol.

Stores the local mirror of ledger registrations in a single `documents`
table. Uniqueness of the digest and of the registration transaction is
enforced by the database, and the verification counter is incremented in
a single UPDATE so concurrent verifications never lose an increment.

Usage:
    from docproof.bootstrap.database import get_session_factory

    index = PostgresDocumentIndex(get_session_factory())
    await index.create_schema()
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from structlog import get_logger

from docproof.application.ports.document_index import (
    RECENT_DOCUMENTS_LIMIT,
    DocumentFilter,
    DocumentIndexProtocol,
    DocumentPage,
    DocumentSort,
    GroupCount,
    IndexStatistics,
    PageRequest,
    RecentDocument,
    SortDirection,
    SortField,
)
from docproof.domain.errors import (
    DocumentIndexError,
    DocumentRecordNotFoundError,
    DuplicateDigestError,
    DuplicateTransactionReferenceError,
)
from docproof.domain.models import (
    DescriptiveMetadata,
    DocumentCategory,
    LocalDocumentRecord,
    RecordStatus,
)
from docproof.domain.value_objects import DocumentDigest

if TYPE_CHECKING:
    from sqlalchemy.engine import RowMapping
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger()

SCHEMA_STATEMENTS: tuple[str, ...] = (
    """
    CREATE TABLE IF NOT EXISTS documents (
        digest CHAR(64) PRIMARY KEY,
        ledger_identity VARCHAR(66) NOT NULL,
        file_name TEXT NOT NULL,
        size BIGINT NOT NULL CHECK (size >= 0),
        content_type TEXT NOT NULL,
        submitted_by TEXT NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        category TEXT NOT NULL,
        tags TEXT[] NOT NULL DEFAULT '{}',
        schema_version TEXT NOT NULL,
        registration_tx_reference TEXT NOT NULL UNIQUE,
        registration_sequence_number BIGINT NOT NULL,
        network TEXT NOT NULL,
        created_at TIMESTAMPTZ NOT NULL,
        verified BOOLEAN NOT NULL DEFAULT FALSE,
        verification_count INTEGER NOT NULL DEFAULT 0 CHECK (verification_count >= 0),
        last_verified_at TIMESTAMPTZ,
        status TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_documents_ledger_identity ON documents (ledger_identity)",
    "CREATE INDEX IF NOT EXISTS idx_documents_category ON documents (category)",
    "CREATE INDEX IF NOT EXISTS idx_documents_created_at ON documents (created_at DESC)",
    "CREATE INDEX IF NOT EXISTS idx_documents_submitted_by ON documents (submitted_by)",
)

_COLUMNS = """
    digest, ledger_identity, file_name, size, content_type, submitted_by,
    description, category, tags, schema_version, registration_tx_reference,
    registration_sequence_number, network, created_at, verified,
    verification_count, last_verified_at, status
"""

# Whitelisted ORDER BY expressions; never interpolate caller input
_SORT_COLUMNS: dict[SortField, str] = {
    SortField.CREATED_AT: "created_at",
    SortField.SIZE: "size",
    SortField.VERIFICATION_COUNT: "verification_count",
    SortField.FILE_NAME: "lower(file_name)",
}


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_record(row: RowMapping) -> LocalDocumentRecord:
    return LocalDocumentRecord(
        digest=DocumentDigest(row["digest"]),
        ledger_identity=row["ledger_identity"],
        file_name=row["file_name"],
        size=row["size"],
        content_type=row["content_type"],
        submitted_by=row["submitted_by"],
        descriptive_metadata=DescriptiveMetadata(
            description=row["description"],
            category=DocumentCategory(row["category"]),
            tags=tuple(row["tags"] or ()),
            schema_version=row["schema_version"],
        ),
        registration_tx_reference=row["registration_tx_reference"],
        registration_sequence_number=row["registration_sequence_number"],
        network=row["network"],
        created_at=row["created_at"],
        verified=row["verified"],
        verification_count=row["verification_count"],
        last_verified_at=row["last_verified_at"],
        status=RecordStatus(row["status"]),
    )


def _record_params(record: LocalDocumentRecord) -> dict[str, Any]:
    metadata = record.descriptive_metadata
    return {
        "digest": record.digest.hex,
        "ledger_identity": record.ledger_identity,
        "file_name": record.file_name,
        "size": record.size,
        "content_type": record.content_type,
        "submitted_by": record.submitted_by,
        "description": metadata.description,
        "category": metadata.category.value,
        "tags": list(metadata.tags),
        "schema_version": metadata.schema_version,
        "registration_tx_reference": record.registration_tx_reference,
        "registration_sequence_number": record.registration_sequence_number,
        "network": record.network,
        "created_at": record.created_at,
        "verified": record.verified,
        "verification_count": record.verification_count,
        "last_verified_at": record.last_verified_at,
        "status": record.status.value,
    }


def _filter_clause(filters: DocumentFilter) -> tuple[str, dict[str, Any]]:
    conditions: list[str] = []
    params: dict[str, Any] = {}
    if filters.category is not None:
        conditions.append("category = :category")
        params["category"] = filters.category.value
    if filters.verified is not None:
        conditions.append("verified = :verified")
        params["verified"] = filters.verified
    if filters.submitted_by_pattern:
        conditions.append("submitted_by ILIKE :submitted_by ESCAPE '\\'")
        params["submitted_by"] = f"%{_escape_like(filters.submitted_by_pattern)}%"
    where = f"WHERE {' AND '.join(conditions)}" if conditions else ""
    return where, params


class PostgresDocumentIndex(DocumentIndexProtocol):
    """Document index backed by PostgreSQL through SQLAlchemy async."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the index.

        Args:
            session_factory: SQLAlchemy async session factory.
        """
        self._session_factory = session_factory

    async def create_schema(self) -> None:
        """Create the documents table and its indexes if missing."""
        try:
            async with self._session_factory() as session, session.begin():
                for statement in SCHEMA_STATEMENTS:
                    await session.execute(text(statement))
        except SQLAlchemyError as exc:
            logger.error("document_index_schema_failed", error=str(exc))
            raise DocumentIndexError(f"Failed to create schema: {exc}") from exc
        logger.info("document_index_schema_ready")

    async def put(self, record: LocalDocumentRecord) -> LocalDocumentRecord:
        log = logger.bind(operation="put", digest=record.digest.hex)
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    text(f"""
                        INSERT INTO documents ({_COLUMNS})
                        VALUES (
                            :digest, :ledger_identity, :file_name, :size,
                            :content_type, :submitted_by, :description, :category,
                            CAST(:tags AS TEXT[]), :schema_version,
                            :registration_tx_reference, :registration_sequence_number,
                            :network, :created_at, :verified, :verification_count,
                            :last_verified_at, :status
                        )
                        ON CONFLICT DO NOTHING
                        RETURNING {_COLUMNS}
                    """),
                    _record_params(record),
                )
                inserted = result.mappings().first()
                if inserted is not None:
                    log.debug("document_indexed")
                    return _row_to_record(inserted)

                existing = await self._select_one(session, record.digest.hex)
        except SQLAlchemyError as exc:
            log.error("document_index_put_failed", error=str(exc))
            raise DocumentIndexError(
                f"Failed to index document: {exc}", digest=record.digest.hex
            ) from exc

        if existing is not None:
            raise DuplicateDigestError(record.digest.hex, existing=existing)
        raise DuplicateTransactionReferenceError(
            record.registration_tx_reference, digest=record.digest.hex
        )

    async def get_by_digest(self, digest: DocumentDigest) -> LocalDocumentRecord | None:
        try:
            async with self._session_factory() as session:
                return await self._select_one(session, digest.hex)
        except SQLAlchemyError as exc:
            raise DocumentIndexError(
                f"Failed to read document: {exc}", digest=digest.hex
            ) from exc

    async def get_by_ledger_identity(self, identity: str) -> LocalDocumentRecord | None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    text(f"""
                        SELECT {_COLUMNS}
                        FROM documents
                        WHERE lower(ledger_identity) = lower(:identity)
                    """),
                    {"identity": identity},
                )
                row = result.mappings().first()
        except SQLAlchemyError as exc:
            raise DocumentIndexError(f"Failed to read document: {exc}") from exc
        return _row_to_record(row) if row is not None else None

    async def list_documents(
        self,
        filters: DocumentFilter | None = None,
        sort: DocumentSort | None = None,
        page: PageRequest | None = None,
    ) -> DocumentPage:
        filters = filters or DocumentFilter()
        sort = sort or DocumentSort()
        page = page or PageRequest()

        where, params = _filter_clause(filters)
        direction = "DESC" if sort.direction == SortDirection.DESC else "ASC"
        order_by = f"{_SORT_COLUMNS[sort.field]} {direction}, digest ASC"

        try:
            async with self._session_factory() as session:
                count_result = await session.execute(
                    text(f"SELECT COUNT(*) FROM documents {where}"),
                    params,
                )
                total = count_result.scalar() or 0

                rows_result = await session.execute(
                    text(f"""
                        SELECT {_COLUMNS}
                        FROM documents
                        {where}
                        ORDER BY {order_by}
                        LIMIT :limit OFFSET :offset
                    """),
                    {**params, "limit": page.limit, "offset": page.offset},
                )
                records = tuple(_row_to_record(row) for row in rows_result.mappings())
        except SQLAlchemyError as exc:
            raise DocumentIndexError(f"Failed to list documents: {exc}") from exc

        return DocumentPage(records=records, total=total, page=page)

    async def increment_verification(
        self,
        digest: DocumentDigest,
        verified_at: datetime,
    ) -> LocalDocumentRecord:
        try:
            async with self._session_factory() as session, session.begin():
                result = await session.execute(
                    text(f"""
                        UPDATE documents
                        SET verification_count = verification_count + 1,
                            verified = TRUE,
                            last_verified_at = :verified_at
                        WHERE digest = :digest
                        RETURNING {_COLUMNS}
                    """),
                    {"digest": digest.hex, "verified_at": verified_at},
                )
                row = result.mappings().first()
        except SQLAlchemyError as exc:
            logger.error(
                "document_index_increment_failed",
                digest=digest.hex,
                error=str(exc),
            )
            raise DocumentIndexError(
                f"Failed to record verification: {exc}", digest=digest.hex
            ) from exc

        if row is None:
            raise DocumentRecordNotFoundError(digest.hex)
        return _row_to_record(row)

    async def aggregate_statistics(self) -> IndexStatistics:
        try:
            async with self._session_factory() as session:
                totals = (
                    await session.execute(
                        text("""
                            SELECT
                                COUNT(*) AS total_count,
                                COUNT(*) FILTER (WHERE verified) AS verified_count,
                                COALESCE(SUM(verification_count), 0) AS total_verifications
                            FROM documents
                        """)
                    )
                ).mappings().one()

                by_category = await self._group_counts(session, "category")
                by_status = await self._group_counts(session, "status")
                by_network = await self._group_counts(session, "network")

                recent_result = await session.execute(
                    text("""
                        SELECT digest, file_name, submitted_by, created_at, verified
                        FROM documents
                        ORDER BY created_at DESC, digest ASC
                        LIMIT :limit
                    """),
                    {"limit": RECENT_DOCUMENTS_LIMIT},
                )
                recent = tuple(
                    RecentDocument(
                        digest=row["digest"],
                        file_name=row["file_name"],
                        submitted_by=row["submitted_by"],
                        created_at=row["created_at"],
                        verified=row["verified"],
                    )
                    for row in recent_result.mappings()
                )
        except SQLAlchemyError as exc:
            raise DocumentIndexError(f"Failed to aggregate statistics: {exc}") from exc

        return IndexStatistics(
            total_count=totals["total_count"],
            verified_count=totals["verified_count"],
            total_verifications=int(totals["total_verifications"]),
            by_category=by_category,
            by_status=by_status,
            by_network=by_network,
            recent=recent,
        )

    @staticmethod
    async def _select_one(
        session: AsyncSession, digest_hex: str
    ) -> LocalDocumentRecord | None:
        result = await session.execute(
            text(f"SELECT {_COLUMNS} FROM documents WHERE digest = :digest"),
            {"digest": digest_hex},
        )
        row = result.mappings().first()
        return _row_to_record(row) if row is not None else None

    @staticmethod
    async def _group_counts(
        session: AsyncSession, column: str
    ) -> tuple[GroupCount, ...]:
        # column is one of the fixed names passed by aggregate_statistics
        result = await session.execute(
            text(f"""
                SELECT {column} AS key, COUNT(*) AS count
                FROM documents
                GROUP BY {column}
                ORDER BY COUNT(*) DESC, {column} ASC
            """)
        )
        return tuple(
            GroupCount(key=row["key"], count=row["count"]) for row in result.mappings()
        )

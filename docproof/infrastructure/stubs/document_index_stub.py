"""In-memory stub for DocumentIndexProtocol.

This stub provides an in-memory implementation for testing.
It simulates the database behavior including:
- Unique digest (conflict key, never overwritten)
- Unique registration transaction reference
- Atomic verification counter increment
- Filtered, sorted, paginated listing
- Aggregate statistics computed on every call

Fault injection:
- fail_next_put(): the next put() raises DocumentIndexError, simulating a
  crash between ledger confirmation and local persistence
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from docproof.application.ports.document_index import (
    RECENT_DOCUMENTS_LIMIT,
    DocumentFilter,
    DocumentIndexProtocol,
    DocumentPage,
    DocumentSort,
    IndexStatistics,
    PageRequest,
    RecentDocument,
    SortDirection,
    SortField,
    group_counts,
)
from docproof.domain.errors import (
    DocumentIndexError,
    DocumentRecordNotFoundError,
    DuplicateDigestError,
    DuplicateTransactionReferenceError,
)

if TYPE_CHECKING:
    from docproof.domain.models import LocalDocumentRecord
    from docproof.domain.value_objects import DocumentDigest


def _sort_key(record: LocalDocumentRecord, sort_field: SortField) -> object:
    if sort_field == SortField.SIZE:
        return record.size
    if sort_field == SortField.VERIFICATION_COUNT:
        return record.verification_count
    if sort_field == SortField.FILE_NAME:
        return record.file_name.lower()
    return record.created_at


class DocumentIndexStub(DocumentIndexProtocol):
    """In-memory implementation of DocumentIndexProtocol.

    Mutations complete without awaiting, so each one is atomic with respect
    to other coroutines on the same event loop.
    """

    def __init__(self) -> None:
        """Initialize empty stub."""
        # Key: digest hex, Value: record
        self._records: dict[str, LocalDocumentRecord] = {}
        # Key: registration tx reference, Value: digest hex
        self._tx_references: dict[str, str] = {}
        self._fail_next_put: DocumentIndexError | None = None

    def fail_next_put(self, error: DocumentIndexError | None = None) -> None:
        """Make the next put() raise instead of storing the record."""
        self._fail_next_put = error or DocumentIndexError("Simulated index failure")

    def clear(self) -> None:
        """Clear all stored data (for test cleanup)."""
        self._records.clear()
        self._tx_references.clear()
        self._fail_next_put = None

    def __len__(self) -> int:
        return len(self._records)

    async def put(self, record: LocalDocumentRecord) -> LocalDocumentRecord:
        if self._fail_next_put is not None:
            error, self._fail_next_put = self._fail_next_put, None
            raise error

        key = record.digest.hex
        existing = self._records.get(key)
        if existing is not None:
            raise DuplicateDigestError(key, existing=existing)
        if record.registration_tx_reference in self._tx_references:
            raise DuplicateTransactionReferenceError(
                record.registration_tx_reference, digest=key
            )

        self._records[key] = record
        self._tx_references[record.registration_tx_reference] = key
        return record

    async def get_by_digest(self, digest: DocumentDigest) -> LocalDocumentRecord | None:
        return self._records.get(digest.hex)

    async def get_by_ledger_identity(self, identity: str) -> LocalDocumentRecord | None:
        identity = identity.lower()
        for record in self._records.values():
            if record.ledger_identity.lower() == identity:
                return record
        return None

    async def list_documents(
        self,
        filters: DocumentFilter | None = None,
        sort: DocumentSort | None = None,
        page: PageRequest | None = None,
    ) -> DocumentPage:
        filters = filters or DocumentFilter()
        sort = sort or DocumentSort()
        page = page or PageRequest()

        matching = [record for record in self._records.values() if filters.matches(record)]
        # Secondary key keeps the order total and repeatable
        matching.sort(key=lambda record: record.digest.hex)
        matching.sort(
            key=lambda record: _sort_key(record, sort.field),
            reverse=sort.direction == SortDirection.DESC,
        )
        window = matching[page.offset : page.offset + page.limit]
        return DocumentPage(records=tuple(window), total=len(matching), page=page)

    async def increment_verification(
        self,
        digest: DocumentDigest,
        verified_at: datetime,
    ) -> LocalDocumentRecord:
        record = self._records.get(digest.hex)
        if record is None:
            raise DocumentRecordNotFoundError(digest.hex)
        updated = record.with_verification(verified_at)
        self._records[digest.hex] = updated
        return updated

    async def aggregate_statistics(self) -> IndexStatistics:
        records = list(self._records.values())
        recent = sorted(records, key=lambda record: record.created_at, reverse=True)
        return IndexStatistics(
            total_count=len(records),
            verified_count=sum(1 for record in records if record.verified),
            total_verifications=sum(record.verification_count for record in records),
            by_category=group_counts(
                [record.descriptive_metadata.category.value for record in records]
            ),
            by_status=group_counts([record.status.value for record in records]),
            by_network=group_counts([record.network for record in records]),
            recent=tuple(
                RecentDocument(
                    digest=record.digest.hex,
                    file_name=record.file_name,
                    submitted_by=record.submitted_by,
                    created_at=record.created_at,
                    verified=record.verified,
                )
                for record in recent[:RECENT_DOCUMENTS_LIMIT]
            ),
        )

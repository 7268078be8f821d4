"""Local document index port.

Defines the contract for the durable, mutable, queryable mirror of ledger
registrations. Implementations:
- DocumentIndexStub (in-memory, docproof.infrastructure.stubs)
- PostgresDocumentIndex (docproof.infrastructure.adapters.persistence)

Rules every implementation honors:
- The digest is the conflict key: put() never overwrites, it raises
  DuplicateDigestError
- put() and increment_verification() are atomic per digest
- aggregate_statistics() is computed fresh on every call
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

from docproof.domain.models import DocumentCategory

if TYPE_CHECKING:
    from docproof.domain.models import LocalDocumentRecord
    from docproof.domain.value_objects import DocumentDigest

MAX_PAGE_SIZE = 100
RECENT_DOCUMENTS_LIMIT = 10


class SortField(StrEnum):
    """Fields a listing can be ordered by."""

    CREATED_AT = "created_at"
    SIZE = "size"
    VERIFICATION_COUNT = "verification_count"
    FILE_NAME = "file_name"


class SortDirection(StrEnum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class DocumentFilter:
    """Filters for listing documents; all given filters must match.

    Attributes:
        category: Only records in this category.
        verified: Only records with this verified flag.
        submitted_by_pattern: Case-insensitive substring of submitted_by.
    """

    category: DocumentCategory | None = None
    verified: bool | None = None
    submitted_by_pattern: str | None = None

    def matches(self, record: LocalDocumentRecord) -> bool:
        if (
            self.category is not None
            and record.descriptive_metadata.category != self.category
        ):
            return False
        if self.verified is not None and record.verified != self.verified:
            return False
        if self.submitted_by_pattern:
            return self.submitted_by_pattern.lower() in record.submitted_by.lower()
        return True


@dataclass(frozen=True)
class DocumentSort:
    field: SortField = SortField.CREATED_AT
    direction: SortDirection = SortDirection.DESC


@dataclass(frozen=True)
class PageRequest:
    """Offset/limit window over a listing.

    Attributes:
        offset: Number of records to skip (>= 0).
        limit: Maximum records to return (1..100).
    """

    offset: int = 0
    limit: int = 10

    def __post_init__(self) -> None:
        if self.offset < 0:
            raise ValueError(f"offset must be non-negative, got {self.offset}")
        if not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValueError(
                f"limit must be between 1 and {MAX_PAGE_SIZE}, got {self.limit}"
            )

    @classmethod
    def for_page(cls, page: int, per_page: int = 10) -> PageRequest:
        """Build a window from a 1-based page number."""
        if page < 1:
            raise ValueError(f"page must be a positive integer, got {page}")
        return cls(offset=(page - 1) * per_page, limit=per_page)


@dataclass(frozen=True)
class DocumentPage:
    """One page of a listing plus the total number of matches."""

    records: tuple[LocalDocumentRecord, ...]
    total: int
    page: PageRequest

    @property
    def current_page(self) -> int:
        return self.page.offset // self.page.limit + 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page.limit)

    @property
    def has_next(self) -> bool:
        return self.page.offset + len(self.records) < self.total

    @property
    def has_previous(self) -> bool:
        return self.page.offset > 0

    def to_dict(self) -> dict[str, object]:
        return {
            "documents": [record.to_dict() for record in self.records],
            "pagination": {
                "current_page": self.current_page,
                "total_pages": self.total_pages,
                "total_documents": self.total,
                "documents_per_page": self.page.limit,
                "has_next_page": self.has_next,
                "has_prev_page": self.has_previous,
            },
        }


@dataclass(frozen=True)
class GroupCount:
    key: str
    count: int


@dataclass(frozen=True)
class RecentDocument:
    """Summary row of a recently indexed document."""

    digest: str
    file_name: str
    submitted_by: str
    created_at: datetime
    verified: bool


@dataclass(frozen=True)
class IndexStatistics:
    """Aggregate view over the local index.

    Group counts are ordered by count descending, then key.
    """

    total_count: int
    verified_count: int
    total_verifications: int
    by_category: tuple[GroupCount, ...] = field(default_factory=tuple)
    by_status: tuple[GroupCount, ...] = field(default_factory=tuple)
    by_network: tuple[GroupCount, ...] = field(default_factory=tuple)
    recent: tuple[RecentDocument, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, object]:
        def groups(items: tuple[GroupCount, ...]) -> list[dict[str, object]]:
            return [{"key": item.key, "count": item.count} for item in items]

        return {
            "total_documents": self.total_count,
            "verified_documents": self.verified_count,
            "total_verifications": self.total_verifications,
            "by_category": groups(self.by_category),
            "by_status": groups(self.by_status),
            "by_network": groups(self.by_network),
            "recent_documents": [
                {
                    "digest": item.digest,
                    "file_name": item.file_name,
                    "submitted_by": item.submitted_by,
                    "created_at": item.created_at.isoformat(),
                    "verified": item.verified,
                }
                for item in self.recent
            ],
        }


def group_counts(keys: list[str]) -> tuple[GroupCount, ...]:
    """Count occurrences of keys, ordered by count desc then key."""
    counts: dict[str, int] = {}
    for key in keys:
        counts[key] = counts.get(key, 0) + 1
    return tuple(
        GroupCount(key=key, count=count)
        for key, count in sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    )


class DocumentIndexProtocol(ABC):
    """Abstract protocol for the local document index."""

    @abstractmethod
    async def put(self, record: LocalDocumentRecord) -> LocalDocumentRecord:
        """Insert a new record.

        Returns:
            The stored record.

        Raises:
            DuplicateDigestError: A record for the digest already exists.
            DuplicateTransactionReferenceError: The registration transaction
                is already bound to another record.
            DocumentIndexError: For storage-related failures.
        """
        ...

    @abstractmethod
    async def get_by_digest(self, digest: DocumentDigest) -> LocalDocumentRecord | None:
        ...

    @abstractmethod
    async def get_by_ledger_identity(self, identity: str) -> LocalDocumentRecord | None:
        ...

    @abstractmethod
    async def list_documents(
        self,
        filters: DocumentFilter | None = None,
        sort: DocumentSort | None = None,
        page: PageRequest | None = None,
    ) -> DocumentPage:
        """Filtered, sorted, paginated listing with the total match count."""
        ...

    @abstractmethod
    async def increment_verification(
        self,
        digest: DocumentDigest,
        verified_at: datetime,
    ) -> LocalDocumentRecord:
        """Atomically count one successful verification.

        Increments verification_count, sets verified and last_verified_at.

        Raises:
            DocumentRecordNotFoundError: No record exists for the digest.
        """
        ...

    @abstractmethod
    async def aggregate_statistics(self) -> IndexStatistics:
        ...

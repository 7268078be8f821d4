"""Local document index errors.

Raised by DocumentIndexProtocol implementations. The index never silently
overwrites a record, so conflicts always surface as DuplicateDigestError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docproof.domain.exceptions import DocProofError

if TYPE_CHECKING:
    from docproof.domain.models.document_record import LocalDocumentRecord


class DocumentIndexError(DocProofError):
    """Base exception for local index operations.

    Covers connection failures, query errors and constraint violations.
    """

    layer = "local_index"


class DuplicateDigestError(DocumentIndexError):
    """Raised when a record for the digest already exists locally.

    Attributes:
        existing: The record already stored, when the store could load it.
    """

    def __init__(
        self,
        digest: str,
        existing: LocalDocumentRecord | None = None,
    ) -> None:
        self.existing = existing
        super().__init__(
            f"A local record for digest {digest} already exists",
            digest=digest,
        )


class DuplicateTransactionReferenceError(DocumentIndexError):
    """Raised when a registration transaction is already bound to a record.

    Attributes:
        tx_reference: The conflicting transaction reference.
    """

    def __init__(self, tx_reference: str, digest: str | None = None) -> None:
        self.tx_reference = tx_reference
        super().__init__(
            f"Registration transaction {tx_reference} is already indexed",
            digest=digest,
        )


class DocumentRecordNotFoundError(DocumentIndexError):
    """Raised when a mutation targets a digest with no local record."""

    def __init__(self, digest: str) -> None:
        super().__init__(f"No local record for digest {digest}", digest=digest)

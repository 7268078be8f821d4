"""Local document record domain models.

This module defines the local index's mirror of a ledger registration:
- DocumentCategory: the fixed set of document categories
- RecordStatus: lifecycle status of a local record
- DescriptiveMetadata: bounded, tagged description of a document
- LocalDocumentRecord: one indexed registration

Rules:
1. One record per digest, created only after the ledger confirmed it
2. verification_count never decreases
3. Records are values: mutations return a new record
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import StrEnum

from docproof.domain.errors.validation import InvalidInputError
from docproof.domain.value_objects import DocumentDigest

MAX_TAGS = 10
MAX_TAG_LENGTH = 50
MAX_DESCRIPTION_LENGTH = 1000
DEFAULT_SCHEMA_VERSION = "1.0"


class DocumentCategory(StrEnum):
    """Document categories accepted by the registry."""

    LEGAL = "legal"
    ACADEMIC = "academic"
    MEDICAL = "medical"
    PROPERTY = "property"
    INSURANCE = "insurance"
    EMPLOYMENT = "employment"
    TAX = "tax"
    IDENTITY = "identity"
    VEHICLE = "vehicle"
    EDUCATION = "education"
    OTHER = "other"


class RecordStatus(StrEnum):
    """Lifecycle status of a local record."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass(frozen=True)
class DescriptiveMetadata:
    """Caller-supplied description of a document.

    A fixed structure rather than an open dictionary: the tag list is
    bounded and each tag is bounded.

    Attributes:
        description: Free text (at most 1000 characters).
        category: One of DocumentCategory.
        tags: Up to 10 tags of at most 50 characters each.
        schema_version: Version of this metadata layout.
    """

    description: str = ""
    category: DocumentCategory = DocumentCategory.OTHER
    tags: tuple[str, ...] = field(default_factory=tuple)
    schema_version: str = DEFAULT_SCHEMA_VERSION

    def __post_init__(self) -> None:
        """Validate bounds.

        Raises:
            InvalidInputError: If description or tags exceed their bounds.
        """
        if len(self.description) > MAX_DESCRIPTION_LENGTH:
            raise InvalidInputError(
                "description",
                f"cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
            )
        if len(self.tags) > MAX_TAGS:
            raise InvalidInputError("tags", f"cannot have more than {MAX_TAGS} tags")
        for tag in self.tags:
            if len(tag) > MAX_TAG_LENGTH:
                raise InvalidInputError(
                    "tags", f"each tag cannot exceed {MAX_TAG_LENGTH} characters"
                )

    @staticmethod
    def parse_tags(value: str | Iterable[str] | None) -> tuple[str, ...]:
        """Normalize tags given as a list or a comma-separated string.

        Example:
            >>> DescriptiveMetadata.parse_tags("deed, 2024 ,")
            ('deed', '2024')
        """
        if value is None:
            return ()
        items = value.split(",") if isinstance(value, str) else value
        return tuple(tag.strip() for tag in items if tag and tag.strip())

    def to_dict(self) -> dict[str, object]:
        return {
            "description": self.description,
            "category": self.category.value,
            "tags": list(self.tags),
            "schema_version": self.schema_version,
        }


@dataclass(frozen=True)
class LocalDocumentRecord:
    """A registration as mirrored in the local index.

    Attributes:
        digest: Content digest (unique across the index).
        ledger_identity: The ledger's record identity for the digest.
        file_name: Original file name.
        size: Content size in bytes.
        content_type: MIME type of the content.
        submitted_by: Submitter label.
        descriptive_metadata: Caller-supplied description.
        registration_tx_reference: Ledger transaction that registered it (unique).
        registration_sequence_number: Block number of that transaction.
        network: Ledger network (chain id) the record lives on.
        created_at: When the local record was created (UTC).
        verified: Whether at least one verification succeeded.
        verification_count: Number of successful verifications.
        last_verified_at: Time of the last successful verification.
        status: Lifecycle status.
    """

    digest: DocumentDigest
    ledger_identity: str
    file_name: str
    size: int
    content_type: str
    submitted_by: str
    descriptive_metadata: DescriptiveMetadata
    registration_tx_reference: str
    registration_sequence_number: int
    network: str
    created_at: datetime
    verified: bool = False
    verification_count: int = 0
    last_verified_at: datetime | None = None
    status: RecordStatus = RecordStatus.CONFIRMED

    def __post_init__(self) -> None:
        """Validate record fields.

        Raises:
            ValueError: If any field validation fails.
        """
        if self.created_at.tzinfo is None:
            raise ValueError("created_at must be timezone-aware (UTC)")
        if self.size < 0:
            raise ValueError(f"size cannot be negative, got {self.size}")
        if self.verification_count < 0:
            raise ValueError(
                f"verification_count cannot be negative, got {self.verification_count}"
            )
        if self.registration_sequence_number < 0:
            raise ValueError(
                "registration_sequence_number cannot be negative, "
                f"got {self.registration_sequence_number}"
            )

    def with_verification(self, verified_at: datetime) -> LocalDocumentRecord:
        """Return the record after one more successful verification."""
        return replace(
            self,
            verified=True,
            verification_count=self.verification_count + 1,
            last_verified_at=verified_at,
        )

    def to_dict(self) -> dict[str, object]:
        """Serialize to a JSON-safe dictionary.

        WARNING: Never use asdict() - it breaks digest/datetime serialization.
        """
        return {
            "digest": self.digest.hex,
            "ledger_identity": self.ledger_identity,
            "file_name": self.file_name,
            "size": self.size,
            "content_type": self.content_type,
            "submitted_by": self.submitted_by,
            "metadata": self.descriptive_metadata.to_dict(),
            "registration_tx_reference": self.registration_tx_reference,
            "registration_sequence_number": self.registration_sequence_number,
            "network": self.network,
            "created_at": self.created_at.isoformat(),
            "verified": self.verified,
            "verification_count": self.verification_count,
            "last_verified_at": (
                self.last_verified_at.isoformat() if self.last_verified_at else None
            ),
            "status": self.status.value,
        }

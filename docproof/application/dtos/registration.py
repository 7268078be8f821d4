"""Registration request and result DTOs.

A registration attempt ends in exactly one RegistrationOutcome. Every
outcome, including failures, is reported as a RegistrationResult so that
callers can tell which layer decided it and whether a retry is safe.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from docproof.domain.models import (
    ANONYMOUS_SUBMITTER,
    DescriptiveMetadata,
    DocumentCategory,
)

if TYPE_CHECKING:
    from docproof.application.ports.ledger_registry import RegistrationReceipt
    from docproof.domain.exceptions import DocProofError
    from docproof.domain.models import LedgerRecord, LocalDocumentRecord
    from docproof.domain.value_objects import DocumentDigest

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class RegistrationOutcome(StrEnum):
    """Terminal states of a registration attempt."""

    REGISTERED = "registered"
    # Retry adopted a registration whose confirmation was missed earlier
    RECOVERED = "recovered"
    REJECTED_DUPLICATE = "rejected_duplicate"
    LEDGER_REJECTED = "ledger_rejected"
    LEDGER_UNAVAILABLE = "ledger_unavailable"
    CONFIRMATION_TIMEOUT = "confirmation_timeout"


class DuplicateSource(StrEnum):
    """Which store reported the duplicate."""

    LOCAL_INDEX = "local_index"
    LEDGER = "ledger"


@dataclass(frozen=True)
class RegistrationRequest:
    """A document submitted for registration.

    Field bounds are enforced by the inbound validation layer; the
    descriptive metadata structure re-checks the tag and description bounds.

    Attributes:
        content: Document bytes.
        file_name: Original file name.
        content_type: MIME type of the content.
        submitted_by: Submitter label.
        description: Free-text description.
        category: Document category.
        tags: Descriptive tags.
    """

    content: bytes
    file_name: str
    content_type: str = DEFAULT_CONTENT_TYPE
    submitted_by: str = ANONYMOUS_SUBMITTER
    description: str = ""
    category: DocumentCategory = DocumentCategory.OTHER
    tags: tuple[str, ...] = field(default_factory=tuple)

    @property
    def size(self) -> int:
        return len(self.content)

    def descriptive_metadata(self) -> DescriptiveMetadata:
        return DescriptiveMetadata(
            description=self.description,
            category=self.category,
            tags=self.tags,
        )


@dataclass(frozen=True)
class RegistrationResult:
    """Result of one registration attempt.

    Attributes:
        outcome: Terminal state reached.
        digest: Digest of the submitted content.
        record: The local record (new on success, existing on duplicate).
        receipt: Ledger confirmation, when one was observed.
        ledger_record: Ledger-side record for ledger duplicates.
        duplicate_source: Which store reported a duplicate.
        error: The ledger error behind a failed outcome.
    """

    outcome: RegistrationOutcome
    digest: DocumentDigest
    record: LocalDocumentRecord | None = None
    receipt: RegistrationReceipt | None = None
    ledger_record: LedgerRecord | None = None
    duplicate_source: DuplicateSource | None = None
    error: DocProofError | None = None

    @property
    def succeeded(self) -> bool:
        return self.outcome in (
            RegistrationOutcome.REGISTERED,
            RegistrationOutcome.RECOVERED,
        )

    @property
    def is_duplicate(self) -> bool:
        return self.outcome == RegistrationOutcome.REJECTED_DUPLICATE

    @property
    def retry_safe(self) -> bool:
        return self.error.retry_safe if self.error is not None else False

    @property
    def effect_unknown(self) -> bool:
        """True when the ledger may hold the registration despite the failure."""
        return self.outcome in (
            RegistrationOutcome.LEDGER_UNAVAILABLE,
            RegistrationOutcome.CONFIRMATION_TIMEOUT,
        )

    def to_dict(self) -> dict[str, object]:
        """Outbound shape of the registration result."""
        data: dict[str, object] = {
            "outcome": self.outcome.value,
            "digest": self.digest.hex,
            "ledger_identity": self.digest.ledger_identity,
            "retry_safe": self.retry_safe,
            "effect_unknown": self.effect_unknown,
        }
        if self.receipt is not None:
            data["registration_tx_reference"] = self.receipt.tx_reference
            data["sequence_number"] = self.receipt.sequence_number
            data["network"] = self.receipt.network
        if self.record is not None:
            data["descriptive_metadata"] = self.record.descriptive_metadata.to_dict()
            data["record"] = self.record.to_dict()
        if self.ledger_record is not None:
            data["ledger_record"] = self.ledger_record.to_dict()
        if self.duplicate_source is not None:
            data["duplicate_source"] = self.duplicate_source.value
        if self.error is not None:
            data["error"] = self.error.to_dict()
        return data

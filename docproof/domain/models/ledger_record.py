"""Ledger record domain model.

LedgerRecord is the ledger's authoritative record for one digest. The ledger
creates it exactly once, never mutates it and never deletes it, so
exists=False strictly means "never registered".
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from docproof.domain.value_objects import DocumentDigest


@dataclass(frozen=True)
class LedgerRecord:
    """A document registration as observed on the ledger.

    Attributes:
        digest: Content digest (the ledger's primary key).
        owner: Account address of the submitting principal.
        registered_at: Ledger-assigned block timestamp (UTC).
        metadata: Opaque metadata string stored with the record (bounded).
        exists: Whether the ledger holds a record for the digest.
    """

    digest: DocumentDigest
    owner: str
    registered_at: datetime
    metadata: str
    exists: bool = True

    def __post_init__(self) -> None:
        if self.registered_at.tzinfo is None:
            raise ValueError("registered_at must be timezone-aware (UTC)")

    @property
    def ledger_identity(self) -> str:
        return self.digest.ledger_identity

    def to_dict(self) -> dict[str, object]:
        return {
            "digest": self.digest.hex,
            "ledger_identity": self.ledger_identity,
            "owner": self.owner,
            "registered_at": self.registered_at.isoformat(),
            "metadata": self.metadata,
            "exists": self.exists,
        }

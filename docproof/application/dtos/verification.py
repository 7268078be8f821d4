"""Verification result DTO."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docproof.application.ports.ledger_registry import VerificationObservation
    from docproof.domain.models import LocalDocumentRecord
    from docproof.domain.value_objects import DocumentDigest


class VerificationStatus(StrEnum):
    """How a verification resolved."""

    VERIFIED = "verified"
    NOT_REGISTERED = "not_registered"
    # Local record exists but the ledger did not confirm it
    DIVERGED = "diverged"


@dataclass(frozen=True)
class VerificationResult:
    """Result of verifying content or an asserted digest.

    Attributes:
        status: How the verification resolved.
        digest: The digest that was checked.
        local_record: Local record after the verification, if any.
        ledger_observation: What the ledger reported, if it was asked.
        healed: Whether the local record was materialized from the ledger
            during this verification.
    """

    status: VerificationStatus
    digest: DocumentDigest
    local_record: LocalDocumentRecord | None = None
    ledger_observation: VerificationObservation | None = None
    healed: bool = False

    @property
    def verified(self) -> bool:
        return self.status == VerificationStatus.VERIFIED

    @property
    def divergence(self) -> bool:
        return self.status == VerificationStatus.DIVERGED

    def to_dict(self) -> dict[str, object]:
        """Outbound shape of the verification result."""
        return {
            "verified": self.verified,
            "status": self.status.value,
            "digest": self.digest.hex,
            "local_record": self.local_record.to_dict() if self.local_record else None,
            "ledger_observation": (
                self.ledger_observation.to_dict() if self.ledger_observation else None
            ),
            "divergence": self.divergence,
            "healed": self.healed,
        }

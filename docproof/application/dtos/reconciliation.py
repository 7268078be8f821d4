"""Reconciliation sweep report DTO."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docproof.domain.value_objects import DocumentDigest


@dataclass(frozen=True)
class ReconciliationReport:
    """Differences found between the ledger and the local index.

    Attributes:
        ledger_scanned: Ledger digests examined.
        local_scanned: Local records examined.
        orphans: Digests on the ledger with no local record.
        repaired: Orphans materialized into the local index.
        unrepaired: Orphans that could not be materialized.
        local_only: Local records the ledger does not know (divergence).
    """

    ledger_scanned: int = 0
    local_scanned: int = 0
    orphans: tuple[DocumentDigest, ...] = field(default_factory=tuple)
    repaired: tuple[DocumentDigest, ...] = field(default_factory=tuple)
    unrepaired: tuple[DocumentDigest, ...] = field(default_factory=tuple)
    local_only: tuple[DocumentDigest, ...] = field(default_factory=tuple)

    @property
    def is_consistent(self) -> bool:
        return not self.local_only and len(self.orphans) == len(self.repaired)

    def to_dict(self) -> dict[str, object]:
        return {
            "ledger_scanned": self.ledger_scanned,
            "local_scanned": self.local_scanned,
            "orphans": [digest.hex for digest in self.orphans],
            "repaired": [digest.hex for digest in self.repaired],
            "unrepaired": [digest.hex for digest in self.unrepaired],
            "local_only": [digest.hex for digest in self.local_only],
            "is_consistent": self.is_consistent,
        }

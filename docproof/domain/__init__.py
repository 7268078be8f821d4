"""
Domain layer - Pure business logic for DocProof.

This layer contains:
- Value objects (DocumentDigest)
- Domain models (LedgerRecord, LocalDocumentRecord, ledger metadata)
- Domain exceptions

CRITICAL: This layer must NOT import from application, infrastructure, or api.
Only stdlib and typing imports are allowed.
"""

from docproof.domain.exceptions import DocProofError
from docproof.domain.value_objects import DocumentDigest

__all__: list[str] = [
    "DocProofError",
    "DocumentDigest",
]

"""Infrastructure stubs for development and testing.

Available stubs:
- InMemoryDocumentLedger: Automining document-registry ledger with
  per-account views and fault injection (unavailable, withheld confirmations)
- DocumentIndexStub: In-memory local index with the same uniqueness and
  atomicity rules as the PostgreSQL index

WARNING: These stubs are NOT for production use.
Production implementations are in docproof/infrastructure/adapters/.
"""

from docproof.infrastructure.stubs.document_index_stub import DocumentIndexStub
from docproof.infrastructure.stubs.document_ledger_stub import (
    DEFAULT_ACCOUNT,
    DEFAULT_CHAIN_ID,
    InMemoryDocumentLedger,
)

__all__: list[str] = [
    "DEFAULT_ACCOUNT",
    "DEFAULT_CHAIN_ID",
    "DocumentIndexStub",
    "InMemoryDocumentLedger",
]

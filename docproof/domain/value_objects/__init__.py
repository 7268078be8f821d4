"""Value objects for the DocProof domain."""

from docproof.domain.value_objects.document_digest import (
    DIGEST_HEX_LENGTH,
    DIGEST_SIZE_BYTES,
    LEDGER_IDENTITY_PREFIX,
    DocumentDigest,
)

__all__: list[str] = [
    "DIGEST_HEX_LENGTH",
    "DIGEST_SIZE_BYTES",
    "LEDGER_IDENTITY_PREFIX",
    "DocumentDigest",
]

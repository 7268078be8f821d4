"""Domain errors for DocProof.

Grouped by the layer that raises them:
- validation: malformed input rejected before any store access
- ledger: gateway-level and translated ledger failures
- document: local index failures
"""

from docproof.domain.errors.document import (
    DocumentIndexError,
    DocumentRecordNotFoundError,
    DuplicateDigestError,
    DuplicateTransactionReferenceError,
)
from docproof.domain.errors.ledger import (
    REVERT_DOCUMENT_ALREADY_EXISTS,
    REVERT_DOCUMENT_NOT_FOUND,
    REVERT_INVALID_DOCUMENT_HASH,
    REVERT_METADATA_TOO_LONG,
    ConfirmationTimeoutError,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    InvalidDocumentHashError,
    LedgerError,
    LedgerRejectedError,
    LedgerRevertError,
    LedgerTransportError,
    LedgerUnavailableError,
    MetadataTooLongError,
    RetryableLedgerError,
)
from docproof.domain.errors.validation import (
    InvalidDigestFormatError,
    InvalidInputError,
)

__all__: list[str] = [
    "REVERT_DOCUMENT_ALREADY_EXISTS",
    "REVERT_DOCUMENT_NOT_FOUND",
    "REVERT_INVALID_DOCUMENT_HASH",
    "REVERT_METADATA_TOO_LONG",
    "ConfirmationTimeoutError",
    "DocumentAlreadyExistsError",
    "DocumentIndexError",
    "DocumentNotFoundError",
    "DocumentRecordNotFoundError",
    "DuplicateDigestError",
    "DuplicateTransactionReferenceError",
    "InvalidDigestFormatError",
    "InvalidDocumentHashError",
    "InvalidInputError",
    "LedgerError",
    "LedgerRejectedError",
    "LedgerRevertError",
    "LedgerTransportError",
    "LedgerUnavailableError",
    "MetadataTooLongError",
    "RetryableLedgerError",
]

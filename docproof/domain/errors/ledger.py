"""Ledger errors for DocProof.

Two families live here:

Gateway-level errors (LedgerRevertError, LedgerTransportError) are raised by
LedgerGatewayProtocol implementations and describe what the ledger node said.
They never leave the registry client.

Client-level errors are the translated taxonomy the coordinators see:
- LedgerRejectedError: semantic rejection, not retryable without new input
- DocumentAlreadyExistsError: the ledger already holds a record for the digest
- DocumentNotFoundError: lookup of an unregistered digest
- LedgerUnavailableError / ConfirmationTimeoutError: the ledger-side effect
  is unknown; the caller may retry after re-checking existence
"""

from __future__ import annotations

from docproof.domain.exceptions import DocProofError

# Symbolic revert reasons emitted by the document-registry contract
REVERT_INVALID_DOCUMENT_HASH = "InvalidDocumentHash"
REVERT_DOCUMENT_ALREADY_EXISTS = "DocumentAlreadyExists"
REVERT_METADATA_TOO_LONG = "MetadataTooLong"
REVERT_DOCUMENT_NOT_FOUND = "DocumentNotFound"


class LedgerRevertError(Exception):
    """Raised by a ledger gateway when the contract reverts a call.

    Attributes:
        reason: Symbolic revert reason (e.g. "DocumentAlreadyExists").
        tx_reference: Hash of the reverted transaction, if one was mined.
    """

    def __init__(self, reason: str, tx_reference: str | None = None) -> None:
        self.reason = reason
        self.tx_reference = tx_reference
        super().__init__(f"execution reverted: {reason}")


class LedgerTransportError(Exception):
    """Raised by a ledger gateway when the node cannot be reached.

    Covers network partitions, unavailable nodes, quota exhaustion and
    rejected submissions that never reached the contract.
    """


class LedgerError(DocProofError):
    """Base exception for translated ledger failures."""

    layer = "ledger"


class LedgerRejectedError(LedgerError):
    """The ledger rejected the operation for a semantic reason.

    Not retryable without changing the input.

    Attributes:
        reason: Symbolic revert reason reported by the ledger.
    """

    def __init__(self, reason: str, digest: str | None = None) -> None:
        self.reason = reason
        super().__init__(f"Ledger rejected operation: {reason}", digest=digest)


class InvalidDocumentHashError(LedgerRejectedError):
    """The ledger refused the digest (the all-zero value)."""

    def __init__(self, digest: str | None = None) -> None:
        super().__init__(REVERT_INVALID_DOCUMENT_HASH, digest=digest)


class MetadataTooLongError(LedgerRejectedError):
    """The ledger refused metadata that exceeds its byte bound.

    Attributes:
        length: Byte length of the metadata that was submitted.
        limit: The ledger's bound.
    """

    def __init__(self, length: int, limit: int, digest: str | None = None) -> None:
        self.length = length
        self.limit = limit
        super().__init__(REVERT_METADATA_TOO_LONG, digest=digest)


class DocumentAlreadyExistsError(LedgerError):
    """The ledger already holds a record for this digest.

    Raised by the registry client; coordinators turn it into a structured
    duplicate result rather than a failure.
    """

    def __init__(self, digest: str) -> None:
        super().__init__(
            f"Document {digest} already exists on the ledger",
            digest=digest,
        )


class DocumentNotFoundError(LedgerError):
    """No ledger record exists for this digest.

    This is a normal condition in many cases, so callers should handle it
    gracefully.
    """

    def __init__(self, digest: str) -> None:
        super().__init__(f"Document {digest} not found on the ledger", digest=digest)


class RetryableLedgerError(LedgerError):
    """Base class for ledger failures whose ledger-side effect is unknown.

    The submission may have been applied even though no confirmation was
    observed. Callers must re-check existence before resubmitting.

    Attributes:
        effect_unknown: Always True for this family; kept explicit so it
            appears in serialized errors.
    """

    retry_safe = True
    effect_unknown = True

    def to_dict(self) -> dict[str, object]:
        data = super().to_dict()
        data["effect_unknown"] = self.effect_unknown
        return data


class LedgerUnavailableError(RetryableLedgerError):
    """The ledger node could not be reached or refused the submission."""

    def __init__(self, message: str, digest: str | None = None) -> None:
        super().__init__(f"Ledger unavailable: {message}", digest=digest)


class ConfirmationTimeoutError(RetryableLedgerError):
    """A submission was sent but its confirmation was not observed in time.

    Attributes:
        tx_reference: Hash of the submitted transaction.
        timeout_seconds: The confirmation wait that was exceeded.
    """

    def __init__(
        self,
        tx_reference: str,
        timeout_seconds: float,
        digest: str | None = None,
    ) -> None:
        self.tx_reference = tx_reference
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Transaction {tx_reference} not confirmed within {timeout_seconds}s",
            digest=digest,
        )

    def to_dict(self) -> dict[str, object]:
        data = super().to_dict()
        data["tx_reference"] = self.tx_reference
        return data

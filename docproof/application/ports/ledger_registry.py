"""Ledger registry port.

Typed access to the document registry on the ledger. This is the contract
the coordinators depend on; the infrastructure LedgerRegistryClient
implements it on top of a LedgerGatewayProtocol.

Error contract (docproof.domain.errors):
- InvalidDocumentHashError, MetadataTooLongError: semantic rejection
- DocumentAlreadyExistsError: conflict decided by the ledger
- DocumentNotFoundError: fetch() of an unregistered digest
- LedgerUnavailableError, ConfirmationTimeoutError: effect unknown, retryable
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from docproof.domain.models import LedgerRecord
    from docproof.domain.value_objects import DocumentDigest


@dataclass(frozen=True)
class RegistrationReceipt:
    """Confirmed registration of a digest on the ledger.

    Attributes:
        digest: The registered digest.
        ledger_identity: The ledger's record identity.
        tx_reference: Registering transaction hash.
        sequence_number: Block number of that transaction.
        network: Network (chain id) the registration lives on.
    """

    digest: DocumentDigest
    ledger_identity: str
    tx_reference: str
    sequence_number: int
    network: str

    def to_dict(self) -> dict[str, object]:
        return {
            "digest": self.digest.hex,
            "ledger_identity": self.ledger_identity,
            "tx_reference": self.tx_reference,
            "sequence_number": self.sequence_number,
            "network": self.network,
        }


@dataclass(frozen=True)
class VerificationObservation:
    """Outcome of a confirmed ledger verification call.

    Attributes:
        digest: The verified digest.
        existed_at_call_time: Whether the ledger held a record when the
            verification transaction executed.
        observed_record: The record read after confirmation, if it exists.
        tx_reference: Hash of the verification transaction.
    """

    digest: DocumentDigest
    existed_at_call_time: bool
    observed_record: LedgerRecord | None
    tx_reference: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "digest": self.digest.hex,
            "existed_at_call_time": self.existed_at_call_time,
            "observed_record": (
                self.observed_record.to_dict() if self.observed_record else None
            ),
            "tx_reference": self.tx_reference,
        }


@dataclass(frozen=True)
class RegistrationReference:
    """Where on the ledger a digest was registered."""

    tx_reference: str
    sequence_number: int


@dataclass(frozen=True)
class LedgerStats:
    """Snapshot of the registry on the ledger."""

    total_documents: int
    network: str
    latest_sequence_number: int
    account: str

    def to_dict(self) -> dict[str, object]:
        return {
            "total_documents": self.total_documents,
            "network": self.network,
            "latest_sequence_number": self.latest_sequence_number,
            "account": self.account,
        }


class LedgerRegistryProtocol(ABC):
    """Abstract interface for the document registry on the ledger.

    Lifecycle: construct, then initialize() (or use as an async context
    manager); close() releases the underlying connection. Operations
    initialize lazily when needed.
    """

    @property
    @abstractmethod
    def account(self) -> str:
        """Identity used as owner of registrations made through this client."""
        ...

    @abstractmethod
    async def initialize(self) -> str:
        """Connect and resolve the network.

        Returns:
            The network (chain id) as a string; repeated calls return the
            resolved value without contacting the ledger again.

        Raises:
            LedgerUnavailableError: If the ledger cannot be reached.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        ...

    @abstractmethod
    async def register(
        self, digest: DocumentDigest, metadata: str
    ) -> RegistrationReceipt:
        """Register a digest and wait for confirmation.

        Metadata longer than the ledger bound is truncated with an ellipsis
        before submission.

        Raises:
            InvalidDocumentHashError: digest is the all-zero value.
            DocumentAlreadyExistsError: a record already exists.
            MetadataTooLongError: the ledger still refused the metadata.
            LedgerUnavailableError: submission did not reach the ledger.
            ConfirmationTimeoutError: confirmation not observed in time.
        """
        ...

    @abstractmethod
    async def verify(self, digest: DocumentDigest) -> VerificationObservation:
        """Record a verification on the ledger and report existence.

        A digest that was never registered yields existed_at_call_time=False;
        it is not an error.

        Raises:
            LedgerUnavailableError: submission did not reach the ledger.
            ConfirmationTimeoutError: confirmation not observed in time.
        """
        ...

    @abstractmethod
    async def fetch(self, digest: DocumentDigest) -> LedgerRecord:
        """Read the ledger record for a digest.

        Raises:
            DocumentNotFoundError: no record exists.
        """
        ...

    @abstractmethod
    async def exists_view(self, digest: DocumentDigest) -> bool:
        """Read-only existence check; no transaction, no confirmation wait."""
        ...

    @abstractmethod
    async def list_all(self, offset: int, limit: int) -> list[DocumentDigest]:
        """Registered digests in registration order.

        Returns at most limit digests starting at offset; an empty list
        when offset is past the end.
        """
        ...

    @abstractmethod
    async def list_by_owner(self, owner: str) -> list[DocumentDigest]:
        ...

    @abstractmethod
    async def count_by_owner(self, owner: str) -> int:
        ...

    @abstractmethod
    async def total_count(self) -> int:
        ...

    @abstractmethod
    async def registration_of(
        self, digest: DocumentDigest
    ) -> RegistrationReference | None:
        """Locate the registering transaction of a digest."""
        ...

    @abstractmethod
    async def ledger_stats(self) -> LedgerStats:
        ...

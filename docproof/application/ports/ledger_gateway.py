"""Ledger gateway port.

Models the deployed document-registry contract as seen from an account on a
ledger node with transaction/confirmation semantics. The registry client
(docproof.infrastructure.adapters.ledger) is the only consumer; it turns
the raw contract behavior into the typed DocProof taxonomy.

Contract summary:
- registerDocument(hash, metadata): reverts InvalidDocumentHash for the zero
  hash, DocumentAlreadyExists on conflict, MetadataTooLong past the bound;
  emits DocumentRegistered(documentHash, owner, timestamp, metadata)
- verifyDocument(hash): state-changing; emits
  DocumentVerified(documentHash, verifier, exists, timestamp)
- getDocument(hash): reverts DocumentNotFound when absent
- documentExistsView, getTotalDocuments, getAllDocuments(offset, limit),
  getDocumentsByOwner(owner), getOwnerDocumentCount(owner): read-only views

Errors (from docproof.domain.errors):
- LedgerRevertError: the contract reverted (carries the symbolic reason)
- LedgerTransportError: the node could not be reached
- TimeoutError: wait_for_receipt exceeded its timeout
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field

EVENT_DOCUMENT_REGISTERED = "DocumentRegistered"
EVENT_DOCUMENT_VERIFIED = "DocumentVerified"


@dataclass(frozen=True)
class LedgerEvent:
    """An event emitted by a mined transaction.

    Attributes:
        name: Event name (e.g. "DocumentVerified").
        args: Decoded event arguments.
    """

    name: str
    args: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class TransactionReceipt:
    """Receipt of a mined, successful transaction.

    Attributes:
        tx_hash: Transaction hash (0x-prefixed).
        block_number: Block that included the transaction.
        events: Events emitted by the transaction.
    """

    tx_hash: str
    block_number: int
    events: tuple[LedgerEvent, ...] = ()

    def find_event(self, name: str) -> LedgerEvent | None:
        for event in self.events:
            if event.name == name:
                return event
        return None


@dataclass(frozen=True)
class RawLedgerDocument:
    """The contract's getDocument() tuple.

    Attributes:
        document_hash: 0x-prefixed bytes32 identity.
        owner: Registering account address.
        timestamp: Block timestamp in unix seconds.
        metadata: Stored metadata string.
        exists: Existence flag.
    """

    document_hash: str
    owner: str
    timestamp: int
    metadata: str
    exists: bool


@dataclass(frozen=True)
class RegistrationLog:
    """A DocumentRegistered event located in the ledger's logs."""

    document_hash: str
    owner: str
    tx_hash: str
    block_number: int


class LedgerGatewayProtocol(ABC):
    """Abstract access to the document-registry contract.

    Implementations are bound to one sending account. Write methods return
    as soon as the node accepted the transaction; confirmation is awaited
    separately with wait_for_receipt().
    """

    @property
    @abstractmethod
    def account_address(self) -> str:
        """Address of the account that signs submitted transactions."""
        ...

    @abstractmethod
    async def chain_id(self) -> int:
        """Chain id of the connected network."""
        ...

    @abstractmethod
    async def block_number(self) -> int:
        """Number of the latest block."""
        ...

    @abstractmethod
    async def send_register(self, document_hash: str, metadata: str) -> str:
        """Submit registerDocument and return the transaction hash."""
        ...

    @abstractmethod
    async def send_verify(self, document_hash: str) -> str:
        """Submit verifyDocument and return the transaction hash."""
        ...

    @abstractmethod
    async def wait_for_receipt(
        self,
        tx_hash: str,
        confirmations: int,
        timeout: float,
    ) -> TransactionReceipt:
        """Wait until the transaction has the given number of confirmations.

        Raises:
            LedgerRevertError: The transaction was mined but reverted.
            TimeoutError: Confirmation not observed within timeout seconds.
            LedgerTransportError: The node could not be reached.
        """
        ...

    @abstractmethod
    async def document_exists(self, document_hash: str) -> bool:
        ...

    @abstractmethod
    async def get_document(self, document_hash: str) -> RawLedgerDocument:
        """Read a record.

        Raises:
            LedgerRevertError: With reason DocumentNotFound when absent.
        """
        ...

    @abstractmethod
    async def get_total_documents(self) -> int:
        ...

    @abstractmethod
    async def get_all_documents(self, offset: int, limit: int) -> list[str]:
        """Registered identities in registration order, paginated."""
        ...

    @abstractmethod
    async def get_documents_by_owner(self, owner: str) -> list[str]:
        ...

    @abstractmethod
    async def get_owner_document_count(self, owner: str) -> int:
        ...

    @abstractmethod
    async def find_registration(self, document_hash: str) -> RegistrationLog | None:
        """Locate the DocumentRegistered event for a document, if any."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the connection to the node."""
        ...

"""In-memory document-registry ledger implementing LedgerGatewayProtocol.

This stub simulates a development ledger node with the document-registry
contract deployed. It reproduces:
- One block per transaction (automine), strictly increasing block numbers
- Contract reverts: InvalidDocumentHash, DocumentAlreadyExists,
  MetadataTooLong, DocumentNotFound
- DocumentRegistered / DocumentVerified events in transaction receipts
- Registration order listing with offset/limit and an owner index
- Per-account views sharing one chain state (connect())

Fault injection for the failure paths:
- set_unavailable(True): every call raises LedgerTransportError and no
  transaction is applied
- withhold_confirmations(True): transactions are applied but their
  confirmation is never observed until release_confirmations(); waiting
  callers time out, which is the "effect unknown" case

WARNING: This stub is NOT for production use.
"""

from __future__ import annotations

import asyncio
import hashlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from docproof.application.ports.ledger_gateway import (
    EVENT_DOCUMENT_REGISTERED,
    EVENT_DOCUMENT_VERIFIED,
    LedgerEvent,
    LedgerGatewayProtocol,
    RawLedgerDocument,
    RegistrationLog,
    TransactionReceipt,
)
from docproof.application.services.time_authority_service import SystemTimeAuthority
from docproof.domain.errors import (
    REVERT_DOCUMENT_ALREADY_EXISTS,
    REVERT_DOCUMENT_NOT_FOUND,
    REVERT_INVALID_DOCUMENT_HASH,
    REVERT_METADATA_TOO_LONG,
    LedgerRevertError,
    LedgerTransportError,
)
from docproof.domain.models import METADATA_MAX_BYTES, metadata_byte_length

if TYPE_CHECKING:
    from docproof.application.ports.time_authority import TimeAuthorityProtocol

DEFAULT_CHAIN_ID = 31337
DEFAULT_ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
ZERO_HASH = "0x" + "0" * 64


@dataclass
class _StoredDocument:
    document_hash: str
    owner: str
    timestamp: int
    metadata: str


@dataclass
class _MinedTransaction:
    tx_hash: str
    block_number: int
    events: tuple[LedgerEvent, ...]
    revert_reason: str | None
    confirmed: asyncio.Event = field(default_factory=asyncio.Event)


@dataclass
class _ChainState:
    """Chain state shared by every account view of one ledger."""

    chain_id: int
    metadata_max_bytes: int
    time_authority: TimeAuthorityProtocol
    block_number: int = 0
    nonce: int = 0
    documents: dict[str, _StoredDocument] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    by_owner: dict[str, list[str]] = field(default_factory=dict)
    transactions: dict[str, _MinedTransaction] = field(default_factory=dict)
    unavailable: bool = False
    withhold: bool = False
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class InMemoryDocumentLedger(LedgerGatewayProtocol):
    """In-memory ledger node bound to one sending account.

    Example:
        >>> ledger = InMemoryDocumentLedger()
        >>> other = ledger.connect("0x70997970C51812dc3A010C7d01b50e0d17dc79C8")
        >>> # both views see the same registrations
    """

    def __init__(
        self,
        account: str = DEFAULT_ACCOUNT,
        chain_id: int = DEFAULT_CHAIN_ID,
        time_authority: TimeAuthorityProtocol | None = None,
        metadata_max_bytes: int = METADATA_MAX_BYTES,
        *,
        _state: _ChainState | None = None,
    ) -> None:
        """Initialize the ledger.

        Args:
            account: Address signing this view's transactions.
            chain_id: Network identifier reported by chain_id().
            time_authority: Clock for block timestamps (host clock if None).
            metadata_max_bytes: The contract's metadata bound.
        """
        self._account = account
        self._state = _state or _ChainState(
            chain_id=chain_id,
            metadata_max_bytes=metadata_max_bytes,
            time_authority=time_authority or SystemTimeAuthority(),
        )
        self._closed = False

    def connect(self, account: str) -> InMemoryDocumentLedger:
        """Return a view of the same chain signing as another account."""
        return InMemoryDocumentLedger(account=account, _state=self._state)

    # Fault injection

    def set_unavailable(self, unavailable: bool) -> None:
        self._state.unavailable = unavailable

    def withhold_confirmations(self, withhold: bool) -> None:
        self._state.withhold = withhold

    def release_confirmations(self) -> None:
        """Confirm every transaction whose confirmation was withheld."""
        self._state.withhold = False
        for tx in self._state.transactions.values():
            tx.confirmed.set()

    @property
    def is_closed(self) -> bool:
        return self._closed

    @property
    def transaction_count(self) -> int:
        return len(self._state.transactions)

    # LedgerGatewayProtocol

    @property
    def account_address(self) -> str:
        return self._account

    async def chain_id(self) -> int:
        self._check_available()
        return self._state.chain_id

    async def block_number(self) -> int:
        self._check_available()
        return self._state.block_number

    async def send_register(self, document_hash: str, metadata: str) -> str:
        self._check_available()
        key = document_hash.lower()
        async with self._state.lock:
            revert_reason: str | None = None
            events: tuple[LedgerEvent, ...] = ()
            timestamp = self._timestamp()
            if key == ZERO_HASH:
                revert_reason = REVERT_INVALID_DOCUMENT_HASH
            elif key in self._state.documents:
                revert_reason = REVERT_DOCUMENT_ALREADY_EXISTS
            elif metadata_byte_length(metadata) > self._state.metadata_max_bytes:
                revert_reason = REVERT_METADATA_TOO_LONG
            else:
                self._state.documents[key] = _StoredDocument(
                    document_hash=key,
                    owner=self._account,
                    timestamp=timestamp,
                    metadata=metadata,
                )
                self._state.order.append(key)
                self._state.by_owner.setdefault(self._account.lower(), []).append(key)
                events = (
                    LedgerEvent(
                        name=EVENT_DOCUMENT_REGISTERED,
                        args={
                            "documentHash": key,
                            "owner": self._account,
                            "timestamp": timestamp,
                            "metadata": metadata,
                        },
                    ),
                )
            tx_hash = self._mine(events, revert_reason)
        await asyncio.sleep(0)
        return tx_hash

    async def send_verify(self, document_hash: str) -> str:
        self._check_available()
        key = document_hash.lower()
        async with self._state.lock:
            events = (
                LedgerEvent(
                    name=EVENT_DOCUMENT_VERIFIED,
                    args={
                        "documentHash": key,
                        "verifier": self._account,
                        "exists": key in self._state.documents,
                        "timestamp": self._timestamp(),
                    },
                ),
            )
            tx_hash = self._mine(events, None)
        await asyncio.sleep(0)
        return tx_hash

    async def wait_for_receipt(
        self,
        tx_hash: str,
        confirmations: int,
        timeout: float,
    ) -> TransactionReceipt:
        self._check_available()
        tx = self._state.transactions.get(tx_hash)
        if tx is None:
            raise LedgerTransportError(f"unknown transaction {tx_hash}")

        await asyncio.wait_for(tx.confirmed.wait(), timeout=timeout)

        # Automine empty blocks until the requested depth is reached
        async with self._state.lock:
            target = tx.block_number + max(confirmations, 1) - 1
            if self._state.block_number < target:
                self._state.block_number = target

        if tx.revert_reason is not None:
            raise LedgerRevertError(tx.revert_reason, tx_reference=tx.tx_hash)
        return TransactionReceipt(
            tx_hash=tx.tx_hash,
            block_number=tx.block_number,
            events=tx.events,
        )

    async def document_exists(self, document_hash: str) -> bool:
        self._check_available()
        return document_hash.lower() in self._state.documents

    async def get_document(self, document_hash: str) -> RawLedgerDocument:
        self._check_available()
        stored = self._state.documents.get(document_hash.lower())
        if stored is None:
            raise LedgerRevertError(REVERT_DOCUMENT_NOT_FOUND)
        return RawLedgerDocument(
            document_hash=stored.document_hash,
            owner=stored.owner,
            timestamp=stored.timestamp,
            metadata=stored.metadata,
            exists=True,
        )

    async def get_total_documents(self) -> int:
        self._check_available()
        return len(self._state.order)

    async def get_all_documents(self, offset: int, limit: int) -> list[str]:
        self._check_available()
        if offset >= len(self._state.order):
            return []
        return list(self._state.order[offset : offset + limit])

    async def get_documents_by_owner(self, owner: str) -> list[str]:
        self._check_available()
        return list(self._state.by_owner.get(owner.lower(), []))

    async def get_owner_document_count(self, owner: str) -> int:
        self._check_available()
        return len(self._state.by_owner.get(owner.lower(), []))

    async def find_registration(self, document_hash: str) -> RegistrationLog | None:
        self._check_available()
        key = document_hash.lower()
        for tx in self._state.transactions.values():
            for event in tx.events:
                if (
                    event.name == EVENT_DOCUMENT_REGISTERED
                    and event.args.get("documentHash") == key
                ):
                    return RegistrationLog(
                        document_hash=key,
                        owner=str(event.args["owner"]),
                        tx_hash=tx.tx_hash,
                        block_number=tx.block_number,
                    )
        return None

    async def close(self) -> None:
        self._closed = True

    # Internals

    def _check_available(self) -> None:
        if self._closed:
            raise LedgerTransportError("connection closed")
        if self._state.unavailable:
            raise LedgerTransportError("ledger node unreachable")

    def _timestamp(self) -> int:
        return int(self._state.time_authority.now().timestamp())

    def _mine(
        self,
        events: tuple[LedgerEvent, ...],
        revert_reason: str | None,
    ) -> str:
        """Mine one block holding one transaction. Caller holds the lock."""
        self._state.nonce += 1
        self._state.block_number += 1
        tx_hash = "0x" + hashlib.sha256(
            f"{self._state.chain_id}:{self._account}:{self._state.nonce}".encode()
        ).hexdigest()
        tx = _MinedTransaction(
            tx_hash=tx_hash,
            block_number=self._state.block_number,
            events=events,
            revert_reason=revert_reason,
        )
        if not self._state.withhold:
            tx.confirmed.set()
        self._state.transactions[tx_hash] = tx
        return tx_hash

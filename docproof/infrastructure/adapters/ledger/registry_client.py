"""Ledger registry client implementing LedgerRegistryProtocol.

Wraps a LedgerGatewayProtocol (raw contract access) and translates its
behavior into the DocProof error taxonomy:

    gateway                                 client
    -------                                 ------
    revert InvalidDocumentHash          ->  InvalidDocumentHashError
    revert DocumentAlreadyExists        ->  DocumentAlreadyExistsError
    revert MetadataTooLong              ->  MetadataTooLongError
    revert DocumentNotFound             ->  DocumentNotFoundError
    revert <other>                      ->  LedgerRejectedError
    LedgerTransportError                ->  LedgerUnavailableError
    no transaction hash in time         ->  LedgerUnavailableError
    no receipt in time                  ->  ConfirmationTimeoutError

Write operations return only after the configured number of confirmations
was observed. Both the submission and the confirmation wait are bounded by
the client itself, so a gateway that never answers cannot stall a caller.
Metadata is truncated to the contract bound before it is submitted.

Lifecycle:
    async with LedgerRegistryClient(gateway, config) as client:
        receipt = await client.register(digest, metadata)

Operations initialize lazily, so calling initialize() explicitly is only
needed to fail fast at startup.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from types import TracebackType
from collections.abc import Awaitable
from typing import TYPE_CHECKING

import structlog

from docproof.application.ports.ledger_gateway import EVENT_DOCUMENT_VERIFIED
from docproof.application.ports.ledger_registry import (
    LedgerRegistryProtocol,
    LedgerStats,
    RegistrationReceipt,
    RegistrationReference,
    VerificationObservation,
)
from docproof.config.ledger_config import DEFAULT_LEDGER_CONFIG, LedgerConfig
from docproof.domain.errors import (
    REVERT_DOCUMENT_ALREADY_EXISTS,
    REVERT_DOCUMENT_NOT_FOUND,
    REVERT_INVALID_DOCUMENT_HASH,
    REVERT_METADATA_TOO_LONG,
    ConfirmationTimeoutError,
    DocumentAlreadyExistsError,
    DocumentNotFoundError,
    InvalidDocumentHashError,
    LedgerRejectedError,
    LedgerRevertError,
    LedgerTransportError,
    LedgerUnavailableError,
    MetadataTooLongError,
)
from docproof.domain.models import (
    LedgerRecord,
    metadata_byte_length,
    truncate_metadata,
)
from docproof.domain.value_objects import DocumentDigest

if TYPE_CHECKING:
    from docproof.application.ports.ledger_gateway import (
        LedgerGatewayProtocol,
        RawLedgerDocument,
        TransactionReceipt,
    )

logger = structlog.get_logger()


class LedgerRegistryClient(LedgerRegistryProtocol):
    """Typed, error-translating client for the document registry."""

    def __init__(
        self,
        gateway: LedgerGatewayProtocol,
        config: LedgerConfig = DEFAULT_LEDGER_CONFIG,
    ) -> None:
        """Initialize the client.

        Args:
            gateway: Raw contract access bound to the sending account.
            config: Confirmation and metadata settings.
        """
        self._gateway = gateway
        self._config = config
        self._network: str | None = None
        self._init_lock = asyncio.Lock()
        self._closed = False

    @property
    def account(self) -> str:
        return self._gateway.account_address

    @property
    def network(self) -> str | None:
        """Chain id of the connected network, once initialized."""
        return self._network

    @property
    def is_initialized(self) -> bool:
        return self._network is not None

    async def initialize(self) -> str:
        """Connect and resolve the network; returns the chain id as a string."""
        async with self._init_lock:
            if self._network is not None:
                return self._network
            try:
                block_number = await self._gateway.block_number()
                chain_id = await self._gateway.chain_id()
            except LedgerTransportError as exc:
                logger.error("ledger_connection_failed", error=str(exc))
                raise LedgerUnavailableError(str(exc)) from exc
            self._network = str(chain_id)
            self._closed = False
            logger.info(
                "ledger_client_initialized",
                network=self._network,
                block_number=block_number,
                account=self.account,
            )
            return self._network

    async def close(self) -> None:
        if self._closed:
            return
        await self._gateway.close()
        self._closed = True
        self._network = None
        logger.info("ledger_client_closed")

    async def __aenter__(self) -> LedgerRegistryClient:
        await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def register(
        self, digest: DocumentDigest, metadata: str
    ) -> RegistrationReceipt:
        log = logger.bind(operation="register", digest=digest.hex)
        if digest.is_zero:
            raise InvalidDocumentHashError(digest.hex)
        network = await self._ensure_initialized()

        bounded = truncate_metadata(metadata, self._config.metadata_max_bytes)
        if bounded != metadata:
            log.info(
                "ledger_metadata_truncated",
                original_bytes=metadata_byte_length(metadata),
                limit=self._config.metadata_max_bytes,
            )

        identity = digest.ledger_identity
        try:
            if await self._gateway.document_exists(identity):
                raise DocumentAlreadyExistsError(digest.hex)
            tx_hash = await self._submit(
                self._gateway.send_register(identity, bounded), digest
            )
        except LedgerTransportError as exc:
            log.warning("ledger_submission_failed", error=str(exc))
            raise LedgerUnavailableError(str(exc), digest=digest.hex) from exc
        except LedgerRevertError as exc:
            raise self._translate_revert(exc, digest, bounded) from exc

        log.debug("ledger_transaction_sent", tx_reference=tx_hash)
        receipt = await self._confirm(tx_hash, digest, bounded)
        log.info(
            "ledger_registration_confirmed",
            tx_reference=receipt.tx_hash,
            block_number=receipt.block_number,
        )
        return RegistrationReceipt(
            digest=digest,
            ledger_identity=identity,
            tx_reference=receipt.tx_hash,
            sequence_number=receipt.block_number,
            network=network,
        )

    async def verify(self, digest: DocumentDigest) -> VerificationObservation:
        log = logger.bind(operation="verify", digest=digest.hex)
        await self._ensure_initialized()
        try:
            tx_hash = await self._submit(
                self._gateway.send_verify(digest.ledger_identity), digest
            )
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc), digest=digest.hex) from exc
        except LedgerRevertError as exc:
            raise self._translate_revert(exc, digest) from exc

        receipt = await self._confirm(tx_hash, digest)
        event = receipt.find_event(EVENT_DOCUMENT_VERIFIED)
        existed = bool(event.args.get("exists")) if event is not None else False
        if event is None:
            log.warning("ledger_verification_event_missing", tx_reference=tx_hash)

        observed: LedgerRecord | None = None
        if existed:
            observed = await self.fetch(digest)
        log.debug("ledger_verification_observed", exists=existed, tx_reference=tx_hash)
        return VerificationObservation(
            digest=digest,
            existed_at_call_time=existed,
            observed_record=observed,
            tx_reference=receipt.tx_hash,
        )

    async def fetch(self, digest: DocumentDigest) -> LedgerRecord:
        await self._ensure_initialized()
        try:
            raw = await self._gateway.get_document(digest.ledger_identity)
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc), digest=digest.hex) from exc
        except LedgerRevertError as exc:
            raise self._translate_revert(exc, digest) from exc
        if not raw.exists:
            raise DocumentNotFoundError(digest.hex)
        return self._to_record(digest, raw)

    async def exists_view(self, digest: DocumentDigest) -> bool:
        await self._ensure_initialized()
        try:
            return await self._gateway.document_exists(digest.ledger_identity)
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc), digest=digest.hex) from exc

    async def list_all(self, offset: int, limit: int) -> list[DocumentDigest]:
        if offset < 0 or limit < 1:
            raise ValueError(f"invalid window offset={offset} limit={limit}")
        await self._ensure_initialized()
        try:
            identities = await self._gateway.get_all_documents(offset, limit)
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc)) from exc
        return [DocumentDigest.from_ledger_identity(identity) for identity in identities]

    async def list_by_owner(self, owner: str) -> list[DocumentDigest]:
        await self._ensure_initialized()
        try:
            identities = await self._gateway.get_documents_by_owner(owner)
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc)) from exc
        return [DocumentDigest.from_ledger_identity(identity) for identity in identities]

    async def count_by_owner(self, owner: str) -> int:
        await self._ensure_initialized()
        try:
            return await self._gateway.get_owner_document_count(owner)
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc)) from exc

    async def total_count(self) -> int:
        await self._ensure_initialized()
        try:
            return await self._gateway.get_total_documents()
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc)) from exc

    async def registration_of(
        self, digest: DocumentDigest
    ) -> RegistrationReference | None:
        await self._ensure_initialized()
        try:
            found = await self._gateway.find_registration(digest.ledger_identity)
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc), digest=digest.hex) from exc
        if found is None:
            return None
        return RegistrationReference(
            tx_reference=found.tx_hash,
            sequence_number=found.block_number,
        )

    async def ledger_stats(self) -> LedgerStats:
        network = await self._ensure_initialized()
        try:
            total = await self._gateway.get_total_documents()
            block_number = await self._gateway.block_number()
        except LedgerTransportError as exc:
            raise LedgerUnavailableError(str(exc)) from exc
        return LedgerStats(
            total_documents=total,
            network=network,
            latest_sequence_number=block_number,
            account=self.account,
        )

    # Internals

    async def _ensure_initialized(self) -> str:
        if self._network is not None:
            return self._network
        return await self.initialize()

    async def _submit(self, send: Awaitable[str], digest: DocumentDigest) -> str:
        """Await a transaction submission for at most the submission timeout.

        A node that accepts the call but never answers may still have
        broadcast the transaction, so the expiry is reported as unavailable
        with the ledger-side effect unknown.
        """
        timeout = self._config.submission_timeout_seconds
        try:
            return await asyncio.wait_for(send, timeout=timeout)
        except TimeoutError as exc:
            logger.warning(
                "ledger_submission_timeout",
                digest=digest.hex,
                timeout_seconds=timeout,
            )
            raise LedgerUnavailableError(
                f"no transaction hash within {timeout}s", digest=digest.hex
            ) from exc

    async def _confirm(
        self,
        tx_hash: str,
        digest: DocumentDigest,
        metadata: str | None = None,
    ) -> TransactionReceipt:
        """Wait for the configured confirmations of a sent transaction."""
        timeout = self._config.confirmation_timeout_seconds
        try:
            return await asyncio.wait_for(
                self._gateway.wait_for_receipt(
                    tx_hash,
                    confirmations=self._config.confirmations,
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except TimeoutError as exc:
            logger.warning(
                "ledger_confirmation_timeout",
                digest=digest.hex,
                tx_reference=tx_hash,
                timeout_seconds=timeout,
            )
            raise ConfirmationTimeoutError(tx_hash, timeout, digest=digest.hex) from exc
        except LedgerTransportError as exc:
            # Sent but not confirmed: the effect is unknown either way
            raise LedgerUnavailableError(str(exc), digest=digest.hex) from exc
        except LedgerRevertError as exc:
            raise self._translate_revert(exc, digest, metadata) from exc

    def _translate_revert(
        self,
        exc: LedgerRevertError,
        digest: DocumentDigest,
        metadata: str | None = None,
    ) -> Exception:
        reason = exc.reason
        if reason == REVERT_DOCUMENT_ALREADY_EXISTS:
            return DocumentAlreadyExistsError(digest.hex)
        if reason == REVERT_INVALID_DOCUMENT_HASH:
            return InvalidDocumentHashError(digest.hex)
        if reason == REVERT_METADATA_TOO_LONG:
            return MetadataTooLongError(
                metadata_byte_length(metadata or ""),
                self._config.metadata_max_bytes,
                digest=digest.hex,
            )
        if reason == REVERT_DOCUMENT_NOT_FOUND:
            return DocumentNotFoundError(digest.hex)
        logger.warning("ledger_unknown_revert", digest=digest.hex, reason=reason)
        return LedgerRejectedError(reason, digest=digest.hex)

    @staticmethod
    def _to_record(digest: DocumentDigest, raw: RawLedgerDocument) -> LedgerRecord:
        return LedgerRecord(
            digest=digest,
            owner=raw.owner,
            registered_at=datetime.fromtimestamp(raw.timestamp, tz=timezone.utc),
            metadata=raw.metadata,
            exists=raw.exists,
        )

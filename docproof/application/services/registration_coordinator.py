"""Registration coordinator.

Orchestrates one registration attempt across the ledger and the local
index:

    Start -> DigestComputed -> LocalDuplicateChecked -> LedgerSubmitted
          -> LedgerConfirmed -> LocallyPersisted

Failure exits:
- REJECTED_DUPLICATE: local index fast path, or the ledger's own conflict
  detection (the only arbiter under concurrent attempts)
- LEDGER_REJECTED: semantic rejection, not retryable with the same input
- LEDGER_UNAVAILABLE / CONFIRMATION_TIMEOUT: retryable; the ledger may
  hold the registration anyway, so a retry re-checks existence first

Ordering rule: the ledger is written and confirmed before the local index.
A crash between the two leaves an orphan (ledger record, no local mirror)
which the reconciliation sweep repairs.

Usage:
    coordinator = RegistrationCoordinator(
        addresser=addresser,
        ledger=ledger_client,
        index=document_index,
        time_authority=SystemTimeAuthority(),
    )
    result = await coordinator.register(request)
    if result.outcome is RegistrationOutcome.CONFIRMATION_TIMEOUT:
        result = await coordinator.register(request, is_retry=True)
"""

from __future__ import annotations

from dataclasses import replace
from typing import TYPE_CHECKING

from docproof.application.dtos.registration import (
    DuplicateSource,
    RegistrationOutcome,
    RegistrationRequest,
    RegistrationResult,
)
from docproof.application.ports.ledger_registry import RegistrationReceipt
from docproof.application.services.base import LoggingMixin
from docproof.domain.errors import (
    ConfirmationTimeoutError,
    DocumentAlreadyExistsError,
    DocumentIndexError,
    DuplicateDigestError,
    LedgerRejectedError,
    LedgerUnavailableError,
    RetryableLedgerError,
)
from docproof.domain.models import (
    METADATA_MAX_BYTES,
    DocumentCategory,
    LedgerMetadata,
    LocalDocumentRecord,
    RecordStatus,
)

if TYPE_CHECKING:
    from structlog import BoundLogger

    from docproof.application.ports.content_addresser import ContentAddresserProtocol
    from docproof.application.ports.document_index import DocumentIndexProtocol
    from docproof.application.ports.ledger_registry import LedgerRegistryProtocol
    from docproof.application.ports.time_authority import TimeAuthorityProtocol
    from docproof.domain.models import LedgerRecord
    from docproof.domain.value_objects import DocumentDigest


class RegistrationCoordinator(LoggingMixin):
    """Registers documents on the ledger and mirrors them locally.

    The local duplicate check is only an optimization that saves a ledger
    call; correctness under races comes from the ledger rejecting the
    second registration of a digest.
    """

    def __init__(
        self,
        addresser: ContentAddresserProtocol,
        ledger: LedgerRegistryProtocol,
        index: DocumentIndexProtocol,
        time_authority: TimeAuthorityProtocol,
        metadata_max_bytes: int = METADATA_MAX_BYTES,
    ) -> None:
        """Initialize the coordinator.

        Args:
            addresser: Content addresser deriving digests.
            ledger: Ledger registry client.
            index: Local document index.
            time_authority: Clock for created_at and metadata timestamps.
            metadata_max_bytes: Ledger metadata bound used for truncation.
        """
        self._addresser = addresser
        self._ledger = ledger
        self._index = index
        self._time = time_authority
        self._metadata_max_bytes = metadata_max_bytes
        self._init_logger()

    async def register(
        self,
        request: RegistrationRequest,
        *,
        is_retry: bool = False,
    ) -> RegistrationResult:
        """Run one registration attempt.

        Args:
            request: The document and its descriptive metadata.
            is_retry: Set when repeating an attempt that ended in
                LEDGER_UNAVAILABLE or CONFIRMATION_TIMEOUT. The ledger is
                then checked first and a registration made by this client's
                account is adopted instead of resubmitted.

        Returns:
            RegistrationResult describing the terminal state reached.

        Raises:
            InvalidInputError: The descriptive metadata is out of bounds.
            DocumentIndexError: The local index failed. When this happens
                after ledger confirmation the registration is orphaned and
                logged as such.
        """
        metadata = request.descriptive_metadata()
        digest = self._addresser.digest(request.content)
        log = self._log_operation(
            "register",
            digest=digest.hex,
            file_name=request.file_name,
            is_retry=is_retry,
        )
        log.info("registration_started", size=request.size)

        existing = await self._index.get_by_digest(digest)
        if existing is not None:
            log.info("registration_duplicate", source=DuplicateSource.LOCAL_INDEX.value)
            return RegistrationResult(
                outcome=RegistrationOutcome.REJECTED_DUPLICATE,
                digest=digest,
                record=existing,
                duplicate_source=DuplicateSource.LOCAL_INDEX,
            )

        try:
            if is_retry and await self._ledger.exists_view(digest):
                return await self._adopt_existing(request, digest, log)

            payload = LedgerMetadata(
                file_name=request.file_name,
                file_type=request.content_type,
                uploaded_by=request.submitted_by,
                uploaded_at=self._time.now(),
                description=metadata.description,
                category=metadata.category.value,
            ).encode(self._metadata_max_bytes)

            log.info("ledger_submission_started")
            receipt = await self._ledger.register(digest, payload)
        except DocumentAlreadyExistsError:
            return await self._ledger_duplicate(digest, log)
        except LedgerRejectedError as exc:
            log.warning("registration_ledger_rejected", reason=exc.reason)
            return RegistrationResult(
                outcome=RegistrationOutcome.LEDGER_REJECTED,
                digest=digest,
                error=exc,
            )
        except ConfirmationTimeoutError as exc:
            log.warning(
                "registration_confirmation_timeout",
                tx_reference=exc.tx_reference,
                timeout_seconds=exc.timeout_seconds,
                effect_unknown=True,
            )
            return RegistrationResult(
                outcome=RegistrationOutcome.CONFIRMATION_TIMEOUT,
                digest=digest,
                error=exc,
            )
        except LedgerUnavailableError as exc:
            log.warning("registration_ledger_unavailable", error=str(exc), effect_unknown=True)
            return RegistrationResult(
                outcome=RegistrationOutcome.LEDGER_UNAVAILABLE,
                digest=digest,
                error=exc,
            )

        log.info(
            "ledger_submission_confirmed",
            tx_reference=receipt.tx_reference,
            sequence_number=receipt.sequence_number,
        )
        record = self._build_record(request, receipt)
        return await self._persist(record, receipt, RegistrationOutcome.REGISTERED, log)

    def _build_record(
        self,
        request: RegistrationRequest,
        receipt: RegistrationReceipt,
        ledger_metadata: LedgerMetadata | None = None,
    ) -> LocalDocumentRecord:
        """Build the local mirror of a confirmed registration.

        When the ledger's own metadata is given it wins over the request:
        the local record must describe what the ledger holds.
        """
        file_name = request.file_name
        content_type = request.content_type
        submitted_by = request.submitted_by
        descriptive = request.descriptive_metadata()
        if ledger_metadata is not None:
            file_name = ledger_metadata.file_name
            content_type = ledger_metadata.file_type or content_type
            submitted_by = ledger_metadata.uploaded_by
            descriptive = replace(
                descriptive,
                description=ledger_metadata.description,
                category=_category_or(ledger_metadata.category, descriptive.category),
            )
        return LocalDocumentRecord(
            digest=receipt.digest,
            ledger_identity=receipt.ledger_identity,
            file_name=file_name,
            size=request.size,
            content_type=content_type,
            submitted_by=submitted_by,
            descriptive_metadata=descriptive,
            registration_tx_reference=receipt.tx_reference,
            registration_sequence_number=receipt.sequence_number,
            network=receipt.network,
            created_at=self._time.now(),
            status=RecordStatus.CONFIRMED,
        )

    async def _persist(
        self,
        record: LocalDocumentRecord,
        receipt: RegistrationReceipt,
        outcome: RegistrationOutcome,
        log: BoundLogger,
    ) -> RegistrationResult:
        """Write the confirmed registration to the local index."""
        try:
            stored = await self._index.put(record)
        except DuplicateDigestError as exc:
            # Another writer mirrored the same ledger record first
            log.warning("registration_local_race_lost", tx_reference=receipt.tx_reference)
            existing = exc.existing or await self._index.get_by_digest(record.digest)
            return RegistrationResult(
                outcome=RegistrationOutcome.REJECTED_DUPLICATE,
                digest=record.digest,
                record=existing,
                receipt=receipt,
                duplicate_source=DuplicateSource.LOCAL_INDEX,
            )
        except DocumentIndexError:
            log.error(
                "registration_orphaned",
                tx_reference=receipt.tx_reference,
                sequence_number=receipt.sequence_number,
                message="Ledger confirmed but local persistence failed; "
                "reconciliation sweep will repair",
            )
            raise

        log.info("registration_completed", outcome=outcome.value)
        return RegistrationResult(
            outcome=outcome,
            digest=record.digest,
            record=stored,
            receipt=receipt,
        )

    async def _adopt_existing(
        self,
        request: RegistrationRequest,
        digest: DocumentDigest,
        log: BoundLogger,
    ) -> RegistrationResult:
        """Resolve a retry whose digest is already on the ledger.

        A record owned by this client's account with a locatable
        registration event is the effect of the earlier, unconfirmed
        attempt: mirror it locally. Anything else is a ledger duplicate.
        """
        ledger_record = await self._ledger.fetch(digest)
        if ledger_record.owner.lower() != self._ledger.account.lower():
            log.info("registration_retry_found_foreign_record", owner=ledger_record.owner)
            return self._duplicate_result(digest, None, ledger_record)

        reference = await self._ledger.registration_of(digest)
        if reference is None:
            log.warning("registration_retry_event_missing")
            return self._duplicate_result(digest, None, ledger_record)

        stats = await self._ledger.ledger_stats()
        receipt = RegistrationReceipt(
            digest=digest,
            ledger_identity=digest.ledger_identity,
            tx_reference=reference.tx_reference,
            sequence_number=reference.sequence_number,
            network=stats.network,
        )
        ledger_metadata = LedgerMetadata.decode(ledger_record.metadata)
        log.info(
            "registration_retry_adopting_ledger_record",
            tx_reference=reference.tx_reference,
            metadata_parsed=ledger_metadata is not None,
        )
        record = self._build_record(request, receipt, ledger_metadata)
        return await self._persist(record, receipt, RegistrationOutcome.RECOVERED, log)

    async def _ledger_duplicate(
        self,
        digest: DocumentDigest,
        log: BoundLogger,
    ) -> RegistrationResult:
        """Build the duplicate result after the ledger refused a registration."""
        log.info("registration_duplicate", source=DuplicateSource.LEDGER.value)
        local = await self._index.get_by_digest(digest)
        ledger_record: LedgerRecord | None = None
        try:
            ledger_record = await self._ledger.fetch(digest)
        except RetryableLedgerError as exc:
            log.warning("registration_duplicate_fetch_failed", error=str(exc))
        return self._duplicate_result(digest, local, ledger_record)

    @staticmethod
    def _duplicate_result(
        digest: DocumentDigest,
        local: LocalDocumentRecord | None,
        ledger_record: LedgerRecord | None,
    ) -> RegistrationResult:
        return RegistrationResult(
            outcome=RegistrationOutcome.REJECTED_DUPLICATE,
            digest=digest,
            record=local,
            ledger_record=ledger_record,
            duplicate_source=DuplicateSource.LEDGER,
        )


def _category_or(value: str, fallback: DocumentCategory) -> DocumentCategory:
    try:
        return DocumentCategory(value)
    except ValueError:
        return fallback

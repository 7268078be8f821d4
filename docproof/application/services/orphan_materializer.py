"""Orphan materialization.

An orphan is a digest the ledger confirmed but the local index never
recorded (a crash between ledger confirmation and local persistence, or a
registration made by another client of the same registry). This module
rebuilds the local record from what the ledger holds: the record itself,
its metadata payload and the registering transaction.

Used by the verification coordinator (self-healing) and the reconciliation
sweep.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docproof.application.dtos.registration import DEFAULT_CONTENT_TYPE
from docproof.application.services.base import LoggingMixin
from docproof.domain.errors import DuplicateDigestError
from docproof.domain.models import (
    ANONYMOUS_SUBMITTER,
    DescriptiveMetadata,
    DocumentCategory,
    LedgerMetadata,
    LocalDocumentRecord,
    RecordStatus,
)

if TYPE_CHECKING:
    from docproof.application.ports.document_index import DocumentIndexProtocol
    from docproof.application.ports.ledger_registry import LedgerRegistryProtocol
    from docproof.application.ports.time_authority import TimeAuthorityProtocol
    from docproof.domain.value_objects import DocumentDigest


class OrphanMaterializer(LoggingMixin):
    """Creates missing local records from ledger state."""

    def __init__(
        self,
        ledger: LedgerRegistryProtocol,
        index: DocumentIndexProtocol,
        time_authority: TimeAuthorityProtocol,
    ) -> None:
        """Initialize the materializer.

        Args:
            ledger: Registry client used to read the orphaned record.
            index: Local index receiving the rebuilt record.
            time_authority: Clock for created_at.
        """
        self._ledger = ledger
        self._index = index
        self._time = time_authority
        self._init_logger(component="reconciliation")

    async def materialize(
        self,
        digest: DocumentDigest,
        size_hint: int = 0,
    ) -> LocalDocumentRecord | None:
        """Materialize the local record for a ledger-only digest.

        Args:
            digest: Digest to materialize.
            size_hint: Content size when the caller knows it; the ledger
                does not store sizes.

        Returns:
            The local record (new, or the one a concurrent writer stored),
            or None when the ledger holds no record or no registration event
            for the digest.

        Raises:
            LedgerUnavailableError: The ledger could not be read.
        """
        log = self._log_operation("materialize", digest=digest.hex)

        if not await self._ledger.exists_view(digest):
            log.debug("orphan_not_on_ledger")
            return None

        ledger_record = await self._ledger.fetch(digest)
        reference = await self._ledger.registration_of(digest)
        if reference is None:
            log.warning("orphan_registration_event_missing")
            return None

        stats = await self._ledger.ledger_stats()
        payload = LedgerMetadata.decode(ledger_record.metadata)

        record = LocalDocumentRecord(
            digest=digest,
            ledger_identity=digest.ledger_identity,
            file_name=payload.file_name if payload else "",
            size=size_hint,
            content_type=(payload.file_type if payload else "") or DEFAULT_CONTENT_TYPE,
            submitted_by=payload.uploaded_by if payload else ANONYMOUS_SUBMITTER,
            descriptive_metadata=DescriptiveMetadata(
                description=payload.description if payload else "",
                category=_category_or_other(payload.category if payload else None),
            ),
            registration_tx_reference=reference.tx_reference,
            registration_sequence_number=reference.sequence_number,
            network=stats.network,
            created_at=self._time.now(),
            status=RecordStatus.CONFIRMED,
        )

        try:
            stored = await self._index.put(record)
        except DuplicateDigestError as exc:
            log.info("orphan_already_materialized")
            return exc.existing or await self._index.get_by_digest(digest)

        log.info(
            "orphan_materialized",
            tx_reference=reference.tx_reference,
            sequence_number=reference.sequence_number,
            metadata_parsed=payload is not None,
        )
        return stored


def _category_or_other(value: str | None) -> DocumentCategory:
    try:
        return DocumentCategory(value) if value else DocumentCategory.OTHER
    except ValueError:
        return DocumentCategory.OTHER

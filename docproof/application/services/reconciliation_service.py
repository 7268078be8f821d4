"""Reconciliation between the ledger and the local index.

The ledger is the source of truth for existence. The sweep walks the
ledger's registration order page by page and reports every digest that
has no local record (an orphan). With repair enabled, orphans are
materialized into the local index.

The optional local pass walks the local index and reports records the
ledger does not know (divergence). Those are never repaired
automatically; they need operator attention.

Usage:
    service = ReconciliationService(ledger, index, materializer)
    report = await service.sweep(repair=True)
    if not report.is_consistent:
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docproof.application.dtos.reconciliation import ReconciliationReport
from docproof.application.ports.document_index import MAX_PAGE_SIZE, PageRequest
from docproof.application.services.base import LoggingMixin
from docproof.domain.errors import RetryableLedgerError

if TYPE_CHECKING:
    from structlog import BoundLogger

    from docproof.application.ports.document_index import DocumentIndexProtocol
    from docproof.application.ports.ledger_registry import LedgerRegistryProtocol
    from docproof.application.services.orphan_materializer import OrphanMaterializer
    from docproof.domain.value_objects import DocumentDigest

DEFAULT_SWEEP_PAGE_SIZE = 100


class ReconciliationService(LoggingMixin):
    """Detects and repairs differences between ledger and local index."""

    def __init__(
        self,
        ledger: LedgerRegistryProtocol,
        index: DocumentIndexProtocol,
        materializer: OrphanMaterializer,
    ) -> None:
        self._ledger = ledger
        self._index = index
        self._materializer = materializer
        self._init_logger(component="reconciliation")

    async def sweep(
        self,
        page_size: int = DEFAULT_SWEEP_PAGE_SIZE,
        repair: bool = False,
        include_local: bool = False,
    ) -> ReconciliationReport:
        """Compare the ledger's registrations with the local index.

        Args:
            page_size: Ledger digests read per page.
            repair: Materialize orphans into the local index.
            include_local: Also check every local record against the ledger.

        Returns:
            ReconciliationReport with the orphans found and repaired.

        Raises:
            ValueError: If page_size is not positive.
            LedgerUnavailableError: The ledger listing could not be read.
        """
        if page_size < 1:
            raise ValueError(f"page_size must be positive, got {page_size}")

        log = self._log_operation("sweep", repair=repair, page_size=page_size)
        log.info("reconciliation_started")

        scanned = 0
        orphans: list[DocumentDigest] = []
        repaired: list[DocumentDigest] = []
        unrepaired: list[DocumentDigest] = []

        offset = 0
        while True:
            digests = await self._ledger.list_all(offset, page_size)
            if not digests:
                break
            for digest in digests:
                scanned += 1
                if await self._index.get_by_digest(digest) is not None:
                    continue
                orphans.append(digest)
                log.warning("reconciliation_orphan_found", digest=digest.hex)
                if not repair:
                    continue
                try:
                    record = await self._materializer.materialize(digest)
                except RetryableLedgerError as exc:
                    log.warning(
                        "reconciliation_repair_failed",
                        digest=digest.hex,
                        error=str(exc),
                    )
                    unrepaired.append(digest)
                    continue
                if record is None:
                    unrepaired.append(digest)
                else:
                    repaired.append(digest)
            if len(digests) < page_size:
                break
            offset += len(digests)

        local_scanned = 0
        local_only: tuple[DocumentDigest, ...] = ()
        if include_local:
            local_scanned, local_only = await self._check_local(log)

        report = ReconciliationReport(
            ledger_scanned=scanned,
            local_scanned=local_scanned,
            orphans=tuple(orphans),
            repaired=tuple(repaired),
            unrepaired=tuple(unrepaired),
            local_only=local_only,
        )
        log.info(
            "reconciliation_completed",
            ledger_scanned=scanned,
            orphans=len(orphans),
            repaired=len(repaired),
            local_only=len(local_only),
        )
        return report

    async def check_local(self) -> ReconciliationReport:
        """Check every local record against the ledger without a ledger sweep."""
        log = self._log_operation("check_local")
        local_scanned, local_only = await self._check_local(log)
        return ReconciliationReport(local_scanned=local_scanned, local_only=local_only)

    async def _check_local(
        self, log: BoundLogger
    ) -> tuple[int, tuple[DocumentDigest, ...]]:
        scanned = 0
        local_only: list[DocumentDigest] = []
        offset = 0
        while True:
            page = await self._index.list_documents(
                page=PageRequest(offset=offset, limit=MAX_PAGE_SIZE)
            )
            for record in page.records:
                scanned += 1
                if not await self._ledger.exists_view(record.digest):
                    local_only.append(record.digest)
                    log.warning(
                        "reconciliation_local_only",
                        digest=record.digest.hex,
                        tx_reference=record.registration_tx_reference,
                    )
            if not page.has_next:
                break
            offset += len(page.records)
        return scanned, tuple(local_only)

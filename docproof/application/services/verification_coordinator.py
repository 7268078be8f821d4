"""Verification coordinator.

Answers "was this content (or this digest) registered?" by consulting the
local index first and the ledger second:

- no local record: NOT_REGISTERED without touching the ledger, unless
  self-healing is enabled and the ledger holds an orphan for the digest
- local record, ledger confirms: the verification is recorded on the
  ledger and counted once, atomically, in the local index
- local record, ledger denies: DIVERGED; the counter is not touched and
  the divergence is logged for operators

Ledger failures propagate as RetryableLedgerError subclasses; the local
counter is only incremented after the ledger confirmed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docproof.application.dtos.verification import (
    VerificationResult,
    VerificationStatus,
)
from docproof.application.services.base import LoggingMixin
from docproof.domain.errors import InvalidDigestFormatError, InvalidInputError
from docproof.domain.value_objects import DocumentDigest

if TYPE_CHECKING:
    from docproof.application.ports.content_addresser import ContentAddresserProtocol
    from docproof.application.ports.document_index import DocumentIndexProtocol
    from docproof.application.ports.ledger_registry import LedgerRegistryProtocol
    from docproof.application.ports.time_authority import TimeAuthorityProtocol
    from docproof.application.services.orphan_materializer import OrphanMaterializer


class VerificationCoordinator(LoggingMixin):
    """Verifies content or asserted digests against both stores."""

    def __init__(
        self,
        addresser: ContentAddresserProtocol,
        ledger: LedgerRegistryProtocol,
        index: DocumentIndexProtocol,
        time_authority: TimeAuthorityProtocol,
        materializer: OrphanMaterializer | None = None,
        heal_orphans: bool = False,
    ) -> None:
        """Initialize the coordinator.

        Args:
            addresser: Content addresser deriving digests.
            ledger: Ledger registry client.
            index: Local document index.
            time_authority: Clock for last_verified_at.
            materializer: Rebuilds local records for ledger-only digests.
            heal_orphans: Materialize orphans found during verification.
                Requires a materializer.
        """
        if heal_orphans and materializer is None:
            raise ValueError("heal_orphans requires an OrphanMaterializer")
        self._addresser = addresser
        self._ledger = ledger
        self._index = index
        self._time = time_authority
        self._materializer = materializer
        self._heal_orphans = heal_orphans
        self._init_logger()

    async def verify_content(self, content: bytes) -> VerificationResult:
        """Verify document bytes.

        Raises:
            LedgerUnavailableError: The ledger could not be reached.
            ConfirmationTimeoutError: The verification was not confirmed.
        """
        digest = self._addresser.digest(content)
        return await self._verify(digest, size_hint=len(content))

    async def verify_digest(self, asserted: str) -> VerificationResult:
        """Verify a digest asserted by the caller.

        Args:
            asserted: 64 hex characters, any case, surrounding whitespace
                ignored.

        Raises:
            InvalidInputError: The value is not a well-formed digest or is
                the all-zero digest.
            LedgerUnavailableError: The ledger could not be reached.
            ConfirmationTimeoutError: The verification was not confirmed.
        """
        try:
            digest = DocumentDigest.parse(asserted)
        except InvalidDigestFormatError as exc:
            raise InvalidInputError("digest", str(exc)) from exc
        if digest.is_zero:
            raise InvalidInputError("digest", "the all-zero digest is never registered")
        return await self._verify(digest, size_hint=0)

    async def _verify(self, digest: DocumentDigest, size_hint: int) -> VerificationResult:
        log = self._log_operation("verify", digest=digest.hex)
        log.info("verification_started")

        local = await self._index.get_by_digest(digest)
        healed = False
        if local is None:
            if not self._heal_orphans or self._materializer is None:
                log.info("verification_not_registered")
                return VerificationResult(
                    status=VerificationStatus.NOT_REGISTERED,
                    digest=digest,
                )
            local = await self._materializer.materialize(digest, size_hint=size_hint)
            if local is None:
                log.info("verification_not_registered", heal_attempted=True)
                return VerificationResult(
                    status=VerificationStatus.NOT_REGISTERED,
                    digest=digest,
                )
            healed = True
            log.info("verification_orphan_healed")

        observation = await self._ledger.verify(digest)
        if not observation.existed_at_call_time:
            log.warning(
                "verification_divergence",
                local_tx_reference=local.registration_tx_reference,
                network=local.network,
                message="Local record exists but the ledger holds no registration",
            )
            return VerificationResult(
                status=VerificationStatus.DIVERGED,
                digest=digest,
                local_record=local,
                ledger_observation=observation,
                healed=healed,
            )

        updated = await self._index.increment_verification(digest, self._time.now())
        log.info(
            "verification_completed",
            verification_count=updated.verification_count,
            tx_reference=observation.tx_reference,
        )
        return VerificationResult(
            status=VerificationStatus.VERIFIED,
            digest=digest,
            local_record=updated,
            ledger_observation=observation,
            healed=healed,
        )

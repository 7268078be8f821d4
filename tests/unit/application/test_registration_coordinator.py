"""Unit tests for RegistrationCoordinator.

Runs against the in-memory ledger behind the real LedgerRegistryClient so
the error translation path is exercised end to end.
"""

import asyncio
import json
from unittest.mock import AsyncMock

import pytest

from docproof.application.dtos.registration import (
    DuplicateSource,
    RegistrationOutcome,
    RegistrationRequest,
)
from docproof.application.services.registration_coordinator import (
    RegistrationCoordinator,
)
from docproof.domain.errors import (
    DocumentIndexError,
    InvalidInputError,
    LedgerRejectedError,
)
from docproof.domain.models import DocumentCategory, LedgerMetadata
from docproof.infrastructure.adapters.ledger import LedgerRegistryClient
from docproof.infrastructure.stubs import DocumentIndexStub, InMemoryDocumentLedger
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.unresponsive_ledgers import SilentConfirmationLedger

OTHER_ACCOUNT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


def _request(content: bytes = b"Hello, DocProof", **overrides: object) -> RegistrationRequest:
    fields: dict[str, object] = {
        "content": content,
        "file_name": "hello.txt",
        "content_type": "text/plain",
        "submitted_by": "alice",
        "description": "Greeting",
        "category": DocumentCategory.OTHER,
        "tags": ("greeting",),
    }
    fields.update(overrides)
    return RegistrationRequest(**fields)  # type: ignore[arg-type]


class TestRegisterNewDocument:
    """Tests for the happy path."""

    @pytest.mark.asyncio
    async def test_register_new_document(
        self,
        registration_coordinator: RegistrationCoordinator,
        document_index: DocumentIndexStub,
        ledger: InMemoryDocumentLedger,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        result = await registration_coordinator.register(_request())

        assert result.outcome == RegistrationOutcome.REGISTERED
        assert result.succeeded
        assert result.receipt is not None
        assert result.receipt.network == "31337"
        assert result.receipt.tx_reference.startswith("0x")

        stored = await document_index.get_by_digest(result.digest)
        assert stored is not None
        assert stored == result.record
        assert stored.verification_count == 0
        assert stored.verified is False
        assert stored.size == len(b"Hello, DocProof")
        assert stored.registration_tx_reference == result.receipt.tx_reference
        assert stored.created_at == fake_time_authority.now()
        assert stored.descriptive_metadata.tags == ("greeting",)

        assert await ledger.document_exists(result.digest.ledger_identity)

    @pytest.mark.asyncio
    async def test_ledger_metadata_is_camel_case_json(
        self,
        registration_coordinator: RegistrationCoordinator,
        ledger: InMemoryDocumentLedger,
    ) -> None:
        result = await registration_coordinator.register(_request())

        raw = await ledger.get_document(result.digest.ledger_identity)
        payload = json.loads(raw.metadata)
        assert payload["fileName"] == "hello.txt"
        assert payload["uploadedBy"] == "alice"
        assert raw.owner == ledger.account_address

    @pytest.mark.asyncio
    async def test_long_description_is_truncated_for_ledger(
        self,
        registration_coordinator: RegistrationCoordinator,
        ledger: InMemoryDocumentLedger,
        document_index: DocumentIndexStub,
    ) -> None:
        result = await registration_coordinator.register(
            _request(description="d" * 1000)
        )

        assert result.outcome == RegistrationOutcome.REGISTERED
        raw = await ledger.get_document(result.digest.ledger_identity)
        assert len(raw.metadata.encode("utf-8")) == 256
        assert raw.metadata.endswith("...")
        # The local record keeps the full description
        stored = await document_index.get_by_digest(result.digest)
        assert stored is not None
        assert stored.descriptive_metadata.description == "d" * 1000

    @pytest.mark.asyncio
    async def test_empty_content_registers(
        self, registration_coordinator: RegistrationCoordinator
    ) -> None:
        result = await registration_coordinator.register(_request(content=b""))
        assert result.outcome == RegistrationOutcome.REGISTERED
        assert result.record is not None
        assert result.record.size == 0

    @pytest.mark.asyncio
    async def test_invalid_metadata_rejected_before_ledger(
        self,
        registration_coordinator: RegistrationCoordinator,
        ledger: InMemoryDocumentLedger,
    ) -> None:
        with pytest.raises(InvalidInputError):
            await registration_coordinator.register(
                _request(tags=tuple(f"t{i}" for i in range(11)))
            )
        assert ledger.transaction_count == 0


class TestDuplicates:
    """Tests for duplicate detection."""

    @pytest.mark.asyncio
    async def test_local_duplicate_skips_ledger(
        self,
        registration_coordinator: RegistrationCoordinator,
        ledger: InMemoryDocumentLedger,
    ) -> None:
        first = await registration_coordinator.register(_request())
        transactions = ledger.transaction_count

        second = await registration_coordinator.register(_request(file_name="copy.txt"))

        assert second.outcome == RegistrationOutcome.REJECTED_DUPLICATE
        assert second.duplicate_source == DuplicateSource.LOCAL_INDEX
        assert second.record == first.record
        assert ledger.transaction_count == transactions

    @pytest.mark.asyncio
    async def test_ledger_duplicate_from_other_client(
        self,
        ledger: InMemoryDocumentLedger,
        ledger_config,
        addresser,
        fake_time_authority: FakeTimeAuthority,
        registration_coordinator: RegistrationCoordinator,
        document_index: DocumentIndexStub,
    ) -> None:
        """A registration made elsewhere is reported by the ledger."""
        other = RegistrationCoordinator(
            addresser=addresser,
            ledger=LedgerRegistryClient(ledger.connect(OTHER_ACCOUNT), ledger_config),
            index=DocumentIndexStub(),
            time_authority=fake_time_authority,
        )
        await other.register(_request())

        result = await registration_coordinator.register(_request())

        assert result.outcome == RegistrationOutcome.REJECTED_DUPLICATE
        assert result.duplicate_source == DuplicateSource.LEDGER
        assert result.record is None
        assert result.ledger_record is not None
        assert result.ledger_record.owner == OTHER_ACCOUNT
        assert len(document_index) == 0

    @pytest.mark.asyncio
    async def test_concurrent_registrations_yield_one_winner(
        self,
        registration_coordinator: RegistrationCoordinator,
        document_index: DocumentIndexStub,
        ledger: InMemoryDocumentLedger,
    ) -> None:
        attempts = 8
        results = await asyncio.gather(
            *(registration_coordinator.register(_request()) for _ in range(attempts))
        )

        outcomes = [result.outcome for result in results]
        assert outcomes.count(RegistrationOutcome.REGISTERED) == 1
        assert outcomes.count(RegistrationOutcome.REJECTED_DUPLICATE) == attempts - 1
        assert len(document_index) == 1
        assert await ledger.get_total_documents() == 1


class TestLedgerFailures:
    """Tests for ledger rejection and effect-unknown outcomes."""

    @pytest.mark.asyncio
    async def test_ledger_rejection(
        self,
        addresser,
        document_index: DocumentIndexStub,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        ledger = AsyncMock()
        ledger.register.side_effect = LedgerRejectedError("Paused")
        coordinator = RegistrationCoordinator(
            addresser=addresser,
            ledger=ledger,
            index=document_index,
            time_authority=fake_time_authority,
        )

        result = await coordinator.register(_request())

        assert result.outcome == RegistrationOutcome.LEDGER_REJECTED
        assert result.retry_safe is False
        assert result.effect_unknown is False
        assert isinstance(result.error, LedgerRejectedError)
        assert len(document_index) == 0

    @pytest.mark.asyncio
    async def test_ledger_unavailable(
        self,
        registration_coordinator: RegistrationCoordinator,
        ledger: InMemoryDocumentLedger,
        document_index: DocumentIndexStub,
    ) -> None:
        ledger.set_unavailable(True)

        result = await registration_coordinator.register(_request())

        assert result.outcome == RegistrationOutcome.LEDGER_UNAVAILABLE
        assert result.retry_safe is True
        assert result.effect_unknown is True
        assert len(document_index) == 0

    @pytest.mark.asyncio
    async def test_timeout_then_retry_recovers(
        self,
        registration_coordinator: RegistrationCoordinator,
        ledger: InMemoryDocumentLedger,
        document_index: DocumentIndexStub,
    ) -> None:
        """The unconfirmed registration is adopted on retry, not resubmitted."""
        ledger.withhold_confirmations(True)

        first = await registration_coordinator.register(_request())

        assert first.outcome == RegistrationOutcome.CONFIRMATION_TIMEOUT
        assert first.effect_unknown is True
        assert first.retry_safe is True
        assert len(document_index) == 0
        # The ledger applied the registration anyway
        assert await ledger.document_exists(first.digest.ledger_identity)

        ledger.release_confirmations()
        retry = await registration_coordinator.register(_request(), is_retry=True)

        assert retry.outcome == RegistrationOutcome.RECOVERED
        assert retry.succeeded
        assert retry.receipt is not None
        assert retry.record is not None
        assert retry.record.registration_tx_reference == retry.receipt.tx_reference
        assert await ledger.get_total_documents() == 1
        assert len(document_index) == 1

    @pytest.mark.asyncio
    async def test_unanswered_receipt_times_out(
        self,
        ledger_config,
        addresser,
        document_index: DocumentIndexStub,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        """A node that never returns a receipt still yields a timeout outcome."""
        coordinator = RegistrationCoordinator(
            addresser=addresser,
            ledger=LedgerRegistryClient(
                SilentConfirmationLedger(time_authority=fake_time_authority),
                ledger_config,
            ),
            index=document_index,
            time_authority=fake_time_authority,
        )

        result = await asyncio.wait_for(coordinator.register(_request()), timeout=1.0)

        assert result.outcome == RegistrationOutcome.CONFIRMATION_TIMEOUT
        assert result.effect_unknown is True
        assert len(document_index) == 0

    @pytest.mark.asyncio
    async def test_retry_mirrors_ledger_metadata(
        self,
        registration_coordinator: RegistrationCoordinator,
        registry_client: LedgerRegistryClient,
        addresser,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        """The adopted record describes what the ledger holds, not the retry."""
        original = LedgerMetadata(
            file_name="contract-v1.pdf",
            file_type="application/pdf",
            uploaded_by="bob",
            uploaded_at=fake_time_authority.now(),
            description="Signed contract",
            category=DocumentCategory.LEGAL.value,
        )
        digest = addresser.digest(b"Hello, DocProof")
        await registry_client.register(digest, original.encode())

        retry = await registration_coordinator.register(_request(), is_retry=True)

        assert retry.outcome == RegistrationOutcome.RECOVERED
        assert retry.record is not None
        assert retry.record.file_name == "contract-v1.pdf"
        assert retry.record.content_type == "application/pdf"
        assert retry.record.submitted_by == "bob"
        assert retry.record.descriptive_metadata.description == "Signed contract"
        assert retry.record.descriptive_metadata.category == DocumentCategory.LEGAL
        # Tags never reach the ledger, so the request's are kept
        assert retry.record.descriptive_metadata.tags == ("greeting",)

    @pytest.mark.asyncio
    async def test_retry_with_unreadable_ledger_metadata_uses_request(
        self,
        registration_coordinator: RegistrationCoordinator,
        registry_client: LedgerRegistryClient,
        addresser,
    ) -> None:
        digest = addresser.digest(b"Hello, DocProof")
        await registry_client.register(digest, "{\"fileName\": \"cut")

        retry = await registration_coordinator.register(_request(), is_retry=True)

        assert retry.outcome == RegistrationOutcome.RECOVERED
        assert retry.record is not None
        assert retry.record.file_name == "hello.txt"
        assert retry.record.submitted_by == "alice"

    @pytest.mark.asyncio
    async def test_plain_resubmission_after_timeout_reports_duplicate(
        self,
        registration_coordinator: RegistrationCoordinator,
        ledger: InMemoryDocumentLedger,
    ) -> None:
        ledger.withhold_confirmations(True)
        await registration_coordinator.register(_request())
        ledger.release_confirmations()

        result = await registration_coordinator.register(_request())

        assert result.outcome == RegistrationOutcome.REJECTED_DUPLICATE
        assert result.duplicate_source == DuplicateSource.LEDGER

    @pytest.mark.asyncio
    async def test_retry_does_not_adopt_foreign_record(
        self,
        ledger: InMemoryDocumentLedger,
        ledger_config,
        addresser,
        fake_time_authority: FakeTimeAuthority,
        registration_coordinator: RegistrationCoordinator,
        document_index: DocumentIndexStub,
    ) -> None:
        other = LedgerRegistryClient(ledger.connect(OTHER_ACCOUNT), ledger_config)
        digest = addresser.digest(b"Hello, DocProof")
        await other.register(digest, "{}")

        result = await registration_coordinator.register(_request(), is_retry=True)

        assert result.outcome == RegistrationOutcome.REJECTED_DUPLICATE
        assert result.duplicate_source == DuplicateSource.LEDGER
        assert len(document_index) == 0

    @pytest.mark.asyncio
    async def test_retry_of_unregistered_document_submits(
        self, registration_coordinator: RegistrationCoordinator
    ) -> None:
        result = await registration_coordinator.register(_request(), is_retry=True)
        assert result.outcome == RegistrationOutcome.REGISTERED


class TestOrphanedRegistration:
    @pytest.mark.asyncio
    async def test_local_failure_after_confirmation_raises(
        self,
        registration_coordinator: RegistrationCoordinator,
        document_index: DocumentIndexStub,
        ledger: InMemoryDocumentLedger,
    ) -> None:
        document_index.fail_next_put()

        with pytest.raises(DocumentIndexError):
            await registration_coordinator.register(_request())

        # Ledger holds the registration, local index does not: an orphan
        assert await ledger.get_total_documents() == 1
        assert len(document_index) == 0

    @pytest.mark.asyncio
    async def test_result_serialization(
        self, registration_coordinator: RegistrationCoordinator
    ) -> None:
        result = await registration_coordinator.register(_request())
        data = result.to_dict()
        assert data["outcome"] == "registered"
        assert data["ledger_identity"] == f"0x{result.digest.hex}"
        assert data["network"] == "31337"
        assert data["effect_unknown"] is False

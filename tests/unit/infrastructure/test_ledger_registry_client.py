"""Unit tests for LedgerRegistryClient error translation and lifecycle."""

import asyncio
from datetime import timezone
from unittest.mock import AsyncMock

import pytest

from docproof.config import LedgerConfig
from docproof.domain.errors import (
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
from docproof.domain.value_objects import DocumentDigest
from docproof.infrastructure.adapters.ledger import LedgerRegistryClient
from docproof.infrastructure.stubs import InMemoryDocumentLedger
from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.unresponsive_ledgers import (
    SilentConfirmationLedger,
    StalledSubmissionLedger,
)

DIGEST = DocumentDigest("ab" * 32)
OTHER = DocumentDigest("cd" * 32)

# Outer bound on calls that must give up on their own well before it
CALLER_PATIENCE_SECONDS = 1.0


class TestLifecycle:
    """Tests for initialize/close."""

    @pytest.mark.asyncio
    async def test_initialize_resolves_network(
        self, registry_client: LedgerRegistryClient
    ) -> None:
        assert not registry_client.is_initialized

        network = await registry_client.initialize()

        assert network == "31337"
        assert registry_client.is_initialized
        assert registry_client.network == "31337"
        assert await registry_client.initialize() == "31337"

    @pytest.mark.asyncio
    async def test_operations_initialize_lazily(
        self, registry_client: LedgerRegistryClient
    ) -> None:
        assert await registry_client.total_count() == 0
        assert registry_client.is_initialized

    @pytest.mark.asyncio
    async def test_initialize_unreachable_ledger(
        self, ledger: InMemoryDocumentLedger, registry_client: LedgerRegistryClient
    ) -> None:
        ledger.set_unavailable(True)
        with pytest.raises(LedgerUnavailableError):
            await registry_client.initialize()
        assert not registry_client.is_initialized

    @pytest.mark.asyncio
    async def test_async_context_manager_closes_gateway(
        self, ledger: InMemoryDocumentLedger, ledger_config: LedgerConfig
    ) -> None:
        async with LedgerRegistryClient(ledger, ledger_config) as client:
            assert client.is_initialized

        assert ledger.is_closed
        assert not client.is_initialized

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, ledger_config: LedgerConfig) -> None:
        gateway = AsyncMock()
        client = LedgerRegistryClient(gateway, ledger_config)

        await client.close()
        await client.close()

        gateway.close.assert_awaited_once()

    def test_account_comes_from_gateway(
        self, ledger: InMemoryDocumentLedger, registry_client: LedgerRegistryClient
    ) -> None:
        assert registry_client.account == ledger.account_address


class TestRegister:
    """Tests for register() and its error translation."""

    @pytest.mark.asyncio
    async def test_register_returns_receipt(
        self, registry_client: LedgerRegistryClient
    ) -> None:
        receipt = await registry_client.register(DIGEST, '{"fileName":"a"}')

        assert receipt.digest == DIGEST
        assert receipt.ledger_identity == DIGEST.ledger_identity
        assert receipt.network == "31337"
        assert receipt.sequence_number >= 1
        assert await registry_client.exists_view(DIGEST)

    @pytest.mark.asyncio
    async def test_zero_digest_rejected(self, registry_client: LedgerRegistryClient) -> None:
        with pytest.raises(InvalidDocumentHashError) as exc_info:
            await registry_client.register(DocumentDigest.zero(), "{}")
        assert exc_info.value.retry_safe is False

    @pytest.mark.asyncio
    async def test_duplicate(self, registry_client: LedgerRegistryClient) -> None:
        await registry_client.register(DIGEST, "{}")
        with pytest.raises(DocumentAlreadyExistsError):
            await registry_client.register(DIGEST, "{}")

    @pytest.mark.asyncio
    async def test_oversized_metadata_is_truncated(
        self, registry_client: LedgerRegistryClient
    ) -> None:
        await registry_client.register(DIGEST, "x" * 1000)

        record = await registry_client.fetch(DIGEST)
        assert len(record.metadata.encode("utf-8")) == 256
        assert record.metadata.endswith("...")

    @pytest.mark.asyncio
    async def test_contract_bound_below_client_bound(
        self, fake_time_authority: FakeTimeAuthority, ledger_config: LedgerConfig
    ) -> None:
        """A contract stricter than the client still refuses the metadata."""
        strict = InMemoryDocumentLedger(
            time_authority=fake_time_authority, metadata_max_bytes=16
        )
        client = LedgerRegistryClient(strict, ledger_config)

        with pytest.raises(MetadataTooLongError) as exc_info:
            await client.register(DIGEST, "x" * 100)
        assert exc_info.value.length == 100
        assert exc_info.value.limit == 256

    @pytest.mark.asyncio
    async def test_unknown_revert_reason(self, ledger_config: LedgerConfig) -> None:
        gateway = AsyncMock()
        gateway.chain_id.return_value = 1
        gateway.block_number.return_value = 10
        gateway.document_exists.return_value = False
        gateway.send_register.side_effect = LedgerRevertError("Paused")
        client = LedgerRegistryClient(gateway, ledger_config)

        with pytest.raises(LedgerRejectedError) as exc_info:
            await client.register(DIGEST, "{}")
        assert exc_info.value.reason == "Paused"

    @pytest.mark.asyncio
    async def test_transport_failure(
        self, ledger: InMemoryDocumentLedger, registry_client: LedgerRegistryClient
    ) -> None:
        await registry_client.initialize()
        ledger.set_unavailable(True)

        with pytest.raises(LedgerUnavailableError) as exc_info:
            await registry_client.register(DIGEST, "{}")
        assert exc_info.value.retry_safe is True
        assert exc_info.value.effect_unknown is True

    @pytest.mark.asyncio
    async def test_confirmation_timeout(
        self, ledger: InMemoryDocumentLedger, registry_client: LedgerRegistryClient
    ) -> None:
        ledger.withhold_confirmations(True)

        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await registry_client.register(DIGEST, "{}")

        assert exc_info.value.tx_reference.startswith("0x")
        assert exc_info.value.timeout_seconds == 0.05
        assert exc_info.value.digest == DIGEST.hex

    @pytest.mark.asyncio
    async def test_transport_failure_while_confirming(
        self, ledger_config: LedgerConfig
    ) -> None:
        gateway = AsyncMock()
        gateway.chain_id.return_value = 1
        gateway.block_number.return_value = 10
        gateway.document_exists.return_value = False
        gateway.send_register.return_value = "0xabc"
        gateway.wait_for_receipt.side_effect = LedgerTransportError("reset by peer")
        client = LedgerRegistryClient(gateway, ledger_config)

        with pytest.raises(LedgerUnavailableError):
            await client.register(DIGEST, "{}")


class TestVerify:
    @pytest.mark.asyncio
    async def test_verify_registered(self, registry_client: LedgerRegistryClient) -> None:
        await registry_client.register(DIGEST, "{}")

        observation = await registry_client.verify(DIGEST)

        assert observation.existed_at_call_time is True
        assert observation.observed_record is not None
        assert observation.observed_record.digest == DIGEST
        assert observation.tx_reference is not None

    @pytest.mark.asyncio
    async def test_verify_unregistered_is_not_an_error(
        self, registry_client: LedgerRegistryClient
    ) -> None:
        observation = await registry_client.verify(OTHER)

        assert observation.existed_at_call_time is False
        assert observation.observed_record is None


class TestReads:
    """Tests for view operations."""

    @pytest.mark.asyncio
    async def test_fetch(
        self,
        registry_client: LedgerRegistryClient,
        ledger: InMemoryDocumentLedger,
        fake_time_authority: FakeTimeAuthority,
    ) -> None:
        await registry_client.register(DIGEST, "meta")

        record = await registry_client.fetch(DIGEST)

        assert record.owner == ledger.account_address
        assert record.metadata == "meta"
        assert record.registered_at.tzinfo == timezone.utc
        assert record.registered_at == fake_time_authority.now().replace(microsecond=0)

    @pytest.mark.asyncio
    async def test_fetch_unregistered(self, registry_client: LedgerRegistryClient) -> None:
        with pytest.raises(DocumentNotFoundError):
            await registry_client.fetch(OTHER)

    @pytest.mark.asyncio
    async def test_listing_and_owner_queries(
        self, registry_client: LedgerRegistryClient
    ) -> None:
        await registry_client.register(DIGEST, "{}")
        await registry_client.register(OTHER, "{}")

        assert await registry_client.list_all(0, 10) == [DIGEST, OTHER]
        assert await registry_client.list_all(1, 10) == [OTHER]
        assert await registry_client.list_all(5, 10) == []
        assert await registry_client.list_by_owner(registry_client.account) == [DIGEST, OTHER]
        assert await registry_client.count_by_owner(registry_client.account) == 2
        assert await registry_client.total_count() == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("offset", "limit"), [(-1, 10), (0, 0)])
    async def test_list_all_rejects_bad_window(
        self, registry_client: LedgerRegistryClient, offset: int, limit: int
    ) -> None:
        with pytest.raises(ValueError):
            await registry_client.list_all(offset, limit)

    @pytest.mark.asyncio
    async def test_registration_of(self, registry_client: LedgerRegistryClient) -> None:
        receipt = await registry_client.register(DIGEST, "{}")

        reference = await registry_client.registration_of(DIGEST)

        assert reference is not None
        assert reference.tx_reference == receipt.tx_reference
        assert reference.sequence_number == receipt.sequence_number
        assert await registry_client.registration_of(OTHER) is None

    @pytest.mark.asyncio
    async def test_ledger_stats(self, registry_client: LedgerRegistryClient) -> None:
        await registry_client.register(DIGEST, "{}")

        stats = await registry_client.ledger_stats()

        assert stats.total_documents == 1
        assert stats.network == "31337"
        assert stats.latest_sequence_number >= 1
        assert stats.account == registry_client.account

    @pytest.mark.asyncio
    async def test_views_translate_transport_errors(
        self, ledger: InMemoryDocumentLedger, registry_client: LedgerRegistryClient
    ) -> None:
        await registry_client.initialize()
        ledger.set_unavailable(True)

        with pytest.raises(LedgerUnavailableError):
            await registry_client.exists_view(DIGEST)
        with pytest.raises(LedgerUnavailableError):
            await registry_client.list_all(0, 10)


class TestUnresponsiveGateway:
    """The client bounds every wait itself, whatever the gateway does."""

    @pytest.mark.asyncio
    async def test_register_times_out_when_receipt_never_arrives(
        self, ledger_config: LedgerConfig
    ) -> None:
        gateway = SilentConfirmationLedger()
        client = LedgerRegistryClient(gateway, ledger_config)

        with pytest.raises(ConfirmationTimeoutError) as exc_info:
            await asyncio.wait_for(
                client.register(DIGEST, "{}"), timeout=CALLER_PATIENCE_SECONDS
            )

        assert exc_info.value.timeout_seconds == ledger_config.confirmation_timeout_seconds
        assert exc_info.value.retry_safe is True
        # The transaction was applied; only its confirmation went missing
        assert await client.exists_view(DIGEST) is True

    @pytest.mark.asyncio
    async def test_verify_times_out_when_receipt_never_arrives(
        self, ledger_config: LedgerConfig
    ) -> None:
        client = LedgerRegistryClient(SilentConfirmationLedger(), ledger_config)

        with pytest.raises(ConfirmationTimeoutError):
            await asyncio.wait_for(client.verify(DIGEST), timeout=CALLER_PATIENCE_SECONDS)

    @pytest.mark.asyncio
    async def test_stalled_submission_is_unavailable(self) -> None:
        config = LedgerConfig(
            confirmation_timeout_seconds=0.05, submission_timeout_seconds=0.05
        )
        client = LedgerRegistryClient(StalledSubmissionLedger(), config)

        with pytest.raises(LedgerUnavailableError) as register_info:
            await asyncio.wait_for(
                client.register(DIGEST, "{}"), timeout=CALLER_PATIENCE_SECONDS
            )
        with pytest.raises(LedgerUnavailableError):
            await asyncio.wait_for(client.verify(DIGEST), timeout=CALLER_PATIENCE_SECONDS)

        assert register_info.value.effect_unknown is True
        assert register_info.value.digest == DIGEST.hex

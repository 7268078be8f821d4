"""
Pytest configuration and shared fixtures for DocProof tests.

Testing Standards:
- All async tests use pytest.mark.asyncio (auto mode enabled in pyproject.toml)
- Use AsyncMock for async failure injection
- Unit tests go in tests/unit/
- Integration tests go in tests/integration/ and are marked integration
"""

from datetime import datetime, timezone

import pytest

from docproof.application.services.content_hash_service import (
    Sha256ContentHashService,
)
from docproof.application.services.orphan_materializer import OrphanMaterializer
from docproof.application.services.registration_coordinator import (
    RegistrationCoordinator,
)
from docproof.application.services.verification_coordinator import (
    VerificationCoordinator,
)
from docproof.config import TEST_LEDGER_CONFIG, LedgerConfig
from docproof.infrastructure.adapters.ledger import LedgerRegistryClient
from docproof.infrastructure.stubs import DocumentIndexStub, InMemoryDocumentLedger
from tests.helpers.fake_time_authority import FakeTimeAuthority


@pytest.fixture
def fake_time_authority() -> FakeTimeAuthority:
    return FakeTimeAuthority(frozen_at=datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger(fake_time_authority: FakeTimeAuthority) -> InMemoryDocumentLedger:
    """In-memory ledger signing as the default development account."""
    return InMemoryDocumentLedger(time_authority=fake_time_authority)


@pytest.fixture
def ledger_config() -> LedgerConfig:
    # Short confirmation wait so withheld confirmations time out quickly
    return TEST_LEDGER_CONFIG


@pytest.fixture
def registry_client(
    ledger: InMemoryDocumentLedger, ledger_config: LedgerConfig
) -> LedgerRegistryClient:
    return LedgerRegistryClient(ledger, ledger_config)


@pytest.fixture
def document_index() -> DocumentIndexStub:
    return DocumentIndexStub()


@pytest.fixture
def addresser() -> Sha256ContentHashService:
    return Sha256ContentHashService()


@pytest.fixture
def registration_coordinator(
    addresser: Sha256ContentHashService,
    registry_client: LedgerRegistryClient,
    document_index: DocumentIndexStub,
    fake_time_authority: FakeTimeAuthority,
) -> RegistrationCoordinator:
    return RegistrationCoordinator(
        addresser=addresser,
        ledger=registry_client,
        index=document_index,
        time_authority=fake_time_authority,
    )


@pytest.fixture
def orphan_materializer(
    registry_client: LedgerRegistryClient,
    document_index: DocumentIndexStub,
    fake_time_authority: FakeTimeAuthority,
) -> OrphanMaterializer:
    return OrphanMaterializer(
        ledger=registry_client,
        index=document_index,
        time_authority=fake_time_authority,
    )


@pytest.fixture
def verification_coordinator(
    addresser: Sha256ContentHashService,
    registry_client: LedgerRegistryClient,
    document_index: DocumentIndexStub,
    fake_time_authority: FakeTimeAuthority,
) -> VerificationCoordinator:
    return VerificationCoordinator(
        addresser=addresser,
        ledger=registry_client,
        index=document_index,
        time_authority=fake_time_authority,
    )

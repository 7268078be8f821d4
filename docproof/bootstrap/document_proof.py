"""Bootstrap wiring for document proof dependencies.

Builds the registry client, the local index and the coordinators from
configuration. The local index is PostgreSQL when DATABASE_URL is set and
the in-memory stub otherwise. The ledger gateway defaults to the in-memory
development ledger; deployments bind a node-backed gateway with
set_ledger_gateway() before first use.

Usage:
    from docproof.bootstrap.document_proof import (
        get_registration_coordinator,
        shutdown_document_proof,
    )

    coordinator = get_registration_coordinator()
    result = await coordinator.register(request)
    ...
    await shutdown_document_proof()
"""

from __future__ import annotations

from structlog import get_logger

from docproof.application.ports.content_addresser import ContentAddresserProtocol
from docproof.application.ports.document_index import DocumentIndexProtocol
from docproof.application.ports.ledger_gateway import LedgerGatewayProtocol
from docproof.application.ports.ledger_registry import LedgerRegistryProtocol
from docproof.application.ports.time_authority import TimeAuthorityProtocol
from docproof.application.services.content_hash_service import (
    create_content_addresser,
)
from docproof.application.services.orphan_materializer import OrphanMaterializer
from docproof.application.services.reconciliation_service import (
    ReconciliationService,
)
from docproof.application.services.registration_coordinator import (
    RegistrationCoordinator,
)
from docproof.application.services.time_authority_service import SystemTimeAuthority
from docproof.application.services.verification_coordinator import (
    VerificationCoordinator,
)
from docproof.bootstrap.database import (
    close_database_engine,
    get_session_factory,
    is_database_configured,
)
from docproof.config import LedgerConfig, ProofConfig
from docproof.infrastructure.adapters.ledger import LedgerRegistryClient
from docproof.infrastructure.adapters.persistence import PostgresDocumentIndex
from docproof.infrastructure.stubs import DocumentIndexStub, InMemoryDocumentLedger

logger = get_logger()

_ledger_config: LedgerConfig | None = None
_proof_config: ProofConfig | None = None
_time_authority: TimeAuthorityProtocol | None = None
_content_addresser: ContentAddresserProtocol | None = None
_ledger_gateway: LedgerGatewayProtocol | None = None
_ledger_registry: LedgerRegistryProtocol | None = None
_document_index: DocumentIndexProtocol | None = None


def get_ledger_config() -> LedgerConfig:
    global _ledger_config
    if _ledger_config is None:
        _ledger_config = LedgerConfig.from_environment()
    return _ledger_config


def get_proof_config() -> ProofConfig:
    global _proof_config
    if _proof_config is None:
        _proof_config = ProofConfig.from_environment()
    return _proof_config


def get_time_authority() -> TimeAuthorityProtocol:
    global _time_authority
    if _time_authority is None:
        _time_authority = SystemTimeAuthority()
    return _time_authority


def get_content_addresser() -> ContentAddresserProtocol:
    """Get the content addresser for the configured digest algorithm."""
    global _content_addresser
    if _content_addresser is None:
        _content_addresser = create_content_addresser(get_proof_config().digest_algorithm)
    return _content_addresser


def get_ledger_gateway() -> LedgerGatewayProtocol:
    """Get the ledger gateway (in-memory development ledger by default)."""
    global _ledger_gateway
    if _ledger_gateway is None:
        config = get_ledger_config()
        logger.warning(
            "using_in_memory_ledger",
            account=config.account,
            message="No ledger gateway bound; registrations are not durable",
        )
        _ledger_gateway = InMemoryDocumentLedger(
            account=config.account,
            time_authority=get_time_authority(),
            metadata_max_bytes=config.metadata_max_bytes,
        )
    return _ledger_gateway


def get_ledger_registry() -> LedgerRegistryProtocol:
    global _ledger_registry
    if _ledger_registry is None:
        _ledger_registry = LedgerRegistryClient(get_ledger_gateway(), get_ledger_config())
    return _ledger_registry


def get_document_index() -> DocumentIndexProtocol:
    """Get the local index (PostgreSQL when DATABASE_URL is set)."""
    global _document_index
    if _document_index is None:
        if is_database_configured():
            _document_index = PostgresDocumentIndex(get_session_factory())
        else:
            logger.warning("using_in_memory_document_index")
            _document_index = DocumentIndexStub()
    return _document_index


def get_orphan_materializer() -> OrphanMaterializer:
    return OrphanMaterializer(
        ledger=get_ledger_registry(),
        index=get_document_index(),
        time_authority=get_time_authority(),
    )


def get_registration_coordinator() -> RegistrationCoordinator:
    return RegistrationCoordinator(
        addresser=get_content_addresser(),
        ledger=get_ledger_registry(),
        index=get_document_index(),
        time_authority=get_time_authority(),
        metadata_max_bytes=get_ledger_config().metadata_max_bytes,
    )


def get_verification_coordinator() -> VerificationCoordinator:
    heal_orphans = get_proof_config().heal_orphans
    return VerificationCoordinator(
        addresser=get_content_addresser(),
        ledger=get_ledger_registry(),
        index=get_document_index(),
        time_authority=get_time_authority(),
        materializer=get_orphan_materializer() if heal_orphans else None,
        heal_orphans=heal_orphans,
    )


def get_reconciliation_service() -> ReconciliationService:
    return ReconciliationService(
        ledger=get_ledger_registry(),
        index=get_document_index(),
        materializer=get_orphan_materializer(),
    )


async def startup_document_proof() -> None:
    """Connect to the ledger and prepare the local index.

    Raises:
        LedgerUnavailableError: If the ledger cannot be reached.
        DocumentIndexError: If the index schema cannot be created.
    """
    await get_ledger_registry().initialize()
    index = get_document_index()
    if isinstance(index, PostgresDocumentIndex):
        await index.create_schema()
    logger.info("document_proof_started")


async def shutdown_document_proof() -> None:
    """Close the ledger client and the database engine."""
    global _ledger_registry, _ledger_gateway
    if _ledger_registry is not None:
        await _ledger_registry.close()
        _ledger_registry = None
        _ledger_gateway = None
    await close_database_engine()
    logger.info("document_proof_stopped")


def set_ledger_gateway(gateway: LedgerGatewayProtocol) -> None:
    """Bind a ledger gateway before the registry client is created."""
    global _ledger_gateway, _ledger_registry
    _ledger_gateway = gateway
    _ledger_registry = None


def set_ledger_registry(registry: LedgerRegistryProtocol) -> None:
    """Set custom ledger registry for testing."""
    global _ledger_registry
    _ledger_registry = registry


def set_document_index(index: DocumentIndexProtocol) -> None:
    """Set custom document index for testing."""
    global _document_index
    _document_index = index


def set_time_authority(time_authority: TimeAuthorityProtocol) -> None:
    """Set custom time authority for testing."""
    global _time_authority
    _time_authority = time_authority


def reset_document_proof_dependencies() -> None:
    """Reset all singleton instances for testing."""
    global _ledger_config
    global _proof_config
    global _time_authority
    global _content_addresser
    global _ledger_gateway
    global _ledger_registry
    global _document_index

    _ledger_config = None
    _proof_config = None
    _time_authority = None
    _content_addresser = None
    _ledger_gateway = None
    _ledger_registry = None
    _document_index = None

"""Application services - use case orchestration.

Available services:
- RegistrationCoordinator: ledger-first registration with local mirroring
- VerificationCoordinator: verification of content or asserted digests
- ReconciliationService: orphan and divergence detection between stores
- OrphanMaterializer: rebuilds local records from ledger state
- Sha256ContentHashService / Blake3ContentHashService: content addressing
- SystemTimeAuthority: host clock
"""

from docproof.application.services.base import LoggingMixin
from docproof.application.services.content_hash_service import (
    BLAKE3,
    SHA256,
    SUPPORTED_ALGORITHMS,
    Blake3ContentHashService,
    Sha256ContentHashService,
    create_content_addresser,
)
from docproof.application.services.orphan_materializer import OrphanMaterializer
from docproof.application.services.reconciliation_service import (
    DEFAULT_SWEEP_PAGE_SIZE,
    ReconciliationService,
)
from docproof.application.services.registration_coordinator import (
    RegistrationCoordinator,
)
from docproof.application.services.time_authority_service import SystemTimeAuthority
from docproof.application.services.verification_coordinator import (
    VerificationCoordinator,
)

__all__: list[str] = [
    "BLAKE3",
    "DEFAULT_SWEEP_PAGE_SIZE",
    "SHA256",
    "SUPPORTED_ALGORITHMS",
    "Blake3ContentHashService",
    "LoggingMixin",
    "OrphanMaterializer",
    "ReconciliationService",
    "RegistrationCoordinator",
    "Sha256ContentHashService",
    "SystemTimeAuthority",
    "VerificationCoordinator",
    "create_content_addresser",
]

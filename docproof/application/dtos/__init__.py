"""Data transfer objects returned by the DocProof coordinators."""

from docproof.application.dtos.reconciliation import ReconciliationReport
from docproof.application.dtos.registration import (
    DEFAULT_CONTENT_TYPE,
    DuplicateSource,
    RegistrationOutcome,
    RegistrationRequest,
    RegistrationResult,
)
from docproof.application.dtos.verification import (
    VerificationResult,
    VerificationStatus,
)

__all__: list[str] = [
    "DEFAULT_CONTENT_TYPE",
    "DuplicateSource",
    "ReconciliationReport",
    "RegistrationOutcome",
    "RegistrationRequest",
    "RegistrationResult",
    "VerificationResult",
    "VerificationStatus",
]

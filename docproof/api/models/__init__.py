"""API request/response models."""

from docproof.api.models.documents import (
    DocumentListResponse,
    DocumentRecordResponse,
    ErrorResponse,
    ListDocumentsQuery,
    RegisterDocumentRequest,
    RegistrationResponse,
    StatisticsResponse,
    VerificationResponse,
    VerifyDigestRequest,
)

__all__ = [
    "DocumentListResponse",
    "DocumentRecordResponse",
    "ErrorResponse",
    "ListDocumentsQuery",
    "RegisterDocumentRequest",
    "RegistrationResponse",
    "StatisticsResponse",
    "VerificationResponse",
    "VerifyDigestRequest",
]

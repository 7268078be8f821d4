"""Document proof API models.

Pydantic models for inbound document requests and outbound results.

Inbound models are the validation layer: every field bound is enforced
here, so requests that reach the coordinators are already well-formed.
Outbound models serialize coordinator results into response shapes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from docproof.application.dtos.registration import (
    DEFAULT_CONTENT_TYPE,
    RegistrationRequest,
    RegistrationResult,
)
from docproof.application.dtos.verification import VerificationResult
from docproof.application.ports.document_index import (
    MAX_PAGE_SIZE,
    DocumentFilter,
    DocumentPage,
    DocumentSort,
    IndexStatistics,
    PageRequest,
    SortDirection,
    SortField,
)
from docproof.domain.exceptions import DocProofError
from docproof.domain.models import (
    ANONYMOUS_SUBMITTER,
    MAX_DESCRIPTION_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
    DescriptiveMetadata,
    DocumentCategory,
    LocalDocumentRecord,
)

MIN_SUBMITTER_LENGTH = 3
MAX_SUBMITTER_LENGTH = 100
MAX_FILE_NAME_LENGTH = 255


class RegisterDocumentRequest(BaseModel):
    """Request model for registering a document.

    The document bytes travel separately (multipart upload); this model
    carries the descriptive fields.
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "file_name": "deed-2024.pdf",
                "content_type": "application/pdf",
                "submitted_by": "Jane Registrar",
                "description": "Property deed for lot 42",
                "category": "property",
                "tags": ["deed", "2024"],
            }
        }
    )

    file_name: str = Field(min_length=1, max_length=MAX_FILE_NAME_LENGTH)
    content_type: str = Field(default=DEFAULT_CONTENT_TYPE, min_length=1)
    submitted_by: Optional[str] = Field(
        default=None,
        description="Submitter label; anonymous when omitted",
    )
    description: str = Field(default="", max_length=MAX_DESCRIPTION_LENGTH)
    category: DocumentCategory = DocumentCategory.OTHER
    tags: list[str] = Field(default_factory=list)

    @field_validator("submitted_by")
    @classmethod
    def _check_submitter(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        if len(value) < MIN_SUBMITTER_LENGTH:
            raise ValueError(
                f"submitted_by must be at least {MIN_SUBMITTER_LENGTH} characters long"
            )
        if len(value) > MAX_SUBMITTER_LENGTH:
            raise ValueError(
                f"submitted_by cannot exceed {MAX_SUBMITTER_LENGTH} characters"
            )
        return value

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: object) -> object:
        # Form submissions send tags as one comma-separated string
        if value is None or isinstance(value, str):
            return list(DescriptiveMetadata.parse_tags(value))
        return value

    @field_validator("tags")
    @classmethod
    def _check_tags(cls, value: list[str]) -> list[str]:
        tags = list(DescriptiveMetadata.parse_tags(value))
        if len(tags) > MAX_TAGS:
            raise ValueError(f"cannot have more than {MAX_TAGS} tags")
        if any(len(tag) > MAX_TAG_LENGTH for tag in tags):
            raise ValueError(f"each tag cannot exceed {MAX_TAG_LENGTH} characters")
        return tags

    def to_request(self, content: bytes) -> RegistrationRequest:
        """Combine the validated fields with the uploaded bytes."""
        return RegistrationRequest(
            content=content,
            file_name=self.file_name,
            content_type=self.content_type,
            submitted_by=self.submitted_by or ANONYMOUS_SUBMITTER,
            description=self.description,
            category=self.category,
            tags=tuple(self.tags),
        )


class VerifyDigestRequest(BaseModel):
    """Request model for verifying an asserted digest."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "digest": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"
            }
        }
    )

    digest: str = Field(
        pattern=r"^\s*[a-fA-F0-9]{64}\s*$",
        description="64-character hexadecimal digest",
    )


class ListDocumentsQuery(BaseModel):
    """Query parameters for listing indexed documents."""

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=MAX_PAGE_SIZE)
    category: Optional[DocumentCategory] = None
    verified: Optional[bool] = None
    submitted_by: Optional[str] = Field(default=None, max_length=MAX_SUBMITTER_LENGTH)
    sort_by: SortField = SortField.CREATED_AT
    sort_order: SortDirection = SortDirection.DESC

    def to_filter(self) -> DocumentFilter:
        return DocumentFilter(
            category=self.category,
            verified=self.verified,
            submitted_by_pattern=self.submitted_by or None,
        )

    def to_sort(self) -> DocumentSort:
        return DocumentSort(field=self.sort_by, direction=self.sort_order)

    def to_page_request(self) -> PageRequest:
        return PageRequest.for_page(self.page, self.limit)


class DescriptiveMetadataResponse(BaseModel):
    description: str
    category: str
    tags: list[str]
    schema_version: str


class DocumentRecordResponse(BaseModel):
    """Response model for one indexed document."""

    digest: str
    ledger_identity: str
    file_name: str
    size: int = Field(ge=0)
    content_type: str
    submitted_by: str
    metadata: DescriptiveMetadataResponse
    registration_tx_reference: str
    registration_sequence_number: int = Field(ge=0)
    network: str
    created_at: datetime
    verified: bool
    verification_count: int = Field(ge=0)
    last_verified_at: Optional[datetime] = None
    status: str

    @classmethod
    def from_record(cls, record: LocalDocumentRecord) -> DocumentRecordResponse:
        metadata = record.descriptive_metadata
        return cls(
            digest=record.digest.hex,
            ledger_identity=record.ledger_identity,
            file_name=record.file_name,
            size=record.size,
            content_type=record.content_type,
            submitted_by=record.submitted_by,
            metadata=DescriptiveMetadataResponse(
                description=metadata.description,
                category=metadata.category.value,
                tags=list(metadata.tags),
                schema_version=metadata.schema_version,
            ),
            registration_tx_reference=record.registration_tx_reference,
            registration_sequence_number=record.registration_sequence_number,
            network=record.network,
            created_at=record.created_at,
            verified=record.verified,
            verification_count=record.verification_count,
            last_verified_at=record.last_verified_at,
            status=record.status.value,
        )


class ErrorResponse(BaseModel):
    """Structured error: which layer decided and whether a retry is safe."""

    error: str
    message: str
    digest: Optional[str] = None
    layer: str
    retry_safe: bool
    effect_unknown: bool = False
    tx_reference: Optional[str] = None

    @classmethod
    def from_error(cls, error: DocProofError) -> ErrorResponse:
        return cls(
            error=error.__class__.__name__,
            message=str(error),
            digest=error.digest,
            layer=error.layer,
            retry_safe=error.retry_safe,
            effect_unknown=bool(getattr(error, "effect_unknown", False)),
            tx_reference=getattr(error, "tx_reference", None),
        )


class RegistrationResponse(BaseModel):
    """Response model for a registration attempt."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "outcome": "registered",
                "digest": "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
                "ledger_identity": "0x9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08",
                "registration_tx_reference": "0x5c50...",
                "sequence_number": 12,
                "network": "31337",
                "descriptive_metadata": {
                    "description": "Property deed for lot 42",
                    "category": "property",
                    "tags": ["deed"],
                    "schema_version": "1.0",
                },
            }
        }
    )

    outcome: str
    digest: str
    ledger_identity: str
    registration_tx_reference: Optional[str] = None
    sequence_number: Optional[int] = None
    network: Optional[str] = None
    descriptive_metadata: Optional[DescriptiveMetadataResponse] = None
    existing_record: Optional[DocumentRecordResponse] = None
    duplicate_source: Optional[str] = None
    error: Optional[ErrorResponse] = None

    @classmethod
    def from_result(cls, result: RegistrationResult) -> RegistrationResponse:
        record = DocumentRecordResponse.from_record(result.record) if result.record else None
        receipt = result.receipt
        return cls(
            outcome=result.outcome.value,
            digest=result.digest.hex,
            ledger_identity=result.digest.ledger_identity,
            registration_tx_reference=receipt.tx_reference if receipt else None,
            sequence_number=receipt.sequence_number if receipt else None,
            network=receipt.network if receipt else None,
            descriptive_metadata=record.metadata if record and result.succeeded else None,
            existing_record=record if result.is_duplicate else None,
            duplicate_source=(
                result.duplicate_source.value if result.duplicate_source else None
            ),
            error=ErrorResponse.from_error(result.error) if result.error else None,
        )


class LedgerObservationResponse(BaseModel):
    existed_at_call_time: bool
    owner: Optional[str] = None
    registered_at: Optional[datetime] = None
    metadata: Optional[str] = None
    tx_reference: Optional[str] = None


class VerificationResponse(BaseModel):
    """Response model for a verification."""

    verified: bool
    status: str
    digest: str
    local_record: Optional[DocumentRecordResponse] = None
    ledger_observation: Optional[LedgerObservationResponse] = None
    divergence: bool
    healed: bool = False

    @classmethod
    def from_result(cls, result: VerificationResult) -> VerificationResponse:
        observation = None
        if result.ledger_observation is not None:
            observed = result.ledger_observation.observed_record
            observation = LedgerObservationResponse(
                existed_at_call_time=result.ledger_observation.existed_at_call_time,
                owner=observed.owner if observed else None,
                registered_at=observed.registered_at if observed else None,
                metadata=observed.metadata if observed else None,
                tx_reference=result.ledger_observation.tx_reference,
            )
        return cls(
            verified=result.verified,
            status=result.status.value,
            digest=result.digest.hex,
            local_record=(
                DocumentRecordResponse.from_record(result.local_record)
                if result.local_record
                else None
            ),
            ledger_observation=observation,
            divergence=result.divergence,
            healed=result.healed,
        )


class PaginationResponse(BaseModel):
    current_page: int = Field(ge=1)
    total_pages: int = Field(ge=0)
    total_documents: int = Field(ge=0)
    documents_per_page: int = Field(ge=1, le=MAX_PAGE_SIZE)
    has_next_page: bool
    has_prev_page: bool


class DocumentListResponse(BaseModel):
    """Response model for a page of indexed documents."""

    documents: list[DocumentRecordResponse]
    pagination: PaginationResponse

    @classmethod
    def from_page(cls, page: DocumentPage) -> DocumentListResponse:
        return cls(
            documents=[DocumentRecordResponse.from_record(r) for r in page.records],
            pagination=PaginationResponse(
                current_page=page.current_page,
                total_pages=page.total_pages,
                total_documents=page.total,
                documents_per_page=page.page.limit,
                has_next_page=page.has_next,
                has_prev_page=page.has_previous,
            ),
        )


class GroupCountResponse(BaseModel):
    key: str
    count: int = Field(ge=0)


class RecentDocumentResponse(BaseModel):
    digest: str
    file_name: str
    submitted_by: str
    created_at: datetime
    verified: bool


class StatisticsResponse(BaseModel):
    """Response model for index statistics."""

    total_documents: int = Field(ge=0)
    verified_documents: int = Field(ge=0)
    total_verifications: int = Field(ge=0)
    by_category: list[GroupCountResponse]
    by_status: list[GroupCountResponse]
    by_network: list[GroupCountResponse]
    recent_documents: list[RecentDocumentResponse]

    @classmethod
    def from_statistics(cls, stats: IndexStatistics) -> StatisticsResponse:
        def groups(items) -> list[GroupCountResponse]:
            return [GroupCountResponse(key=item.key, count=item.count) for item in items]

        return cls(
            total_documents=stats.total_count,
            verified_documents=stats.verified_count,
            total_verifications=stats.total_verifications,
            by_category=groups(stats.by_category),
            by_status=groups(stats.by_status),
            by_network=groups(stats.by_network),
            recent_documents=[
                RecentDocumentResponse(
                    digest=item.digest,
                    file_name=item.file_name,
                    submitted_by=item.submitted_by,
                    created_at=item.created_at,
                    verified=item.verified,
                )
                for item in stats.recent
            ],
        )

"""Domain models for DocProof."""

from docproof.domain.models.document_record import (
    DEFAULT_SCHEMA_VERSION,
    MAX_DESCRIPTION_LENGTH,
    MAX_TAG_LENGTH,
    MAX_TAGS,
    DescriptiveMetadata,
    DocumentCategory,
    LocalDocumentRecord,
    RecordStatus,
)
from docproof.domain.models.ledger_metadata import (
    ANONYMOUS_SUBMITTER,
    METADATA_MAX_BYTES,
    TRUNCATION_MARKER,
    LedgerMetadata,
    metadata_byte_length,
    truncate_metadata,
)
from docproof.domain.models.ledger_record import LedgerRecord

__all__: list[str] = [
    "ANONYMOUS_SUBMITTER",
    "DEFAULT_SCHEMA_VERSION",
    "MAX_DESCRIPTION_LENGTH",
    "MAX_TAGS",
    "MAX_TAG_LENGTH",
    "METADATA_MAX_BYTES",
    "TRUNCATION_MARKER",
    "DescriptiveMetadata",
    "DocumentCategory",
    "LedgerMetadata",
    "LedgerRecord",
    "LocalDocumentRecord",
    "RecordStatus",
    "metadata_byte_length",
    "truncate_metadata",
]

"""Persistence adapters."""

from docproof.infrastructure.adapters.persistence.postgres_document_index import (
    SCHEMA_STATEMENTS,
    PostgresDocumentIndex,
)

__all__: list[str] = ["SCHEMA_STATEMENTS", "PostgresDocumentIndex"]

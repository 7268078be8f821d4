"""Unit tests for ledger metadata encoding and truncation."""

import json
from datetime import datetime, timezone

import pytest

from docproof.domain.models import (
    ANONYMOUS_SUBMITTER,
    METADATA_MAX_BYTES,
    TRUNCATION_MARKER,
    LedgerMetadata,
    metadata_byte_length,
    truncate_metadata,
)

UPLOADED_AT = datetime(2026, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


class TestTruncateMetadata:
    """Tests for the byte-bounded truncation policy."""

    def test_short_text_unchanged(self) -> None:
        assert truncate_metadata("hello") == "hello"

    def test_exactly_at_bound_unchanged(self) -> None:
        text = "a" * METADATA_MAX_BYTES
        assert truncate_metadata(text) == text

    def test_oversized_text_truncated_with_marker(self) -> None:
        result = truncate_metadata("a" * 300)
        assert metadata_byte_length(result) == METADATA_MAX_BYTES
        assert result.endswith(TRUNCATION_MARKER)
        assert result.startswith("a" * 253)

    def test_multibyte_characters_never_split(self) -> None:
        # Each character is 3 bytes in UTF-8
        text = "€" * 200
        result = truncate_metadata(text)
        assert metadata_byte_length(result) <= METADATA_MAX_BYTES
        assert result.endswith(TRUNCATION_MARKER)
        kept = result[: -len(TRUNCATION_MARKER)]
        assert set(kept) == {"€"}
        # 253 bytes hold 84 whole characters
        assert len(kept) == 84

    def test_custom_limit(self) -> None:
        result = truncate_metadata("abcdefghij", limit=8)
        assert result == "abcde..."

    def test_limit_must_exceed_marker(self) -> None:
        with pytest.raises(ValueError):
            truncate_metadata("abcdef", limit=3)


class TestLedgerMetadata:
    """Tests for the camelCase JSON payload."""

    def test_payload_uses_camel_case_keys(self) -> None:
        metadata = LedgerMetadata(
            file_name="deed.pdf",
            file_type="application/pdf",
            uploaded_by="alice",
            uploaded_at=UPLOADED_AT,
            description="Property deed",
            category="property",
        )
        data = json.loads(metadata.to_payload())
        assert data == {
            "fileName": "deed.pdf",
            "fileType": "application/pdf",
            "uploadedBy": "alice",
            "uploadedAt": UPLOADED_AT.isoformat(),
            "description": "Property deed",
            "category": "property",
        }

    def test_empty_submitter_becomes_anonymous(self) -> None:
        metadata = LedgerMetadata(
            file_name="a.txt",
            file_type="text/plain",
            uploaded_by="",
            uploaded_at=UPLOADED_AT,
        )
        assert json.loads(metadata.to_payload())["uploadedBy"] == ANONYMOUS_SUBMITTER

    def test_encode_bounds_long_description(self) -> None:
        metadata = LedgerMetadata(
            file_name="a.txt",
            file_type="text/plain",
            uploaded_by="alice",
            uploaded_at=UPLOADED_AT,
            description="x" * 1000,
        )
        encoded = metadata.encode()
        assert metadata_byte_length(encoded) == METADATA_MAX_BYTES
        assert encoded.endswith(TRUNCATION_MARKER)

    def test_decode_reads_back_payload(self) -> None:
        metadata = LedgerMetadata(
            file_name="a.txt",
            file_type="text/plain",
            uploaded_by="alice",
            uploaded_at=UPLOADED_AT,
            description="short",
            category="legal",
        )
        assert LedgerMetadata.decode(metadata.encode()) == metadata

    @pytest.mark.parametrize(
        "payload",
        [
            '{"fileName":"a.txt","descr...',  # truncated
            "[1, 2, 3]",
            "not json",
            '{"fileName":"a.txt","uploadedAt":"yesterday"}',
        ],
    )
    def test_decode_returns_none_for_unreadable_payload(self, payload: str) -> None:
        assert LedgerMetadata.decode(payload) is None

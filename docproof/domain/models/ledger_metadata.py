"""Ledger metadata payload and truncation policy.

The ledger stores a bounded opaque string with every registration. DocProof
writes a compact JSON object describing the upload, truncated to the
ledger's byte bound with a trailing ellipsis marker when oversized.

Truncation works on UTF-8 bytes because the ledger measures bytes. A
multi-byte character is never split; when the cut falls inside one, the
whole character is dropped and the result is a few bytes shorter than the
bound.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime

METADATA_MAX_BYTES = 256
TRUNCATION_MARKER = "..."
ANONYMOUS_SUBMITTER = "anonymous"


def metadata_byte_length(text: str) -> int:
    """Length of text as the ledger measures it."""
    return len(text.encode("utf-8"))


def truncate_metadata(text: str, limit: int = METADATA_MAX_BYTES) -> str:
    """Truncate metadata to the ledger bound, marking the cut.

    Text within the bound is returned unchanged. Oversized text is cut so
    that the result including the marker is at most limit bytes.

    Args:
        text: Metadata string to bound.
        limit: Maximum size in UTF-8 bytes.

    Returns:
        The bounded metadata string.

    Raises:
        ValueError: If limit cannot even hold the marker.

    Example:
        >>> len(truncate_metadata("a" * 300))
        256
        >>> truncate_metadata("a" * 300).endswith("...")
        True
    """
    marker_length = metadata_byte_length(TRUNCATION_MARKER)
    if limit <= marker_length:
        raise ValueError(f"limit must exceed {marker_length} bytes, got {limit}")

    encoded = text.encode("utf-8")
    if len(encoded) <= limit:
        return text

    kept = encoded[: limit - marker_length].decode("utf-8", errors="ignore")
    return f"{kept}{TRUNCATION_MARKER}"


@dataclass(frozen=True)
class LedgerMetadata:
    """Description of an upload as written to the ledger.

    Serialized with the original camelCase keys so records written by other
    clients of the same registry remain readable.

    Attributes:
        file_name: Original file name.
        file_type: MIME type of the upload.
        uploaded_by: Submitter label ("anonymous" when not given).
        uploaded_at: When the registration was prepared (UTC).
        description: Free-text description.
        category: Category value.
    """

    file_name: str
    file_type: str
    uploaded_by: str
    uploaded_at: datetime
    description: str = ""
    category: str = "other"

    def to_payload(self) -> str:
        """Compact JSON payload, not yet bounded."""
        return json.dumps(
            {
                "fileName": self.file_name,
                "fileType": self.file_type,
                "uploadedBy": self.uploaded_by or ANONYMOUS_SUBMITTER,
                "uploadedAt": self.uploaded_at.isoformat(),
                "description": self.description,
                "category": self.category,
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )

    def encode(self, limit: int = METADATA_MAX_BYTES) -> str:
        """JSON payload bounded to the ledger limit."""
        return truncate_metadata(self.to_payload(), limit)

    @classmethod
    def decode(cls, text: str) -> LedgerMetadata | None:
        """Parse a payload read back from the ledger.

        Truncated or foreign payloads are not valid JSON objects; those
        return None rather than raising.
        """
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            return None
        if not isinstance(data, dict):
            return None

        try:
            uploaded_at = datetime.fromisoformat(str(data.get("uploadedAt", "")))
        except ValueError:
            return None

        return cls(
            file_name=str(data.get("fileName", "")),
            file_type=str(data.get("fileType", "")),
            uploaded_by=str(data.get("uploadedBy") or ANONYMOUS_SUBMITTER),
            uploaded_at=uploaded_at,
            description=str(data.get("description", "")),
            category=str(data.get("category", "other")),
        )

"""Input validation errors.

Raised before any store is touched. The caller can always recover by
resubmitting corrected input.
"""

from __future__ import annotations

from docproof.domain.exceptions import DocProofError


class InvalidInputError(DocProofError):
    """Raised when a request carries malformed or oversized input.

    Attributes:
        field: Name of the offending field.
        reason: Why the value was rejected.
    """

    layer = "input"

    def __init__(self, field: str, reason: str, digest: str | None = None) -> None:
        """Initialize the error.

        Args:
            field: Name of the offending field.
            reason: Why the value was rejected.
            digest: Digest the request referred to, if known.
        """
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid {field}: {reason}", digest=digest)


class InvalidDigestFormatError(InvalidInputError):
    """Raised when an asserted digest is not 64 hexadecimal characters.

    Usage:
        raise InvalidDigestFormatError("abc")
    """

    def __init__(self, value: str) -> None:
        """Initialize the error.

        Args:
            value: The rejected digest text (truncated in the message).
        """
        self.value = value
        shown = value if len(value) <= 80 else f"{value[:77]}..."
        super().__init__(
            field="digest",
            reason=f"expected 64 hexadecimal characters, got {shown!r}",
        )

"""DocumentDigest value object.

A DocumentDigest is the 256-bit identity of a document's content. It is the
natural key in both the ledger and the local index.

Representations:
- canonical: 64 lowercase hexadecimal characters
- ledger identity: the same value as a 0x-prefixed bytes32 string
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from docproof.domain.errors.validation import InvalidDigestFormatError

DIGEST_SIZE_BYTES = 32
DIGEST_HEX_LENGTH = DIGEST_SIZE_BYTES * 2
LEDGER_IDENTITY_PREFIX = "0x"

_CANONICAL_HEX = re.compile(r"^[0-9a-f]{64}$")


@dataclass(frozen=True, order=True)
class DocumentDigest:
    """Immutable 256-bit content identity.

    Construct from raw digest bytes with from_bytes(), from user-supplied
    text with parse(), or from a ledger identity with from_ledger_identity().

    Attributes:
        hex: Canonical lowercase hexadecimal form (64 characters).

    Example:
        >>> digest = DocumentDigest.parse("AB" * 32)
        >>> digest.hex == "ab" * 32
        True
        >>> digest.ledger_identity.startswith("0x")
        True
    """

    hex: str

    def __post_init__(self) -> None:
        """Validate canonical form.

        Raises:
            InvalidDigestFormatError: If hex is not 64 lowercase hex chars.
        """
        if not isinstance(self.hex, str) or not _CANONICAL_HEX.match(self.hex):
            raise InvalidDigestFormatError(str(self.hex))

    @classmethod
    def from_bytes(cls, raw: bytes) -> DocumentDigest:
        """Create a digest from 32 raw bytes.

        Raises:
            InvalidDigestFormatError: If raw is not exactly 32 bytes.
        """
        if len(raw) != DIGEST_SIZE_BYTES:
            raise InvalidDigestFormatError(raw.hex())
        return cls(raw.hex())

    @classmethod
    def parse(cls, value: str) -> DocumentDigest:
        """Parse an asserted digest supplied by a caller.

        Surrounding whitespace is ignored and hexadecimal letters are
        folded to lowercase. Nothing else is accepted: no 0x prefix, no
        separators, exactly 64 characters.

        Args:
            value: The asserted digest text.

        Returns:
            The canonical DocumentDigest.

        Raises:
            InvalidDigestFormatError: If value is not 64 hex characters.
        """
        if not isinstance(value, str):
            raise InvalidDigestFormatError(repr(value))
        return cls(value.strip().lower())

    @classmethod
    def from_ledger_identity(cls, identity: str) -> DocumentDigest:
        """Create a digest from its 0x-prefixed ledger form.

        Raises:
            InvalidDigestFormatError: If identity is not 0x + 64 hex chars.
        """
        if not isinstance(identity, str) or not identity.lower().startswith(
            LEDGER_IDENTITY_PREFIX
        ):
            raise InvalidDigestFormatError(str(identity))
        return cls.parse(identity[len(LEDGER_IDENTITY_PREFIX) :])

    @classmethod
    def zero(cls) -> DocumentDigest:
        """The all-zero digest, which the ledger always rejects."""
        return cls("0" * DIGEST_HEX_LENGTH)

    @property
    def ledger_identity(self) -> str:
        """The ledger's record identity for this digest (0x + hex)."""
        return f"{LEDGER_IDENTITY_PREFIX}{self.hex}"

    @property
    def is_zero(self) -> bool:
        return self.hex == "0" * DIGEST_HEX_LENGTH

    def to_bytes(self) -> bytes:
        return bytes.fromhex(self.hex)

    def short(self) -> str:
        """Abbreviated form for log lines."""
        return f"{self.hex[:10]}..."

    def __str__(self) -> str:
        return self.hex

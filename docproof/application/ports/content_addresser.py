"""Content addresser protocol.

Derives the DocumentDigest identity of a document from its bytes. The
operation is pure: no I/O, no failure mode for any finite input.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from docproof.domain.value_objects import DocumentDigest


class ContentAddresserProtocol(Protocol):
    """Protocol for deriving document digests.

    Attributes:
        algorithm: Name of the hash algorithm ("sha256", "blake3").
    """

    algorithm: str

    def digest(self, content: bytes) -> DocumentDigest:
        """Digest a complete document.

        Args:
            content: Document bytes (may be empty).

        Returns:
            The 256-bit DocumentDigest of content.
        """
        ...

    def digest_stream(self, chunks: Iterable[bytes]) -> DocumentDigest:
        """Digest a document supplied as a sequence of chunks.

        The result equals digest(b"".join(chunks)).
        """
        ...

    def matches(self, content: bytes, expected: DocumentDigest) -> bool:
        """Constant-time check that content hashes to expected."""
        ...

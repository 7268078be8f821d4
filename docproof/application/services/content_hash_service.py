"""Content hash services implementing ContentAddresserProtocol.

Two interchangeable 256-bit addressers are provided:

- Sha256ContentHashService (default): SHA-256, the digest browsers and
  other registry clients compute with the Web Crypto API, so asserted
  digests computed client-side match server-side registrations.
- Blake3ContentHashService: BLAKE3 in default (unkeyed) mode, for
  deployments whose ledger holds only BLAKE3 registrations.

Both are pure and deterministic: identical bytes always give the identical
digest, across calls and across processes, and the empty input is valid.

Usage:
    from docproof.application.services.content_hash_service import (
        create_content_addresser,
    )

    addresser = create_content_addresser("sha256")
    digest = addresser.digest(b"document bytes")
"""

from __future__ import annotations

import hashlib
import hmac
from collections.abc import Iterable

import blake3

from docproof.application.services.base import LoggingMixin
from docproof.domain.value_objects import DocumentDigest

SHA256 = "sha256"
BLAKE3 = "blake3"
SUPPORTED_ALGORITHMS: tuple[str, ...] = (SHA256, BLAKE3)


class Sha256ContentHashService(LoggingMixin):
    """SHA-256 implementation of content addressing.

    Attributes:
        algorithm: "sha256".
        HASH_SIZE: Fixed output size in bytes (32).
    """

    algorithm: str = SHA256
    HASH_SIZE: int = 32

    def __init__(self) -> None:
        self._init_logger(component="addressing")

    def digest(self, content: bytes) -> DocumentDigest:
        """Hash raw bytes to a DocumentDigest.

        Args:
            content: Raw document bytes (may be empty).

        Returns:
            The SHA-256 DocumentDigest.
        """
        return DocumentDigest.from_bytes(hashlib.sha256(content).digest())

    def digest_stream(self, chunks: Iterable[bytes]) -> DocumentDigest:
        """Hash a document supplied in chunks without joining them."""
        hasher = hashlib.sha256()
        for chunk in chunks:
            hasher.update(chunk)
        return DocumentDigest.from_bytes(hasher.digest())

    def matches(self, content: bytes, expected: DocumentDigest) -> bool:
        """Verify that content hashes to expected.

        Performs constant-time comparison using hmac.compare_digest().
        """
        actual = self.digest(content)
        return hmac.compare_digest(actual.to_bytes(), expected.to_bytes())


class Blake3ContentHashService(Sha256ContentHashService):
    """BLAKE3 implementation of content addressing.

    Uses BLAKE3's default mode (not keyed or derive_key mode), whose fixed
    output is 32 bytes.
    """

    algorithm: str = BLAKE3

    def digest(self, content: bytes) -> DocumentDigest:
        return DocumentDigest.from_bytes(blake3.blake3(content).digest())

    def digest_stream(self, chunks: Iterable[bytes]) -> DocumentDigest:
        hasher = blake3.blake3()
        for chunk in chunks:
            hasher.update(chunk)
        return DocumentDigest.from_bytes(hasher.digest())


def create_content_addresser(algorithm: str = SHA256) -> Sha256ContentHashService:
    """Build the addresser for a configured algorithm name.

    Args:
        algorithm: "sha256" or "blake3" (case-insensitive).

    Raises:
        ValueError: If the algorithm is not supported.
    """
    name = algorithm.strip().lower()
    if name == SHA256:
        return Sha256ContentHashService()
    if name == BLAKE3:
        return Blake3ContentHashService()
    raise ValueError(
        f"Unsupported digest algorithm {algorithm!r}; "
        f"expected one of {', '.join(SUPPORTED_ALGORITHMS)}"
    )

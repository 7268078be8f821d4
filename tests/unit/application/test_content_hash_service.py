"""Unit tests for content hash services."""

import hashlib

import blake3
import pytest

from docproof.application.services.content_hash_service import (
    BLAKE3,
    SHA256,
    Blake3ContentHashService,
    Sha256ContentHashService,
    create_content_addresser,
)
from docproof.domain.value_objects import DocumentDigest


class TestSha256ContentHashService:
    """Tests for the default SHA-256 addresser."""

    @pytest.fixture
    def service(self) -> Sha256ContentHashService:
        return Sha256ContentHashService()

    def test_digest_matches_sha256(self, service: Sha256ContentHashService) -> None:
        content = b"Hello, DocProof"
        assert service.digest(content).hex == hashlib.sha256(content).hexdigest()

    def test_digest_is_deterministic(self, service: Sha256ContentHashService) -> None:
        content = b"same bytes"
        assert service.digest(content) == service.digest(content)
        assert service.digest(content) == Sha256ContentHashService().digest(content)

    def test_different_content_gives_different_digest(
        self, service: Sha256ContentHashService
    ) -> None:
        assert service.digest(b"document A") != service.digest(b"document B")

    def test_empty_content_is_valid(self, service: Sha256ContentHashService) -> None:
        digest = service.digest(b"")
        assert digest.hex == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_stream_equals_whole(self, service: Sha256ContentHashService) -> None:
        chunks = [b"part one, ", b"part two, ", b"", b"part three"]
        assert service.digest_stream(chunks) == service.digest(b"".join(chunks))

    def test_matches(self, service: Sha256ContentHashService) -> None:
        digest = service.digest(b"content")
        assert service.matches(b"content", digest)
        assert not service.matches(b"tampered", digest)

    def test_algorithm_name(self, service: Sha256ContentHashService) -> None:
        assert service.algorithm == SHA256


class TestBlake3ContentHashService:
    """Tests for the BLAKE3 addresser."""

    def test_digest_matches_blake3(self) -> None:
        content = b"Hello, DocProof"
        digest = Blake3ContentHashService().digest(content)
        assert digest.hex == blake3.blake3(content).hexdigest()

    def test_differs_from_sha256(self) -> None:
        content = b"Hello, DocProof"
        assert (
            Blake3ContentHashService().digest(content)
            != Sha256ContentHashService().digest(content)
        )

    def test_stream_equals_whole(self) -> None:
        service = Blake3ContentHashService()
        chunks = [b"a" * 2000, b"b" * 3000]
        assert service.digest_stream(chunks) == service.digest(b"".join(chunks))

    def test_returns_document_digest(self) -> None:
        assert isinstance(Blake3ContentHashService().digest(b""), DocumentDigest)


class TestCreateContentAddresser:
    def test_default_is_sha256(self) -> None:
        assert create_content_addresser().algorithm == SHA256

    def test_name_is_case_insensitive(self) -> None:
        addresser = create_content_addresser(" BLAKE3 ")
        assert isinstance(addresser, Blake3ContentHashService)
        assert addresser.algorithm == BLAKE3

    def test_unknown_algorithm_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unsupported digest algorithm"):
            create_content_addresser("md5")

"""Proof service configuration.

Environment Variables:
- DOCPROOF_DIGEST_ALGORITHM: Content addressing algorithm, "sha256" or
  "blake3" (default: sha256)
- DOCPROOF_HEAL_ORPHANS: Materialize ledger-only records found during
  verification (default: false)
"""

from __future__ import annotations

from dataclasses import dataclass

from docproof.application.services.content_hash_service import (
    SHA256,
    SUPPORTED_ALGORITHMS,
)
from docproof.config._env import _get_bool_env, _get_str_env


@dataclass(frozen=True)
class ProofConfig:
    """Configuration for registration and verification.

    Attributes:
        digest_algorithm: Content addressing algorithm. Every client of one
            registry must use the same algorithm or verification fails.
        heal_orphans: Whether verification materializes orphans instead of
            reporting NOT_REGISTERED.
    """

    digest_algorithm: str = SHA256
    heal_orphans: bool = False

    def __post_init__(self) -> None:
        if self.digest_algorithm not in SUPPORTED_ALGORITHMS:
            raise ValueError(
                f"digest_algorithm must be one of {SUPPORTED_ALGORITHMS}, "
                f"got {self.digest_algorithm!r}"
            )

    @classmethod
    def from_environment(cls) -> ProofConfig:
        return cls(
            digest_algorithm=_get_str_env("DOCPROOF_DIGEST_ALGORITHM", SHA256).lower(),
            heal_orphans=_get_bool_env("DOCPROOF_HEAL_ORPHANS", False),
        )


DEFAULT_PROOF_CONFIG = ProofConfig()

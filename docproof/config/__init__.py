"""Configuration module for DocProof."""

from docproof.config.ledger_config import (
    DEFAULT_CONFIRMATION_TIMEOUT_SECONDS,
    DEFAULT_CONFIRMATIONS,
    DEFAULT_LEDGER_ACCOUNT,
    DEFAULT_LEDGER_CONFIG,
    DEFAULT_SUBMISSION_TIMEOUT_SECONDS,
    TEST_LEDGER_CONFIG,
    LedgerConfig,
)
from docproof.config.proof_config import DEFAULT_PROOF_CONFIG, ProofConfig

__all__ = [
    "DEFAULT_CONFIRMATIONS",
    "DEFAULT_CONFIRMATION_TIMEOUT_SECONDS",
    "DEFAULT_LEDGER_ACCOUNT",
    "DEFAULT_LEDGER_CONFIG",
    "DEFAULT_PROOF_CONFIG",
    "DEFAULT_SUBMISSION_TIMEOUT_SECONDS",
    "TEST_LEDGER_CONFIG",
    "LedgerConfig",
    "ProofConfig",
]

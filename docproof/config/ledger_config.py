"""Ledger client configuration.

Controls how long the registry client waits for confirmations and how
metadata is bounded before submission.

Environment Variables:
- DOCPROOF_LEDGER_CONFIRMATION_TIMEOUT: Seconds to wait for a receipt (default: 60.0)
- DOCPROOF_LEDGER_SUBMISSION_TIMEOUT: Seconds to wait for a transaction hash (default: 30.0)
- DOCPROOF_LEDGER_CONFIRMATIONS: Blocks required for confirmation (default: 1)
- DOCPROOF_LEDGER_METADATA_MAX_BYTES: Contract metadata bound (default: 256)
- DOCPROOF_LEDGER_ACCOUNT: Sending account address for the development ledger
"""

from __future__ import annotations

from dataclasses import dataclass

from docproof.config._env import _get_float_env, _get_int_env, _get_str_env
from docproof.domain.models import METADATA_MAX_BYTES, TRUNCATION_MARKER

DEFAULT_CONFIRMATION_TIMEOUT_SECONDS = 60.0
DEFAULT_SUBMISSION_TIMEOUT_SECONDS = 30.0
DEFAULT_CONFIRMATIONS = 1
DEFAULT_LEDGER_ACCOUNT = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


@dataclass(frozen=True)
class LedgerConfig:
    """Configuration for the ledger registry client.

    Attributes:
        confirmation_timeout_seconds: Maximum wait for a transaction receipt.
            Exceeding it yields ConfirmationTimeoutError (effect unknown).
        submission_timeout_seconds: Maximum wait for the node to accept a
            transaction and return its hash. Exceeding it yields
            LedgerUnavailableError (effect unknown).
        confirmations: Number of blocks a transaction needs before it
            counts as confirmed.
        metadata_max_bytes: The contract's metadata bound in UTF-8 bytes.
        account: Sending account address used when the bootstrap builds a
            development ledger.
    """

    confirmation_timeout_seconds: float = DEFAULT_CONFIRMATION_TIMEOUT_SECONDS
    submission_timeout_seconds: float = DEFAULT_SUBMISSION_TIMEOUT_SECONDS
    confirmations: int = DEFAULT_CONFIRMATIONS
    metadata_max_bytes: int = METADATA_MAX_BYTES
    account: str = DEFAULT_LEDGER_ACCOUNT

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.confirmation_timeout_seconds <= 0:
            raise ValueError(
                "confirmation_timeout_seconds must be positive, "
                f"got {self.confirmation_timeout_seconds}"
            )
        if self.submission_timeout_seconds <= 0:
            raise ValueError(
                "submission_timeout_seconds must be positive, "
                f"got {self.submission_timeout_seconds}"
            )
        if self.confirmations < 1:
            raise ValueError(
                f"confirmations must be at least 1, got {self.confirmations}"
            )
        if self.metadata_max_bytes <= len(TRUNCATION_MARKER):
            raise ValueError(
                f"metadata_max_bytes must exceed {len(TRUNCATION_MARKER)}, "
                f"got {self.metadata_max_bytes}"
            )
        if not self.account.startswith("0x"):
            raise ValueError(f"account must be a 0x-prefixed address, got {self.account}")

    @classmethod
    def from_environment(cls) -> LedgerConfig:
        """Create config from environment variables with defaults.

        Returns:
            LedgerConfig with values from environment or defaults.
        """
        return cls(
            confirmation_timeout_seconds=_get_float_env(
                "DOCPROOF_LEDGER_CONFIRMATION_TIMEOUT",
                DEFAULT_CONFIRMATION_TIMEOUT_SECONDS,
            ),
            submission_timeout_seconds=_get_float_env(
                "DOCPROOF_LEDGER_SUBMISSION_TIMEOUT",
                DEFAULT_SUBMISSION_TIMEOUT_SECONDS,
            ),
            confirmations=_get_int_env("DOCPROOF_LEDGER_CONFIRMATIONS", DEFAULT_CONFIRMATIONS),
            metadata_max_bytes=_get_int_env(
                "DOCPROOF_LEDGER_METADATA_MAX_BYTES", METADATA_MAX_BYTES
            ),
            account=_get_str_env("DOCPROOF_LEDGER_ACCOUNT", DEFAULT_LEDGER_ACCOUNT),
        )


# Default production config
DEFAULT_LEDGER_CONFIG = LedgerConfig()

# Testing config: confirmation waits time out quickly, submissions get more room
TEST_LEDGER_CONFIG = LedgerConfig(
    confirmation_timeout_seconds=0.05,
    submission_timeout_seconds=1.0,
)

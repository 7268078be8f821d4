"""Ledger adapters."""

from docproof.infrastructure.adapters.ledger.registry_client import (
    LedgerRegistryClient,
)

__all__: list[str] = ["LedgerRegistryClient"]

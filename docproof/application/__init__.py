"""
Application layer - Use cases and orchestration for DocProof.

This layer contains:
- Coordinators for registration, verification and reconciliation
- Port definitions (abstract interfaces for infrastructure)
- Request/result DTOs

IMPORT RULES:
- CAN import from: domain
- CANNOT import from: infrastructure, api
"""

from docproof.application.ports import (
    DocumentIndexProtocol,
    LedgerGatewayProtocol,
    LedgerRegistryProtocol,
)

__all__: list[str] = [
    "DocumentIndexProtocol",
    "LedgerGatewayProtocol",
    "LedgerRegistryProtocol",
]

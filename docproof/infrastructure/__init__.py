"""
Infrastructure layer - External adapters for DocProof.

This layer contains:
- Ledger registry client (error translation over a ledger gateway)
- PostgreSQL document index
- In-memory stubs for the ledger and the index
- Structured logging setup

IMPORT RULES:
- CAN import from: domain, application
- Implements ports defined in application layer
"""

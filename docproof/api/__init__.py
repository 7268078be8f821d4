"""
API layer - External interface models for DocProof.

IMPORT RULES:
- CAN import from: application, domain
- CANNOT import from: infrastructure
"""

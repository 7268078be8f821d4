"""
DocProof - Document proof-of-existence registry

Registers content digests of documents on an append-only ledger and keeps a
queryable local index of those registrations, so that anyone can later check
that a piece of content matches a previously registered record.

Operating rules:
- The ledger is the source of truth; the local index is a rebuildable mirror
- Ledger effects are confirmed before anything is written locally
- Ambiguous ledger outcomes are never reported as success
"""

__version__ = "0.1.0"
__all__ = ["__version__"]

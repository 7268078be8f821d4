"""Test helpers for DocProof tests.

Helpers:
    FakeTimeAuthority: Controllable time authority for deterministic tests
    make_record: Builds a LocalDocumentRecord with sensible defaults

Usage:
    from tests.helpers import FakeTimeAuthority, make_record
"""

from tests.helpers.fake_time_authority import FakeTimeAuthority
from tests.helpers.records import make_record

__all__ = ["FakeTimeAuthority", "make_record"]

"""Clock port.

Registration stamps created_at and the metadata uploadedAt, verification
stamps last_verified_at, and the development ledger stamps block times.
All of them read this port rather than the host clock, which lets tests
freeze and advance time. Production binds SystemTimeAuthority; tests
bind FakeTimeAuthority from tests/helpers.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Source of wall-clock and monotonic time."""

    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware, in UTC."""
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a clock that never goes backwards; compare only differences."""
        ...

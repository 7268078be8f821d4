"""System time authority.

Production implementation of TimeAuthorityProtocol backed by the host
clock. Timestamps are always timezone-aware UTC.
"""

import time
from datetime import datetime, timezone

from docproof.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Time authority reading the system clock.

    Example:
        >>> authority = SystemTimeAuthority()
        >>> authority.now().tzinfo is not None
        True
    """

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

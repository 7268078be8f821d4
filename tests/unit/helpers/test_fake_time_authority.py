"""Tests for the FakeTimeAuthority test helper.

Other tests rely on it for deterministic timestamps, so its own
behavior is pinned here.
"""

from datetime import datetime, timedelta, timezone

import pytest

from docproof.application.ports.time_authority import TimeAuthorityProtocol
from tests.helpers.fake_time_authority import DEFAULT_FROZEN_AT, FakeTimeAuthority


class TestFakeTimeAuthority:
    def test_implements_protocol(self) -> None:
        assert isinstance(FakeTimeAuthority(), TimeAuthorityProtocol)

    def test_default_time_is_predictable(self) -> None:
        fake_time = FakeTimeAuthority()

        assert fake_time.now() == DEFAULT_FROZEN_AT
        assert fake_time.now() == fake_time.now()

    def test_naive_time_is_taken_as_utc(self) -> None:
        fake_time = FakeTimeAuthority(frozen_at=datetime(2026, 3, 1, 12, 0))

        assert fake_time.now() == datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def test_advance_moves_both_clocks(self) -> None:
        fake_time = FakeTimeAuthority(start_monotonic=100.0)

        fake_time.advance(seconds=30)
        fake_time.advance(delta=timedelta(minutes=1))

        assert fake_time.now() == DEFAULT_FROZEN_AT + timedelta(seconds=90)
        assert fake_time.monotonic() == pytest.approx(190.0)
        assert fake_time.elapsed_monotonic == pytest.approx(90.0)

    def test_set_time_leaves_monotonic_clock(self) -> None:
        fake_time = FakeTimeAuthority()
        target = datetime(2027, 6, 1, tzinfo=timezone.utc)

        fake_time.set_time(target)

        assert fake_time.now() == target
        assert fake_time.monotonic() == 0.0

    @pytest.mark.parametrize("kwargs", [{}, {"seconds": -1}])
    def test_invalid_advance(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            FakeTimeAuthority().advance(**kwargs)

    def test_repr_shows_current_time(self) -> None:
        assert "2026-01-01T00:00:00+00:00" in repr(FakeTimeAuthority())

"""Tests for lease timing helpers."""

from datetime import datetime, timedelta

from worldnotes.domains.notes import lease

T0 = datetime(2026, 1, 1, 12, 0, 0)


class TestLeaseTiming:
    """Lease constants and staleness boundaries."""

    def test_defaults(self) -> None:
        """Five minute lease renewed every two minutes."""
        assert lease.LEASE_TTL == timedelta(minutes=5)
        assert lease.HEARTBEAT_INTERVAL == timedelta(minutes=2)
        assert lease.HEARTBEAT_INTERVAL < lease.LEASE_TTL / 2
        assert lease.MAX_VERSIONS_PER_NOTE == 50

    def test_heartbeat_interval_scales_with_ttl(self) -> None:
        assert lease.heartbeat_interval_for(timedelta(seconds=50)) == timedelta(seconds=20)

    def test_not_stale_at_exact_ttl(self) -> None:
        """A lease is stale only once strictly more than the TTL has passed."""
        assert not lease.is_stale(T0, T0 + timedelta(seconds=300))
        assert lease.is_stale(T0, T0 + timedelta(seconds=301))

    def test_missing_timestamp_is_stale(self) -> None:
        assert lease.is_stale(None, T0)

    def test_stale_cutoff_and_expiry(self) -> None:
        assert lease.stale_cutoff(T0) == T0 - timedelta(minutes=5)
        assert lease.expires_at(T0) == T0 + timedelta(minutes=5)

    def test_held_for_seconds(self) -> None:
        assert lease.held_for_seconds(T0, T0 + timedelta(seconds=90, milliseconds=500)) == 90
        assert lease.held_for_seconds(None, T0) == 0
        # Clock skew never reports negative durations
        assert lease.held_for_seconds(T0, T0 - timedelta(seconds=5)) == 0

    def test_utcnow_is_naive(self) -> None:
        assert lease.utcnow().tzinfo is None

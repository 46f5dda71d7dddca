"""Lease timing policy for note edit locks.

Pure functions only. Staleness is checked lazily when someone tries to acquire a
lock, so nothing here schedules work. All timestamps are naive UTC, matching the
``DateTime`` columns they are compared against.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

LEASE_TTL = timedelta(minutes=5)

# One missed heartbeat must not let the lease lapse
HEARTBEAT_INTERVAL = LEASE_TTL / 2.5

MAX_VERSIONS_PER_NOTE = 50

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def heartbeat_interval_for(ttl: timedelta) -> timedelta:
    return ttl / 2.5


def stale_cutoff(now: datetime, ttl: timedelta = LEASE_TTL) -> datetime:
    """Leases acquired or renewed before this instant are stale"""
    return now - ttl


def is_stale(acquired_at: Optional[datetime], now: datetime, ttl: timedelta = LEASE_TTL) -> bool:
    if acquired_at is None:
        return True
    return now - acquired_at > ttl


def expires_at(acquired_at: datetime, ttl: timedelta = LEASE_TTL) -> datetime:
    return acquired_at + ttl


def held_for_seconds(acquired_at: Optional[datetime], now: datetime) -> int:
    if acquired_at is None:
        return 0
    return max(0, int((now - acquired_at).total_seconds()))

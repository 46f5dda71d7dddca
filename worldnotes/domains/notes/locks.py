"""Pessimistic edit leases for shared notes.

The lock lives in three columns on the note row (holder, holder name, acquired
at). Each operation is one conditional UPDATE followed by a commit; when two
requests race for the same note the database lets exactly one UPDATE match.
Stale leases are reclaimed lazily by the next ``acquire``.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from worldnotes.db.repositories.note_repository import NoteRepository
from worldnotes.domains.notes import lease
from worldnotes.domains.notes.entities import Principal

logger = logging.getLogger(__name__)


class LockStatus(str, Enum):
    GRANTED = "granted"
    RENEWED = "renewed"
    RELEASED = "released"
    CONFLICT = "conflict"


@dataclass
class LockResult:
    status: LockStatus
    note_id: uuid.UUID
    holder_id: Optional[uuid.UUID] = None
    holder_name: Optional[str] = None
    held_since: Optional[datetime] = None
    held_for_seconds: int = 0
    expires_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.status != LockStatus.CONFLICT


class LockManager:
    """Acquire, renew, release and force-release note edit leases"""

    def __init__(
        self,
        session: AsyncSession,
        clock: lease.Clock = lease.utcnow,
        ttl: timedelta = lease.LEASE_TTL,
    ):
        self.session = session
        self.clock = clock
        self.ttl = ttl
        self.note_repository = NoteRepository(session)

    async def acquire(self, note_id: uuid.UUID, principal: Principal) -> LockResult:
        """Grant the lease if the note is unlocked, already held by the caller,
        or held by someone whose lease has gone stale."""
        now = self.clock()
        previous = await self.note_repository.get_by_uuid(note_id)

        acquired = await self.note_repository.try_acquire_lock(
            note_id,
            holder_id=principal.user_id,
            holder_name=principal.name,
            now=now,
            stale_before=lease.stale_cutoff(now, self.ttl),
        )
        if not acquired:
            await self.session.rollback()
            return await self._conflict(note_id, principal, "acquire")

        await self.session.commit()

        if previous and previous.locked_by and previous.locked_by != principal.user_id:
            logger.info(
                f"Reclaimed stale lock on note {note_id} from {previous.locked_by} "
                f"(held {lease.held_for_seconds(previous.locked_at, now)}s) for {principal.user_id}"
            )
        logger.info(f"Lock on note {note_id} granted to {principal.user_id}")

        return LockResult(
            status=LockStatus.GRANTED,
            note_id=note_id,
            holder_id=principal.user_id,
            holder_name=principal.name,
            held_since=now,
            expires_at=lease.expires_at(now, self.ttl),
        )

    async def heartbeat(self, note_id: uuid.UUID, principal: Principal) -> LockResult:
        """Refresh the lease timestamp; only the current holder may do this"""
        now = self.clock()
        renewed = await self.note_repository.refresh_lock(note_id, principal.user_id, now)
        if not renewed:
            await self.session.rollback()
            return await self._conflict(note_id, principal, "heartbeat")

        await self.session.commit()
        logger.debug(f"Lock on note {note_id} renewed by {principal.user_id}")
        return LockResult(
            status=LockStatus.RENEWED,
            note_id=note_id,
            holder_id=principal.user_id,
            holder_name=principal.name,
            held_since=now,
            expires_at=lease.expires_at(now, self.ttl),
        )

    async def release(self, note_id: uuid.UUID, principal: Principal) -> LockResult:
        released = await self.note_repository.release_lock(note_id, principal.user_id)
        if not released:
            await self.session.rollback()
            return await self._conflict(note_id, principal, "release")

        await self.session.commit()
        logger.info(f"Lock on note {note_id} released by {principal.user_id}")
        return LockResult(status=LockStatus.RELEASED, note_id=note_id)

    async def force_release(self, note_id: uuid.UUID, acting: Principal) -> LockResult:
        """Clear the lock whoever holds it. Callers must check elevated permission first."""
        previous = await self.note_repository.get_by_uuid(note_id)
        await self.note_repository.force_release_lock(note_id)
        await self.session.commit()

        logger.info(
            f"Lock on note {note_id} force-released by {acting.user_id} "
            f"(was held by {previous.locked_by if previous else None})"
        )
        return LockResult(status=LockStatus.RELEASED, note_id=note_id)

    async def _conflict(self, note_id: uuid.UUID, principal: Principal, action: str) -> LockResult:
        current = await self.note_repository.get_by_uuid(note_id)
        now = self.clock()

        result = LockResult(status=LockStatus.CONFLICT, note_id=note_id)
        if current is not None and current.locked_by is not None:
            result.holder_id = current.locked_by
            result.holder_name = current.locked_by_name
            result.held_since = current.locked_at
            result.held_for_seconds = lease.held_for_seconds(current.locked_at, now)
            if current.locked_at is not None:
                result.expires_at = lease.expires_at(current.locked_at, self.ttl)

        logger.info(
            f"Lock {action} on note {note_id} by {principal.user_id} refused, "
            f"held by {result.holder_id}"
        )
        return result

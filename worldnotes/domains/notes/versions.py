import logging
import uuid
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from worldnotes.core.errors import NotFoundError
from worldnotes.db.repositories.version_repository import NoteVersionRepository
from worldnotes.domains.notes import lease
from worldnotes.domains.notes.entities import Note, NoteVersion

logger = logging.getLogger(__name__)


class VersionStore:
    """Bounded, append-only snapshot history per note.

    ``snapshot`` runs inside the caller's transaction, wrapped in a savepoint:
    if writing history fails, only the savepoint is rolled back and the
    caller's save goes ahead.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: lease.Clock = lease.utcnow,
        max_versions: int = lease.MAX_VERSIONS_PER_NOTE,
    ):
        self.session = session
        self.clock = clock
        self.max_versions = max_versions
        self.version_repository = NoteVersionRepository(session)

    async def snapshot(self, note: Note, author_id: uuid.UUID) -> Optional[NoteVersion]:
        """Record the note's current content. Never raises on storage errors."""
        version = NoteVersion.capture(note, author_id, created_at=self.clock())
        try:
            async with self.session.begin_nested():
                created = await self.version_repository.create(version)
                await self.prune(note.uuid)
        except SQLAlchemyError:
            logger.exception(f"Failed to snapshot note {note.uuid}, continuing without a version")
            return None
        return created

    async def prune(self, note_id: uuid.UUID) -> int:
        """Drop the oldest snapshots beyond the retention bound"""
        count = await self.version_repository.count_by_note(note_id)
        excess = count - self.max_versions
        if excess <= 0:
            return 0

        deleted = await self.version_repository.delete_oldest(note_id, excess)
        logger.debug(f"Pruned {deleted} old versions of note {note_id}")
        return deleted

    async def list(self, note_id: uuid.UUID) -> List[NoteVersion]:
        return await self.version_repository.get_by_note(note_id, limit=self.max_versions)

    async def get(self, version_id: uuid.UUID) -> NoteVersion:
        version = await self.version_repository.get_by_uuid(version_id)
        if version is None:
            raise NotFoundError("note version not found")
        return version

from typing import List, Optional
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from worldnotes.db.models.note import NoteVersionModel
from worldnotes.domains.notes.entities import NoteVersion


class NoteVersionRepository:
    """Append-only storage for note snapshots"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, version: NoteVersion) -> NoteVersion:
        db_version = NoteVersionModel(
            uuid=version.uuid,
            note_id=version.note_id,
            author_id=version.author_id,
            title=version.title,
            content=version.content,
            content_html=version.content_html,
            created_at=version.created_at,
            updated_at=version.created_at,
        )
        self.session.add(db_version)
        await self.session.flush()
        return self._to_domain(db_version)

    async def get_by_uuid(self, version_uuid: uuid.UUID) -> Optional[NoteVersion]:
        result = await self.session.execute(
            select(NoteVersionModel).where(NoteVersionModel.uuid == version_uuid)
        )
        db_version = result.scalar_one_or_none()
        return self._to_domain(db_version) if db_version else None

    async def get_by_note(self, note_id: uuid.UUID, limit: int = 50) -> List[NoteVersion]:
        """Newest first"""
        result = await self.session.execute(
            select(NoteVersionModel)
            .where(NoteVersionModel.note_id == note_id)
            .order_by(NoteVersionModel.created_at.desc(), NoteVersionModel.id.desc())
            .limit(limit)
        )
        return [self._to_domain(db_version) for db_version in result.scalars().all()]

    async def count_by_note(self, note_id: uuid.UUID) -> int:
        result = await self.session.execute(
            select(func.count(NoteVersionModel.id)).where(NoteVersionModel.note_id == note_id)
        )
        return result.scalar() or 0

    async def delete_oldest(self, note_id: uuid.UUID, count: int) -> int:
        """Delete the ``count`` oldest versions of a note"""
        if count <= 0:
            return 0

        oldest = await self.session.execute(
            select(NoteVersionModel.id)
            .where(NoteVersionModel.note_id == note_id)
            .order_by(NoteVersionModel.created_at.asc(), NoteVersionModel.id.asc())
            .limit(count)
        )
        ids = list(oldest.scalars().all())
        if not ids:
            return 0

        result = await self.session.execute(
            delete(NoteVersionModel)
            .where(NoteVersionModel.id.in_(ids))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def _to_domain(self, db_version: NoteVersionModel) -> NoteVersion:
        return NoteVersion(
            uuid=db_version.uuid,
            note_id=db_version.note_id,
            author_id=db_version.author_id,
            title=db_version.title,
            content=db_version.content,
            content_html=db_version.content_html,
            created_at=db_version.created_at,
        )

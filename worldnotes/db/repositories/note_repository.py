from datetime import datetime
from typing import List, Optional
import uuid

from sqlalchemy import and_, delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from worldnotes.db.models.note import NoteModel
from worldnotes.domains.notes.entities import Note, Visibility


class NoteRepository:
    """Data access for notes and their edit-lock columns.

    Methods never commit: the calling service owns the transaction. Every lock
    method is a single conditional UPDATE whose WHERE clause encodes the expected
    lock state, so the database row is the only synchronization point.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, note: Note) -> Note:
        db_note = NoteModel(
            uuid=note.uuid,
            campaign_id=note.campaign_id,
            owner_id=note.owner_id,
            entity_id=note.entity_id,
            title=note.title,
            content=note.content,
            content_html=note.content_html,
            color=note.color,
            pinned=note.pinned,
            visibility=note.visibility.value,
            last_edited_by=note.last_edited_by,
        )
        self.session.add(db_note)
        await self.session.flush()
        await self.session.refresh(db_note)
        return self._to_domain(db_note)

    async def get_by_uuid(self, note_uuid: uuid.UUID) -> Optional[Note]:
        result = await self.session.execute(
            select(NoteModel)
            .where(NoteModel.uuid == note_uuid)
            .execution_options(populate_existing=True)
        )
        db_note = result.scalar_one_or_none()
        return self._to_domain(db_note) if db_note else None

    async def list_visible(
        self,
        campaign_id: uuid.UUID,
        user_id: uuid.UUID,
        scope: str = "all",
        entity_id: Optional[uuid.UUID] = None,
    ) -> List[Note]:
        """Own notes plus shared notes in a campaign, pinned first then most recent"""
        query = select(NoteModel).where(
            and_(
                NoteModel.campaign_id == campaign_id,
                or_(
                    NoteModel.owner_id == user_id,
                    NoteModel.visibility == Visibility.SHARED.value,
                ),
            )
        )
        if scope == "entity":
            query = query.where(NoteModel.entity_id == entity_id)
        elif scope == "campaign":
            query = query.where(NoteModel.entity_id.is_(None))

        result = await self.session.execute(
            query.order_by(NoteModel.pinned.desc(), NoteModel.updated_at.desc(), NoteModel.id.desc())
        )
        return [self._to_domain(db_note) for db_note in result.scalars().all()]

    async def write_content(
        self,
        note: Note,
        editor_id: uuid.UUID,
        now: datetime,
        required_holder: Optional[uuid.UUID] = None,
    ) -> bool:
        """Persist title/content/html. With ``required_holder`` the write only
        lands if that user still holds the lock."""
        stmt = update(NoteModel).where(NoteModel.uuid == note.uuid)
        if required_holder is not None:
            stmt = stmt.where(NoteModel.locked_by == required_holder)

        result = await self.session.execute(
            stmt.values(
                title=note.title,
                content=note.content,
                content_html=note.content_html,
                last_edited_by=editor_id,
                updated_at=now,
            ).execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def write_settings(self, note: Note, now: datetime) -> bool:
        values = {
            "color": note.color,
            "pinned": note.pinned,
            "visibility": note.visibility.value,
            "updated_at": now,
        }
        if not note.is_shared:
            # Private notes never carry a lock
            values.update(locked_by=None, locked_by_name=None, locked_at=None)

        result = await self.session.execute(
            update(NoteModel)
            .where(NoteModel.uuid == note.uuid)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def delete(self, note_uuid: uuid.UUID) -> bool:
        """Delete a note; its versions go with it through ON DELETE CASCADE"""
        result = await self.session.execute(
            delete(NoteModel)
            .where(NoteModel.uuid == note_uuid)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def try_acquire_lock(
        self,
        note_uuid: uuid.UUID,
        holder_id: uuid.UUID,
        holder_name: str,
        now: datetime,
        stale_before: datetime,
    ) -> bool:
        """Take the lock if it is free, already ours, or stale"""
        result = await self.session.execute(
            update(NoteModel)
            .where(
                and_(
                    NoteModel.uuid == note_uuid,
                    NoteModel.visibility == Visibility.SHARED.value,
                    or_(
                        NoteModel.locked_by.is_(None),
                        NoteModel.locked_by == holder_id,
                        NoteModel.locked_at < stale_before,
                    ),
                )
            )
            .values(locked_by=holder_id, locked_by_name=holder_name[:100], locked_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def refresh_lock(self, note_uuid: uuid.UUID, holder_id: uuid.UUID, now: datetime) -> bool:
        result = await self.session.execute(
            update(NoteModel)
            .where(and_(NoteModel.uuid == note_uuid, NoteModel.locked_by == holder_id))
            .values(locked_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def release_lock(self, note_uuid: uuid.UUID, holder_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            update(NoteModel)
            .where(and_(NoteModel.uuid == note_uuid, NoteModel.locked_by == holder_id))
            .values(locked_by=None, locked_by_name=None, locked_at=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def force_release_lock(self, note_uuid: uuid.UUID) -> bool:
        result = await self.session.execute(
            update(NoteModel)
            .where(NoteModel.uuid == note_uuid)
            .values(locked_by=None, locked_by_name=None, locked_at=None)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    def _to_domain(self, db_note: NoteModel) -> Note:
        return Note(
            uuid=db_note.uuid,
            campaign_id=db_note.campaign_id,
            owner_id=db_note.owner_id,
            title=db_note.title,
            content=db_note.content,
            content_html=db_note.content_html,
            visibility=Visibility(db_note.visibility),
            entity_id=db_note.entity_id,
            color=db_note.color,
            pinned=db_note.pinned,
            last_edited_by=db_note.last_edited_by,
            locked_by=db_note.locked_by,
            locked_by_name=db_note.locked_by_name,
            locked_at=db_note.locked_at,
            created_at=db_note.created_at,
            updated_at=db_note.updated_at,
        )

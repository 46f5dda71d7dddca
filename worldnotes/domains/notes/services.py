import logging
import uuid
from datetime import timedelta
from typing import Any, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from worldnotes.core.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from worldnotes.db.repositories.note_repository import NoteRepository
from worldnotes.domains.notes import lease
from worldnotes.domains.notes.entities import (
    DEFAULT_COLOR, DEFAULT_TITLE, MAX_TITLE_LENGTH, Note, NoteVersion, Principal, Visibility,
)
from worldnotes.domains.notes.locks import LockManager, LockResult, LockStatus
from worldnotes.domains.notes.versions import VersionStore

logger = logging.getLogger(__name__)


def normalize_title(title: Optional[str]) -> str:
    title = (title or "").strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"title must be {MAX_TITLE_LENGTH} characters or less")
    return title or DEFAULT_TITLE


class NoteEditCoordinator:
    """Entry point for every note operation.

    Shared notes can only be changed by the current lock holder; private notes
    only by their owner, with no locking at all. Every content change (update or
    restore) snapshots the state it is about to replace, so the version list is
    always a stack of superseded states.
    """

    def __init__(
        self,
        session: AsyncSession,
        clock: lease.Clock = lease.utcnow,
        ttl: timedelta = lease.LEASE_TTL,
        max_versions: int = lease.MAX_VERSIONS_PER_NOTE,
    ):
        self.session = session
        self.clock = clock
        self.ttl = ttl
        self.note_repository = NoteRepository(session)
        self.lock_manager = LockManager(session, clock=clock, ttl=ttl)
        self.version_store = VersionStore(session, clock=clock, max_versions=max_versions)

    # Notes

    async def create_note(
        self,
        principal: Principal,
        title: Optional[str] = None,
        content: Any = None,
        content_html: Optional[str] = None,
        entity_id: Optional[uuid.UUID] = None,
        color: Optional[str] = None,
        visibility: Visibility = Visibility.PRIVATE,
    ) -> Note:
        self._require_collaborator(principal)
        note = Note.create_note(
            campaign_id=principal.campaign_id,
            owner_id=principal.user_id,
            title=normalize_title(title),
            content=content,
            content_html=content_html,
            visibility=visibility,
            entity_id=entity_id,
            color=(color or "").strip() or DEFAULT_COLOR,
        )
        created = await self.note_repository.create(note)
        await self.session.commit()
        logger.info(f"Note {created.uuid} created by {principal.user_id} ({visibility.value})")
        return created

    async def get_note(self, note_id: uuid.UUID, principal: Principal) -> Note:
        note = await self.note_repository.get_by_uuid(note_id)
        if note is None or not note.is_visible_to(principal):
            raise NotFoundError("note not found")
        return note

    async def list_notes(
        self,
        principal: Principal,
        scope: str = "all",
        entity_id: Optional[uuid.UUID] = None,
    ) -> List[Note]:
        if scope == "entity" and entity_id is None:
            raise ValidationError("entity_id is required for entity scope")
        return await self.note_repository.list_visible(
            principal.campaign_id, principal.user_id, scope=scope, entity_id=entity_id
        )

    async def update_settings(
        self,
        note_id: uuid.UUID,
        principal: Principal,
        color: Optional[str] = None,
        pinned: Optional[bool] = None,
        visibility: Optional[Visibility] = None,
    ) -> Note:
        """Change display settings. Only the owner may pin or change visibility."""
        note = await self.get_note(note_id, principal)
        owner = note.is_owned_by(principal.user_id)
        if (pinned is not None or visibility is not None) and not owner:
            raise ForbiddenError("only the note owner can change pinned or visibility")

        if color is not None:
            note.color = color.strip() or DEFAULT_COLOR
        if pinned is not None:
            note.pinned = pinned
        if visibility is not None:
            note.visibility = visibility

        await self.note_repository.write_settings(note, self.clock())
        await self.session.commit()
        return await self.get_note(note_id, principal)

    async def delete_note(self, note_id: uuid.UUID, principal: Principal) -> None:
        note = await self.get_note(note_id, principal)
        if not note.is_owned_by(principal.user_id):
            raise ForbiddenError("only the note owner can delete it")
        await self.note_repository.delete(note_id)
        await self.session.commit()
        logger.info(f"Note {note_id} deleted by {principal.user_id}")

    # Locking

    async def acquire_lock(self, note_id: uuid.UUID, principal: Principal) -> LockResult:
        note = await self.get_note(note_id, principal)
        if not note.is_shared:
            # The owner edits private notes freely; the lock columns stay empty
            return LockResult(status=LockStatus.GRANTED, note_id=note_id, holder_id=principal.user_id, holder_name=principal.name)
        self._require_collaborator(principal)
        return await self.lock_manager.acquire(note_id, principal)

    async def heartbeat(self, note_id: uuid.UUID, principal: Principal) -> LockResult:
        note = await self.get_note(note_id, principal)
        if not note.is_shared:
            return LockResult(status=LockStatus.RENEWED, note_id=note_id, holder_id=principal.user_id, holder_name=principal.name)
        return await self.lock_manager.heartbeat(note_id, principal)

    async def release_lock(self, note_id: uuid.UUID, principal: Principal) -> LockResult:
        note = await self.get_note(note_id, principal)
        if not note.is_shared:
            return LockResult(status=LockStatus.RELEASED, note_id=note_id)
        return await self.lock_manager.release(note_id, principal)

    async def force_unlock(self, note_id: uuid.UUID, acting: Principal) -> LockResult:
        """Break any lock on the note. The caller must have checked ``acting.is_elevated``."""
        await self.get_note(note_id, acting)
        return await self.lock_manager.force_release(note_id, acting)

    # Content

    async def update_content(
        self,
        note_id: uuid.UUID,
        principal: Principal,
        title: Optional[str],
        content: Any,
        content_html: Optional[str] = None,
    ) -> Note:
        title = normalize_title(title)
        if content is None:
            raise ValidationError("content is required")

        note = await self.get_note(note_id, principal)
        required_holder = self._require_edit_right(note, principal)

        await self.version_store.snapshot(note, principal.user_id)

        note.title = title
        note.content = content
        note.content_html = content_html
        await self._persist_content(note, principal, required_holder)

        logger.info(f"Note {note_id} content updated by {principal.user_id}")
        return await self.get_note(note_id, principal)

    async def restore_version(self, note_id: uuid.UUID, principal: Principal, version_id: uuid.UUID) -> Note:
        note = await self.get_note(note_id, principal)
        required_holder = self._require_edit_right(note, principal)

        version = await self._get_note_version(note, version_id)

        await self.version_store.snapshot(note, principal.user_id)

        note.title = version.title
        note.content = version.content
        note.content_html = version.content_html
        await self._persist_content(note, principal, required_holder)

        logger.info(f"Note {note_id} restored to version {version_id} by {principal.user_id}")
        return await self.get_note(note_id, principal)

    # Versions

    async def list_versions(self, note_id: uuid.UUID, principal: Principal) -> List[NoteVersion]:
        note = await self.get_note(note_id, principal)
        return await self.version_store.list(note.uuid)

    async def get_version(self, note_id: uuid.UUID, principal: Principal, version_id: uuid.UUID) -> NoteVersion:
        note = await self.get_note(note_id, principal)
        return await self._get_note_version(note, version_id)

    # Helpers

    def _require_collaborator(self, principal: Principal) -> None:
        if not principal.can_collaborate:
            raise ForbiddenError("your campaign role does not allow editing notes")

    def _require_edit_right(self, note: Note, principal: Principal) -> Optional[uuid.UUID]:
        """Check the caller may change content now.

        Returns the lock holder the write must be conditioned on, or None for
        private notes.
        """
        if not note.is_shared:
            if not note.is_owned_by(principal.user_id):
                raise NotFoundError("note not found")
            return None

        self._require_collaborator(principal)
        if not note.is_locked_by(principal.user_id):
            raise self._conflict_from(note, "you must hold the edit lock to change this note")
        return principal.user_id

    async def _get_note_version(self, note: Note, version_id: uuid.UUID) -> NoteVersion:
        version = await self.version_store.get(version_id)
        if version.note_id != note.uuid:
            raise NotFoundError("note version not found")
        return version

    async def _persist_content(self, note: Note, principal: Principal, required_holder: Optional[uuid.UUID]) -> None:
        written = await self.note_repository.write_content(
            note, principal.user_id, self.clock(), required_holder=required_holder
        )
        if not written:
            # The lock moved between our check and the write; drop the snapshot too
            await self.session.rollback()
            current = await self.note_repository.get_by_uuid(note.uuid)
            if current is None:
                raise NotFoundError("note not found")
            raise self._conflict_from(current, "the edit lock was lost before the save")
        await self.session.commit()

    def _conflict_from(self, note: Note, message: str) -> ConflictError:
        return ConflictError(
            message,
            holder_id=note.locked_by,
            holder_name=note.locked_by_name,
            held_since=note.locked_at,
            held_for_seconds=lease.held_for_seconds(note.locked_at, self.clock()) if note.locked_at else None,
        )

import uuid
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Optional

DEFAULT_TITLE = "Untitled"
DEFAULT_COLOR = "#374151"
MAX_TITLE_LENGTH = 200
TITLE_PREVIEW_LENGTH = 80


class Visibility(str, Enum):
    PRIVATE = "private"
    SHARED = "shared"


class Role(IntEnum):
    """Campaign membership level, ordered so that ``role >= Role.PLAYER`` reads naturally"""
    NONE = 0
    PLAYER = 1
    SCRIBE = 2
    OWNER = 3


# Lowest role allowed to edit shared notes
MIN_COLLABORATION_ROLE = Role.PLAYER


class Principal:
    """The acting user within one campaign, as supplied by the identity resolver"""

    def __init__(self, user_id: uuid.UUID, name: str, campaign_id: uuid.UUID, role: Role = Role.PLAYER):
        self.user_id = user_id
        self.name = name
        self.campaign_id = campaign_id
        self.role = role

    @property
    def can_collaborate(self) -> bool:
        return self.role >= MIN_COLLABORATION_ROLE

    @property
    def is_elevated(self) -> bool:
        """Owner-level permission, required for force-unlock"""
        return self.role >= Role.OWNER

    def __repr__(self) -> str:
        return f"Principal(user_id={self.user_id}, name={self.name}, role={self.role.name})"


class Note:
    """A campaign note, the unit of collaborative editing"""

    def __init__(
        self,
        uuid: uuid.UUID,
        campaign_id: uuid.UUID,
        owner_id: uuid.UUID,
        title: str = DEFAULT_TITLE,
        content: Any = None,
        content_html: Optional[str] = None,
        visibility: Visibility = Visibility.PRIVATE,
        entity_id: Optional[uuid.UUID] = None,
        color: str = DEFAULT_COLOR,
        pinned: bool = False,
        last_edited_by: Optional[uuid.UUID] = None,
        locked_by: Optional[uuid.UUID] = None,
        locked_by_name: Optional[str] = None,
        locked_at: Optional[datetime] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.uuid = uuid
        self.campaign_id = campaign_id
        self.owner_id = owner_id
        self.title = title
        self.content = content if content is not None else []
        self.content_html = content_html
        self.visibility = visibility
        self.entity_id = entity_id
        self.color = color
        self.pinned = pinned
        self.last_edited_by = last_edited_by
        self.locked_by = locked_by
        self.locked_by_name = locked_by_name
        self.locked_at = locked_at
        self.created_at = created_at
        self.updated_at = updated_at

    @property
    def is_shared(self) -> bool:
        return self.visibility == Visibility.SHARED

    @property
    def is_locked(self) -> bool:
        return self.locked_by is not None

    def is_owned_by(self, user_id: uuid.UUID) -> bool:
        return self.owner_id == user_id

    def is_locked_by(self, user_id: uuid.UUID) -> bool:
        return self.locked_by is not None and self.locked_by == user_id

    def is_visible_to(self, principal: Principal) -> bool:
        """Owner or, for shared notes, any member of the same campaign"""
        if self.campaign_id != principal.campaign_id:
            return False
        return self.is_owned_by(principal.user_id) or self.is_shared

    @classmethod
    def create_note(
        cls,
        campaign_id: uuid.UUID,
        owner_id: uuid.UUID,
        title: str = DEFAULT_TITLE,
        content: Any = None,
        content_html: Optional[str] = None,
        visibility: Visibility = Visibility.PRIVATE,
        entity_id: Optional[uuid.UUID] = None,
        color: str = DEFAULT_COLOR,
    ) -> "Note":
        return cls(
            uuid=uuid.uuid4(),
            campaign_id=campaign_id,
            owner_id=owner_id,
            title=title,
            content=content,
            content_html=content_html,
            visibility=visibility,
            entity_id=entity_id,
            color=color,
            last_edited_by=owner_id,
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Note):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"Note(uuid={self.uuid}, title={self.title}, visibility={self.visibility.value}, locked_by={self.locked_by})"


class NoteVersion:
    """Immutable full-content snapshot of a note"""

    def __init__(
        self,
        uuid: uuid.UUID,
        note_id: uuid.UUID,
        author_id: uuid.UUID,
        title: str,
        content: Any,
        content_html: Optional[str] = None,
        created_at: Optional[datetime] = None,
    ):
        self.uuid = uuid
        self.note_id = note_id
        self.author_id = author_id
        self.title = title
        self.content = content
        self.content_html = content_html
        self.created_at = created_at

    @property
    def title_preview(self) -> str:
        if len(self.title) <= TITLE_PREVIEW_LENGTH:
            return self.title
        return self.title[:TITLE_PREVIEW_LENGTH - 1] + "…"

    @classmethod
    def capture(cls, note: Note, author_id: uuid.UUID, created_at: datetime) -> "NoteVersion":
        """Copy the note's current content state"""
        return cls(
            uuid=uuid.uuid4(),
            note_id=note.uuid,
            author_id=author_id,
            title=note.title,
            content=note.content,
            content_html=note.content_html,
            created_at=created_at,
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, NoteVersion):
            return False
        return self.uuid == other.uuid

    def __repr__(self) -> str:
        return f"NoteVersion(uuid={self.uuid}, note_id={self.note_id}, created_at={self.created_at})"

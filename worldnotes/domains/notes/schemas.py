from datetime import datetime
from typing import Any, List, Literal, Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator

from worldnotes.domains.notes.entities import MAX_TITLE_LENGTH, Visibility


class NoteCreate(BaseModel):
    """Payload for creating a note"""
    title: str = Field(default="", max_length=MAX_TITLE_LENGTH)
    content: Any = Field(default_factory=list)
    content_html: Optional[str] = None
    entity_id: Optional[uuid.UUID] = None
    color: Optional[str] = Field(None, max_length=20)
    visibility: Visibility = Visibility.PRIVATE


class NoteContentUpdate(BaseModel):
    """Payload for a content save. ``content`` is opaque editor state and is required."""
    title: str = Field(default="", max_length=MAX_TITLE_LENGTH)
    content: Any
    content_html: Optional[str] = None

    @field_validator('content')
    @classmethod
    def validate_content(cls, v):
        if v is None:
            raise ValueError('Content is required')
        return v


class NoteSettingsUpdate(BaseModel):
    color: Optional[str] = Field(None, min_length=1, max_length=20)
    pinned: Optional[bool] = None
    visibility: Optional[Visibility] = None


class NoteResponse(BaseModel):
    uuid: uuid.UUID
    campaign_id: uuid.UUID
    owner_id: uuid.UUID
    entity_id: Optional[uuid.UUID]
    title: str
    content: Any
    content_html: Optional[str]
    color: str
    pinned: bool
    visibility: Visibility
    last_edited_by: Optional[uuid.UUID]
    locked_by: Optional[uuid.UUID]
    locked_by_name: Optional[str]
    locked_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LockResponse(BaseModel):
    status: Literal["granted", "renewed", "released", "conflict"]
    note_id: uuid.UUID
    holder_id: Optional[uuid.UUID] = None
    holder_name: Optional[str] = None
    held_since: Optional[datetime] = None
    held_for_seconds: int = 0
    expires_at: Optional[datetime] = None
    lease_ttl_seconds: int
    heartbeat_interval_seconds: int


class VersionSummaryResponse(BaseModel):
    """Version list entry (metadata only)"""
    version_id: uuid.UUID
    author_id: uuid.UUID
    created_at: datetime
    title_preview: str


class VersionResponse(BaseModel):
    version_id: uuid.UUID
    note_id: uuid.UUID
    author_id: uuid.UUID
    title: str
    content: Any
    content_html: Optional[str]
    created_at: datetime


class VersionListResponse(BaseModel):
    note_id: uuid.UUID
    versions: List[VersionSummaryResponse]
    total: int

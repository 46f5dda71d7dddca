from sqlalchemy import JSON, UUID, Boolean, Column, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from worldnotes.db.base import BaseModel


class NoteModel(BaseModel):
    __tablename__ = "notes"

    campaign_id = Column(UUID(as_uuid=True), nullable=False)
    owner_id = Column(UUID(as_uuid=True), nullable=False)
    entity_id = Column(UUID(as_uuid=True), nullable=True)  # NULL = campaign-wide
    title = Column(String(200), nullable=False, default="Untitled")
    content = Column(JSON, nullable=False)
    content_html = Column(Text, nullable=True)
    color = Column(String(20), nullable=False, default="#374151")
    pinned = Column(Boolean, nullable=False, default=False)
    visibility = Column(String(16), nullable=False, default="private")
    last_edited_by = Column(UUID(as_uuid=True), nullable=True)

    # Edit lease; all three are NULL when the note is unlocked
    locked_by = Column(UUID(as_uuid=True), nullable=True)
    locked_by_name = Column(String(100), nullable=True)
    locked_at = Column(DateTime, nullable=True)

    # Relationships
    versions = relationship(
        "NoteVersionModel",
        back_populates="note",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_notes_locked", "locked_by", "locked_at"),
        Index("idx_notes_campaign_visibility", "campaign_id", "visibility"),
        Index("idx_notes_owner_campaign", "owner_id", "campaign_id"),
    )


class NoteVersionModel(BaseModel):
    __tablename__ = "note_versions"

    note_id = Column(UUID(as_uuid=True), ForeignKey("notes.uuid", ondelete="CASCADE"), nullable=False)
    author_id = Column(UUID(as_uuid=True), nullable=False)
    title = Column(String(200), nullable=False, default="")
    content = Column(JSON, nullable=False)
    content_html = Column(Text, nullable=True)

    # Relationships
    note = relationship("NoteModel", back_populates="versions")

    __table_args__ = (
        Index("idx_note_versions_note", "note_id", "created_at"),
    )

from worldnotes.domains.notes.entities import Note, NoteVersion, Principal, Role, Visibility
from worldnotes.domains.notes.schemas import (
    NoteCreate, NoteContentUpdate, NoteSettingsUpdate, NoteResponse,
    LockResponse, VersionSummaryResponse, VersionResponse, VersionListResponse
)

__all__ = [
    "Note", "NoteVersion", "Principal", "Role", "Visibility",
    "NoteCreate", "NoteContentUpdate", "NoteSettingsUpdate", "NoteResponse",
    "LockResponse", "VersionSummaryResponse", "VersionResponse", "VersionListResponse",
]

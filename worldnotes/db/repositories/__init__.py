from worldnotes.db.repositories.note_repository import NoteRepository
from worldnotes.db.repositories.version_repository import NoteVersionRepository

__all__ = [
    "NoteRepository",
    "NoteVersionRepository",
]

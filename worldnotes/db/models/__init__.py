from worldnotes.db.models.note import NoteModel, NoteVersionModel

__all__ = [
    "NoteModel",
    "NoteVersionModel",
]

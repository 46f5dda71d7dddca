"""Application error types.

Every error the note services raise derives from ``AppError``. Each carries an
HTTP status code, a machine-readable ``type`` and a message that is safe to show
to the client; the FastAPI handler in ``worldnotes.main`` renders them.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, Optional


class AppError(Exception):
    """Base error for all domain errors"""

    code: int = 500
    type: str = "internal_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message}


class NotFoundError(AppError):
    code = 404
    type = "not_found"


class ValidationError(AppError):
    code = 422
    type = "validation_error"


class ForbiddenError(AppError):
    code = 403
    type = "forbidden"


class ConflictError(AppError):
    """The note is locked by someone else, or a mutation needs a lock the caller lacks."""

    code = 409
    type = "conflict"

    def __init__(
        self,
        message: str,
        holder_id: Optional[uuid.UUID] = None,
        holder_name: Optional[str] = None,
        held_since: Optional[datetime] = None,
        held_for_seconds: Optional[int] = None,
    ):
        super().__init__(message)
        self.holder_id = holder_id
        self.holder_name = holder_name
        self.held_since = held_since
        self.held_for_seconds = held_for_seconds

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "holder_id": str(self.holder_id) if self.holder_id else None,
            "holder_name": self.holder_name,
            "held_since": self.held_since.isoformat() if self.held_since else None,
            "held_for_seconds": self.held_for_seconds,
        })
        return data

import uuid

from sqlalchemy import UUID, Column, DateTime, Integer

from worldnotes.core.db import Base
from worldnotes.domains.notes.lease import utcnow


class BaseModel(Base):
    """Common columns: internal integer key, public uuid and timestamps"""

    __abstract__ = True

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(UUID(as_uuid=True), unique=True, index=True, nullable=False, default=uuid.uuid4)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

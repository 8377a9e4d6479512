"""SQLAlchemy model backing the generic document store."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, Index, JSON, String, func

from .session import Base


class Document(Base):
    """One JSON document of a named collection, keyed by (collection, id)."""

    __tablename__ = "documents"

    collection = Column(String(64), primary_key=True)
    id = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (Index("ix_documents_collection", "collection"),)

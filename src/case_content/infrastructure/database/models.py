"""SQLAlchemy database models."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class DocumentDB(Base):
    """SQLAlchemy model for the documents table.

    One row per document; ``collection`` separates cases from user records.
    """

    __tablename__ = "documents"

    collection = Column(String(50), primary_key=True)
    doc_id = Column(String(100), primary_key=True)

    body = Column(Text, nullable=False, default="{}")

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

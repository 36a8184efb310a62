from __future__ import annotations

from datetime import datetime
from typing import Optional
from sqlalchemy import (
    DateTime,
    Float,
    Index,
    String,
    Text,
    func,
    JSON,
)
from sqlalchemy.orm import Mapped, mapped_column

from memoraize.core.db.base import Base


class UserRecord(Base):
    """Per-user document; ``fields["flashcards"]`` is the ordered collection list."""

    __tablename__ = "user_records"

    user_id: Mapped[str] = mapped_column(String, primary_key=True)
    fields: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )


class CardRecord(Base):
    """One flashcard inside a collection's sub-store."""

    __tablename__ = "card_records"
    __table_args__ = (
        Index("ix_card_records_owner_collection", "user_id", "collection_name"),
    )

    id: Mapped[str] = mapped_column(String(20), primary_key=True)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    collection_name: Mapped[str] = mapped_column(String, nullable=False)
    front: Mapped[str] = mapped_column(Text, nullable=False)
    back: Mapped[str] = mapped_column(Text, nullable=False)
    date: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    thematic: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        server_default=func.now(),
        index=True,
    )


__all__ = ["UserRecord", "CardRecord"]

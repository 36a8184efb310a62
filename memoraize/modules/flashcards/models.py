"""Pydantic models for collections and flashcards.

Kept free of constraints so generated output and stored documents validate
the same way; emptiness checks belong to the views.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class Collection(BaseModel):
    """A named, user-owned grouping of flashcards."""

    name: str


class Flashcard(BaseModel):
    """A stored front/back card; ``id`` is assigned by the store."""

    id: Optional[str] = None
    front: str
    back: str
    date: Optional[float] = None
    thematic: Optional[str] = None


class CardDraft(BaseModel):
    front: str = ""
    back: str = ""

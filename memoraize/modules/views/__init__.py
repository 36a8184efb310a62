"""Screen controllers and their view-state models."""

from .base import Effect, effects_for
from .collections import CollectionView, CollectionViewState
from .flashcards import FlashcardView, FlashcardViewState
from .generate import GenerationView, GenerationViewState, Upload
from .sessions import ViewSession, ViewSessionManager, view_sessions

__all__ = [
    "Effect",
    "effects_for",
    "CollectionView",
    "CollectionViewState",
    "FlashcardView",
    "FlashcardViewState",
    "GenerationView",
    "GenerationViewState",
    "Upload",
    "ViewSession",
    "ViewSessionManager",
    "view_sessions",
]

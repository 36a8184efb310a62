"""Memoraize: AI-assisted flashcard study service."""

__version__ = "0.1.0"

"""Filter and sort pipeline producing the visible flashcard list."""

from __future__ import annotations

import unicodedata
from typing import Iterable, Literal

from memoraize.modules.flashcards.models import Flashcard

SortOrder = Literal["name", "date", "thematic"]
SORT_ORDERS: tuple[str, ...] = ("name", "date", "thematic")


def collation_key(text: str) -> tuple:
    """Locale-style ordering key.

    Compares base letters case-insensitively first, then accents, then case
    with lowercase first, which is how browser ``localeCompare`` orders Latin
    text.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (
        base.casefold(),
        decomposed.casefold(),
        tuple(ch.isupper() for ch in text),
        text,
    )


def matches(card: Flashcard, query: str) -> bool:
    needle = query.lower()
    return needle in card.front.lower() or needle in card.back.lower()


def filter_cards(cards: Iterable[Flashcard], query: str) -> list[Flashcard]:
    if not query:
        return list(cards)
    return [c for c in cards if matches(c, query)]


def _date_key(card: Flashcard) -> float:
    # Undated cards order first, ahead of negative timestamps too
    return card.date if card.date is not None else float("-inf")


def sort_cards(cards: Iterable[Flashcard], order: str) -> list[Flashcard]:
    """Stable ascending sort by the given order; unknown orders sort by name."""
    if order == "date":
        return sorted(cards, key=_date_key)
    if order == "thematic":
        return sorted(cards, key=lambda c: collation_key(c.thematic or ""))
    return sorted(cards, key=lambda c: collation_key(c.front))


def derive_visible(cards: Iterable[Flashcard], query: str, order: str) -> list[Flashcard]:
    return sort_cards(filter_cards(cards, query), order)

"""Flashcard browsing screen for one collection.

The visible list is always a fresh projection of the store: every change of
collection, search text or sort order reloads the sub-store and runs it
through ``derive_visible``. Flip state is keyed by rendered position unless the
view is built with ``flip_key="id"``; with position keys a re-filter or
re-sort keeps the flipped positions, not the flipped cards.
"""

from __future__ import annotations

import re
from typing import Literal, Optional

from pydantic import BaseModel, Field

from memoraize.core.logging import get_logger, log_context
from memoraize.core.result import ErrorKind, Result
from memoraize.core.store import DocumentStore, StoreError
from memoraize.modules.auth.identity import Identity
from memoraize.modules.flashcards.models import CardDraft, Flashcard
from memoraize.modules.views.base import SIGN_IN_REQUIRED, signed_in_user
from memoraize.modules.views.derive import SORT_ORDERS, SortOrder, derive_visible

logger = get_logger(__name__)

VIEW = "flashcards"

FlipKey = Literal["position", "id"]

DEFAULT_FRONT_COLOR = "#0F9ED5"
DEFAULT_BACK_COLOR = "#E54792"
_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


class FlashcardViewState(BaseModel):
    collection: Optional[str] = None
    flashcards: list[Flashcard] = Field(default_factory=list)
    search: str = ""
    sort_order: SortOrder = "name"
    flip_key: FlipKey = "position"
    flipped: dict[str, bool] = Field(default_factory=dict)
    front_color: str = DEFAULT_FRONT_COLOR
    back_color: str = DEFAULT_BACK_COLOR
    audio_mode: bool = False
    delete_mode: bool = False
    sort_menu_open: bool = False
    color_menu_open: bool = False
    dialog_open: bool = False
    draft: CardDraft = Field(default_factory=CardDraft)


def flip_slot(state: FlashcardViewState, index: int) -> str:
    if state.flip_key == "id" and 0 <= index < len(state.flashcards):
        card_id = state.flashcards[index].id
        if card_id:
            return card_id
    return str(index)


def is_flipped(state: FlashcardViewState, index: int) -> bool:
    return state.flipped.get(flip_slot(state, index), False)


# Reducers ----------------------------------------------------------------


def collection_selected(state: FlashcardViewState, name: Optional[str]) -> FlashcardViewState:
    """Switching collection discards the card projection; session prefs stay."""
    if name == state.collection:
        return state
    return state.model_copy(
        update={
            "collection": name,
            "flashcards": [],
            "flipped": {},
            "dialog_open": False,
            "draft": CardDraft(),
        }
    )


def search_changed(state: FlashcardViewState, query: str) -> FlashcardViewState:
    return state.model_copy(update={"search": query})


def sort_changed(state: FlashcardViewState, order: SortOrder) -> FlashcardViewState:
    return state.model_copy(update={"sort_order": order, "sort_menu_open": False})


def cards_loaded(state: FlashcardViewState, cards: list[Flashcard]) -> FlashcardViewState:
    return state.model_copy(update={"flashcards": list(cards)})


def card_flipped(state: FlashcardViewState, index: int) -> FlashcardViewState:
    slot = flip_slot(state, index)
    flipped = dict(state.flipped)
    flipped[slot] = not flipped.get(slot, False)
    return state.model_copy(update={"flipped": flipped})


def audio_toggled(state: FlashcardViewState) -> FlashcardViewState:
    return state.model_copy(update={"audio_mode": not state.audio_mode})


def delete_mode_toggled(state: FlashcardViewState) -> FlashcardViewState:
    return state.model_copy(update={"delete_mode": not state.delete_mode})


def sort_menu_toggled(state: FlashcardViewState) -> FlashcardViewState:
    return state.model_copy(update={"sort_menu_open": not state.sort_menu_open})


def color_menu_toggled(state: FlashcardViewState) -> FlashcardViewState:
    return state.model_copy(update={"color_menu_open": not state.color_menu_open})


def colors_changed(
    state: FlashcardViewState,
    *,
    front: Optional[str] = None,
    back: Optional[str] = None,
) -> FlashcardViewState:
    update = {}
    if front is not None:
        update["front_color"] = front
    if back is not None:
        update["back_color"] = back
    return state.model_copy(update=update)


def dialog_opened(state: FlashcardViewState) -> FlashcardViewState:
    return state.model_copy(update={"dialog_open": True})


def dialog_closed(state: FlashcardViewState) -> FlashcardViewState:
    return state.model_copy(update={"dialog_open": False})


def draft_changed(
    state: FlashcardViewState,
    *,
    front: Optional[str] = None,
    back: Optional[str] = None,
) -> FlashcardViewState:
    draft = state.draft.model_copy(
        update={k: v for k, v in (("front", front), ("back", back)) if v is not None}
    )
    return state.model_copy(update={"draft": draft})


def card_added(state: FlashcardViewState, card: Flashcard) -> FlashcardViewState:
    return state.model_copy(
        update={
            "flashcards": state.flashcards + [card],
            "draft": CardDraft(),
            "dialog_open": False,
        }
    )


def card_removed(state: FlashcardViewState, card_id: str) -> FlashcardViewState:
    return state.model_copy(
        update={"flashcards": [c for c in state.flashcards if c.id != card_id]}
    )


# Controller --------------------------------------------------------------


class FlashcardView:
    def __init__(
        self,
        store: DocumentStore,
        identity: Identity,
        *,
        flip_key: FlipKey = "position",
    ) -> None:
        self.store = store
        self.identity = identity
        self.state = FlashcardViewState(flip_key=flip_key)

    def _log_extra(self) -> dict:
        return log_context(self.identity.id, VIEW)

    async def load(self) -> Result[list[Flashcard]]:
        """Rebuild the visible list from the selected collection's sub-store."""
        user_id = signed_in_user(self.identity)
        collection = self.state.collection
        if user_id is None or not collection:
            return Result.success(self.state.flashcards)
        try:
            cards = await self.store.read_collection_cards(user_id, collection)
        except StoreError as e:
            logger.error(f"Error loading flashcards: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not load the flashcards.")
        visible = derive_visible(cards, self.state.search, self.state.sort_order)
        self.state = cards_loaded(self.state, visible)
        return Result.success(visible)

    async def select_collection(self, name: Optional[str]) -> Result[list[Flashcard]]:
        self.state = collection_selected(self.state, name or None)
        return await self.load()

    async def set_search(self, query: str) -> Result[list[Flashcard]]:
        self.state = search_changed(self.state, query)
        return await self.load()

    async def set_sort(self, order: str) -> Result[list[Flashcard]]:
        if order not in SORT_ORDERS:
            return Result.rejected(f"Unknown sort order: {order}")
        self.state = sort_changed(self.state, order)  # type: ignore[arg-type]
        return await self.load()

    def flip(self, index: int) -> Result[bool]:
        if not 0 <= index < len(self.state.flashcards):
            return Result.rejected(f"No flashcard at position {index}.")
        self.state = card_flipped(self.state, index)
        return Result.success(is_flipped(self.state, index))

    def play_audio(self, text: str) -> Result[str]:
        """Request speech for ``text``; never touches the flip state."""
        if not text:
            return Result.rejected("Nothing to read aloud.")
        return Result.success(text)

    def toggle_audio(self) -> Result[bool]:
        self.state = audio_toggled(self.state)
        return Result.success(self.state.audio_mode)

    def toggle_delete_mode(self) -> Result[bool]:
        self.state = delete_mode_toggled(self.state)
        return Result.success(self.state.delete_mode)

    def toggle_sort_menu(self) -> Result[bool]:
        self.state = sort_menu_toggled(self.state)
        return Result.success(self.state.sort_menu_open)

    def toggle_color_menu(self) -> Result[bool]:
        self.state = color_menu_toggled(self.state)
        return Result.success(self.state.color_menu_open)

    def set_colors(
        self, *, front: Optional[str] = None, back: Optional[str] = None
    ) -> Result[None]:
        for color in (front, back):
            if color is not None and not _HEX_COLOR.match(color):
                return Result.rejected(f"Not a #RRGGBB color: {color}")
        self.state = colors_changed(self.state, front=front, back=back)
        return Result.success()

    def open_dialog(self) -> Result[None]:
        self.state = dialog_opened(self.state)
        return Result.success()

    def close_dialog(self) -> Result[None]:
        self.state = dialog_closed(self.state)
        return Result.success()

    def set_draft(
        self, *, front: Optional[str] = None, back: Optional[str] = None
    ) -> Result[None]:
        self.state = draft_changed(self.state, front=front, back=back)
        return Result.success()

    async def create_card(
        self, front: Optional[str] = None, back: Optional[str] = None
    ) -> Result[Flashcard]:
        """Write one card, then append it (with its new id) to the visible list."""
        front = self.state.draft.front if front is None else front
        back = self.state.draft.back if back is None else back
        user_id = signed_in_user(self.identity)
        collection = self.state.collection
        if user_id is None:
            return Result.rejected(SIGN_IN_REQUIRED)
        if not collection:
            return Result.rejected("Open a collection first.")
        if not front or not back:
            return Result.rejected("Both front and back are required.")

        card = Flashcard(front=front, back=back)
        try:
            card_id = await self.store.create_card(user_id, collection, card)
        except StoreError as e:
            logger.error(f"Error creating flashcard: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not save the flashcard.")

        created = card.model_copy(update={"id": card_id})
        self.state = card_added(self.state, created)
        return Result.success(created)

    async def delete_card(self, card_id: str) -> Result[None]:
        user_id = signed_in_user(self.identity)
        collection = self.state.collection
        if user_id is None:
            return Result.rejected(SIGN_IN_REQUIRED)
        if not collection:
            return Result.rejected("Open a collection first.")
        if not card_id:
            return Result.rejected("Missing flashcard id.")
        try:
            await self.store.delete_card(user_id, collection, card_id)
        except StoreError as e:
            logger.error(f"Error deleting flashcard: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not delete the flashcard.")
        self.state = card_removed(self.state, card_id)
        return Result.success()

"""Collection list screen: load, create, delete and open collections."""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, Field

from memoraize.core.logging import get_logger, log_context
from memoraize.core.result import ErrorKind, Result
from memoraize.core.store import COLLECTIONS_FIELD, DocumentStore, StoreError
from memoraize.modules.auth.identity import Identity
from memoraize.modules.flashcards.models import Collection
from memoraize.modules.views.base import SIGN_IN_REQUIRED, signed_in_user

logger = get_logger(__name__)

VIEW = "collections"


class CollectionViewState(BaseModel):
    collections: list[Collection] = Field(default_factory=list)
    loaded: bool = False
    selected: Optional[str] = None
    dialog_open: bool = False
    draft_name: str = ""


def collections_loaded(
    state: CollectionViewState, collections: list[Collection]
) -> CollectionViewState:
    return state.model_copy(update={"collections": list(collections), "loaded": True})


def collection_added(
    state: CollectionViewState, collections: list[Collection]
) -> CollectionViewState:
    return state.model_copy(
        update={"collections": list(collections), "dialog_open": False, "draft_name": ""}
    )


def collection_removed(
    state: CollectionViewState, collections: list[Collection]
) -> CollectionViewState:
    return state.model_copy(update={"collections": list(collections)})


def dialog_opened(state: CollectionViewState) -> CollectionViewState:
    return state.model_copy(update={"dialog_open": True})


def dialog_closed(state: CollectionViewState) -> CollectionViewState:
    return state.model_copy(update={"dialog_open": False})


def draft_name_changed(state: CollectionViewState, name: str) -> CollectionViewState:
    return state.model_copy(update={"draft_name": name})


def collection_selected(state: CollectionViewState, name: str) -> CollectionViewState:
    return state.model_copy(update={"selected": name})


def flashcards_url(name: str) -> str:
    return f"/flashcards?id={quote(name, safe='')}"


def _parse(raw: list[dict]) -> list[Collection]:
    return [Collection.model_validate(c) for c in raw]


class CollectionView:
    """Controller for the collection list.

    Store writes always resolve before the matching state update; a failed
    write leaves ``state`` exactly as it was.
    """

    def __init__(
        self,
        store: DocumentStore,
        identity: Identity,
        *,
        cascade_delete: bool = False,
    ) -> None:
        self.store = store
        self.identity = identity
        self.cascade_delete = cascade_delete
        self.state = CollectionViewState()

    def _log_extra(self) -> dict:
        return log_context(self.identity.id, VIEW)

    async def load(self) -> Result[list[Collection]]:
        user_id = signed_in_user(self.identity)
        if user_id is None:
            return Result.success([])
        try:
            raw = await self.store.read_collections(user_id)
        except StoreError as e:
            logger.error(f"Error loading collections: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not load your collections.")
        collections = _parse(raw or [])
        self.state = collections_loaded(self.state, collections)
        return Result.success(collections)

    async def create(self, name: Optional[str] = None) -> Result[Collection]:
        name = self.state.draft_name if name is None else name
        user_id = signed_in_user(self.identity)
        if user_id is None:
            return Result.rejected(SIGN_IN_REQUIRED)
        if not name:
            return Result.rejected("Please enter a collection name.")

        try:
            raw = await self.store.read_collections(user_id)
            existing = _parse(raw or [])
            if any(c.name == name for c in existing):
                return Result.rejected(f"A collection named {name!r} already exists.")
            updated = existing + [Collection(name=name)]
            await self.store.write_user_record(
                user_id,
                {COLLECTIONS_FIELD: [c.model_dump() for c in updated]},
                merge=True,
            )
        except StoreError as e:
            logger.error(f"Error creating collection: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not create the collection.")

        self.state = collection_added(self.state, updated)
        logger.info(f"Created collection {name!r}", extra=self._log_extra())
        return Result.success(Collection(name=name))

    async def delete(self, name: str) -> Result[Optional[Collection]]:
        """Remove ``name`` from the user's list; a missing name is a no-op."""
        user_id = signed_in_user(self.identity)
        if user_id is None:
            return Result.rejected(SIGN_IN_REQUIRED)

        try:
            raw = await self.store.read_collections(user_id)
            if raw is None:
                return Result.success(None)
            existing = _parse(raw)
            remaining = [c for c in existing if c.name != name]
            if len(remaining) == len(existing):
                return Result.success(None)

            batch = self.store.batch()
            batch.set_user_record(
                user_id,
                {COLLECTIONS_FIELD: [c.model_dump() for c in remaining]},
                merge=True,
            )
            if self.cascade_delete:
                batch.delete_collection_cards(user_id, name)
            await batch.commit()
        except StoreError as e:
            logger.error(f"Error deleting collection: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not delete the collection.")

        self.state = collection_removed(self.state, remaining)
        logger.info(f"Deleted collection {name!r}", extra=self._log_extra())
        return Result.success(Collection(name=name))

    def navigate(self, name: str) -> Result[str]:
        if not name:
            return Result.rejected("Pick a collection to open.")
        self.state = collection_selected(self.state, name)
        return Result.success(flashcards_url(name))

    def open_dialog(self) -> Result[None]:
        self.state = dialog_opened(self.state)
        return Result.success()

    def close_dialog(self) -> Result[None]:
        self.state = dialog_closed(self.state)
        return Result.success()

    def set_draft_name(self, name: str) -> Result[None]:
        self.state = draft_name_changed(self.state, name)
        return Result.success()

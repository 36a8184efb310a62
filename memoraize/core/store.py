"""Document store client: per-user records and per-collection card sub-stores.

The store mirrors a hosted document database. Each user owns one record whose
``flashcards`` field is the ordered list of collections, and each collection
owns a sub-store of card records. ``SqlDocumentStore`` keeps both in SQL
tables; ``WriteBatch`` groups writes into a single transaction.
"""

from __future__ import annotations

import abc
import secrets
import string
from dataclasses import dataclass, field
from typing import Any, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from memoraize.core.db.schemas.documents import CardRecord, UserRecord
from memoraize.core.logging import get_logger
from memoraize.modules.flashcards.models import Flashcard

logger = get_logger(__name__)

COLLECTIONS_FIELD = "flashcards"

_ID_ALPHABET = string.ascii_letters + string.digits
_ID_LENGTH = 20


class StoreError(Exception):
    """Raised when the store cannot complete a read or write."""


def new_card_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(_ID_LENGTH))


@dataclass
class BatchWrite:
    kind: str
    user_id: str
    collection: Optional[str] = None
    card_id: Optional[str] = None
    payload: dict[str, Any] = field(default_factory=dict)
    merge: bool = True


class WriteBatch:
    """Collects writes and applies them all-or-nothing on ``commit``."""

    def __init__(self, store: "DocumentStore") -> None:
        self._store = store
        self._writes: list[BatchWrite] = []
        self._committed = False

    def __len__(self) -> int:
        return len(self._writes)

    def set_user_record(
        self, user_id: str, fields: dict[str, Any], *, merge: bool = True
    ) -> None:
        self._writes.append(
            BatchWrite(kind="set_user", user_id=user_id, payload=dict(fields), merge=merge)
        )

    def create_card(self, user_id: str, collection: str, card: Flashcard) -> str:
        card_id = new_card_id()
        self._writes.append(
            BatchWrite(
                kind="create_card",
                user_id=user_id,
                collection=collection,
                card_id=card_id,
                payload=card.model_dump(exclude={"id"}),
            )
        )
        return card_id

    def delete_card(self, user_id: str, collection: str, card_id: str) -> None:
        self._writes.append(
            BatchWrite(
                kind="delete_card",
                user_id=user_id,
                collection=collection,
                card_id=card_id,
            )
        )

    def delete_collection_cards(self, user_id: str, collection: str) -> None:
        self._writes.append(
            BatchWrite(kind="delete_collection", user_id=user_id, collection=collection)
        )

    async def commit(self) -> None:
        if self._committed:
            raise StoreError("Batch already committed")
        self._committed = True
        await self._store.commit_batch(self._writes)


class DocumentStore(abc.ABC):
    """Contract consumed by the views."""

    @abc.abstractmethod
    async def read_user_record(self, user_id: str) -> Optional[dict[str, Any]]:
        """Return the user's document, or ``None`` when it does not exist."""

    @abc.abstractmethod
    async def read_collection_cards(
        self, user_id: str, collection: str
    ) -> list[Flashcard]: ...

    @abc.abstractmethod
    async def commit_batch(self, writes: list[BatchWrite]) -> None:
        """Apply every write in one transaction."""

    def batch(self) -> WriteBatch:
        return WriteBatch(self)

    async def read_collections(self, user_id: str) -> Optional[list[dict[str, Any]]]:
        """Collection list of the user's record; ``None`` when the record is absent."""
        record = await self.read_user_record(user_id)
        if record is None:
            return None
        return list(record.get(COLLECTIONS_FIELD) or [])

    async def write_user_record(
        self, user_id: str, fields: dict[str, Any], *, merge: bool = True
    ) -> None:
        batch = self.batch()
        batch.set_user_record(user_id, fields, merge=merge)
        await batch.commit()

    async def create_card(self, user_id: str, collection: str, card: Flashcard) -> str:
        batch = self.batch()
        card_id = batch.create_card(user_id, collection, card)
        await batch.commit()
        return card_id

    async def delete_card(self, user_id: str, collection: str, card_id: str) -> None:
        batch = self.batch()
        batch.delete_card(user_id, collection, card_id)
        await batch.commit()

    async def delete_collection_cards(self, user_id: str, collection: str) -> None:
        batch = self.batch()
        batch.delete_collection_cards(user_id, collection)
        await batch.commit()


class SqlDocumentStore(DocumentStore):
    """Document store backed by SQLAlchemy async sessions."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    async def read_user_record(self, user_id: str) -> Optional[dict[str, Any]]:
        try:
            async with self.session_maker() as session:
                record = await session.get(UserRecord, user_id)
                if record is None:
                    return None
                return dict(record.fields or {})
        except SQLAlchemyError as e:
            raise StoreError(f"Could not read record for user {user_id}: {e}") from e

    async def read_collection_cards(
        self, user_id: str, collection: str
    ) -> list[Flashcard]:
        try:
            async with self.session_maker() as session:
                rows = await session.execute(
                    select(CardRecord)
                    .where(
                        CardRecord.user_id == user_id,
                        CardRecord.collection_name == collection,
                    )
                    .order_by(CardRecord.created_at, CardRecord.id)
                )
                return [
                    Flashcard(
                        id=r.id,
                        front=r.front,
                        back=r.back,
                        date=r.date,
                        thematic=r.thematic,
                    )
                    for r in rows.scalars().all()
                ]
        except SQLAlchemyError as e:
            raise StoreError(
                f"Could not read collection {collection!r} for user {user_id}: {e}"
            ) from e

    async def commit_batch(self, writes: list[BatchWrite]) -> None:
        if not writes:
            return
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    for write in writes:
                        await self.apply_write(session, write)
        except SQLAlchemyError as e:
            logger.error(f"Batch of {len(writes)} writes rolled back: {e}")
            raise StoreError(f"Batch commit failed: {e}") from e

    async def apply_write(self, session: AsyncSession, write: BatchWrite) -> None:
        if write.kind == "set_user":
            record = await session.get(UserRecord, write.user_id)
            if record is None:
                session.add(UserRecord(user_id=write.user_id, fields=dict(write.payload)))
            elif write.merge:
                # Reassign so the JSON column is flagged dirty
                record.fields = {**(record.fields or {}), **write.payload}
            else:
                record.fields = dict(write.payload)
        elif write.kind == "create_card":
            session.add(
                CardRecord(
                    id=write.card_id,
                    user_id=write.user_id,
                    collection_name=write.collection,
                    **write.payload,
                )
            )
        elif write.kind == "delete_card":
            await session.execute(
                delete(CardRecord).where(
                    CardRecord.id == write.card_id,
                    CardRecord.user_id == write.user_id,
                    CardRecord.collection_name == write.collection,
                )
            )
        elif write.kind == "delete_collection":
            await session.execute(
                delete(CardRecord).where(
                    CardRecord.user_id == write.user_id,
                    CardRecord.collection_name == write.collection,
                )
            )
        else:
            raise StoreError(f"Unknown write kind: {write.kind}")
        await session.flush()

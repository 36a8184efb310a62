"""In-process view sessions, one per browser cookie.

View state is disposable: nothing here is persisted, and a session is
rebuilt from the store whenever it is swept or its identity changes.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from memoraize.core.config import settings
from memoraize.core.logging import get_logger
from memoraize.core.store import DocumentStore
from memoraize.modules.auth.identity import Identity
from memoraize.modules.generation.client import GenerationClient
from memoraize.modules.views.collections import CollectionView
from memoraize.modules.views.flashcards import FlashcardView
from memoraize.modules.views.generate import GenerationView

logger = get_logger(__name__)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ViewSession:
    id: str
    identity: Identity
    collections: CollectionView
    flashcards: FlashcardView
    generation: GenerationView
    created_at: datetime = field(default_factory=_now_utc)
    last_activity: datetime = field(default_factory=_now_utc)

    def touch(self) -> None:
        self.last_activity = _now_utc()


class ViewSessionManager:
    def __init__(self) -> None:
        self.sessions: dict[str, ViewSession] = {}
        self._cleanup_task: Optional[asyncio.Task] = None
        self._idle_seconds: int = settings.views.session_idle_seconds
        self._sweep_interval: int = settings.views.session_sweep_seconds

    def _build(
        self,
        session_id: str,
        identity: Identity,
        store: DocumentStore,
        client: GenerationClient,
    ) -> ViewSession:
        return ViewSession(
            id=session_id,
            identity=identity,
            collections=CollectionView(
                store, identity, cascade_delete=settings.views.cascade_collection_delete
            ),
            flashcards=FlashcardView(store, identity, flip_key=settings.views.flip_key),
            generation=GenerationView(store, client, identity),
        )

    def get_or_create(
        self,
        session_id: Optional[str],
        identity: Identity,
        *,
        store: DocumentStore,
        client: GenerationClient,
    ) -> ViewSession:
        session = self.sessions.get(session_id) if session_id else None
        if session is not None and session.identity.id != identity.id:
            logger.info("Identity changed; resetting view session")
            session = None
        if session is None:
            session = self._build(session_id or uuid4().hex, identity, store, client)
            self.sessions[session.id] = session
        session.touch()
        return session

    def sweep(self, now: Optional[datetime] = None) -> int:
        now = now or _now_utc()
        stale = [
            sid
            for sid, s in self.sessions.items()
            if (now - s.last_activity).total_seconds() > self._idle_seconds
        ]
        for sid in stale:
            self.sessions.pop(sid, None)
        return len(stale)

    # Cleanup loop -------------------------------------------------------
    def start(self, *, idle_seconds: Optional[int] = None, sweep_interval: Optional[int] = None) -> None:
        if idle_seconds is not None:
            self._idle_seconds = max(60, int(idle_seconds))
        if sweep_interval is not None:
            self._sweep_interval = max(5, int(sweep_interval))
        if self._cleanup_task and not self._cleanup_task.done():
            return
        self._cleanup_task = asyncio.create_task(self._cleanup_loop())

    async def stop(self) -> None:
        if self._cleanup_task and not self._cleanup_task.done():
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
        self._cleanup_task = None

    async def _cleanup_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self._sweep_interval)
                removed = self.sweep()
                if removed:
                    logger.info(f"Swept {removed} idle view sessions")
        except asyncio.CancelledError:
            return


# Singleton manager used by the API layer
view_sessions = ViewSessionManager()

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from fastapi import Cookie, Depends, Response

from memoraize.core.config import settings
from memoraize.core.db.base import async_session_maker
from memoraize.core.db.schemas.auth import User
from memoraize.core.store import DocumentStore, SqlDocumentStore
from memoraize.modules.auth import Identity, fastapi_users
from memoraize.modules.generation.client import GenerationClient
from memoraize.modules.views.sessions import ViewSession, view_sessions


@lru_cache(maxsize=1)
def get_store() -> DocumentStore:
    return SqlDocumentStore(async_session_maker)


@lru_cache(maxsize=1)
def get_generation_client() -> GenerationClient:
    return GenerationClient()


async def current_identity(
    user: Optional[User] = Depends(fastapi_users.current_user(optional=True)),
) -> Identity:
    """Signed-in state for the views; anonymous callers get an empty identity."""
    return Identity.for_user(user)


async def get_view_session(
    response: Response,
    identity: Identity = Depends(current_identity),
    store: DocumentStore = Depends(get_store),
    client: GenerationClient = Depends(get_generation_client),
    view_session_id: Optional[str] = Cookie(
        default=None, alias=settings.views.session_cookie
    ),
) -> ViewSession:
    """Resolve the caller's view session from its cookie, creating one if needed."""
    session = view_sessions.get_or_create(
        view_session_id, identity, store=store, client=client
    )
    if session.id != view_session_id:
        response.set_cookie(
            settings.views.session_cookie,
            session.id,
            httponly=True,
            samesite="lax",
            secure=settings.app.is_production,
        )
    return session

"""fastapi-users wiring: schemas, user manager and the JWT bearer backend.

The store keys every record by ``str(user.id)``; see ``Identity.for_user``.
"""

from typing import AsyncIterator, Optional, cast

from fastapi import Depends, Request
from fastapi_users import FastAPIUsers
from fastapi_users import schemas as fa_schemas
from fastapi_users.authentication import (
    AuthenticationBackend,
    BearerTransport,
    JWTStrategy,
)
from fastapi_users.authentication.transport import Transport
from fastapi_users.manager import BaseUserManager, IntegerIDMixin
from fastapi_users_db_sqlalchemy import SQLAlchemyUserDatabase
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from memoraize.core.config import settings
from memoraize.core.db.base import get_session
from memoraize.core.db.schemas.auth import User
from memoraize.core.logging import get_logger, log_context

logger = get_logger(__name__)


class UserRead(fa_schemas.BaseUser[int]):
    email: EmailStr


class UserCreate(fa_schemas.BaseUserCreate):
    pass


class UserUpdate(fa_schemas.BaseUserUpdate):
    email: Optional[EmailStr] = None


async def get_user_db(
    session: AsyncSession = Depends(get_session),
) -> AsyncIterator[SQLAlchemyUserDatabase]:
    yield SQLAlchemyUserDatabase(session, User)


class UserManager(IntegerIDMixin, BaseUserManager[User, int]):  # type: ignore[type-arg]
    reset_password_token_secret = settings.app.jwt_secret
    verification_token_secret = settings.app.jwt_secret

    async def on_after_register(self, user: User, request: Optional[Request] = None) -> None:
        # No user record yet; the first collection write creates it
        logger.info("Registered new user", extra=log_context(str(user.id)))

    async def on_after_forgot_password(
        self, user: User, token: str, request: Optional[Request] = None
    ) -> None:
        logger.info("Password reset requested", extra=log_context(str(user.id)))


async def get_user_manager(
    user_db: SQLAlchemyUserDatabase = Depends(get_user_db),
) -> AsyncIterator[UserManager]:
    yield UserManager(user_db)


bearer_transport = BearerTransport(tokenUrl=f"{settings.app.version}/auth/jwt/login")


def get_jwt_strategy() -> JWTStrategy:
    return JWTStrategy(
        secret=settings.app.jwt_secret,
        lifetime_seconds=settings.jwt.token_lifetime_seconds,
    )


auth_backend = AuthenticationBackend(
    name="jwt",
    transport=cast(Transport, bearer_transport),
    get_strategy=get_jwt_strategy,
)

fastapi_users = FastAPIUsers[User, int](  # type: ignore[type-arg]
    get_user_manager,
    [auth_backend],
)

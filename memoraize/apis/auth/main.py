from fastapi import APIRouter, Depends

from memoraize.core.config import settings
from memoraize.apis.deps import current_identity
from memoraize.modules.auth import (
    Identity,
    fastapi_users,
    auth_backend,
    UserRead,
    UserCreate,
    UserUpdate,
)


router = APIRouter()


@router.get(
    f"/{settings.app.version}/auth/identity",
    response_model=Identity,
    tags=["auth"],
)
async def identity(identity: Identity = Depends(current_identity)) -> Identity:
    """Signed-in state as the views see it; anonymous callers are not an error."""
    return identity


router.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix=f"/{settings.app.version}/auth/jwt",
    tags=["auth"],
)

router.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix=f"/{settings.app.version}/auth",
    tags=["auth"],
)

router.include_router(
    fastapi_users.get_reset_password_router(),
    prefix=f"/{settings.app.version}/auth",
    tags=["auth"],
)

router.include_router(
    fastapi_users.get_users_router(UserRead, UserUpdate),
    prefix=f"/{settings.app.version}/users",
    tags=["users"],
)

from memoraize.core.db.schemas.auth import User
from .identity import Identity
from .users import (
    UserCreate,
    UserRead,
    UserUpdate,
    UserManager,
    get_user_db,
    get_user_manager,
    auth_backend,
    fastapi_users,
)

__all__ = [
    "User",
    "Identity",
    "UserCreate",
    "UserRead",
    "UserUpdate",
    "UserManager",
    "get_user_db",
    "get_user_manager",
    "auth_backend",
    "fastapi_users",
]

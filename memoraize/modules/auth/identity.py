"""Signed-in state as the views see it."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from memoraize.core.db.schemas.auth import User


class Identity(BaseModel):
    id: Optional[str] = None
    is_signed_in: bool = False
    is_loaded: bool = True

    @classmethod
    def anonymous(cls) -> "Identity":
        return cls()

    @classmethod
    def for_user(cls, user: Optional[User]) -> "Identity":
        if user is None:
            return cls.anonymous()
        return cls(id=str(user.id), is_signed_in=True)

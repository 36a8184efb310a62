"""Shared pieces of the screen controllers."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel

from memoraize.core.result import ErrorKind, Result
from memoraize.modules.auth.identity import Identity

EffectType = Literal["alert", "notice", "speak", "navigate"]

SIGN_IN_REQUIRED = "Please sign in first."


class Effect(BaseModel):
    """One-shot instruction for the client; never part of view state."""

    type: EffectType
    message: str


def effects_for(result: Result) -> list[Effect]:
    if result.ok or result.error is None:
        return []
    if result.error.kind == ErrorKind.REMOTE:
        return [Effect(type="notice", message=result.error.message)]
    return [Effect(type="alert", message=result.error.message)]


def signed_in_user(identity: Identity) -> Optional[str]:
    if identity.is_loaded and identity.is_signed_in and identity.id:
        return identity.id
    return None

"""Success/failure values returned by every view operation.

View operations never raise for expected failures; they hand back a
``Result`` so the caller must look at ``ok`` before using ``value``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    REMOTE = "remote"
    EXTRACTION = "extraction"


@dataclass(frozen=True)
class ViewError:
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[ViewError] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "Result[T]":
        return cls(ok=False, error=ViewError(kind=kind, message=message))

    @classmethod
    def rejected(cls, message: str) -> "Result[T]":
        """Shorthand for a validation rejection."""
        return cls.failure(ErrorKind.VALIDATION, message)

"""Discriminated results returned by the booking operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")

UNEXPECTED_ERROR = "An unexpected error occurred."


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_STATE = "invalid_state"
    UNAUTHORIZED = "unauthorized"
    SIDE_EFFECT = "side_effect"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class ActionResult(Generic[T]):
    """Either ``success`` with ``data`` or a failure carrying ``error``.

    A ``SIDE_EFFECT`` failure means the core mutation was already committed;
    callers should re-fetch the appointment instead of retrying.
    """
    success: bool
    data: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "ActionResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, kind: ErrorKind = ErrorKind.UNEXPECTED) -> "ActionResult[T]":
        return cls(success=False, error=error, kind=kind)

    @property
    def mutation_applied(self) -> bool:
        return self.success or self.kind == ErrorKind.SIDE_EFFECT

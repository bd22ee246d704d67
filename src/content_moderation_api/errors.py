"""Error kinds and result types for the moderation pipeline."""

from enum import Enum
from typing import Generic
from typing import TypeVar

from pydantic import BaseModel
from pydantic import ConfigDict


class ErrorKind(str, Enum):
    """Machine-readable error kinds surfaced to callers."""

    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    RESOLUTION_CONFLICT = "resolution_conflict"
    CLASSIFIER_UNAVAILABLE = "classifier_unavailable"
    DUPLICATE_APPEAL = "duplicate_appeal"


class ModerationError(BaseModel):
    """Structured error with a kind and a human-readable message."""

    kind: ErrorKind
    message: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def validation(cls, message: str) -> "ModerationError":
        return cls(kind=ErrorKind.VALIDATION_ERROR, message=message)

    @classmethod
    def not_found(cls, message: str) -> "ModerationError":
        return cls(kind=ErrorKind.NOT_FOUND, message=message)

    @classmethod
    def forbidden(
        cls, message: str = "Moderation capability required"
    ) -> "ModerationError":
        return cls(kind=ErrorKind.FORBIDDEN, message=message)

    @classmethod
    def conflict(cls, message: str) -> "ModerationError":
        return cls(kind=ErrorKind.RESOLUTION_CONFLICT, message=message)


T = TypeVar("T")


class ClassifierUnavailableError(Exception):
    """The classification service failed and no fallback is configured."""


class Result(Generic[T]):
    """
    Outcome of a service operation that can fail in an expected way.

    Exactly one of ``value`` and ``error`` is meaningful: ``error`` is None on
    success.
    """

    __slots__ = ("error", "value")

    def __init__(self, value: T | None = None, error: ModerationError | None = None):
        self.value = value
        self.error = error

    @classmethod
    def ok(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: ModerationError) -> "Result[T]":
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def __repr__(self) -> str:
        if self.error is not None:
            return f"Result(error={self.error!r})"
        return f"Result(value={self.value!r})"

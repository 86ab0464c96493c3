"""Tagged results returned by the core services.

Expected outcomes (not found, conflict, bad input) are values, not
exceptions. The route layer is the only place that turns a Failure into
an HTTP status.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(StrEnum):
    """Failure taxonomy shared by location mutations and cascade deletes."""

    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    CONFLICT = "CONFLICT"
    MAX_DEPTH_EXCEEDED = "MAX_DEPTH_EXCEEDED"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    details: Any = None


Result = Union[Ok[T], Failure]


def validation_error(message: str, details: Any = None) -> Failure:
    return Failure(ErrorKind.VALIDATION, message, details)


def not_found(message: str) -> Failure:
    return Failure(ErrorKind.NOT_FOUND, message)

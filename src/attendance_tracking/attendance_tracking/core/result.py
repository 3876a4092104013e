from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar, Union

from .enums import ErrorKind
from .exceptions import AttendanceError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], Err]


def attempt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> "Result[T]":
    """Run a service call and return its outcome as a value.

    Only ``AttendanceError`` is converted into ``Err``; anything else is a bug
    or an infrastructure failure and propagates.
    """

    try:
        return Ok(fn(*args, **kwargs))
    except AttendanceError as e:
        return Err(kind=e.kind, message=e.message)

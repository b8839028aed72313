"""Two-variant success/failure value returned by every fallible operation.

Callers either branch on ``is_success`` or use structural pattern matching::

    match Connection.open("localhost", "5432", "app"):
        case Success(conn):
            ...
        case Failure(message):
            print(message)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Literal, NoReturn, TypeVar, Union

from pgtext.errors import PgTextError

T = TypeVar("T")


@dataclass(frozen=True)
class Failure:
    """The failure arm: a diagnostic message, plus the structured error when known."""

    message: str
    error: PgTextError | None = None

    @property
    def is_success(self) -> Literal[False]:
        return False

    @property
    def is_failure(self) -> Literal[True]:
        return True

    def unwrap(self) -> NoReturn:
        """Raise the carried error (or a generic PgTextError with the message)."""
        if self.error is not None:
            raise self.error
        raise PgTextError(self.message)


@dataclass(frozen=True)
class Success(Generic[T]):
    """The success arm, owning the produced value."""

    value: T

    @property
    def is_success(self) -> Literal[True]:
        return True

    @property
    def is_failure(self) -> Literal[False]:
        return False

    def unwrap(self) -> T:
        """Return the wrapped value."""
        return self.value


ResultSum = Union[Failure, Success[T]]

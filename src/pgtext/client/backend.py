"""Database client capability: the native driver seen as three protocols.

``Connection`` and ``Cursor`` program against these. Each backend
(PostgreSQL via asyncpg, SQLite via aiosqlite, ...) provides a concrete
implementation; driver differences stay inside the backend.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class ExecStatus(StrEnum):
    """Outcome classification for an executed query."""

    EMPTY_QUERY = "empty_query"
    COMMAND_OK = "command_ok"
    TUPLES_OK = "tuples_ok"
    BAD_RESPONSE = "bad_response"
    NONFATAL_ERROR = "nonfatal_error"
    FATAL_ERROR = "fatal_error"

    @property
    def is_error(self) -> bool:
        """True for the three statuses that turn a query into a failure."""
        return self in _ERROR_STATUSES


_ERROR_STATUSES = frozenset(
    {ExecStatus.BAD_RESPONSE, ExecStatus.NONFATAL_ERROR, ExecStatus.FATAL_ERROR}
)


class ConnectParams(BaseModel):
    """Session parameters. An empty string means "use the driver default"."""

    model_config = ConfigDict(frozen=True)

    host: str = ""
    port: str = ""
    dbname: str = ""
    user: str = ""
    password: str = Field(default="", repr=False)


@runtime_checkable
class ResultHandle(Protocol):
    """A completed query's result set, owned by exactly one Cursor."""

    @property
    def status(self) -> ExecStatus:
        """Classification of the query outcome."""
        ...

    @property
    def error_message(self) -> str:
        """Diagnostic text; empty unless ``status.is_error``."""
        ...

    def ntuples(self) -> int:
        """Number of rows in the result."""
        ...

    def nfields(self) -> int:
        """Number of columns in the result."""
        ...

    def get_value(self, row: int, col: int) -> str:
        """Text of one cell; empty string for NULL."""
        ...

    def get_is_null(self, row: int, col: int) -> bool:
        """Whether one cell is NULL."""
        ...

    def clear(self) -> None:
        """Release the result set."""
        ...


@runtime_checkable
class Session(Protocol):
    """A live database session, owned by exactly one Connection."""

    def execute(self, sql: str) -> ResultHandle:
        """Run ``sql`` and return its result; errors are reported via ``status``."""
        ...

    def finish(self) -> None:
        """Release the session."""
        ...


@runtime_checkable
class DatabaseClient(Protocol):
    """Factory for sessions."""

    def connect(self, params: ConnectParams) -> Session:
        """Open a session.

        Raises:
            SessionError: negotiation failed; the message is the driver's diagnostic.
        """
        ...

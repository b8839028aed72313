"""Exception taxonomy.

``open`` and ``query`` never raise these across the Connection/Cursor
boundary; they travel inside a ``Failure`` so callers can still ``raise``
them via ``Failure.unwrap()``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pgtext.client.backend import ExecStatus


class PgTextError(Exception):
    """Base class for all pgtext errors."""

    @property
    def message(self) -> str:
        """The human-readable diagnostic text."""
        return str(self.args[0]) if self.args else ""


class TemplateError(PgTextError):
    """A query template has more ``?`` placeholders than arguments."""


class SessionError(PgTextError):
    """Session negotiation with the database failed."""


class QueryError(PgTextError):
    """The server or protocol rejected a query.

    ``status`` keeps the capability's classification (bad response,
    non-fatal or fatal error) that the ``Failure`` message flattens away.
    """

    def __init__(self, message: str, status: ExecStatus) -> None:
        """Initialize with the diagnostic text and the reported status."""
        super().__init__(message)
        self.status = status


class CursorBusyError(PgTextError):
    """``each_row`` was re-entered from inside its own callback."""

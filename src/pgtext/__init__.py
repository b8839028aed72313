"""Minimal synchronous database client: ``?`` templates, text rows, Success/Failure results."""

from pgtext.connection import Connection
from pgtext.cursor import Cursor
from pgtext.errors import (
    CursorBusyError,
    PgTextError,
    QueryError,
    SessionError,
    TemplateError,
)
from pgtext.result import Failure, ResultSum, Success

__all__ = [
    "Connection",
    "Cursor",
    "CursorBusyError",
    "Failure",
    "PgTextError",
    "QueryError",
    "ResultSum",
    "SessionError",
    "Success",
    "TemplateError",
]

"""Eagerly fetched result sets.

Both async drivers return rows as Python values in one go; there is no
server-side cursor for simple queries. ``BufferedResult`` holds those rows
already rendered to text so it satisfies the ResultHandle protocol.
"""

from __future__ import annotations

import datetime
import math
from collections.abc import Iterable, Sequence
from typing import Any

from pgtext.client.backend import ExecStatus


def _format_offset(offset: datetime.timedelta | None) -> str:
    """``+00``, ``+05:30``, ``-08``: PostgreSQL's ISO zone suffix."""
    if offset is None:
        return ""
    sign = "-" if offset < datetime.timedelta(0) else "+"
    minutes, seconds = divmod(abs(int(offset.total_seconds())), 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{sign}{hours:02d}"
    if minutes or seconds:
        text += f":{minutes:02d}"
    if seconds:
        text += f":{seconds:02d}"
    return text


def _trim_fraction(text: str) -> str:
    """Drop trailing zeros of fractional seconds, as the server does."""
    if "." not in text:
        return text
    return text.rstrip("0").rstrip(".")


def _format_clock(value: datetime.datetime | datetime.time) -> str:
    naive = value.replace(tzinfo=None)
    if isinstance(naive, datetime.datetime):
        text = naive.isoformat(sep=" ")
    else:
        text = naive.isoformat()
    return _trim_fraction(text) + _format_offset(value.utcoffset())


def _format_interval(value: datetime.timedelta) -> str:
    """``1 day``, ``2 days 03:00:00``, ``-00:00:01``: postgres interval style."""
    sign = "-" if value < datetime.timedelta(0) else ""
    magnitude = abs(value)
    parts = []
    if magnitude.days:
        unit = "day" if not sign and magnitude.days == 1 else "days"
        parts.append(f"{sign}{magnitude.days} {unit}")
    if magnitude.seconds or magnitude.microseconds or not parts:
        minutes, seconds = divmod(magnitude.seconds, 60)
        hours, minutes = divmod(minutes, 60)
        clock = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        if magnitude.microseconds:
            clock = _trim_fraction(f"{clock}.{magnitude.microseconds:06d}")
        parts.append(f"{sign}{clock}")
    return " ".join(parts)


def _format_float(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    text = repr(value)
    return text[:-2] if text.endswith(".0") else text


def _array_element(value: Any) -> str:
    """One array element, double-quoted when the server would quote it."""
    if value is None:
        return "NULL"
    if isinstance(value, (list, tuple)):
        return _format_array(value)
    text = str(render_text(value))
    needs_quotes = (
        text == ""
        or text.upper() == "NULL"
        or any(ch in _ARRAY_SPECIALS or ch.isspace() for ch in text)
    )
    if not needs_quotes:
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _format_array(value: Sequence[Any]) -> str:
    return "{" + ",".join(_array_element(v) for v in value) + "}"


_ARRAY_SPECIALS = frozenset('{}",\\')


def render_text(value: Any) -> str | None:
    """Render a driver value in PostgreSQL's text output form. NULL stays None."""
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "t" if value else "f"
    if isinstance(value, float):
        return _format_float(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return "\\x" + bytes(value).hex()
    if isinstance(value, (datetime.datetime, datetime.time)):
        return _format_clock(value)
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, datetime.timedelta):
        return _format_interval(value)
    if isinstance(value, (list, tuple)):
        return _format_array(value)
    return str(value)


class BufferedResult:
    """In-memory result set satisfying the ResultHandle protocol."""

    def __init__(
        self,
        status: ExecStatus,
        rows: Iterable[Sequence[Any]] = (),
        *,
        nfields: int = 0,
        error_message: str = "",
    ) -> None:
        """Initialize with a status, raw driver rows and the column count."""
        self._status = status
        self._rows: list[list[str | None]] | None = [
            [render_text(v) for v in row] for row in rows
        ]
        self._nfields = nfields
        self._error_message = error_message

    @classmethod
    def error(cls, status: ExecStatus, message: str) -> BufferedResult:
        """Build an empty result that carries a failure status."""
        return cls(status, error_message=message)

    @property
    def status(self) -> ExecStatus:
        return self._status

    @property
    def error_message(self) -> str:
        return self._error_message

    @property
    def cleared(self) -> bool:
        return self._rows is None

    def ntuples(self) -> int:
        return len(self._live_rows())

    def nfields(self) -> int:
        return self._nfields

    def get_value(self, row: int, col: int) -> str:
        value = self._live_rows()[row][col]
        return "" if value is None else value

    def get_is_null(self, row: int, col: int) -> bool:
        return self._live_rows()[row][col] is None

    def clear(self) -> None:
        """Drop the buffered rows."""
        self._rows = None

    def _live_rows(self) -> list[list[str | None]]:
        if self._rows is None:
            raise RuntimeError("result has been cleared")
        return self._rows

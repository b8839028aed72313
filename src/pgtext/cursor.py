"""Cursor over a completed query's result set."""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable
from types import TracebackType
from typing import TYPE_CHECKING

from pgtext.errors import CursorBusyError

if TYPE_CHECKING:
    from pgtext.client.backend import ResultHandle

logger = logging.getLogger(__name__)

NULL_TEXT = "(null)"


def _release_result(handle: ResultHandle) -> None:
    """Single release path shared by ``close()`` and garbage collection."""
    handle.clear()
    logger.debug("Result handle released")


class Cursor:
    """Owns one result set until closed.

    The result handle is released exactly once: by ``close()`` or, failing
    that, when the cursor is garbage collected.
    """

    def __init__(self, handle: ResultHandle) -> None:
        """Wrap ``handle``, reading its row and column counts once."""
        self._handle: ResultHandle | None = handle
        self.total_rows = handle.ntuples()
        self.column_count = handle.nfields()
        self.current_row = 0
        self._iterating = False
        self._finalizer = weakref.finalize(self, _release_result, handle)

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def row_count(self) -> int:
        """Return the row position counter.

        Nothing advances the counter, so this is 0 for every cursor. Use
        ``total_rows`` for the size of the result set.
        """
        return self.current_row

    def close(self) -> None:
        """Release the result set. Calling it again does nothing."""
        self._finalizer()
        self._handle = None
        self.total_rows = 0
        self.current_row = 0

    def each_row(self, callback: Callable[[list[str]], object]) -> None:
        """Call ``callback`` once per row, in order, with the row's values as text.

        NULL cells arrive as ``"(null)"``. Does nothing on a closed or empty
        cursor. Exceptions from ``callback`` propagate to the caller.

        Raises:
            CursorBusyError: called from inside a callback of the same cursor.
        """
        if self._handle is None or self.total_rows == 0:
            return
        if self._iterating:
            raise CursorBusyError("each_row() is already iterating this cursor")

        self._iterating = True
        try:
            for row in range(self.total_rows):
                handle = self._handle
                if handle is None:
                    # Closed by the callback
                    break
                values = [
                    NULL_TEXT if handle.get_is_null(row, col) else handle.get_value(row, col)
                    for col in range(self.column_count)
                ]
                callback(values)
        finally:
            self._iterating = False

    def __enter__(self) -> Cursor:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Cursor {state} rows={self.total_rows} columns={self.column_count}>"

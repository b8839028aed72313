"""SQLite implementation of the database client capability.

Thin wrapper around aiosqlite. Only ``dbname`` matters: it is the database
path, with an empty name meaning a private in-memory database. Each
statement is committed as soon as it succeeds.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import TYPE_CHECKING

import aiosqlite

from pgtext.client.backend import ConnectParams, ExecStatus
from pgtext.client.buffered import BufferedResult
from pgtext.client.loop import EventLoopRunner
from pgtext.errors import SessionError

if TYPE_CHECKING:
    from pgtext.client.backend import ResultHandle

logger = logging.getLogger(__name__)

MEMORY_DB = ":memory:"


class SQLiteSession:
    """One aiosqlite connection plus the loop it lives on."""

    def __init__(self, conn: aiosqlite.Connection, runner: EventLoopRunner) -> None:
        """Initialize with an open aiosqlite connection and its loop runner."""
        self._conn = conn
        self._runner = runner

    def execute(self, sql: str) -> ResultHandle:
        """Run ``sql``; any sqlite3 error is a fatal error."""
        if not sql.strip():
            return BufferedResult(ExecStatus.EMPTY_QUERY)
        try:
            return self._runner.run(self._execute(sql))
        except sqlite3.Error as exc:
            logger.warning("Query failed: %s", exc)
            return BufferedResult.error(ExecStatus.FATAL_ERROR, f"{exc}\n")
        except UnicodeError as exc:
            logger.warning("Query text could not be encoded: %s", exc)
            return BufferedResult.error(ExecStatus.BAD_RESPONSE, f"invalid query text: {exc}\n")

    async def _execute(self, sql: str) -> BufferedResult:
        cursor = await self._conn.execute(sql)
        try:
            description = cursor.description
            rows = await cursor.fetchall() if description else []
        finally:
            await cursor.close()
        await self._conn.commit()
        if description:
            return BufferedResult(ExecStatus.TUPLES_OK, rows, nfields=len(description))
        return BufferedResult(ExecStatus.COMMAND_OK)

    def finish(self) -> None:
        """Close the connection and stop the loop."""
        self._runner.shutdown(self._close())

    async def _close(self) -> None:
        try:
            await self._conn.close()
        except sqlite3.Error:
            logger.warning("Error closing SQLite session", exc_info=True)


class SQLiteClient:
    """Opens SQLite sessions through aiosqlite."""

    def connect(self, params: ConnectParams) -> SQLiteSession:
        """Open the database at ``params.dbname``; raises SessionError on failure."""
        path = params.dbname or MEMORY_DB
        runner = EventLoopRunner()
        try:
            conn = runner.run(_open(path))
        except sqlite3.Error as exc:
            runner.close()
            raise SessionError(f"{exc}\n") from exc
        logger.debug("SQLite session opened at %s", path)
        return SQLiteSession(conn, runner)


async def _open(path: str) -> aiosqlite.Connection:
    conn = await aiosqlite.connect(path)
    await conn.execute("PRAGMA foreign_keys=ON")
    return conn

"""PostgreSQL implementation of the database client capability.

Uses asyncpg under a private event loop per session. Each ``execute()``
prepares the statement first: row-returning statements are fetched, the
rest are executed for their status string. Result columns are switched to
asyncpg's text codecs so cell values are the server's own text output.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

import asyncpg

from pgtext.client.backend import ConnectParams, ExecStatus
from pgtext.client.buffered import BufferedResult
from pgtext.client.loop import EventLoopRunner
from pgtext.config import get_connect_timeout
from pgtext.errors import SessionError

if TYPE_CHECKING:
    from asyncpg.prepared_stmt import PreparedStatement
    from asyncpg.types import Attribute

    from pgtext.client.backend import ResultHandle

logger = logging.getLogger(__name__)

# Severities reported by the server that do not abort the statement
_NONFATAL_SEVERITIES = frozenset({"WARNING", "NOTICE", "DEBUG", "INFO", "LOG"})

# Server message for a multi-statement string sent to prepare()
_MULTIPLE_COMMANDS = "cannot insert multiple commands into a prepared statement"

_CONNECT_ERRORS = (
    OSError,
    TimeoutError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncpg.ProtocolError,
)

_QUERY_ERRORS = (
    OSError,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    asyncpg.ProtocolError,
)


def _parse_port(port: str) -> int | None:
    """Convert the textual port to asyncpg's int form; empty means default."""
    if not port:
        return None
    try:
        return int(port)
    except ValueError:
        message = f'invalid integer value "{port}" for connection option "port"\n'
        raise SessionError(message) from None


def _error_text(exc: BaseException) -> str:
    """Format a driver exception the way libpq formats its error messages."""
    severity = getattr(exc, "severity", None) or "ERROR"
    detail = str(exc) or type(exc).__name__
    if isinstance(exc, asyncpg.PostgresError):
        return f"{severity}:  {detail}\n"
    return f"{detail}\n"


def classify_error(exc: BaseException) -> ExecStatus:
    """Map a driver exception onto the three failure statuses."""
    if isinstance(exc, asyncpg.PostgresError):
        severity = (getattr(exc, "severity", None) or "ERROR").upper()
        if severity in _NONFATAL_SEVERITIES:
            return ExecStatus.NONFATAL_ERROR
        return ExecStatus.FATAL_ERROR
    return ExecStatus.BAD_RESPONSE


class PostgresSession:
    """One asyncpg connection plus the loop it lives on."""

    def __init__(self, conn: asyncpg.Connection, runner: EventLoopRunner) -> None:
        """Initialize with an open asyncpg connection and its loop runner."""
        self._conn = conn
        self._runner = runner
        self._text_types: set[int] = set()

    def execute(self, sql: str) -> ResultHandle:
        """Run ``sql`` and classify the outcome."""
        if not sql.strip():
            return BufferedResult(ExecStatus.EMPTY_QUERY)
        try:
            return self._runner.run(self._execute(sql))
        except _QUERY_ERRORS as exc:
            status = classify_error(exc)
            logger.warning("Query failed (%s): %s", status, exc)
            return BufferedResult.error(status, _error_text(exc))
        except UnicodeError as exc:
            logger.warning("Query text could not be encoded: %s", exc)
            return BufferedResult.error(ExecStatus.BAD_RESPONSE, f"invalid query text: {exc}\n")

    async def _execute(self, sql: str) -> BufferedResult:
        try:
            stmt = await self._conn.prepare(sql)
        except asyncpg.exceptions.PostgresSyntaxError as exc:
            if _MULTIPLE_COMMANDS not in str(exc):
                raise
            # Several statements: only the simple query protocol runs them,
            # and it reports a status string, never rows
            status = await self._conn.execute(sql)
            logger.debug("Multi-statement command completed: %s", status)
            return BufferedResult(ExecStatus.COMMAND_OK)

        attributes = stmt.get_attributes()
        if attributes:
            # Query returns rows
            if await self._use_text_codecs(attributes):
                # Codec changes only apply to statements prepared afterwards
                stmt = await self._conn.prepare(sql)
            return await self._fetch(stmt, len(attributes))
        # DML/DDL: only a status string comes back
        status = await self._conn.execute(sql)
        logger.debug("Command completed: %s", status)
        return BufferedResult(ExecStatus.COMMAND_OK)

    async def _fetch(self, stmt: PreparedStatement, nfields: int) -> BufferedResult:
        records = await stmt.fetch()
        return BufferedResult(
            ExecStatus.TUPLES_OK,
            (tuple(record.values()) for record in records),
            nfields=nfields,
        )

    async def _use_text_codecs(self, attributes: Sequence[Attribute]) -> bool:
        """Decode the given columns' types as server text. True if any codec changed.

        Arrays take their element type's codec. Types asyncpg refuses to
        override (composites, domains) keep their binary codec and are
        rendered by ``render_text`` instead.
        """
        changed = False
        for attr in attributes:
            pg_type = attr.type
            if pg_type.oid in self._text_types:
                continue
            self._text_types.add(pg_type.oid)
            name = pg_type.name
            if pg_type.kind == "array" and name.startswith("_"):
                name = name[1:]
            try:
                await self._conn.set_type_codec(
                    name, schema=pg_type.schema, encoder=str, decoder=str, format="text"
                )
            except (asyncpg.InterfaceError, ValueError):
                logger.debug("Keeping binary codec for %s.%s", pg_type.schema, name)
                continue
            changed = True
        return changed

    def finish(self) -> None:
        """Close the connection and stop the loop."""
        self._runner.shutdown(self._close())

    async def _close(self) -> None:
        try:
            await self._conn.close(timeout=get_connect_timeout())
        except (OSError, TimeoutError, asyncpg.PostgresError, asyncpg.InterfaceError):
            logger.warning("Error closing PostgreSQL session", exc_info=True)


class PostgresClient:
    """Opens PostgreSQL sessions through asyncpg."""

    def connect(self, params: ConnectParams) -> PostgresSession:
        """Negotiate a session; raises SessionError with the driver's diagnostic."""
        port = _parse_port(params.port)
        runner = EventLoopRunner()
        try:
            conn = runner.run(
                asyncpg.connect(
                    host=params.host or None,
                    port=port,
                    database=params.dbname or None,
                    user=params.user or None,
                    password=params.password or None,
                    timeout=get_connect_timeout(),
                )
            )
        except _CONNECT_ERRORS as exc:
            runner.close()
            raise SessionError(_error_text(exc)) from exc
        logger.debug("PostgreSQL session opened (%r)", params)
        return PostgresSession(conn, runner)

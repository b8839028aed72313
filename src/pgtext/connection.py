"""Connection: session lifecycle and query execution."""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING

from pgtext.client import create_client
from pgtext.client.backend import ConnectParams
from pgtext.cursor import Cursor
from pgtext.errors import QueryError, SessionError, TemplateError
from pgtext.result import Failure, ResultSum, Success
from pgtext.template import build, placeholder_count

if TYPE_CHECKING:
    from pgtext.client.backend import DatabaseClient, Session

logger = logging.getLogger(__name__)


def _release_session(session: Session) -> None:
    session.finish()
    logger.debug("Session released")


class Connection:
    """A live database session.

    Created only by ``Connection.open``. There is no ``close()``: the session
    is released once, when the Connection is garbage collected.
    """

    def __init__(self, session: Session) -> None:
        """Take ownership of an open ``session``."""
        self._session = session
        self._finalizer = weakref.finalize(self, _release_session, session)

    @property
    def is_open(self) -> bool:
        return self._finalizer.alive

    @staticmethod
    def open(
        host: str = "",
        port: str = "",
        dbname: str = "",
        user: str = "",
        password: str = "",
        *,
        client: DatabaseClient | None = None,
    ) -> ResultSum[Connection]:
        """Connect to the database.

        Positional arguments fill host, port, dbname, user and password in
        that order; empty strings leave the choice to the driver (which falls
        back to PGHOST, PGPORT, ... for PostgreSQL).

        Returns ``Success(Connection)``, or ``Failure`` with the driver's
        diagnostic text.
        """
        params = ConnectParams(host=host, port=port, dbname=dbname, user=user, password=password)
        if client is None:
            client = create_client()
        try:
            session = client.connect(params)
        except SessionError as exc:
            logger.warning("Connection failed: %s", exc.message.rstrip())
            return Failure(exc.message, exc)
        return Success(Connection(session))

    def query(self, template: str, *args: str) -> ResultSum[Cursor]:
        """Run ``template`` with each ``?`` replaced by the next of ``args``.

        Substitution is textual; see ``pgtext.template.build``. Returns
        ``Success(Cursor)``, or ``Failure`` for a template with too few
        arguments (the database is not contacted) or a query the server
        rejects. The connection stays usable after a failure.
        """
        for value in (template, *args):
            if not isinstance(value, str):
                raise TypeError(f"query arguments must be str, not {type(value).__name__}")

        try:
            sql = build(template, args)
        except TemplateError as exc:
            logger.debug(
                "Template has %d placeholders but %d arguments",
                placeholder_count(template),
                len(args),
            )
            return Failure(exc.message, exc)

        result = self._session.execute(sql)
        status = result.status
        if status.is_error:
            message = result.error_message
            result.clear()
            return Failure(message, QueryError(message, status))

        cursor = Cursor(result)
        logger.debug("Query returned %s (%d rows)", status, cursor.total_rows)
        return Success(cursor)

    def __repr__(self) -> str:
        return f"<Connection {'open' if self.is_open else 'released'}>"

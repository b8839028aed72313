"""Database client capability and its backends."""

from pgtext.client.backend import (
    ConnectParams,
    DatabaseClient,
    ExecStatus,
    ResultHandle,
    Session,
)
from pgtext.client.sqlite_client import SQLiteClient
from pgtext.config import get_backend

try:
    from pgtext.client.postgres_client import PostgresClient
except ImportError:
    PostgresClient = None  # type: ignore[assignment,misc]


def create_client(backend: str | None = None) -> DatabaseClient:
    """Create the client for ``backend`` (default: PGTEXT_BACKEND)."""
    name = backend or get_backend()
    if name in ("postgres", "postgresql"):
        if PostgresClient is None:
            raise RuntimeError("PostgreSQL backend requires asyncpg: pip install asyncpg")
        return PostgresClient()
    if name == "sqlite":
        return SQLiteClient()
    raise ValueError(f"Unknown database backend: {name!r}")


__all__ = [
    "ConnectParams",
    "DatabaseClient",
    "ExecStatus",
    "PostgresClient",
    "ResultHandle",
    "SQLiteClient",
    "Session",
    "create_client",
]

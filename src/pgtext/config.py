"""Environment-variable-based configuration."""

import os


def get_backend() -> str:
    """Return the database client backend name from PGTEXT_BACKEND."""
    return os.environ.get("PGTEXT_BACKEND", "postgres").strip().lower()


def get_connect_timeout() -> float:
    """Return the session connect timeout in seconds from PGTEXT_CONNECT_TIMEOUT."""
    return float(os.environ.get("PGTEXT_CONNECT_TIMEOUT", "60.0"))


def get_log_level() -> str:
    """Return the logging level from PGTEXT_LOG_LEVEL."""
    return os.environ.get("PGTEXT_LOG_LEVEL", "WARNING").upper()

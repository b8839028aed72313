"""Shared test fixtures."""

import pytest

from pgtext import Connection
from pgtext.client import SQLiteClient
from pgtext.client.backend import ConnectParams, ExecStatus
from pgtext.client.buffered import BufferedResult
from pgtext.errors import SessionError


class TrackingResult(BufferedResult):
    """BufferedResult that counts how often it is cleared."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.clear_calls = 0

    def clear(self) -> None:
        self.clear_calls += 1
        super().clear()


class FakeSession:
    """Scriptable session for testing.

    Returns queued results in order, then empty COMMAND_OK results.
    """

    def __init__(self, results: list[TrackingResult] | None = None):
        self.results = list(results or [])
        self.executed: list[str] = []
        self.finish_calls = 0

    def execute(self, sql: str) -> TrackingResult:
        self.executed.append(sql)
        if self.results:
            return self.results.pop(0)
        return TrackingResult(ExecStatus.COMMAND_OK)

    def finish(self) -> None:
        self.finish_calls += 1


class FakeClient:
    """Controllable fake database client for testing."""

    def __init__(self, session: FakeSession | None = None, error: str | None = None):
        self.session = session or FakeSession()
        self.error = error
        self.last_params: ConnectParams | None = None

    def connect(self, params: ConnectParams) -> FakeSession:
        self.last_params = params
        if self.error is not None:
            raise SessionError(self.error)
        return self.session


@pytest.fixture
def fake_session():
    """Fake session with nothing queued."""
    return FakeSession()


@pytest.fixture
def fake_client(fake_session):
    """Fake client handing out ``fake_session``."""
    return FakeClient(fake_session)


@pytest.fixture
def sqlite_conn():
    """Connection to a private in-memory SQLite database."""
    return Connection.open(client=SQLiteClient()).unwrap()

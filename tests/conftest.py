"""Shared test fixtures."""

import pytest

from n1ql_adapter import errors
from n1ql_adapter.db.connection import CouchbaseConnection


class FakeBucket:
    """Records enable/query calls and returns canned rows."""

    def __init__(self, name: str, rows: list | None = None, error: Exception | None = None):
        self._name = name
        self.rows = rows if rows is not None else []
        self.error = error
        self.enabled_servers: list[list[str]] = []
        self.requests = []

    @property
    def name(self) -> str:
        return self._name

    def enable_n1ql(self, servers):
        self.enabled_servers.append(list(servers))
        return self

    def query(self, request):
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return list(self.rows)


class FakeSession:
    """Hands out FakeBuckets and remembers which names were opened."""

    def __init__(self, rows_by_bucket: dict[str, list] | None = None):
        self.rows_by_bucket = rows_by_bucket or {}
        self.opened: list[str] = []
        self.buckets: list[FakeBucket] = []
        self.closed = False

    def open_bucket(self, name: str) -> FakeBucket:
        self.opened.append(name)
        bucket = FakeBucket(name, self.rows_by_bucket.get(name, []))
        self.buckets.append(bucket)
        return bucket

    def close(self) -> None:
        self.closed = True

    @property
    def last_request(self):
        return self.buckets[-1].requests[-1]


class FakeConnector:
    """Counts connect() calls; fails on demand."""

    def __init__(self, session: FakeSession | None = None):
        self.session = session or FakeSession()
        self.connect_count = 0
        self.fail = False
        self.configs = []

    def connect(self, config):
        self.connect_count += 1
        self.configs.append(config)
        if self.fail:
            raise errors.ConnectionError("cluster unreachable")
        return self.session


@pytest.fixture
def session():
    """Fake cluster session with no canned rows."""
    return FakeSession()


@pytest.fixture
def connector(session):
    """Fake connector returning the shared fake session."""
    return FakeConnector(session)


@pytest.fixture
def config():
    """Minimal valid connection config."""
    return {"user": "app", "password": "secret"}


@pytest.fixture
def conn(config, connector):
    """Connection wired to the fake connector."""
    return CouchbaseConnection(config, connector=connector)

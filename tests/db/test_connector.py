"""Tests for CouchbaseConnector with the SDK Cluster patched out."""

from datetime import timedelta

import pytest
from couchbase.exceptions import CouchbaseException

from n1ql_adapter import errors
from n1ql_adapter.db import connector as connector_module
from n1ql_adapter.db.connector import CouchbaseConnector, connection_string
from n1ql_adapter.db.couchbase_backend import CouchbaseSession
from n1ql_adapter.models.config import ConnectionConfig


class RecordingCluster:
    instances: list["RecordingCluster"] = []
    fail_ready = False

    def __init__(self, conn_str, options):
        self.conn_str = conn_str
        self.options = options
        self.ready_timeout = None
        RecordingCluster.instances.append(self)

    def wait_until_ready(self, timeout):
        if RecordingCluster.fail_ready:
            raise CouchbaseException(message="unambiguous timeout")
        self.ready_timeout = timeout


@pytest.fixture
def patched_cluster(monkeypatch):
    RecordingCluster.instances = []
    RecordingCluster.fail_ready = False
    monkeypatch.setattr(connector_module, "Cluster", RecordingCluster)
    return RecordingCluster


def test_connection_string_adds_scheme():
    assert connection_string("10.0.0.1,10.0.0.2") == "couchbase://10.0.0.1,10.0.0.2"


def test_connection_string_keeps_scheme():
    assert connection_string("couchbases://cb.example.com") == "couchbases://cb.example.com"


def test_connect_returns_session(patched_cluster):
    config = ConnectionConfig(user="app", password="secret", host="cb1", connect_timeout=3)
    session = CouchbaseConnector().connect(config)

    assert isinstance(session, CouchbaseSession)
    cluster = patched_cluster.instances[0]
    assert cluster.conn_str == "couchbase://cb1"
    assert cluster.ready_timeout == timedelta(seconds=3)
    assert session.cluster is cluster
    assert session.credentials == ("app", "secret")


def test_connect_failure_raises_connection_error(patched_cluster):
    patched_cluster.fail_ready = True
    config = ConnectionConfig(user="app", password="secret")
    with pytest.raises(errors.ConnectionError) as exc_info:
        CouchbaseConnector().connect(config)
    assert isinstance(exc_info.value.__cause__, CouchbaseException)

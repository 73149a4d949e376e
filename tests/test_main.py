"""Tests for the n1ql-adapter command."""

import json

import pytest

from n1ql_adapter import __main__ as cli
from n1ql_adapter.db.connection import CouchbaseConnection
from n1ql_adapter.models.config import ConnectionConfig
from tests.conftest import FakeConnector, FakeSession


@pytest.fixture
def fake_cluster(monkeypatch):
    """Route the CLI's connection through a fake connector."""
    session = FakeSession({"orders": [{"id": 1}, {"id": 2}]})
    connector = FakeConnector(session)

    def _connection(config):
        return CouchbaseConnection(config, connector=connector)

    monkeypatch.setattr(cli, "CouchbaseConnection", _connection)
    monkeypatch.setattr(cli, "load_config", lambda: ConnectionConfig(user="a", password="b"))
    return session


def test_decode_bindings():
    assert cli._decode_bindings(["1", '"x"', "[1, 2]", "plain"]) == [1, "x", [1, 2], "plain"]


def test_select_prints_rows(fake_cluster, capsys):
    assert cli.main(["SELECT * FROM orders WHERE id = ?", "--bucket", "orders", "--arg", "1"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"id": 1}, {"id": 2}]
    assert fake_cluster.last_request.args == [1]


def test_affecting_mode_prints_count(fake_cluster, capsys):
    assert cli.main(["DELETE FROM orders", "--bucket", "orders", "--mode", "affecting"]) == 0
    assert json.loads(capsys.readouterr().out) == 2


def test_pretend_prints_log_without_querying(fake_cluster, capsys):
    assert cli.main(["SELECT 1", "--bucket", "orders", "--pretend"]) == 0
    output = json.loads(capsys.readouterr().out)
    assert output[0]["query"] == "SELECT 1"
    assert output[0]["bucket"] == "orders"
    assert fake_cluster.opened == []


def test_configuration_error_exits_nonzero(monkeypatch, capsys):
    monkeypatch.delenv("CB_USER", raising=False)
    monkeypatch.delenv("CB_PASSWORD", raising=False)
    assert cli.main(["SELECT 1", "--bucket", "orders"]) == 1
    assert "error:" in capsys.readouterr().err

"""Tests for configuration models and environment loading."""

import pytest

from n1ql_adapter.config import get_n1ql_servers, load_config
from n1ql_adapter.errors import ConfigurationError
from n1ql_adapter.models.config import ConnectionConfig, parse_config


def test_parse_minimal_config():
    config = parse_config({"user": "a", "password": "b"})
    assert config.manager is None
    assert config.enables == []
    assert config.host == "couchbase://127.0.0.1"
    assert config.manager_credentials == ("a", "b")


def test_manager_branch_wins_without_merge():
    config = parse_config(
        {"user": "a", "password": "b", "manager": {"user": "m", "password": "p"}}
    )
    assert config.manager_credentials == ("m", "p")


def test_extra_fields_kept():
    config = parse_config({"user": "a", "password": "b", "bucket_defaults": {"ttl": 0}})
    assert config.model_extra == {"bucket_defaults": {"ttl": 0}}


def test_parse_passes_model_through():
    config = ConnectionConfig(user="a", password="b")
    assert parse_config(config) is config


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"user": "a"},
        {"password": "b"},
        {"user": "a", "password": "b", "manager": {"user": "m"}},
        {"user": "a", "password": "b", "manager": {"password": "p"}},
    ],
)
def test_missing_credentials(raw):
    with pytest.raises(ConfigurationError):
        parse_config(raw)


def test_get_n1ql_servers_splits_and_strips(monkeypatch):
    monkeypatch.setenv("CB_N1QL_SERVERS", " q1:8093, ,q2:8093 ")
    assert get_n1ql_servers() == ["q1:8093", "q2:8093"]


def test_load_config_from_env(monkeypatch):
    monkeypatch.setenv("CB_HOST", "couchbase://cb1")
    monkeypatch.setenv("CB_USER", "app")
    monkeypatch.setenv("CB_PASSWORD", "secret")
    monkeypatch.setenv("CB_MANAGER_USER", "admin")
    monkeypatch.setenv("CB_MANAGER_PASSWORD", "root")
    monkeypatch.setenv("CB_N1QL_SERVERS", "q1:8093")
    monkeypatch.setenv("CB_CONNECT_TIMEOUT", "2.5")

    config = load_config()
    assert config.host == "couchbase://cb1"
    assert config.manager_credentials == ("admin", "root")
    assert config.enables == ["q1:8093"]
    assert config.connect_timeout == 2.5


def test_load_config_half_manager_fails(monkeypatch):
    monkeypatch.setenv("CB_USER", "app")
    monkeypatch.setenv("CB_PASSWORD", "secret")
    monkeypatch.setenv("CB_MANAGER_USER", "admin")
    monkeypatch.delenv("CB_MANAGER_PASSWORD", raising=False)
    with pytest.raises(ConfigurationError):
        load_config()


def test_null_enables_means_none():
    config = parse_config({"user": "a", "password": "b", "enables": None})
    assert config.enables == []

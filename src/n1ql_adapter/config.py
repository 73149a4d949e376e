"""Environment-variable-based configuration."""

import os

from n1ql_adapter.models.config import ConnectionConfig, parse_config


def get_host() -> str:
    """Return the cluster connection string from CB_HOST."""
    return os.environ.get("CB_HOST", "couchbase://127.0.0.1")


def get_user() -> str | None:
    """Return the cluster user from CB_USER."""
    return os.environ.get("CB_USER")


def get_password() -> str | None:
    """Return the cluster password from CB_PASSWORD."""
    return os.environ.get("CB_PASSWORD")


def get_manager_user() -> str | None:
    """Return the bucket manager user from CB_MANAGER_USER."""
    return os.environ.get("CB_MANAGER_USER")


def get_manager_password() -> str | None:
    """Return the bucket manager password from CB_MANAGER_PASSWORD."""
    return os.environ.get("CB_MANAGER_PASSWORD")


def get_n1ql_servers() -> list[str]:
    """Return the N1QL-enabled query endpoints from CB_N1QL_SERVERS (comma separated)."""
    raw = os.environ.get("CB_N1QL_SERVERS", "")
    return [s.strip() for s in raw.split(",") if s.strip()]


def get_connect_timeout() -> float:
    """Return the cluster connect timeout in seconds from CB_CONNECT_TIMEOUT."""
    return float(os.environ.get("CB_CONNECT_TIMEOUT", "10.0"))


def get_log_level() -> str:
    """Return the logging level from CB_LOG_LEVEL."""
    return os.environ.get("CB_LOG_LEVEL", "WARNING")


def load_config() -> ConnectionConfig:
    """Assemble a ConnectionConfig from the environment.

    The manager block is only present when CB_MANAGER_USER is set, so a
    half-configured manager surfaces as a ConfigurationError.
    """
    raw: dict[str, object] = {
        "host": get_host(),
        "enables": get_n1ql_servers(),
        "connect_timeout": get_connect_timeout(),
    }
    user = get_user()
    if user is not None:
        raw["user"] = user
    password = get_password()
    if password is not None:
        raw["password"] = password

    manager_user = get_manager_user()
    if manager_user is not None:
        manager: dict[str, str] = {"user": manager_user}
        manager_password = get_manager_password()
        if manager_password is not None:
            manager["password"] = manager_password
        raw["manager"] = manager
    return parse_config(raw)

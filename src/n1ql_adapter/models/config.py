"""Connection configuration models."""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from n1ql_adapter.errors import ConfigurationError


class ManagerCredentials(BaseModel):
    """Credentials for administrative bucket operations."""

    user: str
    password: str


class ConnectionConfig(BaseModel):
    """Resolved configuration for one logical Couchbase connection.

    Fields the adapter does not read are kept (``extra="allow"``) so that
    connector-specific settings travel with the record.
    """

    model_config = ConfigDict(extra="allow")

    user: str
    password: str
    manager: ManagerCredentials | None = None
    enables: list[str] = Field(default_factory=list)
    host: str = "couchbase://127.0.0.1"
    connect_timeout: float = Field(default=10.0, gt=0)

    @field_validator("enables", mode="before")
    @classmethod
    def _enables_default(cls, value: Any) -> Any:
        """An explicit null means no N1QL-enabled servers."""
        return [] if value is None else value

    @property
    def manager_credentials(self) -> tuple[str, str]:
        """Manager user/password, falling back to the top-level credentials."""
        if self.manager is None:
            return self.user, self.password
        return self.manager.user, self.manager.password


def parse_config(raw: Mapping[str, Any] | ConnectionConfig) -> ConnectionConfig:
    """Validate a raw mapping into a ConnectionConfig.

    Raises ConfigurationError when required credentials are missing on
    either the top-level or the ``manager`` branch.
    """
    if isinstance(raw, ConnectionConfig):
        return raw
    try:
        return ConnectionConfig.model_validate(dict(raw))
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ConfigurationError(f"Invalid couchbase configuration: {fields}") from e

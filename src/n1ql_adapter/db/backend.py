"""Connection protocols: the capability set a database connection provides.

The adapter programs against these protocols rather than a shared base
class. The Couchbase backend supplies concrete sessions and bucket handles;
tests supply fakes.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from n1ql_adapter.db.request import N1qlRequest
    from n1ql_adapter.models.config import ConnectionConfig

# N1QL rows are JSON values; ``SELECT`` projections yield objects,
# ``SELECT RAW`` yields scalars.
Row: TypeAlias = Any


@runtime_checkable
class BucketHandle(Protocol):
    """An open bucket on an established cluster session."""

    @property
    def name(self) -> str:
        """Bucket name."""
        ...

    def enable_n1ql(self, servers: Sequence[str]) -> BucketHandle:
        """Route N1QL requests on this handle to the given query servers."""
        ...

    def query(self, request: N1qlRequest) -> list[Row]:
        """Execute a N1QL request and return all rows."""
        ...


@runtime_checkable
class Session(Protocol):
    """An established cluster session."""

    def open_bucket(self, name: str) -> BucketHandle:
        """Open a handle on the named bucket."""
        ...

    def close(self) -> None:
        """Release the session."""
        ...


@runtime_checkable
class Connector(Protocol):
    """Turns a resolved configuration into an established session."""

    def connect(self, config: ConnectionConfig) -> Session:
        """Establish a session, raising ConnectionError on failure."""
        ...


@runtime_checkable
class Connection(Protocol):
    """Execute-read, execute-write, execute-affecting, transactions, identity.

    Document-store connections raise NotSupportedError from the transaction
    methods.
    """

    def select(
        self, query: str, bindings: Sequence[Any] = (), *, bucket: str | None = None
    ) -> list[Row]:
        """Run a read query and return its rows."""
        ...

    def statement(
        self, query: str, bindings: Sequence[Any] = (), *, bucket: str | None = None
    ) -> bool:
        """Run a statement and report whether it produced rows."""
        ...

    def affecting_statement(
        self, query: str, bindings: Sequence[Any] = (), *, bucket: str | None = None
    ) -> int:
        """Run a statement and return the number of rows it produced."""
        ...

    def begin_transaction(self) -> None:
        """Start a transaction."""
        ...

    def commit(self) -> None:
        """Commit the current transaction."""
        ...

    def roll_back(self) -> None:
        """Roll back the current transaction."""
        ...

    def transaction(self, callback: Callable[[Any], Any]) -> Any:
        """Run callback inside a transaction."""
        ...

    def get_driver_name(self) -> str:
        """Identifier used for dialect dispatch."""
        ...

"""Couchbase connection: the SQL-shaped execution verbs over N1QL.

``CouchbaseConnection`` implements the Connection protocol for a Couchbase
cluster. Each verb turns ``(query, bindings)`` into a N1QL request against
one bucket and normalizes the returned rows into the shape the verb
promises: rows for ``select``, a bool for ``statement``, a count for
``affecting_statement``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeVar

from n1ql_adapter import errors
from n1ql_adapter.db.request import ScanConsistency, build_request
from n1ql_adapter.models.config import ConnectionConfig, parse_config
from n1ql_adapter.models.query import QueryLogEntry
from n1ql_adapter.query.builder import QueryBuilder
from n1ql_adapter.query.grammar import Grammar
from n1ql_adapter.query.processor import Processor

if TYPE_CHECKING:
    from n1ql_adapter.db.backend import BucketHandle, Connector, Row, Session

logger = logging.getLogger(__name__)

T = TypeVar("T")

DRIVER_NAME = "couchbase"


class CouchbaseConnection:
    """A logical database handle over a Couchbase cluster session.

    The session is established at construction, dropped by ``disconnect()``
    and re-established on the next verb. Verbs target the bucket passed as
    ``bucket=`` or, failing that, the one last chosen with ``bucket()`` /
    ``table()``. ``selected_bucket`` is shared mutable state; threads sharing
    a connection should use ``on_bucket()`` views instead.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | ConnectionConfig,
        *,
        connector: Connector | None = None,
    ) -> None:
        """Validate config, connect, and install the default grammar and processor."""
        self._config = parse_config(config)
        if connector is None:
            from n1ql_adapter.db.connector import CouchbaseConnector

            connector = CouchbaseConnector()
        self._connector = connector
        self._session: Session | None = self._connector.connect(self._config)

        self._manager_user, self._manager_password = self._config.manager_credentials
        self._n1ql_enabled_servers: tuple[str, ...] = tuple(self._config.enables)

        self.selected_bucket: str | None = None
        self.fetch_mode: int = 0
        self._pretending = False
        self._logging_queries = False
        self._query_log: list[QueryLogEntry] = []

        self.use_default_query_grammar()
        self.use_default_post_processor()

    # -- Configuration --

    @property
    def config(self) -> ConnectionConfig:
        """The validated connection configuration."""
        return self._config

    @property
    def manager_credentials(self) -> tuple[str, str]:
        """User/password for administrative bucket operations."""
        return self._manager_user, self._manager_password

    @property
    def n1ql_enabled_servers(self) -> tuple[str, ...]:
        """Servers on which N1QL is enabled for every opened bucket."""
        return self._n1ql_enabled_servers

    def get_driver_name(self) -> str:
        """Identifier used for dialect dispatch."""
        return DRIVER_NAME

    def set_fetch_mode(self, fetch_mode: int) -> None:
        """Accepted for compatibility; rows are always JSON values."""

    def use_default_query_grammar(self) -> None:
        """Install the default N1QL grammar."""
        self._grammar = Grammar()

    def use_default_post_processor(self) -> None:
        """Install the default result processor."""
        self._processor = Processor()

    def get_query_grammar(self) -> Grammar:
        """The grammar used by query builders from this connection."""
        return self._grammar

    def get_post_processor(self) -> Processor:
        """The processor used by query builders from this connection."""
        return self._processor

    # -- Session lifecycle --

    def get_couchbase(self) -> Session | None:
        """The live cluster session, or None after disconnect()."""
        return self._session

    def disconnect(self) -> None:
        """Drop the session reference; the client owns socket teardown."""
        logger.info("Disconnecting from couchbase")
        self._session = None

    def reconnect(self) -> None:
        """Establish a fresh session through the connector."""
        logger.warning("Reconnecting to couchbase")
        try:
            self._session = self._connector.connect(self._config)
        except errors.ConnectionError:
            raise
        except Exception as e:
            raise errors.ConnectionError(f"Reconnect failed: {e}") from e

    def reconnect_if_missing_connection(self) -> None:
        """Reconnect once when the session has been dropped."""
        if self._session is None:
            self.reconnect()

    def open_bucket(self, name: str) -> BucketHandle:
        """Open a handle on ``name`` from the current session."""
        if self._session is None:
            raise errors.ConnectionError("No couchbase session established")
        return self._session.open_bucket(name)

    def enable_n1ql(self, bucket: BucketHandle) -> BucketHandle:
        """Enable N1QL on the configured servers; no-op when none are configured."""
        if not self._n1ql_enabled_servers:
            return bucket
        bucket.enable_n1ql(list(self._n1ql_enabled_servers))
        return bucket

    # -- Bucket selection --

    def bucket(self, name: str) -> CouchbaseConnection:
        """Select the bucket subsequent verbs target."""
        self.selected_bucket = name
        return self

    def table(self, name: str) -> QueryBuilder:
        """Select ``name`` and return a query builder over it."""
        self.selected_bucket = name
        return self.query().from_(name)

    def on_bucket(self, name: str) -> BucketView:
        """A view whose verbs always target ``name``."""
        return BucketView(self, name)

    def query(self) -> QueryBuilder:
        """A new query builder bound to this connection."""
        return QueryBuilder(self, self._grammar, self._processor)

    # -- Execution verbs --

    def select(
        self, query: str, bindings: Sequence[Any] = (), *, bucket: str | None = None
    ) -> list[Row]:
        """Run a read query with request-plus consistency and return its rows."""

        def _execute(target: str, args: Sequence[Any]) -> list[Row]:
            return self._execute(target, query, args, ScanConsistency.REQUEST_PLUS)

        return self._run(query, bindings, bucket, _execute, pretend_result=[])

    def statement(
        self, query: str, bindings: Sequence[Any] = (), *, bucket: str | None = None
    ) -> bool:
        """Run a statement; True iff it returned at least one row."""

        def _execute(target: str, args: Sequence[Any]) -> bool:
            return len(self._execute(target, query, args)) > 0

        return self._run(query, bindings, bucket, _execute, pretend_result=True)

    def affecting_statement(
        self, query: str, bindings: Sequence[Any] = (), *, bucket: str | None = None
    ) -> int:
        """Run a statement and return the number of rows it returned."""

        def _execute(target: str, args: Sequence[Any]) -> int:
            return len(self._execute(target, query, args))

        return self._run(query, bindings, bucket, _execute, pretend_result=0)

    def upsert(
        self, query: str, bindings: Sequence[Any] = (), *, bucket: str | None = None
    ) -> int:
        """Run a N1QL UPSERT; same contract as affecting_statement()."""
        return self.affecting_statement(query, bindings, bucket=bucket)

    def _run(
        self,
        query: str,
        bindings: Sequence[Any],
        bucket: str | None,
        callback: Callable[[str, Sequence[Any]], T],
        *,
        pretend_result: T,
    ) -> T:
        """Shared verb template: reconnect, pretend short-circuit, execute, log."""
        self.reconnect_if_missing_connection()
        target = bucket if bucket is not None else self.selected_bucket

        if self._pretending:
            logger.debug("Pretending N1QL on %s: %s", target, query)
            self._log_query(query, bindings, target, None)
            return pretend_result

        if target is None:
            raise errors.BucketNotSelectedError()

        start = time.perf_counter()
        result = callback(target, bindings)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug("N1QL on %s (%.1f ms): %s", target, elapsed_ms, query)
        self._log_query(query, bindings, target, elapsed_ms)
        return result

    def _execute(
        self,
        bucket: str,
        query: str,
        bindings: Sequence[Any],
        consistency: ScanConsistency | None = None,
    ) -> list[Row]:
        """Build the request, open and enable the bucket, and run it."""
        request = build_request(query, bindings, consistency=consistency)
        handle = self.enable_n1ql(self.open_bucket(bucket))
        return handle.query(request)

    # -- Unsupported: transactions --

    def transaction(self, callback: Callable[[CouchbaseConnection], T]) -> T:
        """Not supported; ``callback`` is never invoked."""
        raise errors.NotSupportedError("CouchbaseConnection.transaction")

    def begin_transaction(self) -> None:
        """Not supported."""
        raise errors.NotSupportedError("CouchbaseConnection.begin_transaction")

    def commit(self) -> None:
        """Not supported."""
        raise errors.NotSupportedError("CouchbaseConnection.commit")

    def roll_back(self) -> None:
        """Not supported."""
        raise errors.NotSupportedError("CouchbaseConnection.roll_back")

    # -- Pretend mode and query log --

    @property
    def pretending(self) -> bool:
        """True while verbs short-circuit without contacting the cluster."""
        return self._pretending

    @contextmanager
    def pretend(self) -> Iterator[list[QueryLogEntry]]:
        """Dry-run every verb inside the block.

        Yields the list of statements captured while pretending. The previous
        pretend state and query log are restored on exit.
        """
        previous_pretending = self._pretending
        previous_log = self._query_log
        captured: list[QueryLogEntry] = []
        self._pretending = True
        self._query_log = captured
        try:
            yield captured
        finally:
            self._pretending = previous_pretending
            self._query_log = previous_log

    @property
    def logging_queries(self) -> bool:
        """True when executed statements are recorded in the query log."""
        return self._logging_queries

    def enable_query_log(self) -> None:
        """Start recording executed statements."""
        self._logging_queries = True

    def disable_query_log(self) -> None:
        """Stop recording executed statements."""
        self._logging_queries = False

    def get_query_log(self) -> list[QueryLogEntry]:
        """Statements recorded so far."""
        return list(self._query_log)

    def flush_query_log(self) -> None:
        """Forget recorded statements."""
        self._query_log = []

    def _log_query(
        self,
        query: str,
        bindings: Sequence[Any],
        bucket: str | None,
        time_ms: float | None,
    ) -> None:
        if self._logging_queries or self._pretending:
            self._query_log.append(
                QueryLogEntry(query=query, bindings=list(bindings), bucket=bucket, time_ms=time_ms)
            )


class BucketView:
    """Verbs permanently bound to one bucket.

    Never reads or writes the connection's ``selected_bucket``.
    """

    def __init__(self, connection: CouchbaseConnection, bucket: str) -> None:
        """Bind ``connection`` to ``bucket``."""
        self._connection = connection
        self._bucket = bucket

    @property
    def name(self) -> str:
        """The bound bucket."""
        return self._bucket

    def select(self, query: str, bindings: Sequence[Any] = ()) -> list[Row]:
        return self._connection.select(query, bindings, bucket=self._bucket)

    def statement(self, query: str, bindings: Sequence[Any] = ()) -> bool:
        return self._connection.statement(query, bindings, bucket=self._bucket)

    def affecting_statement(self, query: str, bindings: Sequence[Any] = ()) -> int:
        return self._connection.affecting_statement(query, bindings, bucket=self._bucket)

    def upsert(self, query: str, bindings: Sequence[Any] = ()) -> int:
        return self._connection.upsert(query, bindings, bucket=self._bucket)

    def query(self) -> QueryBuilder:
        """A query builder over the bound bucket."""
        return self._connection.query().from_(self._bucket)

"""Couchbase implementation of the Session and BucketHandle protocols.

Thin wrappers around the ``couchbase`` SDK. By default N1QL runs through
``Cluster.query``, which routes to the cluster's query nodes. Once a handle
is N1QL-enabled for explicit servers, requests go straight to those
servers' ``/query/service`` REST endpoint via httpx instead.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import httpx
from couchbase.exceptions import CouchbaseException
from couchbase.n1ql import QueryScanConsistency
from couchbase.options import QueryOptions

from n1ql_adapter import errors
from n1ql_adapter.db.request import N1qlRequest, ScanConsistency

if TYPE_CHECKING:
    from couchbase.bucket import Bucket
    from couchbase.cluster import Cluster

    from n1ql_adapter.db.backend import Row

logger = logging.getLogger(__name__)

_QUERY_SERVICE_PATH = "/query/service"

_SCAN_CONSISTENCY = {
    ScanConsistency.NOT_BOUNDED: QueryScanConsistency.NOT_BOUNDED,
    ScanConsistency.REQUEST_PLUS: QueryScanConsistency.REQUEST_PLUS,
}


def _query_options(request: N1qlRequest) -> QueryOptions:
    """Translate a request's arguments and consistency into SDK options."""
    kwargs: dict[str, Any] = {}
    if request.args:
        kwargs["positional_parameters"] = list(request.args)
    if request.consistency is not None:
        kwargs["scan_consistency"] = _SCAN_CONSISTENCY[request.consistency]
    return QueryOptions(**kwargs)


def _service_url(server: str) -> str:
    """Build the query service URL for a server identifier.

    Bare host[:port] identifiers are treated as plain HTTP.
    """
    base = server if "://" in server else f"http://{server}"
    return base.rstrip("/") + _QUERY_SERVICE_PATH


class CouchbaseBucketHandle:
    """Wraps an SDK bucket to satisfy the BucketHandle protocol."""

    def __init__(self, session: CouchbaseSession, bucket: Bucket) -> None:
        """Initialize with the owning session and an open SDK bucket."""
        self._session = session
        self._bucket = bucket
        self._n1ql_servers: list[str] = []

    @property
    def name(self) -> str:
        """Bucket name."""
        return str(self._bucket.name)

    @property
    def n1ql_servers(self) -> list[str]:
        """Query servers this handle has been enabled for."""
        return list(self._n1ql_servers)

    def enable_n1ql(self, servers: Sequence[str]) -> CouchbaseBucketHandle:
        """Send subsequent N1QL requests to ``servers`` in rotation.

        The rotation cursor lives on the session, so handles opened per call
        keep cycling through the same server list.
        """
        self._n1ql_servers = list(servers)
        logger.debug("N1QL enabled on bucket %s for %s", self.name, self._n1ql_servers)
        return self

    def query(self, request: N1qlRequest) -> list[Row]:
        """Execute a N1QL request and return all rows."""
        if self._n1ql_servers:
            return self._query_service(request)
        result = self._session.cluster.query(request.statement, _query_options(request))
        return list(result.rows())

    def _query_service(self, request: N1qlRequest) -> list[Row]:
        """POST the request to the next enabled query server.

        A JSON body with a non-success status raises ClientError whatever the
        HTTP code; responses without a JSON body fall back to raise_for_status().
        """
        server = self._session.next_query_server(self._n1ql_servers)
        resp = self._session.http_client.post(
            _service_url(server),
            json=request.to_payload(),
            auth=self._session.credentials,
        )
        try:
            data = resp.json()
        except ValueError as e:
            resp.raise_for_status()
            raise errors.ClientError(f"Query service at {server} returned a non-JSON body") from e
        if not isinstance(data, dict):
            resp.raise_for_status()
            raise errors.ClientError(f"Unexpected query service response from {server}")

        if data.get("status") != "success":
            service_errors = data.get("errors") or []
            message = "; ".join(
                str(e.get("msg", e)) if isinstance(e, dict) else str(e) for e in service_errors
            ) or str(data.get("status"))
            cause: httpx.HTTPStatusError | None = None
            try:
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                cause = e
            raise errors.ClientError(f"N1QL request failed: {message}", service_errors) from cause

        resp.raise_for_status()
        results: list[Row] = data.get("results") or []
        return results


class CouchbaseSession:
    """Wraps an SDK Cluster to satisfy the Session protocol.

    The httpx client used for N1QL-enabled servers is created lazily and
    owned by the session unless one is passed in.
    """

    def __init__(
        self,
        cluster: Cluster,
        *,
        user: str,
        password: str,
        http_client: httpx.Client | None = None,
    ) -> None:
        """Initialize with a connected cluster and its credentials."""
        self._cluster = cluster
        self._user = user
        self._password = password
        self._http = http_client
        self._server_cursors: dict[tuple[str, ...], int] = {}

    @property
    def cluster(self) -> Cluster:
        """The underlying SDK cluster."""
        return self._cluster

    @property
    def credentials(self) -> tuple[str, str]:
        """User/password used for HTTP basic auth against query servers."""
        return self._user, self._password

    @property
    def http_client(self) -> httpx.Client:
        """HTTP client for direct query-service requests."""
        if self._http is None:
            self._http = httpx.Client()
        return self._http

    def next_query_server(self, servers: Sequence[str]) -> str:
        """Pick the next server from ``servers``, round-robin per server list."""
        key = tuple(servers)
        index = self._server_cursors.get(key, 0)
        self._server_cursors[key] = index + 1
        return key[index % len(key)]

    def open_bucket(self, name: str) -> CouchbaseBucketHandle:
        """Open a handle on the named bucket."""
        try:
            bucket = self._cluster.bucket(name)
        except CouchbaseException as e:
            raise errors.ConnectionError(f"Could not open bucket {name!r}: {e}") from e
        return CouchbaseBucketHandle(self, bucket)

    def close(self) -> None:
        """Close the cluster and any HTTP client."""
        if self._http is not None:
            self._http.close()
            self._http = None
        self._cluster.close()

"""Cluster connection management."""

import logging
from datetime import timedelta

from couchbase.auth import PasswordAuthenticator
from couchbase.cluster import Cluster
from couchbase.exceptions import CouchbaseException
from couchbase.options import ClusterOptions

from n1ql_adapter import errors
from n1ql_adapter.db.couchbase_backend import CouchbaseSession
from n1ql_adapter.models.config import ConnectionConfig

logger = logging.getLogger(__name__)


def connection_string(host: str) -> str:
    """Normalize a configured host into a couchbase connection string."""
    if "://" in host:
        return host
    return f"couchbase://{host}"


class CouchbaseConnector:
    """Establishes cluster sessions from a resolved configuration."""

    def connect(self, config: ConnectionConfig) -> CouchbaseSession:
        """Connect to the cluster and wait until it is ready for requests."""
        conn_str = connection_string(config.host)
        logger.info("Connecting to couchbase cluster at %s", conn_str)
        try:
            auth = PasswordAuthenticator(config.user, config.password)
            cluster = Cluster(conn_str, ClusterOptions(auth))
            cluster.wait_until_ready(timedelta(seconds=config.connect_timeout))
        except CouchbaseException as e:
            raise errors.ConnectionError(f"Could not connect to {conn_str}: {e}") from e
        return CouchbaseSession(cluster, user=config.user, password=config.password)

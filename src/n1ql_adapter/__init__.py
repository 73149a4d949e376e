"""N1QL connection adapter: SQL-shaped execution verbs over Couchbase buckets."""

from n1ql_adapter.db.connection import BucketView, CouchbaseConnection
from n1ql_adapter.errors import (
    BucketNotSelectedError,
    ClientError,
    ConfigurationError,
    ConnectionError,
    N1qlAdapterError,
    NotSupportedError,
)
from n1ql_adapter.models.config import ConnectionConfig, ManagerCredentials

__all__ = [
    "BucketNotSelectedError",
    "BucketView",
    "ClientError",
    "ConfigurationError",
    "ConnectionConfig",
    "ConnectionError",
    "CouchbaseConnection",
    "ManagerCredentials",
    "N1qlAdapterError",
    "NotSupportedError",
]

"""Cluster sessions, request construction, and the connection adapter."""

from n1ql_adapter.db.backend import BucketHandle, Connection, Connector, Row, Session
from n1ql_adapter.db.connection import BucketView, CouchbaseConnection
from n1ql_adapter.db.request import N1qlRequest, ScanConsistency, build_request

__all__ = [
    "BucketHandle",
    "BucketView",
    "Connection",
    "Connector",
    "CouchbaseConnection",
    "N1qlRequest",
    "Row",
    "ScanConsistency",
    "Session",
    "build_request",
]

"""Error taxonomy for the N1QL connection adapter.

Errors raised by the Couchbase SDK or by ``httpx`` during query execution are
not wrapped; they reach the caller unchanged.
"""


class N1qlAdapterError(Exception):
    """Base class for all adapter errors."""


class ConfigurationError(N1qlAdapterError):
    """Connection configuration is missing required fields or is malformed."""


class ConnectionError(N1qlAdapterError):  # noqa: A001
    """No live cluster session, or establishing one failed."""


class BucketNotSelectedError(N1qlAdapterError):
    """A verb was called with no bucket selected and none passed explicitly."""

    def __init__(self) -> None:
        super().__init__("No bucket selected; call bucket(name) or pass bucket=")


class NotSupportedError(N1qlAdapterError):
    """The requested operation has no equivalent in the document store."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"{operation} is not supported by the couchbase driver")


class ClientError(N1qlAdapterError):
    """The query service answered with a non-success status."""

    def __init__(self, message: str, errors: list[dict[str, object]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

"""N1QL request construction.

A request is built per execution call from raw query text and positional
bindings, carries an optional scan consistency, and is discarded once the
call returns.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class ScanConsistency(StrEnum):
    """Index consistency a query waits for before reading."""

    NOT_BOUNDED = "not_bounded"
    REQUEST_PLUS = "request_plus"


@dataclass
class N1qlRequest:
    """An executable N1QL statement with positional arguments."""

    statement: str
    args: list[Any] = field(default_factory=list)
    consistency: ScanConsistency | None = None

    @classmethod
    def from_string(cls, statement: str) -> N1qlRequest:
        """Create a request with no arguments and default consistency."""
        return cls(statement=statement)

    def to_payload(self) -> dict[str, Any]:
        """Body for the query service REST endpoint."""
        payload: dict[str, Any] = {"statement": self.statement}
        if self.args:
            payload["args"] = list(self.args)
        if self.consistency is not None:
            payload["scan_consistency"] = self.consistency.value
        return payload


def build_request(
    query: str,
    bindings: Sequence[Any] = (),
    *,
    consistency: ScanConsistency | None = None,
) -> N1qlRequest:
    """Wrap query text and bindings into a request.

    Bindings are attached positionally, in order, matching ``?`` / ``$N``
    placeholders in the statement.
    """
    request = N1qlRequest.from_string(query)
    request.args = list(bindings)
    request.consistency = consistency
    return request

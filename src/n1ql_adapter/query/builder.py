"""Fluent N1QL query builder.

Builders are created by ``CouchbaseConnection.query()`` / ``table()``.
Every chaining method mutates the builder and returns it; terminal methods
compile through the connection's Grammar and execute through its verbs,
always passing the builder's bucket explicitly.
"""

from __future__ import annotations

import copy
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from n1ql_adapter.query.grammar import OPERATORS, Expression, raw

if TYPE_CHECKING:
    from n1ql_adapter.db.connection import CouchbaseConnection
    from n1ql_adapter.query.grammar import Grammar
    from n1ql_adapter.query.processor import Processor

_MISSING = object()


@dataclass
class Where:
    """One WHERE condition."""

    type: str  # "basic", "in", "null", "not_null"
    column: str
    boolean: str = "AND"
    operator: str = "="
    value: Any = None


class QueryBuilder:
    """Accumulates a N1QL query against one bucket."""

    def __init__(
        self, connection: CouchbaseConnection, grammar: Grammar, processor: Processor
    ) -> None:
        self.connection = connection
        self.grammar = grammar
        self.processor = processor
        self.bucket: str | None = None
        self.columns: list[str | Expression] = ["*"]
        self.keys: list[str] | None = None
        self.wheres: list[Where] = []
        self.orders: list[tuple[str, str]] = []
        self.limit_value: int | None = None
        self.offset_value: int | None = None

    # -- Chaining --

    def from_(self, bucket: str) -> QueryBuilder:
        """Set the bucket (keyspace) the query runs against."""
        self.bucket = bucket
        return self

    def select(self, *columns: str | Expression) -> QueryBuilder:
        """Replace the projection; no arguments means ``*``."""
        self.columns = list(columns) or ["*"]
        return self

    def add_select(self, *columns: str | Expression) -> QueryBuilder:
        """Extend the projection."""
        if self.columns == ["*"]:
            self.columns = []
        self.columns.extend(columns)
        return self

    def use_keys(self, keys: str | Sequence[str]) -> QueryBuilder:
        """Restrict the query to documents with the given keys."""
        self.keys = [keys] if isinstance(keys, str) else list(keys)
        return self

    def where(
        self, column: str, operator: Any = _MISSING, value: Any = _MISSING, boolean: str = "AND"
    ) -> QueryBuilder:
        """Add ``column <operator> ?``; ``where(col, value)`` means equality."""
        if operator is _MISSING:
            raise ValueError("where() requires a value")
        if value is _MISSING:
            operator, value = "=", operator
        op = str(operator).upper()
        if op not in OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
        self.wheres.append(Where("basic", column, boolean, op, value))
        return self

    def or_where(
        self, column: str, operator: Any = _MISSING, value: Any = _MISSING
    ) -> QueryBuilder:
        return self.where(column, operator, value, boolean="OR")

    def where_in(self, column: str, values: Sequence[Any], boolean: str = "AND") -> QueryBuilder:
        """Add ``column IN ?`` bound to the whole list."""
        self.wheres.append(Where("in", column, boolean, value=list(values)))
        return self

    def where_null(self, column: str, boolean: str = "AND") -> QueryBuilder:
        self.wheres.append(Where("null", column, boolean))
        return self

    def where_not_null(self, column: str, boolean: str = "AND") -> QueryBuilder:
        self.wheres.append(Where("not_null", column, boolean))
        return self

    def order_by(self, column: str, direction: str = "asc") -> QueryBuilder:
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Order direction must be asc or desc, got {direction!r}")
        self.orders.append((column, direction))
        return self

    def limit(self, value: int) -> QueryBuilder:
        if value < 0:
            raise ValueError("limit must be non-negative")
        self.limit_value = value
        return self

    def offset(self, value: int) -> QueryBuilder:
        if value < 0:
            raise ValueError("offset must be non-negative")
        self.offset_value = value
        return self

    # -- Compilation --

    def to_n1ql(self) -> str:
        """Compile the read query."""
        return self.grammar.compile_select(self)

    def where_bindings(self) -> list[Any]:
        return [w.value for w in self.wheres if w.type in ("basic", "in")]

    def get_bindings(self) -> list[Any]:
        """Bindings for the read query, in placeholder order."""
        bindings: list[Any] = []
        if self.keys is not None:
            bindings.append(list(self.keys))
        bindings.extend(self.where_bindings())
        return bindings

    def clone(self) -> QueryBuilder:
        cloned = copy.copy(self)
        cloned.columns = list(self.columns)
        cloned.keys = None if self.keys is None else list(self.keys)
        cloned.wheres = list(self.wheres)
        cloned.orders = list(self.orders)
        return cloned

    # -- Reads --

    def get(self) -> list[Any]:
        """Execute the read and return processed rows."""
        rows = self.connection.select(self.to_n1ql(), self.get_bindings(), bucket=self.bucket)
        return self.processor.process_select(self, rows)

    def first(self) -> Any | None:
        """First row, or None."""
        rows = self.clone().limit(1).get()
        return rows[0] if rows else None

    def count(self) -> int:
        """Number of matching documents."""
        query = self.clone()
        query.columns = [raw("COUNT(*) AS `aggregate`")]
        query.orders = []
        query.limit_value = None
        query.offset_value = None
        rows = query.get()
        if not rows:
            return 0
        return int(rows[0]["aggregate"])

    def exists(self) -> bool:
        return self.count() > 0

    # -- Writes --

    def insert(self, key: str, document: dict[str, Any]) -> bool:
        """Insert one document; True when it was created."""
        sql = self.grammar.compile_insert(self)
        return self.connection.statement(sql, [key, document], bucket=self.bucket)

    def upsert(self, key: str, document: dict[str, Any]) -> int:
        """Insert or replace one document; returns the number written."""
        sql = self.grammar.compile_upsert(self)
        return self.connection.upsert(sql, [key, document], bucket=self.bucket)

    def update(self, values: dict[str, Any]) -> int:
        """Set fields on matching documents; returns the number updated."""
        sql = self.grammar.compile_update(self, values)
        bindings = self.grammar.prepare_bindings_for_update(self, values)
        return self.connection.affecting_statement(sql, bindings, bucket=self.bucket)

    def delete(self) -> int:
        """Delete matching documents; returns the number deleted."""
        sql = self.grammar.compile_delete(self)
        return self.connection.affecting_statement(sql, self.get_bindings(), bucket=self.bucket)

"""N1QL grammar: compiles query builder state into statement text.

Identifiers are wrapped in backticks; every value is a ``?`` positional
placeholder whose binding the builder supplies in placeholder order.
Mutations end with ``RETURNING META(<bucket>).id`` so the number of returned
rows equals the number of documents touched.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from n1ql_adapter.query.builder import QueryBuilder, Where

OPERATORS = frozenset({"=", "==", "!=", "<>", "<", "<=", ">", ">=", "LIKE", "NOT LIKE"})


class Expression:
    """Raw N1QL text that the grammar emits without quoting."""

    def __init__(self, value: str) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Expression) and other.value == self.value

    def __repr__(self) -> str:
        return f"Expression({self.value!r})"


def raw(value: str) -> Expression:
    """Mark ``value`` as a raw N1QL expression."""
    return Expression(value)


class Grammar:
    """Compiles QueryBuilder state into N1QL."""

    def wrap(self, value: str | Expression) -> str:
        """Quote an identifier, handling ``a.b`` paths and ``x AS y`` aliases."""
        if isinstance(value, Expression):
            return value.value
        lowered = value.lower()
        if " as " in lowered:
            idx = lowered.index(" as ")
            column, alias = value[:idx].strip(), value[idx + 4 :].strip()
            return f"{self.wrap(column)} AS {self._wrap_segment(alias)}"
        return ".".join(self._wrap_segment(segment) for segment in value.split("."))

    def _wrap_segment(self, segment: str) -> str:
        if segment == "*":
            return segment
        return "`" + segment.replace("`", "``") + "`"

    def wrap_table(self, bucket: str) -> str:
        """Quote a bucket (keyspace) name."""
        return self._wrap_segment(bucket)

    def columnize(self, columns: list[str | Expression]) -> str:
        return ", ".join(self.wrap(c) for c in columns)

    # -- SELECT --

    def compile_select(self, query: QueryBuilder) -> str:
        """Compile a read: SELECT, FROM, USE KEYS, WHERE, ORDER BY, LIMIT, OFFSET."""
        bucket = self._require_bucket(query)
        parts = [f"SELECT {self.columnize(query.columns)}", f"FROM {self.wrap_table(bucket)}"]
        parts.extend(self._compile_filters(query))
        if query.orders:
            orders = ", ".join(f"{self.wrap(col)} {direction}" for col, direction in query.orders)
            parts.append(f"ORDER BY {orders}")
        if query.limit_value is not None:
            parts.append(f"LIMIT {int(query.limit_value)}")
        if query.offset_value is not None:
            parts.append(f"OFFSET {int(query.offset_value)}")
        return " ".join(parts)

    # -- Mutations --

    def compile_insert(self, query: QueryBuilder) -> str:
        """``INSERT INTO b (KEY, VALUE) VALUES (?, ?)``; binds key, document."""
        return self._compile_key_value("INSERT", query)

    def compile_upsert(self, query: QueryBuilder) -> str:
        """``UPSERT INTO b (KEY, VALUE) VALUES (?, ?)``; binds key, document."""
        return self._compile_key_value("UPSERT", query)

    def compile_update(self, query: QueryBuilder, values: dict[str, Any]) -> str:
        """``UPDATE b USE KEYS ? SET a = ? ... WHERE ... LIMIT n RETURNING ...``."""
        if not values:
            raise ValueError("update() requires at least one value")
        bucket = self._require_bucket(query)
        assignments = ", ".join(f"{self.wrap(column)} = ?" for column in values)
        parts = [f"UPDATE {self.wrap_table(bucket)}"]
        if query.keys is not None:
            parts.append("USE KEYS ?")
        parts.append(f"SET {assignments}")
        if query.wheres:
            parts.append(self.compile_wheres(query.wheres))
        if query.limit_value is not None:
            parts.append(f"LIMIT {int(query.limit_value)}")
        parts.append(self.compile_returning(bucket))
        return " ".join(parts)

    def compile_delete(self, query: QueryBuilder) -> str:
        """``DELETE FROM b USE KEYS ? WHERE ... LIMIT n RETURNING ...``."""
        bucket = self._require_bucket(query)
        parts = [f"DELETE FROM {self.wrap_table(bucket)}"]
        parts.extend(self._compile_filters(query))
        if query.limit_value is not None:
            parts.append(f"LIMIT {int(query.limit_value)}")
        parts.append(self.compile_returning(bucket))
        return " ".join(parts)

    def compile_returning(self, bucket: str) -> str:
        return f"RETURNING META({self.wrap_table(bucket)}).id"

    def prepare_bindings_for_update(self, query: QueryBuilder, values: dict[str, Any]) -> list[Any]:
        """Bindings in placeholder order: keys, SET values, WHERE values."""
        bindings: list[Any] = []
        if query.keys is not None:
            bindings.append(list(query.keys))
        bindings.extend(values.values())
        bindings.extend(query.where_bindings())
        return bindings

    # -- Clauses --

    def compile_wheres(self, wheres: list[Where]) -> str:
        clauses = []
        for i, where in enumerate(wheres):
            clause = self._compile_where(where)
            clauses.append(clause if i == 0 else f"{where.boolean} {clause}")
        return "WHERE " + " ".join(clauses)

    def _compile_where(self, where: Where) -> str:
        column = self.wrap(where.column)
        if where.type == "basic":
            return f"{column} {where.operator} ?"
        if where.type == "in":
            return f"{column} IN ?"
        if where.type == "null":
            return f"{column} IS NULL"
        if where.type == "not_null":
            return f"{column} IS NOT NULL"
        raise ValueError(f"Unknown where type: {where.type}")

    def _compile_filters(self, query: QueryBuilder) -> list[str]:
        parts = []
        if query.keys is not None:
            parts.append("USE KEYS ?")
        if query.wheres:
            parts.append(self.compile_wheres(query.wheres))
        return parts

    def _compile_key_value(self, verb: str, query: QueryBuilder) -> str:
        bucket = self._require_bucket(query)
        table = self.wrap_table(bucket)
        return f"{verb} INTO {table} (KEY, VALUE) VALUES (?, ?) {self.compile_returning(bucket)}"

    @staticmethod
    def _require_bucket(query: QueryBuilder) -> str:
        if query.bucket is None:
            raise ValueError("Query has no bucket; call from_(bucket) first")
        return query.bucket

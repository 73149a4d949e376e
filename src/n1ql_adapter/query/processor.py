"""Post-processing of rows returned to query builders."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from n1ql_adapter.query.builder import QueryBuilder


class Processor:
    """Shapes raw N1QL rows for query builder callers."""

    def process_select(self, query: QueryBuilder, rows: list[Any]) -> list[Any]:
        """Unwrap ``SELECT *`` rows.

        N1QL returns ``SELECT * FROM b`` rows as ``{"b": {...document...}}``;
        builder callers get the document itself. Projections pass unchanged.
        """
        if query.columns != ["*"] or query.bucket is None:
            return rows
        bucket = query.bucket
        return [
            row[bucket] if isinstance(row, dict) and len(row) == 1 and bucket in row else row
            for row in rows
        ]

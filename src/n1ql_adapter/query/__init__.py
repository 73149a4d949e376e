"""Fluent query front-end: builder, grammar, and result processor."""

from n1ql_adapter.query.builder import QueryBuilder
from n1ql_adapter.query.grammar import Expression, Grammar, raw
from n1ql_adapter.query.processor import Processor

__all__ = ["Expression", "Grammar", "Processor", "QueryBuilder", "raw"]

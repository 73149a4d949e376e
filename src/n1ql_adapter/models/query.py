"""Query log models."""

from typing import Any

from pydantic import BaseModel, Field


class QueryLogEntry(BaseModel):
    """A statement the connection ran (or would have run, when pretending)."""

    query: str
    bindings: list[Any] = Field(default_factory=list)
    bucket: str | None = None
    time_ms: float | None = None  # None when pretending

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence

FILTER_OPS = ("eq", "in", "gte", "lte", "ilike")


@dataclass(frozen=True)
class Filter:
    """Column predicate understood by every relational store.

    ops:
      - eq    : column == value
      - in    : column is one of value (a sequence)
      - gte   : column >= value
      - lte   : column <= value
      - ilike : case-insensitive LIKE, `%` as wildcard
    """

    column: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in FILTER_OPS:
            raise ValueError(f"unsupported filter op: {self.op}")


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def is_in(column: str, values: Sequence[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


def gte(column: str, value: Any) -> Filter:
    return Filter(column, "gte", value)


def lte(column: str, value: Any) -> Filter:
    return Filter(column, "lte", value)


def ilike(column: str, pattern: str) -> Filter:
    return Filter(column, "ilike", pattern)


class DocumentStore(Protocol):
    """Keyed document lookups (user/employee records, form schemas)."""

    async def get(self, collection: str, key: str) -> dict[str, Any] | None: ...


class RelationalStore(Protocol):
    """Row reads over named tables/views.

    `start`/`end` form an inclusive row range (as in PostgREST `range()`).
    A store may silently cap the number of rows it returns.
    Implementations raise `BackendUnavailable` on any failure.
    """

    async def select(
        self,
        table: str,
        columns: Sequence[str] | None = None,
        *,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        start: int | None = None,
        end: int | None = None,
    ) -> list[dict[str, Any]]: ...

    async def count(self, table: str, *, filters: Sequence[Filter] = ()) -> int: ...


def range_to_offset_limit(start: int | None, end: int | None, max_rows: int = 0) -> tuple[int, int | None]:
    """Translate an inclusive range into (offset, limit), applying the row cap."""
    offset = max(0, int(start or 0))
    limit: int | None = None
    if end is not None:
        limit = max(0, int(end) - offset + 1)
    if max_rows and max_rows > 0:
        limit = max_rows if limit is None else min(limit, max_rows)
    return offset, limit

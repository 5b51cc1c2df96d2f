from __future__ import annotations

import copy
import re
from datetime import datetime
from typing import Any, Iterable, Sequence

from fieldreports.core.errors import BackendUnavailable
from fieldreports.stores.base import Filter, range_to_offset_limit
from fieldreports.utils.dates import parse_timestamp


def _comparable(left: Any, right: Any) -> tuple[Any, Any]:
    # ISO strings vs datetimes (submitted_at filters)
    if isinstance(left, datetime) or isinstance(right, datetime):
        return parse_timestamp(left), parse_timestamp(right)
    return left, right


def _like_to_regex(pattern: str) -> re.Pattern:
    parts = [re.escape(p) for p in str(pattern).split("%")]
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def _matches(row: dict[str, Any], f: Filter) -> bool:
    value = row.get(f.column)
    if f.op == "eq":
        return value == f.value
    if f.op == "in":
        return value in f.value
    if f.op == "ilike":
        return isinstance(value, str) and bool(_like_to_regex(f.value).match(value))
    if value is None:
        return False
    left, right = _comparable(value, f.value)
    if left is None or right is None:
        return False
    if f.op == "gte":
        return left >= right
    return left <= right


class InMemoryDocumentStore:
    def __init__(self, documents: dict[str, dict[str, dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        for collection, docs in (documents or {}).items():
            for key, doc in docs.items():
                self.put(collection, key, doc)

    def put(self, collection: str, key: str, document: dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[str(key)] = copy.deepcopy(document)

    def delete(self, collection: str, key: str) -> None:
        self._collections.get(collection, {}).pop(str(key), None)

    async def get(self, collection: str, key: str) -> dict[str, Any] | None:
        doc = self._collections.get(collection, {}).get(str(key))
        return copy.deepcopy(doc) if doc is not None else None


class InMemoryRelationalStore:
    """Tables as lists of dict rows.

    `max_rows` mimics a server that silently truncates every response.
    Unknown tables raise `BackendUnavailable`, like a missing relation.
    """

    def __init__(self, tables: dict[str, Iterable[dict[str, Any]]] | None = None, *, max_rows: int = 0) -> None:
        self.max_rows = max_rows
        self._tables: dict[str, list[dict[str, Any]]] = {}
        for name, rows in (tables or {}).items():
            self.create_table(name, rows)

    def create_table(self, name: str, rows: Iterable[dict[str, Any]] = ()) -> None:
        self._tables[name] = [dict(r) for r in rows]

    def insert(self, name: str, *rows: dict[str, Any]) -> None:
        self._rows(name).extend(dict(r) for r in rows)

    def _rows(self, name: str) -> list[dict[str, Any]]:
        try:
            return self._tables[name]
        except KeyError:
            raise BackendUnavailable(f'relation "{name}" does not exist') from None

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
    ) -> list[dict[str, Any]]:
        rows = [r for r in self._rows(table) if all(_matches(r, f) for f in filters)]
        if order_by:
            present = [r for r in rows if r.get(order_by) is not None]
            missing = [r for r in rows if r.get(order_by) is None]
            present.sort(key=lambda r: r[order_by], reverse=descending)
            rows = present + missing
        offset, limit = range_to_offset_limit(start, end, self.max_rows)
        rows = rows[offset:] if limit is None else rows[offset : offset + limit]
        if columns:
            return [{c: r.get(c) for c in columns} for r in rows]
        return [copy.deepcopy(r) for r in rows]

    async def count(self, table: str, *, filters: Sequence[Filter] = ()) -> int:
        return sum(1 for r in self._rows(table) if all(_matches(r, f) for f in filters))

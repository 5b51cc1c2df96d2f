from __future__ import annotations

import logging
from typing import Any, Sequence

from sqlalchemy import MetaData, Table, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from fieldreports.core.errors import BackendUnavailable
from fieldreports.stores.base import Filter, range_to_offset_limit

logger = logging.getLogger("fieldreports.stores.sql")


def _clause(column, f: Filter):
    if f.op == "eq":
        return column == f.value
    if f.op == "in":
        return column.in_(f.value)
    if f.op == "gte":
        return column >= f.value
    if f.op == "lte":
        return column <= f.value
    return column.ilike(f.value)


class SqlRelationalStore:
    """Relational store over an async SQLAlchemy engine.

    Tables are reflected on first use, so the store works against views
    and externally managed tables as long as they exist in the database.
    """

    def __init__(self, engine: AsyncEngine, *, max_rows: int = 0) -> None:
        self.engine = engine
        self.max_rows = max_rows
        self._metadata = MetaData()

    async def _table(self, conn: AsyncConnection, name: str) -> Table:
        table = self._metadata.tables.get(name)
        if table is not None:
            return table
        return await conn.run_sync(lambda sync_conn: Table(name, self._metadata, autoload_with=sync_conn))

    @staticmethod
    def _column(table: Table, name: str):
        try:
            return table.c[name]
        except KeyError:
            raise BackendUnavailable(f'column "{name}" of relation "{table.name}" does not exist') from None

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
        try:
            async with self.engine.connect() as conn:
                t = await self._table(conn, table)
                stmt = select(*[self._column(t, c) for c in columns]) if columns else select(t)
                for f in filters:
                    stmt = stmt.where(_clause(self._column(t, f.column), f))
                if order_by:
                    col = self._column(t, order_by)
                    stmt = stmt.order_by(col.desc() if descending else col.asc())
                offset, limit = range_to_offset_limit(start, end, self.max_rows)
                if offset:
                    stmt = stmt.offset(offset)
                if limit is not None:
                    stmt = stmt.limit(limit)
                result = await conn.execute(stmt)
                return [dict(r) for r in result.mappings().all()]
        except SQLAlchemyError as exc:
            raise BackendUnavailable(f"select from {table} failed: {exc}") from exc

    async def count(self, table: str, *, filters: Sequence[Filter] = ()) -> int:
        try:
            async with self.engine.connect() as conn:
                t = await self._table(conn, table)
                stmt = select(func.count()).select_from(t)
                for f in filters:
                    stmt = stmt.where(_clause(self._column(t, f.column), f))
                result = await conn.execute(stmt)
                return int(result.scalar_one())
        except SQLAlchemyError as exc:
            raise BackendUnavailable(f"count on {table} failed: {exc}") from exc

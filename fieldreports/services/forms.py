from __future__ import annotations

import logging
from typing import Any

from fieldreports.services.types import FormConfiguration
from fieldreports.stores.base import Filter, RelationalStore, eq, ilike
from fieldreports.utils.schema import parse_json_list, parse_office_list

logger = logging.getLogger("fieldreports.forms")

FORMS_TABLE = "page_configurations"


def form_from_row(row: dict[str, Any]) -> FormConfiguration:
    last_updated = row.get("last_updated")
    return FormConfiguration(
        id=str(row.get("id") or ""),
        title=str(row.get("title") or ""),
        selected_offices=parse_office_list(row.get("selected_offices")),
        fields=tuple(f for f in parse_json_list(row.get("fields")) if isinstance(f, dict)),
        last_updated=str(last_updated) if last_updated is not None else None,
    )


class FormCatalog:
    """Read access to `page_configurations`: forms and their target offices."""

    def __init__(self, store: RelationalStore, *, table: str = FORMS_TABLE) -> None:
        self.store = store
        self.table = table

    async def fetch_form_configurations(self) -> list[FormConfiguration]:
        try:
            rows = await self.store.select(self.table, order_by="title")
        except Exception as exc:
            logger.warning("Fetching form configurations failed: %s", exc)
            return []
        return [form_from_row(r) for r in rows]

    async def get_form(self, form_id: str) -> FormConfiguration | None:
        rows = await self.store.select(self.table, filters=[eq("id", form_id)], end=0)
        return form_from_row(rows[0]) if rows else None

    async def get_form_targets(self, form_id: str) -> tuple[str, ...] | None:
        """Target offices of one form; None when the form does not exist.

        Store failures propagate; callers decide how to degrade.
        """
        form = await self.get_form(form_id)
        return form.selected_offices if form is not None else None

    async def search_form_configurations(
        self,
        title: str | None = None,
        has_office_restrictions: bool | None = None,
    ) -> list[FormConfiguration]:
        filters: list[Filter] = []
        if title:
            filters.append(ilike("title", f"%{title}%"))
        try:
            rows = await self.store.select(self.table, filters=filters, order_by="title")
        except Exception as exc:
            logger.warning("Searching form configurations failed: %s", exc)
            return []
        forms = [form_from_row(r) for r in rows]
        if has_office_restrictions is not None:
            forms = [f for f in forms if f.is_restricted == has_office_restrictions]
        return forms

from __future__ import annotations

import logging
from typing import Iterable

from fieldreports.core.cache import TTLCache
from fieldreports.services.strategies import OFFICE_NAME, OFFICES_TABLE
from fieldreports.services.types import ReportView, UserOffice, UserOffices
from fieldreports.stores.base import DocumentStore, RelationalStore, eq
from fieldreports.utils.heuristics import is_division_office, normalize_office

logger = logging.getLogger("fieldreports.hierarchy")

REPORTING_OFFICE = "Reporting Office Nam"


def merge_office_names(own: str, others: Iterable[object]) -> list[str]:
    """`own` plus `others`, de-duplicated on trimmed/case-folded name, sorted.

    The first spelling seen wins, and `own` is always seen first.
    """
    seen: dict[str, str] = {normalize_office(own): own}
    for name in others:
        if not isinstance(name, str) or not name.strip():
            continue
        seen.setdefault(normalize_office(name), name.strip())
    return sorted(seen.values())


class OfficeHierarchyResolver:
    """The current user's office and the offices that report to it.

    A user without an office resolves to nothing at all (never to the global
    roster). Results are cached per office name; when the store fails the
    answer degrades to the cached list, then to the user's own office alone.
    """

    def __init__(
        self,
        documents: DocumentStore,
        store: RelationalStore,
        cache: TTLCache[str, list[str]],
        *,
        employee_collection: str = "employees",
    ) -> None:
        self.documents = documents
        self.store = store
        self.cache = cache
        self.employee_collection = employee_collection

    async def get_user_office(self, user_id: str | None) -> UserOffice:
        if not user_id:
            return UserOffice()
        try:
            doc = await self.documents.get(self.employee_collection, user_id)
        except Exception as exc:
            logger.warning("Employee lookup for %s failed: %s", user_id, exc)
            return UserOffice()
        if not doc:
            logger.info("No employee record for %s", user_id)
            return UserOffice()
        office = doc.get("officeName")
        reporting = doc.get("reportingOfficeName")
        return UserOffice(
            office_name=office.strip() if isinstance(office, str) and office.strip() else None,
            reporting_office_name=reporting.strip() if isinstance(reporting, str) and reporting.strip() else None,
        )

    async def resolve_user_offices(self, user_id: str | None) -> UserOffices:
        own = (await self.get_user_office(user_id)).office_name
        if not own:
            return UserOffices()

        cached = self.cache.get(own)
        if cached is not None:
            return self._result(own, cached)

        try:
            rows = await self.store.select(
                OFFICES_TABLE,
                [OFFICE_NAME],
                filters=[eq(REPORTING_OFFICE, own)],
                order_by=OFFICE_NAME,
            )
        except Exception as exc:
            stale = self.cache.get_stale(own)
            if stale is not None:
                logger.warning("Reporting offices for %r unavailable, serving cache: %s", own, exc)
                return self._result(own, stale)
            logger.warning("Reporting offices for %r unavailable, using own office only: %s", own, exc)
            return UserOffices(own=own, names=(own,))

        names = merge_office_names(own, (r.get(OFFICE_NAME) for r in rows))
        logger.info("%d offices report to %r", len(names) - 1, own)
        self.cache.set(own, names)
        return self._result(own, names)

    is_division_office = staticmethod(is_division_office)

    async def report_view(self, user_id: str | None) -> ReportView:
        """Division offices get the comprehensive report, other offices the simple one."""
        own = (await self.get_user_office(user_id)).office_name
        if not own:
            return "none"
        return "comprehensive" if is_division_office(own) else "simple"

    def clear_cache(self, office_name: str | None = None) -> None:
        self.cache.invalidate(office_name)

    @staticmethod
    def _result(own: str, names: list[str]) -> UserOffices:
        own_key = normalize_office(own)
        return UserOffices(
            own=own,
            reporting=tuple(n for n in names if normalize_office(n) != own_key),
            names=tuple(names),
        )

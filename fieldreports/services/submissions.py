from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Sequence

from fieldreports.core.cache import TTLCache
from fieldreports.core.errors import DataSourceNotFound
from fieldreports.core.locator import ResourceLocator
from fieldreports.services.types import ReportsFilter, ReportsSummary, Submission
from fieldreports.stores.base import Filter, RelationalStore, eq, gte, is_in, lte
from fieldreports.utils.heuristics import extract_office_name

logger = logging.getLogger("fieldreports.submissions")

SUMMARY_KEY = "summary"


def submissions_locator(store: RelationalStore, candidates: Sequence[str]) -> ResourceLocator:
    """Locator over candidate submission tables; a table is usable when it can be counted."""

    async def check(name: str) -> int:
        return await store.count(name)

    return ResourceLocator(candidates, check, kind="submissions table")


PROFILE_COLUMNS = ("employeeId", "full_name", "office_name")


def _text(value: object) -> str | None:
    return value.strip() if isinstance(value, str) and value.strip() else None


def enrich(sub: Submission, profile: dict[str, Any] | None = None) -> Submission:
    """Display name and office: profile first, then the submission itself."""
    profile = profile or {}
    if sub.user_id:
        fallback_name = f"User {sub.user_id[:8]}"
    else:
        fallback_name = "Unknown"
    sub.user_name = _text(profile.get("full_name")) or _text(sub.employee_id) or fallback_name
    sub.user_office = (
        _text(profile.get("office_name"))
        or _text(sub.submission_data.get("officeName"))
        or "Unknown Office"
    )
    return sub


def matches_office(sub: Submission, office_name: str) -> bool:
    office = extract_office_name(sub.submission_data) or sub.user_office
    return office_name.strip().lower() in office.lower()


class SubmissionSource:
    """Reads submissions from whichever candidate table exists."""

    def __init__(
        self,
        store: RelationalStore,
        locator: ResourceLocator,
        summary_cache: TTLCache[str, ReportsSummary],
        *,
        profile_table: str = "user_profile",
    ) -> None:
        self.store = store
        self.locator = locator
        self.summary_cache = summary_cache
        self.profile_table = profile_table

    async def table(self) -> str:
        name = await self.locator.locate()
        if name is None:
            raise DataSourceNotFound(
                "no submissions table available (tried: " + ", ".join(self.locator.candidates) + ")"
            )
        return name

    async def fetch_submissions(self, flt: ReportsFilter | None = None) -> list[Submission]:
        flt = flt or ReportsFilter()
        table = await self.table()

        filters: list[Filter] = []
        if flt.form_identifier:
            filters.append(eq("form_identifier", flt.form_identifier))
        if flt.user_id:
            filters.append(eq("user_id", flt.user_id))
        if flt.start_date:
            filters.append(gte("submitted_at", flt.start_date))
        if flt.end_date:
            filters.append(lte("submitted_at", flt.end_date))

        start = end = None
        if flt.limit:
            start = flt.offset or 0
            end = start + flt.limit - 1
        elif flt.offset:
            start = flt.offset

        rows = await self.store.select(
            table,
            filters=filters,
            order_by="submitted_at",
            descending=True,
            start=start,
            end=end,
        )
        subs = [Submission.from_row(r) for r in rows]
        profiles = await self.user_profiles(subs)
        subs = [enrich(s, profiles.get(s.employee_id or "")) for s in subs]
        if flt.office_name:
            subs = [s for s in subs if matches_office(s, flt.office_name)]
        logger.info("Fetched %d submissions from %s", len(subs), table)
        return subs

    async def user_profiles(self, subs: Sequence[Submission]) -> dict[str, dict[str, Any]]:
        """employee id -> profile row for one batch, in a single lookup.

        A failed lookup leaves the batch without profiles.
        """
        ids = sorted({s.employee_id for s in subs if _text(s.employee_id)})
        if not ids:
            return {}
        try:
            rows = await self.store.select(self.profile_table, PROFILE_COLUMNS, filters=[is_in("employeeId", ids)])
        except Exception as exc:
            logger.warning("User profile lookup failed: %s", exc)
            return {}
        return {r["employeeId"]: r for r in rows if r.get("employeeId")}

    async def get_reports_summary(self, now: datetime | None = None) -> ReportsSummary:
        cached = self.summary_cache.get(SUMMARY_KEY)
        if cached is not None:
            return cached

        table = await self.table()
        rows = await self.store.select(table, ["form_identifier", "user_id", "submitted_at"])
        subs = [Submission.from_row(r) for r in rows]

        now = now or datetime.now(timezone.utc)
        today = now.replace(hour=0, minute=0, second=0, microsecond=0)
        week_ago = now - timedelta(days=7)
        month_start = today.replace(day=1)

        def since(moment: datetime) -> int:
            return sum(1 for s in subs if s.submitted_at is not None and s.submitted_at >= moment)

        summary = ReportsSummary(
            total_submissions=len(subs),
            unique_forms=len({s.form_identifier for s in subs}),
            unique_users=len({s.user_id for s in subs if s.user_id}),
            submissions_today=since(today),
            submissions_this_week=since(week_ago),
            submissions_this_month=since(month_start),
        )
        self.summary_cache.set(SUMMARY_KEY, summary)
        return summary

    async def get_form_identifiers(self) -> list[str]:
        table = await self.table()
        rows = await self.store.select(table, ["form_identifier"])
        return sorted({r["form_identifier"] for r in rows if r.get("form_identifier")})

    def clear_cache(self) -> None:
        self.summary_cache.invalidate()
        self.locator.reset()

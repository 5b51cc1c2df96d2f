from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Iterable, Sequence

from fieldreports.core.cache import TTLCache
from fieldreports.core.errors import OfficeDirectoryUnavailable
from fieldreports.services.strategies import RetrievalStrategy, arbitrate
from fieldreports.services.types import Office
from fieldreports.stores.base import RelationalStore

logger = logging.getLogger("fieldreports.offices")

ALL_OFFICES_KEY = "all"


def _clean(value: Any) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def office_from_row(row: dict[str, Any]) -> Office | None:
    name = _clean(row.get("Office name"))
    if name is None:
        return None
    facility = row.get("Facility ID")
    return Office(
        name=name,
        region=_clean(row.get("Region")),
        division=_clean(row.get("Division")),
        facility_id=str(facility) if facility not in (None, "") else None,
        reporting_office_name=_clean(row.get("Reporting Office Nam")),
    )


def unique_sorted_names(offices: Iterable[Office]) -> list[str]:
    return sorted({o.name for o in offices})


def log_office_statistics(names: Sequence[str]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("Total offices: %d", len(names))
    if not names:
        return
    logger.debug("Alphabetical range: %r .. %r", names[0], names[-1])
    letters = Counter(n[0].upper() for n in names)
    for letter in sorted(letters):
        logger.debug("  %s: %d offices", letter, letters[letter])


class OfficeDirectory:
    """Office roster with multi-strategy retrieval and a process-wide TTL cache.

    A valid cache answers without touching the store. Otherwise every
    strategy runs and the largest result becomes the roster. If every
    strategy fails, the last good roster is served even when expired;
    only when there has never been one does `OfficeDirectoryUnavailable`
    reach the caller.
    """

    def __init__(
        self,
        store: RelationalStore,
        cache: TTLCache[str, list[Office]],
        strategies: Sequence[RetrievalStrategy],
    ) -> None:
        self.store = store
        self.cache = cache
        self.strategies = list(strategies)
        self.last_strategy: str | None = None

    async def fetch_offices(self, *, force: bool = False) -> list[Office]:
        cached = None if force else self.cache.get(ALL_OFFICES_KEY)
        if cached is not None:
            logger.debug("Returning cached office roster (%d)", len(cached))
            return list(cached)

        best, outcomes = await arbitrate(self.strategies)
        if all(o.failed for o in outcomes):
            stale = self.cache.get_stale(ALL_OFFICES_KEY)
            errors = "; ".join(f"{o.name}: {o.error}" for o in outcomes)
            if stale is not None:
                logger.warning("All office strategies failed, serving expired cache (%s)", errors)
                return list(stale)
            raise OfficeDirectoryUnavailable(f"office roster unavailable ({errors})")

        offices = [o for o in (office_from_row(r) for r in best.records) if o is not None]
        self.cache.set(ALL_OFFICES_KEY, offices)
        self.last_strategy = best.name
        logger.info("Fetched %d office records using %s", len(offices), best.name)
        log_office_statistics(unique_sorted_names(offices))
        return list(offices)

    async def fetch_office_names(self, *, force: bool = False) -> list[str]:
        return unique_sorted_names(await self.fetch_offices(force=force))

    def cached_office_names(self) -> list[str] | None:
        """Valid cached names without any I/O, else None."""
        cached = self.cache.get(ALL_OFFICES_KEY)
        return unique_sorted_names(cached) if cached is not None else None

    async def refresh_office_names(self) -> list[str]:
        # bypasses the TTL but keeps the old roster as the stale fallback
        return await self.fetch_office_names(force=True)

    def clear_cache(self) -> None:
        self.cache.invalidate(ALL_OFFICES_KEY)
        logger.info("Office roster cache cleared")

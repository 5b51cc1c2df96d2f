from __future__ import annotations

import logging
from typing import Iterable, Sequence

from fieldreports.services.forms import FormCatalog
from fieldreports.services.hierarchy import OfficeHierarchyResolver
from fieldreports.services.types import FilteredForms, FormAccessStats, FormConfiguration
from fieldreports.utils.heuristics import normalize_office

logger = logging.getLogger("fieldreports.access")


def check_access(user_office: str | None, target_offices: Sequence[str] | None) -> bool:
    """May a user of `user_office` see a form targeted at `target_offices`?

    1. no user office: deny, even for unrestricted forms
    2. no targets: allow
    3. otherwise trimmed, case-insensitive membership
    """
    if not user_office or not user_office.strip():
        return False
    if not target_offices:
        return True
    key = normalize_office(user_office)
    return any(normalize_office(t) == key for t in target_offices)


def filter_by_access(forms: Iterable[FormConfiguration], user_office: str | None) -> list[FormConfiguration]:
    try:
        return [f for f in forms if check_access(user_office, f.selected_offices)]
    except Exception:
        logger.exception("Access filtering failed, returning no forms")
        return []


class AccessPolicyEngine:
    def __init__(self, resolver: OfficeHierarchyResolver, catalog: FormCatalog) -> None:
        self.resolver = resolver
        self.catalog = catalog

    async def _own_office(self, user_id: str | None) -> str | None:
        return (await self.resolver.get_user_office(user_id)).office_name

    async def can_access_form(self, form_id: str, user_id: str | None) -> bool:
        user_office = await self._own_office(user_id)
        if not user_office:
            return False
        try:
            targets = await self.catalog.get_form_targets(form_id)
        except Exception as exc:
            logger.warning("Target lookup for form %s failed: %s", form_id, exc)
            return False
        if targets is None:
            return False
        return check_access(user_office, targets)

    async def filtered_forms_for_user(self, user_id: str | None) -> FilteredForms:
        user_office = await self._own_office(user_id)
        forms = await self.catalog.fetch_form_configurations()
        accessible = filter_by_access(forms, user_office)
        logger.info("%d of %d forms accessible to office %r", len(accessible), len(forms), user_office)
        return FilteredForms(accessible=tuple(accessible), total=len(forms), user_office=user_office)

    async def form_access_stats(self, user_id: str | None) -> FormAccessStats:
        user_office = await self._own_office(user_id)
        forms = await self.catalog.fetch_form_configurations()
        restricted = sum(1 for f in forms if f.is_restricted)
        return FormAccessStats(
            total_forms=len(forms),
            accessible_forms=len(filter_by_access(forms, user_office)),
            restricted_forms=restricted,
            unrestricted_forms=len(forms) - restricted,
            user_office=user_office,
        )

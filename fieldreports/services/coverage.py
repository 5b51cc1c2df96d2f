from __future__ import annotations

import logging
from typing import Iterable, Sequence

from fieldreports.services.field_schema import FieldSchemaRegistry
from fieldreports.services.forms import FormCatalog
from fieldreports.services.types import Coverage, Submission
from fieldreports.utils.heuristics import extract_office_name, normalize_office

logger = logging.getLogger("fieldreports.coverage")


def _dedupe(names: Iterable[str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for name in names:
        if name and name.strip():
            out.setdefault(normalize_office(name), name.strip())
    return out


class CoverageAggregator:
    """Which target offices have submitted a form, and which are still pending."""

    def __init__(self, registry: FieldSchemaRegistry, catalog: FormCatalog) -> None:
        self.registry = registry
        self.catalog = catalog

    async def submitting_office(self, submission: Submission) -> str | None:
        converted = await self.registry.convert_submission_data(
            submission.form_identifier, submission.submission_data
        )
        return extract_office_name(converted) or extract_office_name(submission.submission_data)

    async def compute_coverage(self, form_id: str | None, submissions: Sequence[Submission]) -> Coverage:
        if form_id:
            submissions = [s for s in submissions if s.form_identifier == form_id]

        seen = _dedupe([o for o in [await self.submitting_office(s) for s in submissions] if o])

        targets: dict[str, str] | None = None
        if form_id:
            try:
                found = await self.catalog.get_form_targets(form_id)
            except Exception as exc:
                logger.warning("Target offices for %s unavailable: %s", form_id, exc)
                found = None
            if found is not None:
                targets = _dedupe(found)

        if targets is None:
            return Coverage(completed=tuple(sorted(seen.values())), pending=(), total_targets=None)

        # prefer the roster's spelling
        completed = {key: targets.get(key, name) for key, name in seen.items()}
        pending = [name for key, name in targets.items() if key not in completed]
        logger.info(
            "Coverage for %s: %d completed, %d pending of %d targets",
            form_id, len(completed), len(pending), len(targets),
        )
        return Coverage(
            completed=tuple(sorted(completed.values())),
            pending=tuple(sorted(pending)),
            total_targets=len(targets),
        )

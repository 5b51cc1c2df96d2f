from __future__ import annotations

import asyncio
import logging
from typing import Any, Sequence

from fieldreports.services.field_schema import FieldSchemaRegistry
from fieldreports.services.types import Column, ReportTable, Submission
from fieldreports.utils.dates import format_date, format_datetime
from fieldreports.utils.heuristics import (
    SEPARATELY_HANDLED_FIELDS,
    extract_office_name,
    looks_like_iso_timestamp,
)

logger = logging.getLogger("fieldreports.reports")

FORM_TYPE_TITLES = {
    "employee-registration": "Employee Registration",
    "leave-request": "Leave Request",
    "expense-report": "Expense Report",
    "performance-review": "Performance Review",
    "it-support-request": "IT Support Request",
    "training-registration": "Training Registration",
    "feedback-form": "Feedback Form",
    "inventory-request": "Inventory Request",
    "test": "Test Form",
}

META_COLUMNS = (
    Column("form_type", "Form Type", "form_type"),
    Column("submitted_at", "Submitted At", "date"),
)


def form_type_display(form_id: str) -> str:
    """Display title for a form identifier: known titles, else `a-b` -> `A B`."""
    if form_id in FORM_TYPE_TITLES:
        return FORM_TYPE_TITLES[form_id]
    return " ".join(w[:1].upper() + w[1:] for w in form_id.replace("-", " ").split(" "))


def display_value(value: Any) -> Any:
    if value is None:
        return ""
    if looks_like_iso_timestamp(value):
        return format_date(value)
    return value


class SubmissionReconciler:
    """Builds the report table for a heterogeneous batch of submissions.

    Columns are discovered from the batch itself: for each submission in
    order, its form's labels and then any raw field ids the schema does not
    label. Row values live under `values`, keyed by column key, with a blank
    cell for every column the submission did not send.
    """

    def __init__(self, registry: FieldSchemaRegistry) -> None:
        self.registry = registry

    async def _mappings(self, submissions: Sequence[Submission]) -> dict[str, dict[str, str]]:
        form_ids = list(dict.fromkeys(s.form_identifier for s in submissions))
        results = await asyncio.gather(*(self.registry.get_field_mapping(f) for f in form_ids))
        return dict(zip(form_ids, results))

    async def reconcile(self, submissions: Sequence[Submission]) -> ReportTable:
        mappings = await self._mappings(submissions)

        labels: dict[str, None] = {}
        rows: list[dict[str, Any]] = []
        for sub in submissions:
            mapping = mappings.get(sub.form_identifier, {})
            for field_id, label in mapping.items():
                if field_id not in SEPARATELY_HANDLED_FIELDS:
                    labels.setdefault(label)

            values: dict[str, Any] = {}
            for field_id, value in sub.submission_data.items():
                if field_id in SEPARATELY_HANDLED_FIELDS:
                    continue
                label = mapping.get(field_id, field_id)
                labels.setdefault(label)
                values[label] = display_value(value)

            rows.append(
                {
                    "id": sub.id,
                    "form_type": form_type_display(sub.form_identifier),
                    "submitted_at": format_datetime(sub.submitted_at),
                    "office": extract_office_name(sub.submission_data) or sub.user_office,
                    "values": values,
                }
            )

        # every row gets a cell for every column, blank when its form lacks the field
        for row in rows:
            sent = row["values"]
            row["values"] = {label: sent.get(label, "") for label in labels}

        columns = META_COLUMNS + tuple(Column(label, label) for label in labels)
        logger.debug("Reconciled %d submissions into %d columns", len(rows), len(columns))
        return ReportTable(columns=columns, rows=tuple(rows))

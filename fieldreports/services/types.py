from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

from fieldreports.utils.dates import parse_timestamp


FieldType = Literal[
    "text",
    "textarea",
    "dropdown",
    "radio",
    "button",
    "checkbox",
    "number",
    "date",
    "file",
    "section",
    "switch",
    "checkbox-group",
]

# Layout-only field types: never carry submitted data.
STRUCTURAL_FIELD_TYPES = frozenset({"section", "button"})

ColumnKind = Literal["form_type", "date", "field"]
ReportView = Literal["comprehensive", "simple", "none"]


@dataclass(frozen=True, slots=True)
class FormField:
    id: str
    label: str
    type: str = "text"

    @property
    def is_structural(self) -> bool:
        return self.type in STRUCTURAL_FIELD_TYPES


@dataclass(frozen=True, slots=True)
class FormConfig:
    """Form schema as stored in the document store."""

    id: str
    title: str | None
    fields: tuple[FormField, ...]


@dataclass(frozen=True, slots=True)
class FormConfiguration:
    """One `page_configurations` row."""

    id: str
    title: str
    selected_offices: tuple[str, ...] = ()
    fields: tuple[dict, ...] = ()
    last_updated: str | None = None

    @property
    def is_restricted(self) -> bool:
        return bool(self.selected_offices)


@dataclass(frozen=True, slots=True)
class Office:
    name: str
    region: str | None = None
    division: str | None = None
    facility_id: str | None = None
    reporting_office_name: str | None = None


@dataclass(slots=True)
class Submission:
    id: str
    form_identifier: str
    submission_data: dict[str, Any]
    submitted_at: datetime | None
    user_id: str | None = None
    employee_id: str | None = None
    # display enrichment (not stored)
    user_name: str = "Unknown"
    user_office: str = "Unknown Office"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Submission":
        data = row.get("submission_data")
        if isinstance(data, str):
            # views may expose the payload as text
            try:
                data = json.loads(data)
            except ValueError:
                data = {}
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=str(row.get("id") or ""),
            form_identifier=str(row.get("form_identifier") or ""),
            submission_data=data,
            submitted_at=parse_timestamp(row.get("submitted_at")),
            user_id=row.get("user_id"),
            employee_id=row.get("employee_id"),
        )


@dataclass(frozen=True, slots=True)
class UserOffice:
    office_name: str | None = None
    reporting_office_name: str | None = None


@dataclass(frozen=True, slots=True)
class UserOffices:
    own: str | None = None
    reporting: tuple[str, ...] = ()
    # own + reporting, de-duplicated and sorted
    names: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class Column:
    key: str
    label: str
    kind: ColumnKind = "field"


@dataclass(frozen=True, slots=True)
class ReportTable:
    columns: tuple[Column, ...]
    rows: tuple[dict[str, Any], ...]


@dataclass(frozen=True, slots=True)
class Coverage:
    completed: tuple[str, ...]
    pending: tuple[str, ...]
    # None when no form is selected (no authoritative target roster)
    total_targets: int | None

    @property
    def completed_count(self) -> int:
        return len(self.completed)

    @property
    def pending_count(self) -> int:
        return len(self.pending)


@dataclass(frozen=True, slots=True)
class FilteredForms:
    accessible: tuple[FormConfiguration, ...]
    total: int
    user_office: str | None


@dataclass(frozen=True, slots=True)
class FormAccessStats:
    total_forms: int
    accessible_forms: int
    restricted_forms: int
    unrestricted_forms: int
    user_office: str | None


@dataclass(slots=True)
class ReportsFilter:
    form_identifier: str | None = None
    user_id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    office_name: str | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass(frozen=True, slots=True)
class ReportsSummary:
    total_submissions: int
    unique_forms: int
    unique_users: int
    submissions_today: int
    submissions_this_week: int
    submissions_this_month: int


@dataclass(slots=True)
class StrategyOutcome:
    name: str
    records: list[dict[str, Any]] = field(default_factory=list)
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.error is not None and not self.records

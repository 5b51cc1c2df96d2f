"""String-sniffing predicates used when a form schema does not tag field roles.

These are deliberately simple and knowingly fragile:
  - any free-text value containing both "T" and ":" is taken for a timestamp
    ("Meeting at 10:30 Tuesday" included);
  - any value with a standalone RO/BO/SO/HO/DO token or the word "office"
    is taken for an office name.
They preserve the behaviour existing reports rely on. Explicit field-role
tagging in the form schema should replace them once schemas carry it.
"""

from __future__ import annotations

from typing import Any, Mapping

# Regional / branch / sub / head / divisional office suffixes.
OFFICE_SUFFIX_TOKENS = frozenset({"RO", "BO", "SO", "HO", "DO"})

# Keys (raw ids or resolved labels) that hold the submitting office directly.
OFFICE_FIELD_KEYS = (
    "officeName",
    "Office Name",
    "office_name",
    "Office",
    "office",
    "Branch",
    "branch",
)

# Shown elsewhere in the report; kept out of the dynamic columns.
SEPARATELY_HANDLED_FIELDS = frozenset({"officeName"})


def looks_like_iso_timestamp(value: Any) -> bool:
    return isinstance(value, str) and "T" in value and ":" in value


def looks_like_office_name(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    s = value.strip()
    if not s or looks_like_iso_timestamp(s):
        return False
    if "office" in s.lower():
        return True
    tokens = s.split()
    return any(tok.upper() in OFFICE_SUFFIX_TOKENS for tok in tokens[1:])


def is_division_office(office_name: str | None) -> bool:
    return bool(office_name) and office_name.strip().lower().endswith("division")


def normalize_office(name: str | None) -> str:
    """Comparison key for office names: trimmed and case-folded."""
    return (name or "").strip().casefold()


def extract_office_name(data: Mapping[str, Any]) -> str | None:
    """Best-effort office name for one submission payload (raw or relabelled).

    Dedicated office fields win; otherwise the first value that looks like an
    office name, in payload order.
    """
    for key in OFFICE_FIELD_KEYS:
        value = data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    for value in data.values():
        if looks_like_office_name(value):
            return value.strip()
    return None

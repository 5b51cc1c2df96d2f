from __future__ import annotations
import json
from typing import Any

from fieldreports.services.types import FormField


def parse_json_list(value: Any) -> list:
    """Accept a list as-is or a JSON-encoded list; anything else becomes []."""
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        try:
            parsed = json.loads(value or "[]")
        except Exception:
            return []
        return parsed if isinstance(parsed, list) else []
    return []


def parse_fields(value: Any) -> tuple[FormField, ...]:
    """Normalize a stored field list into FormField objects.

    Entries without an id are dropped; a missing label falls back to the id.
    """
    out: list[FormField] = []
    for f in parse_json_list(value):
        if not isinstance(f, dict) or not f.get("id"):
            continue
        fid = str(f["id"])
        out.append(
            FormField(
                id=fid,
                label=str(f.get("label") or fid),
                type=str(f.get("type") or "text").lower(),
            )
        )
    return tuple(out)


def label_map(fields: tuple[FormField, ...]) -> dict[str, str]:
    """field id -> label for data-bearing fields, in schema order."""
    return {f.id: f.label for f in fields if not f.is_structural}


def parse_office_list(value: Any) -> tuple[str, ...]:
    return tuple(str(x) for x in parse_json_list(value) if isinstance(x, str) and x.strip())

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fieldreports.core.config import settings


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 string (or pass a datetime through), always tz-aware.

    Naive values are taken as UTC. Returns None for anything unparseable.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_date(value: Any) -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return "" if value is None else str(value)
    return dt.strftime(settings.REPORT_DATE_FORMAT)


def format_datetime(value: Any) -> str:
    dt = parse_timestamp(value)
    if dt is None:
        return "" if value is None else str(value)
    return f"{dt.strftime(settings.REPORT_DATE_FORMAT)} {dt.strftime(settings.REPORT_TIME_FORMAT)}"

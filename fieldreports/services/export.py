from __future__ import annotations

import csv
import io
import json
from datetime import datetime, timezone
from typing import Sequence

from fieldreports.core.errors import NoDataToExport
from fieldreports.services.types import Submission
from fieldreports.utils.dates import format_datetime

CSV_HEADER = (
    "ID",
    "Form Identifier",
    "User ID",
    "User Name",
    "User Office",
    "Submitted At",
    "Submission Data",
)


def export_csv(submissions: Sequence[Submission]) -> str:
    """Every cell quoted; `Submission Data` is the raw JSON payload."""
    if not submissions:
        raise NoDataToExport("no submissions to export")
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for s in submissions:
        writer.writerow(
            [
                s.id,
                s.form_identifier,
                s.user_id or "",
                s.user_name,
                s.user_office,
                format_datetime(s.submitted_at),
                json.dumps(s.submission_data, ensure_ascii=False),
            ]
        )
    return buf.getvalue()


def export_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"reports_export_{now:%Y-%m-%d}.csv"

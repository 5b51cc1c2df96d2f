from __future__ import annotations

from dataclasses import asdict, replace
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from fieldreports.auth.deps import get_current_user_id
from fieldreports.core.rbac import can_view_office, require
from fieldreports.services.container import Services, get_services
from fieldreports.services.export import export_csv, export_filename
from fieldreports.services.types import ReportsFilter, Submission
from fieldreports.utils.heuristics import extract_office_name

router = APIRouter(prefix="/reports", tags=["reports"])


def _filter(
    form_id: str | None = None,
    office: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int | None = Query(None, ge=1, le=5000),
    offset: int | None = Query(None, ge=0),
) -> ReportsFilter:
    return ReportsFilter(
        form_identifier=form_id,
        start_date=start_date,
        end_date=end_date,
        office_name=office,
        limit=limit,
        offset=offset,
    )


async def _visible_submissions(services: Services, user_id: str, flt: ReportsFilter) -> list[Submission]:
    """Submissions the user may see: everything for division offices, else their office tree.

    Office-scoped users are paged after scoping, so a page is never cut
    short by rows they cannot see.
    """
    view = await services.hierarchy.report_view(user_id)
    require(view != "none", "No office assigned to this user")
    if view == "comprehensive":
        return await services.submissions.fetch_submissions(flt)

    offices = await services.hierarchy.resolve_user_offices(user_id)
    subs = await services.submissions.fetch_submissions(replace(flt, limit=None, offset=None))
    visible = [s for s in subs if can_view_office(offices, extract_office_name(s.submission_data) or s.user_office)]
    start = flt.offset or 0
    return visible[start : start + flt.limit] if flt.limit else visible[start:]


@router.get("/view", response_class=JSONResponse)
async def report_view(services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    office = await services.hierarchy.get_user_office(user_id)
    return {"view": await services.hierarchy.report_view(user_id), "office": office.office_name}


@router.get("/table", response_class=JSONResponse)
async def table(
    flt: ReportsFilter = Depends(_filter),
    services: Services = Depends(get_services),
    user_id: str = Depends(get_current_user_id),
):
    subs = await _visible_submissions(services, user_id, flt)
    report = await services.reconciler.reconcile(subs)
    return {
        "columns": [asdict(c) for c in report.columns],
        "rows": list(report.rows),
        "count": len(report.rows),
    }


@router.get("/coverage", response_class=JSONResponse)
async def coverage(
    form_id: str | None = None,
    services: Services = Depends(get_services),
    user_id: str = Depends(get_current_user_id),
):
    require(await services.hierarchy.report_view(user_id) != "none", "No office assigned to this user")
    subs = await services.submissions.fetch_submissions(ReportsFilter(form_identifier=form_id))
    result = await services.coverage.compute_coverage(form_id, subs)
    return {
        "form_id": form_id,
        "completed": list(result.completed),
        "pending": list(result.pending),
        "completed_count": result.completed_count,
        "pending_count": result.pending_count,
        "total_targets": result.total_targets,
    }


@router.get("/summary", response_class=JSONResponse)
async def summary(services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    return asdict(await services.submissions.get_reports_summary())


@router.get("/form-identifiers", response_class=JSONResponse)
async def form_identifiers(services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    ids = await services.submissions.get_form_identifiers()
    return {"form_identifiers": ids}


@router.get("/export.csv")
async def export(
    flt: ReportsFilter = Depends(_filter),
    services: Services = Depends(get_services),
    user_id: str = Depends(get_current_user_id),
):
    subs = await _visible_submissions(services, user_id, flt)
    return Response(
        content=export_csv(subs),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fieldreports.auth.deps import get_current_user_id
from fieldreports.services.access import filter_by_access
from fieldreports.services.container import Services, get_services
from fieldreports.services.types import FormConfiguration

router = APIRouter(prefix="/forms", tags=["forms"])


def _form(f: FormConfiguration) -> dict:
    return {
        "id": f.id,
        "title": f.title,
        "selected_offices": list(f.selected_offices),
        "restricted": f.is_restricted,
        "field_count": len(f.fields),
        "last_updated": f.last_updated,
    }


@router.get("", response_class=JSONResponse)
async def accessible_forms(services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    result = await services.access.filtered_forms_for_user(user_id)
    return {
        "forms": [_form(f) for f in result.accessible],
        "total": result.total,
        "user_office": result.user_office,
    }


@router.get("/search", response_class=JSONResponse)
async def search(
    title: str | None = None,
    restricted: bool | None = None,
    services: Services = Depends(get_services),
    user_id: str = Depends(get_current_user_id),
):
    forms = await services.catalog.search_form_configurations(title=title, has_office_restrictions=restricted)
    user_office = (await services.hierarchy.get_user_office(user_id)).office_name
    visible = filter_by_access(forms, user_office)
    return {"forms": [_form(f) for f in visible]}


@router.get("/stats", response_class=JSONResponse)
async def stats(services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    return asdict(await services.access.form_access_stats(user_id))


@router.get("/{form_id}/access", response_class=JSONResponse)
async def access(form_id: str, services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    return {"form_id": form_id, "allowed": await services.access.can_access_form(form_id, user_id)}

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from fieldreports.auth.deps import get_current_user_id
from fieldreports.services.container import Services, get_services

router = APIRouter(prefix="/offices", tags=["offices"])


@router.get("", response_class=JSONResponse)
async def list_offices(
    details: bool = False,
    services: Services = Depends(get_services),
    user_id: str = Depends(get_current_user_id),
):
    if details:
        offices = await services.offices.fetch_offices()
        return {"offices": [asdict(o) for o in offices], "count": len(offices)}
    names = await services.offices.fetch_office_names()
    return {"offices": names, "count": len(names), "strategy": services.offices.last_strategy}


@router.get("/mine", response_class=JSONResponse)
async def my_offices(services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    offices = await services.hierarchy.resolve_user_offices(user_id)
    return {
        "office": offices.own,
        "reporting": list(offices.reporting),
        "offices": list(offices.names),
        "view": await services.hierarchy.report_view(user_id),
    }


@router.post("/refresh", response_class=JSONResponse)
async def refresh(services: Services = Depends(get_services), user_id: str = Depends(get_current_user_id)):
    services.hierarchy.clear_cache()
    names = await services.offices.refresh_office_names()
    return {"offices": names, "count": len(names), "strategy": services.offices.last_strategy}

from __future__ import annotations

from fastapi import HTTPException

from fieldreports.services.types import UserOffices
from fieldreports.utils.heuristics import normalize_office


def require(condition: bool, msg: str = "Access denied", status_code: int = 403) -> None:
    """Small helper used across routers.

    Defaults to 403 (permission denied). For validation errors or not-found cases,
    pass `status_code=400/404`.
    """
    if not condition:
        raise HTTPException(status_code=status_code, detail=msg)


def can_view_office(offices: UserOffices, office_name: str | None) -> bool:
    """A user sees their own office and the offices reporting to it."""
    if not office_name or not offices.names:
        return False
    key = normalize_office(office_name)
    return any(normalize_office(n) == key for n in offices.names)

from fastapi import HTTPException, Request

from fieldreports.core.security import verify_session

SESSION_COOKIE = "sid"


def get_current_user_id(request: Request) -> str:
    token = request.cookies.get(SESSION_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")
    payload = verify_session(token)
    if not payload or not payload.get("user_id"):
        raise HTTPException(status_code=401, detail="Invalid session")
    return str(payload["user_id"])

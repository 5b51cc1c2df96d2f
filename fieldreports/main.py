from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.responses import JSONResponse

from fieldreports.auth.deps import get_current_user_id
from fieldreports.core.config import settings
from fieldreports.core.errors import (
    BackendUnavailable,
    DataSourceNotFound,
    NoDataToExport,
    OfficeDirectoryUnavailable,
    ReportingError,
)
from fieldreports.core.redis import close_redis, ping_redis
from fieldreports.db.session import dispose_engine
from fieldreports.modules.forms.router import router as forms_router
from fieldreports.modules.offices.router import router as offices_router
from fieldreports.modules.reports.router import router as reports_router
from fieldreports.services.container import reset_services

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("fieldreports")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("%s starting (%s stores)", settings.APP_NAME, settings.STORE_BACKEND)
    yield
    reset_services()
    if settings.STORE_BACKEND == "sql":
        await dispose_engine()
        await close_redis()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS (Access-Control-Allow-*) - configurable
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
)

# Report tables and CSV exports compress well
app.add_middleware(GZipMiddleware, minimum_size=800)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start = time.perf_counter()
    resp = await call_next(request)
    resp.headers["X-Process-Time-ms"] = f"{(time.perf_counter() - start) * 1000:.2f}"
    return resp


@app.exception_handler(NoDataToExport)
async def no_data_handler(request: Request, exc: NoDataToExport):
    return JSONResponse(status_code=404, content={"detail": str(exc) or "No data to export"})


@app.exception_handler(ReportingError)
async def reporting_error_handler(request: Request, exc: ReportingError):
    # missing data source / office roster / backend: the client may retry later
    if isinstance(exc, (DataSourceNotFound, OfficeDirectoryUnavailable, BackendUnavailable)):
        logger.warning("%s on %s: %s", exc.__class__.__name__, request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"detail": str(exc), "error": exc.__class__.__name__, "retry": True},
        )
    logger.exception("Reporting error", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": str(exc), "retry": False})


@app.exception_handler(Exception)
async def unhandled_exc_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception", exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


# Routers
app.include_router(offices_router)
app.include_router(forms_router)
app.include_router(reports_router)


@app.get("/health", response_class=JSONResponse)
async def health():
    out = {"status": "ok", "app": settings.APP_NAME, "stores": settings.STORE_BACKEND}
    if settings.STORE_BACKEND == "sql":
        out["redis"] = await ping_redis()
    return out


@app.get("/health/auth", response_class=JSONResponse)
def health_auth(user_id: str = Depends(get_current_user_id)):
    return {"status": "ok", "authenticated": True, "user_id": user_id}

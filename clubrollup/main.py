import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clubrollup.core.config import settings
from clubrollup.core.database import get_db
from clubrollup.core.errors import (
    ReferenceNotFound,
    ReferenceStoreUnavailable,
    RollupError,
)
from clubrollup.routers import reports, summaries

logger = logging.getLogger(__name__)

OPENAPI_TAGS = [
    {"name": "Summaries", "description": "Recompute and read amenity monthly summaries."},
    {"name": "Reports", "description": "Performance, usage, profitability and revenue reports."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Monthly amenity usage, cost and engagement rollups for a membership club. "
        "Recompute summaries from raw usage events and read reporting projections."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _status_for(exc: RollupError) -> int:
    if isinstance(exc, ReferenceNotFound):
        return 404
    if isinstance(exc, ReferenceStoreUnavailable):
        return 503
    return 422


async def rollup_error_handler(request: Request, exc: RollupError) -> JSONResponse:
    status_code = _status_for(exc)
    logger.log(
        logging.ERROR if status_code >= 500 else logging.WARNING,
        "%s %s failed with %s: %s",
        request.method,
        request.url.path,
        exc.code,
        exc,
    )
    return JSONResponse(status_code=status_code, content={"detail": exc.to_dict()})


app.add_exception_handler(RollupError, rollup_error_handler)  # type: ignore[arg-type]

app.include_router(summaries.router, prefix="/v1/summaries", tags=["Summaries"])
app.include_router(reports.router, prefix="/v1/reports", tags=["Reports"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }


@app.get("/health")
async def health(db: Session = Depends(get_db)) -> JSONResponse:
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check could not reach the database")
        return JSONResponse(status_code=503, content={"status": "unavailable", "database": "error"})
    return JSONResponse(status_code=200, content={"status": "ok", "database": "ok"})

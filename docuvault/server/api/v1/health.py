"""
Health Check Endpoints.

Liveness and readiness of the DocuVault API: the database must answer a
trivial query; object storage and SMTP are reported but never fail the check,
since the API keeps serving metadata without them.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from docuvault.core.database.session import get_session
from docuvault.core.logging_config import get_logger
from docuvault.server.core import constant
from docuvault.server.services.deps import EmailDep, StorageDep

logger = get_logger(__name__)

router = APIRouter()


class HealthStatus(BaseModel):
    status: str
    database: str
    storage: str
    email: str


class VersionInfo(BaseModel):
    version: str
    schema_version: str


def _configured(flag: bool) -> str:
    return "configured" if flag else "not_configured"


@router.get(
    "/health",
    response_model=HealthStatus,
    summary="Health Check",
    description="Check the database connection and report object storage and SMTP configuration.",
    responses={503: {"description": "Database unreachable"}},
)
async def health_check(storage: StorageDep, email: EmailDep, session: AsyncSession = Depends(get_session)):
    try:
        await session.execute(text("SELECT 1"))
        database = "ok"
    except Exception as e:
        logger.error(f"Health check database probe failed: {e}", exc_info=True)
        database = "unavailable"

    health = HealthStatus(
        status="ok" if database == "ok" else "degraded",
        database=database,
        storage=_configured(bool(storage.config.bucket)),
        email=_configured(email.config.is_configured),
    )
    if database != "ok":
        return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=health.model_dump())
    return health


@router.get(
    "/version",
    response_model=VersionInfo,
    summary="Get Version",
    description="Server version and the API schema version it serves.",
)
async def version():
    return VersionInfo(version=constant.API_VERSION, schema_version="v1")

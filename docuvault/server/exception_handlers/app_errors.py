"""
Domain Error Handlers.

Render :class:`DocuVaultError`, request validation failures and framework
HTTP errors as the error envelope ``{"success": false, "message", "code"}``.
"""

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docuvault.core.errors import DocuVaultError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.io.common import ErrorResponse

logger = get_logger(__name__)


def error_response(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message, code=code).model_dump())


async def docuvault_error_handler(request: Request, exc: DocuVaultError) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.info
    log(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}",
        extra={"status_code": exc.status_code, "code": exc.code, "path": request.url.path},
    )
    return error_response(exc.status_code, exc.message, exc.code)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request validation errors are reported as 400, not FastAPI's 422."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response(400, "; ".join(problems) or "Invalid request", "VALIDATION_ERROR")


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail), "HTTP_ERROR")

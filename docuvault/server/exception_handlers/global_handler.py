"""
Last-resort handler and the registration of every DocuVault error handler.

Unexpected exceptions are logged with their request context and answered
with a 500 envelope carrying an ``error_id``; the exception text itself is
never sent to the client.
"""

import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from docuvault.core.errors import DocuVaultError
from docuvault.core.logging_config import get_logger

from .app_errors import docuvault_error_handler, http_error_handler, validation_error_handler

logger = get_logger(__name__)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log an unhandled exception and return ``INTERNAL_ERROR``.

    The ``error_id`` in the body matches the one in the log record so a
    support request can be traced back to its stack trace.
    """
    error_id = id(exc)
    context = {
        "error_id": error_id,
        "method": request.method,
        "path": request.url.path,
        "query_params": dict(request.query_params),
        "client": request.client.host if request.client else "unknown",
        "error_type": type(exc).__name__,
        "traceback": traceback.format_exc(),
    }
    logger.error(
        f"Unhandled exception [{error_id}] in {request.method} {request.url.path}: {exc}",
        exc_info=True,
        extra=context,
    )

    body = {"success": False, "message": "Internal server error", "code": "INTERNAL_ERROR", "error_id": error_id}
    return JSONResponse(status_code=500, content=body)


def setup_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DocuVaultError, docuvault_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)
    logger.debug("DocuVault exception handlers registered")

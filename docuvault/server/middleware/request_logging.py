"""
Per-request timing for the DocuVault API.

Each response carries ``X-Process-Time`` in milliseconds. Requests slower
than ``SLOW_REQUEST_MS`` are logged as warnings with the calling user id,
and every request is forwarded to Logfire when tracing is on.
"""

import time
from typing import Any, Callable, Dict

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from docuvault.core.logging_config import get_logger
from docuvault.core.monitoring import log_api_request
from docuvault.server.core import constant

logger = get_logger(__name__)

SLOW_REQUEST_MS = 1000


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        context: Dict[str, Any] = {
            "method": request.method,
            "path": request.url.path,
            "user_id": request.headers.get(constant.USER_ID_HEADER),
        }

        try:
            response = await call_next(request)
        except Exception as e:
            context["duration_ms"] = _elapsed_ms(started)
            logger.error(
                f"Unhandled failure in {context['method']} {context['path']}",
                exc_info=True,
                extra={**context, "error": str(e)},
            )
            log_api_request(context["method"], context["path"], 500, context["duration_ms"])
            raise

        duration_ms = _elapsed_ms(started)
        response.headers["X-Process-Time"] = f"{duration_ms:.2f}"
        log_api_request(context["method"], context["path"], response.status_code, duration_ms)

        if duration_ms <= SLOW_REQUEST_MS:
            logger.debug(f"{context['method']} {context['path']} -> {response.status_code} ({duration_ms:.2f}ms)")
        else:
            logger.warning(
                f"Slow request {context['method']} {context['path']}: {duration_ms:.2f}ms",
                extra={**context, "duration_ms": duration_ms, "status_code": response.status_code},
            )
        return response

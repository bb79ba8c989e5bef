"""
Logfire tracing for the DocuVault server.

Tracing is opt-in: nothing is sent unless ``LOGFIRE_ENABLED`` is true and a
``LOGFIRE_TOKEN`` is present. When it is on, SQLAlchemy queries and FastAPI
routes are instrumented and the request middleware and the notification
dispatcher add their own events through ``log_api_request`` and ``log_event``.
Exporter failures never reach the caller.
"""

import logging
import os
from typing import Any, Callable, Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "yes")


LOGFIRE_ENABLED = _env_flag("LOGFIRE_ENABLED", "false")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "docuvault-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

LOGFIRE_TRACE_SQLALCHEMY = _env_flag("LOGFIRE_TRACE_SQLALCHEMY", "true")
LOGFIRE_TRACE_FASTAPI = _env_flag("LOGFIRE_TRACE_FASTAPI", "true")

_logfire_ready = False


def _instrument(target: str, call: Callable[[], Any]) -> None:
    try:
        call()
    except Exception as e:
        logger.warning(f"Logfire could not instrument {target}: {e}")
    else:
        logger.info(f"Logfire is tracing {target}")


def initialize_logfire(app: FastAPI | None = None) -> bool:
    """
    Configure Logfire and instrument the database and the API.

    Args:
        app: Application to instrument; FastAPI tracing is skipped without it.

    Returns:
        True when Logfire was configured.
    """
    global _logfire_ready

    if not LOGFIRE_ENABLED:
        logger.info("Logfire tracing is off (LOGFIRE_ENABLED is not set)")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning("LOGFIRE_ENABLED is set without LOGFIRE_TOKEN; tracing stays off")
        return False

    try:
        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
    except Exception as e:
        logger.error(f"Logfire configuration failed: {e}", exc_info=True)
        return False

    if LOGFIRE_TRACE_SQLALCHEMY:
        _instrument("SQLAlchemy", logfire.instrument_sqlalchemy)
    if LOGFIRE_TRACE_FASTAPI and app is not None:
        _instrument("FastAPI", lambda: logfire.instrument_fastapi(app=app))

    _logfire_ready = True
    logger.info(f"Logfire tracing {LOGFIRE_SERVICE_NAME} in {LOGFIRE_ENVIRONMENT}")
    return True


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """Send one finished request, with its latency, to Logfire."""
    if not _logfire_ready:
        return
    try:
        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Logfire dropped request event {method} {path}")


def log_event(event: str, tenant_id: Optional[str] = None, **attributes: Any) -> None:
    """
    Record a domain event such as a notification fan-out or an object deletion.

    Args:
        event: Short event name
        tenant_id: Tenant the event belongs to, when there is one
        attributes: Extra structured attributes
    """
    if not _logfire_ready:
        return
    try:
        logfire.info(event, tenant_id=tenant_id, **attributes)
    except Exception:
        logger.debug(f"Logfire dropped event {event}")

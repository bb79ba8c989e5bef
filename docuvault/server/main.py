"""
DocuVault ASGI application.

Wires logging, Logfire, CORS, request timing, the error envelope handlers
and the v1 routers into one FastAPI app. ``uvicorn docuvault.server.main:app``
or the ``docuvault-server`` script runs it.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docuvault.core.database.session import init_db
from docuvault.core.logging_config import get_logger, setup_logging
from docuvault.core.monitoring import initialize_logfire

from .api.v1 import admin, documents, folder_templates, folders, health, notifications, tenants, uploads, users
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware

setup_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"{constant.PROJECT_NAME} starting, API {constant.API_VERSION}")
    try:
        await init_db()
    except Exception as e:
        # keep serving; /health reports the database as unavailable
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info(f"{constant.PROJECT_NAME} stopped")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description=(
        "Multi-tenant document management: tenant organizations, folder hierarchies, "
        "documents in object storage, staff accounts, and in-app and email "
        "notifications for tenant admins and the master admin."
    ),
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

setup_exception_handlers(app)
initialize_logfire(app)

# (module, path under /api/v1, OpenAPI tag)
ROUTERS = [
    (health, "", "health"),
    (tenants, "/tenants", "tenants"),
    (admin, "/admin", "admin"),
    (users, "/users", "users"),
    (folders, "/folders", "folders"),
    (documents, "/documents", "documents"),
    (uploads, "/document-upload", "document-upload"),
    (notifications, "/notifications", "notifications"),
    (folder_templates, "/folder-templates", "folder-templates"),
]

for module, path, tag in ROUTERS:
    app.include_router(module.router, prefix=f"{constant.API_V1_STR}{path}", tags=[tag])

"""HTTP client fixtures for the API tests.

The app talks to the per-test SQLite database, records emails instead of
sending them and signs URLs against the fake S3 client. Lifespan does not
run under ``ASGITransport``, so the schema comes from the ``engine`` fixture.
"""

from typing import AsyncGenerator, Callable, Dict

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from docuvault.core.database.entities.users import User
from docuvault.core.database.session import get_session
from docuvault.server.core.constant import USER_ID_HEADER
from docuvault.server.main import app
from docuvault.server.services.deps import get_session_factory
from docuvault.server.services.email import get_email_service
from docuvault.server.services.storage import get_storage_service


@pytest.fixture
async def client(session_factory, email, storage) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the database, SMTP and S3 dependencies overridden."""

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_email_service] = lambda: email
    app.dependency_overrides[get_storage_service] = lambda: storage

    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth() -> Callable[[User], Dict[str, str]]:
    """Headers identifying a user the way the gateway does."""

    def _headers(user: User) -> Dict[str, str]:
        return {USER_ID_HEADER: user.id}

    return _headers

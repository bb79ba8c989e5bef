"""Shared fixtures for unit tests.

Every test gets its own SQLite database file with the full schema, the
built-in roles, and recording fakes for SMTP and S3. Using a file instead of
``:memory:`` lets the notification dispatcher open its own sessions exactly
as it does in production.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import SimpleNamespace
from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from docuvault.core.database.entities.tenants import Tenant
from docuvault.core.database.entities.users import User
from docuvault.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session
from docuvault.core.database.utils import create_all, create_engine, create_sessionmaker
from docuvault.core.models.domain.enums import RoleName, TenantStatus, UserStatus
from docuvault.server.core.config import SMTPConfig, StorageConfig
from docuvault.server.services.dispatcher import NotificationDispatcher
from docuvault.server.services.email import EmailResult, EmailService
from docuvault.server.services.storage import StorageService
from docuvault.server.services.users import ensure_builtin_roles, hash_password

MASTER_ADMIN_EMAIL = "master@docuvault.example.com"


@dataclass
class SentEmail:
    to: str
    subject: str
    template_name: Optional[str]
    template_vars: Dict[str, Any]


class RecordingEmailService(EmailService):
    """Email service that renders nothing and records every send."""

    def __init__(self) -> None:
        super().__init__(SMTPConfig())
        self.sent: List[SentEmail] = []
        self.fail = False

    async def send_email(self, to, subject, html=None, text=None, template_name=None, template_vars=None):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append(SentEmail(to, subject, template_name, dict(template_vars or {})))
        return EmailResult(success=True, message_id=f"<{len(self.sent)}@test>")

    def templates(self) -> List[Optional[str]]:
        return [email.template_name for email in self.sent]


@dataclass
class FakeS3Client:
    """Stand-in for the boto3 S3 client: signs URLs and records deletions."""

    deleted: List[str] = field(default_factory=list)
    fail_delete: bool = False

    def generate_presigned_url(self, operation: str, Params: Dict[str, Any], ExpiresIn: int) -> str:
        return f"https://mock-s3.local/{Params['Bucket']}/{Params['Key']}?op={operation}&expires={ExpiresIn}"

    def delete_object(self, Bucket: str, Key: str) -> None:
        if self.fail_delete:
            raise RuntimeError("storage unavailable")
        self.deleted.append(Key)


@pytest.fixture
async def engine(tmp_path):
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'docuvault-test.db'}")
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_sessionmaker(engine)


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def repos(session: AsyncSession) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=session)


@pytest.fixture
async def roles(repos: SqlRepoBundle) -> Dict[str, Any]:
    """Built-in roles keyed by name."""
    return {role.name: role for role in await ensure_builtin_roles(repos)}


@pytest.fixture
def email() -> RecordingEmailService:
    return RecordingEmailService()


@pytest.fixture
def s3_client() -> FakeS3Client:
    return FakeS3Client()


@pytest.fixture
def storage(s3_client: FakeS3Client) -> StorageService:
    return StorageService(StorageConfig(bucket="test-bucket", presigned_expires=900), client=s3_client)


@pytest.fixture
def dispatcher(session_factory, email: RecordingEmailService) -> NotificationDispatcher:
    return NotificationDispatcher(session_factory, email, MASTER_ADMIN_EMAIL)


@pytest.fixture
def make_tenant(repos: SqlRepoBundle):
    async def _make(name: str = "Acme Corp", status: TenantStatus = TenantStatus.active, **fields) -> Tenant:
        slug = fields.pop("slug", name.lower().replace(" ", "-"))
        return await repos.tenants.create(
            Tenant(
                name=name,
                slug=slug,
                status=status.value,
                admin_email=fields.pop("admin_email", f"admin@{slug}.example.com"),
                **fields,
            )
        )

    return _make


@pytest.fixture
def make_user(repos: SqlRepoBundle, roles):
    async def _make(
        tenant: Optional[Tenant],
        role: RoleName = RoleName.user,
        email: Optional[str] = None,
        first_name: str = "Sam",
        last_name: str = "Staff",
        status: UserStatus = UserStatus.active,
    ) -> User:
        domain = f"{tenant.slug if tenant else 'docuvault'}.example.com"
        user = User(
            tenant_id=tenant.id if tenant else None,
            email=email or f"{first_name.lower()}.{role.value.lower()}@{domain}",
            password_hash=hash_password("password123"),
            first_name=first_name,
            last_name=last_name,
            status=status.value,
        )
        return await repos.users.create_with_roles(user, [roles[role.value].id])

    return _make


@pytest.fixture
async def world(make_tenant, make_user) -> SimpleNamespace:
    """A master admin plus an active tenant with an admin and a staff member."""
    master = await make_user(
        None, RoleName.super_admin, email="master@docuvault.example.com", first_name="Mia", last_name="Master"
    )
    tenant = await make_tenant("Acme Corp")
    admin = await make_user(tenant, RoleName.tenant_admin, first_name="Ada", last_name="Admin")
    staff = await make_user(tenant, RoleName.user, first_name="Sam", last_name="Staff")
    other_tenant = await make_tenant("Globex")
    other_admin = await make_user(other_tenant, RoleName.tenant_admin, first_name="Otto", last_name="Other")
    return SimpleNamespace(
        master=master,
        tenant=tenant,
        admin=admin,
        staff=staff,
        other_tenant=other_tenant,
        other_admin=other_admin,
    )

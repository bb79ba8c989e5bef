"""
User Service.

Staff and admin account management: creation with role assignment and an
invite email, tenant-scoped listing, profile updates, soft deletion, role
replacement and password resets. Passwords are stored as bcrypt hashes.
"""

from __future__ import annotations

import secrets
from typing import List, Optional, Sequence

import bcrypt

from docuvault.core.database.base import utc_now
from docuvault.core.database.entities.users import Role, User
from docuvault.core.database.repositories import SqlRepoBundle
from docuvault.core.errors import BadRequestError, ConflictError, NotFoundError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.domain.enums import RoleName, UserStatus
from docuvault.core.models.io.common import PaginationMeta
from docuvault.core.models.io.users import UserCreate, UserList, UserRead, UserUpdate
from docuvault.server.core import constant

from .email import EmailService

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def generate_password() -> str:
    """Random 16 hex character password for accounts created without one."""
    return secrets.token_hex(8)


def to_user_read(user: User, roles: Sequence[str]) -> UserRead:
    return UserRead.model_validate(user).model_copy(update={"roles": list(roles)})


class UserService:
    """User management bound to one database session."""

    def __init__(self, repos: SqlRepoBundle, email: EmailService) -> None:
        self.repos = repos
        self.email = email

    async def create_user(self, tenant_id: Optional[str], data: UserCreate) -> UserRead:
        """
        Create a user inside a tenant (or a tenantless master admin).

        Args:
            tenant_id: Owning tenant, None for master admins
            data: Account details; roles default to ``USER``

        Returns:
            The created user with its role names

        Raises:
            NotFoundError: The tenant does not exist or was deleted
            ConflictError: The email is already used by a live user of the tenant
            BadRequestError: One of the role ids does not exist
        """
        if tenant_id is not None and await self.repos.tenants.get_by_id(tenant_id) is None:
            raise NotFoundError("Tenant not found")
        if await self.repos.users.get_by_email(data.email, tenant_id) is not None:
            raise ConflictError("A user with this email already exists", code="EMAIL_ALREADY_EXISTS")

        roles = await self._resolve_roles(data.role_ids, tenant_id)
        password = data.password or generate_password()
        user = await self.repos.users.create_with_roles(
            User(
                tenant_id=tenant_id,
                email=data.email.lower(),
                password_hash=hash_password(password),
                first_name=data.first_name,
                last_name=data.last_name,
                phone=data.phone,
                status=UserStatus.active.value,
            ),
            [role.id for role in roles],
        )
        logger.info(f"User created: {user.id} in tenant {tenant_id}", extra={"user_id": user.id})

        if data.send_invite:
            await self._send_invite(user, None if data.password else password)

        return to_user_read(user, sorted(role.name for role in roles))

    async def get_user(self, user_id: str, tenant_id: Optional[str] = None) -> UserRead:
        user = await self._get(user_id, tenant_id)
        return to_user_read(user, await self.repos.users.get_role_names(user.id))

    async def list_users(
        self, tenant_id: Optional[str], page: int, limit: int, status: Optional[UserStatus] = None
    ) -> UserList:
        """Live users of a tenant (all users when ``tenant_id`` is None), newest first."""
        filters = {"tenant_id": tenant_id, "status": status.value if status else None}
        users = await self.repos.users.list(limit=limit, offset=(page - 1) * limit, filters=filters)
        total = await self.repos.users.count(filters)
        roles = await self.repos.users.get_role_names_for([user.id for user in users])
        return UserList(
            users=[to_user_read(user, roles[user.id]) for user in users],
            pagination=PaginationMeta.build(total, page, limit),
        )

    async def update_user(self, user_id: str, data: UserUpdate, tenant_id: Optional[str] = None) -> UserRead:
        user = await self._get(user_id, tenant_id)
        changes = data.model_dump(exclude_unset=True)
        if "status" in changes and changes["status"] is not None:
            changes["status"] = UserStatus(changes["status"]).value
        for key, value in changes.items():
            if value is not None:
                setattr(user, key, value)
        user = await self.repos.users.update(user)
        return to_user_read(user, await self.repos.users.get_role_names(user.id))

    async def set_status(self, user_id: str, status: UserStatus, tenant_id: Optional[str] = None) -> UserRead:
        return await self.update_user(user_id, UserUpdate(status=status), tenant_id)

    async def delete_user(self, user_id: str, tenant_id: Optional[str] = None, actor_id: Optional[str] = None) -> None:
        user = await self._get(user_id, tenant_id)
        if actor_id is not None and user.id == actor_id:
            raise BadRequestError("You cannot delete your own account")
        user.deleted_at = utc_now()
        user.status = UserStatus.inactive.value
        await self.repos.users.update(user)
        logger.info(f"User soft-deleted: {user.id}")

    async def assign_roles(self, user_id: str, role_ids: Sequence[str], tenant_id: Optional[str] = None) -> UserRead:
        """Replace every role of the user."""
        user = await self._get(user_id, tenant_id)
        roles = await self._resolve_roles(role_ids, user.tenant_id)
        await self.repos.users.replace_roles(user.id, [role.id for role in roles])
        return to_user_read(user, sorted(role.name for role in roles))

    async def reset_password(self, user_id: str, new_password: str, tenant_id: Optional[str] = None) -> None:
        user = await self._get(user_id, tenant_id)
        user.password_hash = hash_password(new_password)
        await self.repos.users.update(user)
        logger.info(f"Password reset for user {user.id}")

    async def list_roles(self) -> List[Role]:
        return await self.repos.roles.list()

    async def _get(self, user_id: str, tenant_id: Optional[str]) -> User:
        if tenant_id is None:
            user = await self.repos.users.get_by_id(user_id)
        else:
            user = await self.repos.users.get_in_tenant(user_id, tenant_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def _resolve_roles(self, role_ids: Sequence[str], tenant_id: Optional[str]) -> List[Role]:
        if not role_ids:
            default = await self.repos.roles.get_by_name(RoleName.user.value)
            if default is None:
                raise BadRequestError("Default USER role is missing; seed the role catalogue first")
            return [default]
        roles = await self.repos.roles.get_many(role_ids)
        missing = set(role_ids) - {role.id for role in roles}
        if missing:
            raise BadRequestError(f"Unknown role ids: {', '.join(sorted(missing))}")
        if tenant_id is not None and any(role.name == RoleName.super_admin.value for role in roles):
            raise BadRequestError("SUPER_ADMIN cannot be assigned to tenant users")
        return roles

    async def _send_invite(self, user: User, temporary_password: Optional[str]) -> None:
        tenant_name = constant.PROJECT_NAME
        if user.tenant_id:
            tenant = await self.repos.tenants.get_by_id(user.tenant_id)
            if tenant is not None:
                tenant_name = tenant.name
        try:
            result = await self.email.send_user_invite(user.email, user.first_name, tenant_name, temporary_password)
        except Exception as e:
            logger.error(f"Failed to send invite email to {user.email}: {e}", exc_info=True)
            return
        if not result.success:
            logger.warning(f"Invite email to {user.email} not delivered: {result.error}")


async def ensure_builtin_roles(repos: SqlRepoBundle) -> List[Role]:
    """Create any missing built-in role; returns the full catalogue."""
    descriptions = {
        RoleName.super_admin: "Master administrator across all tenants",
        RoleName.tenant_admin: "Administrator of a tenant organization",
        RoleName.user: "Staff member of a tenant organization",
    }
    for name, description in descriptions.items():
        if await repos.roles.get_by_name(name.value) is None:
            await repos.roles.create(Role(name=name.value, description=description))
    return await repos.roles.list()

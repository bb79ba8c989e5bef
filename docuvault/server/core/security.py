"""
Caller Identity and Authorization.

Authentication happens upstream; the gateway forwards the authenticated user
id in the ``X-User-Id`` header. This module resolves that id to a
:class:`CurrentUser` and provides the tenant and role guards used by the API.

- Missing header, unknown, deleted or inactive user -> 401
- User of a tenant that is not ``ACTIVE`` -> 403
- ``SUPER_ADMIN`` passes every role check
"""

from dataclasses import dataclass, field
from typing import Annotated, List, Optional

from fastapi import Depends, Header, Query

from docuvault.core.database.entities.tenants import Tenant
from docuvault.core.database.entities.users import User
from docuvault.core.errors import ForbiddenError, UnauthorizedError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.domain.enums import RoleName, TenantStatus, UserStatus
from docuvault.core.models.io.common import PageParams
from docuvault.server.services.deps import ReposDep

from . import constant

logger = get_logger(__name__)


@dataclass
class CurrentUser:
    user: User
    roles: List[str] = field(default_factory=list)
    tenant: Optional[Tenant] = None

    @property
    def id(self) -> str:
        return self.user.id

    @property
    def tenant_id(self) -> Optional[str]:
        return self.user.tenant_id

    @property
    def is_super_admin(self) -> bool:
        return RoleName.super_admin.value in self.roles

    def has_role(self, *roles: RoleName) -> bool:
        return self.is_super_admin or any(role.value in self.roles for role in roles)


async def get_current_user(
    repos: ReposDep,
    x_user_id: Annotated[Optional[str], Header(alias=constant.USER_ID_HEADER)] = None,
) -> CurrentUser:
    # not named user_id: that name is a path parameter on the user routes
    if not x_user_id:
        raise UnauthorizedError("Authentication required")

    user = await repos.users.get_by_id(x_user_id)
    if user is None or user.status != UserStatus.active.value:
        logger.warning(f"Rejected request for unknown or inactive user {x_user_id}")
        raise UnauthorizedError("Invalid or inactive user")

    tenant = None
    if user.tenant_id:
        tenant = await repos.tenants.get_by_id(user.tenant_id)
        if tenant is None or tenant.status != TenantStatus.active.value:
            raise ForbiddenError("Tenant account is not active", code="TENANT_NOT_ACTIVE")

    return CurrentUser(user=user, roles=await repos.users.get_role_names(user.id), tenant=tenant)


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


def require_tenant(current: CurrentUserDep) -> str:
    """Tenant id every tenant-scoped operation is restricted to."""
    if current.tenant_id is None:
        raise ForbiddenError("This operation requires a tenant account", code="TENANT_REQUIRED")
    return current.tenant_id


def require_roles(*roles: RoleName):
    """Dependency factory: 403 unless the caller holds one of ``roles``."""

    async def checker(current: CurrentUserDep) -> CurrentUser:
        if not current.has_role(*roles):
            raise ForbiddenError(f"Requires one of the roles: {', '.join(role.value for role in roles)}")
        return current

    return checker


def page_params(default_limit: int = 20):
    """Dependency factory for ``page``/``limit`` query parameters."""

    def dependency(
        page: int = Query(default=1, ge=1, description="Page number, starting at 1"),
        limit: int = Query(default=default_limit, ge=1, le=100, description="Items per page"),
    ) -> PageParams:
        return PageParams(page=page, limit=limit)

    return dependency


TenantIdDep = Annotated[str, Depends(require_tenant)]
SuperAdminDep = Annotated[CurrentUser, Depends(require_roles(RoleName.super_admin))]
TenantAdminDep = Annotated[CurrentUser, Depends(require_roles(RoleName.tenant_admin))]
PageDep = Annotated[PageParams, Depends(page_params())]

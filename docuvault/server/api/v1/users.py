"""
User Management Endpoints.

Staff accounts of the caller's tenant, managed by its ``TENANT_ADMIN``.
Every lookup is scoped to the caller's tenant; users of other tenants are
reported as not found.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from docuvault.core.models.domain.enums import UserStatus
from docuvault.core.models.io.common import ApiResponse, ok
from docuvault.core.models.io.users import RoleAssignment, RoleRead, UserCreate, UserList, UserRead, UserUpdate
from docuvault.server.core.security import CurrentUserDep, PageDep, TenantAdminDep, TenantIdDep
from docuvault.server.services.deps import UserServiceDep
from docuvault.server.services.users import to_user_read

router = APIRouter()


@router.get(
    "/me",
    response_model=ApiResponse[UserRead],
    summary="Get Current User",
    description="Profile and role names of the calling user.",
)
async def get_me(current: CurrentUserDep):
    return ok(to_user_read(current.user, current.roles))


@router.get(
    "/roles",
    response_model=ApiResponse[List[RoleRead]],
    summary="List Roles",
    description="The role catalogue available for assignment.",
)
async def list_roles(admin: TenantAdminDep, service: UserServiceDep):
    return ok([RoleRead.model_validate(role) for role in await service.list_roles()])


@router.get(
    "",
    response_model=ApiResponse[UserList],
    summary="List Users",
    description="Live users of the caller's tenant, newest first.",
)
async def list_users(
    admin: TenantAdminDep,
    tenant_id: TenantIdDep,
    service: UserServiceDep,
    paging: PageDep,
    status_filter: Optional[UserStatus] = Query(default=None, alias="status"),
):
    return ok(await service.list_users(tenant_id, paging.page, paging.limit, status_filter))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserRead],
    summary="Create User",
    description="Create a staff account and send an invite email.",
    responses={409: {"description": "Email already exists in the tenant"}},
)
async def create_user(user_in: UserCreate, admin: TenantAdminDep, tenant_id: TenantIdDep, service: UserServiceDep):
    """
    Create a user.

    When no password is supplied a random one is generated and included in
    the invite email. Roles default to ``USER``.
    """
    return ok(await service.create_user(tenant_id, user_in), "User created")


@router.get(
    "/{user_id}",
    response_model=ApiResponse[UserRead],
    summary="Get User",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: str, admin: TenantAdminDep, tenant_id: TenantIdDep, service: UserServiceDep):
    return ok(await service.get_user(user_id, tenant_id))


@router.patch(
    "/{user_id}",
    response_model=ApiResponse[UserRead],
    summary="Update User",
    responses={404: {"description": "User not found"}},
)
async def update_user(
    user_id: str, user_in: UserUpdate, admin: TenantAdminDep, tenant_id: TenantIdDep, service: UserServiceDep
):
    return ok(await service.update_user(user_id, user_in, tenant_id), "User updated")


@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    summary="Delete User",
    responses={400: {"description": "Cannot delete yourself"}, 404: {"description": "User not found"}},
)
async def delete_user(user_id: str, admin: TenantAdminDep, tenant_id: TenantIdDep, service: UserServiceDep):
    await service.delete_user(user_id, tenant_id, actor_id=admin.id)
    return ok(message="User deleted")


@router.post(
    "/{user_id}/roles",
    response_model=ApiResponse[UserRead],
    summary="Assign Roles",
    description="Replace every role of the user with the given ones.",
    responses={400: {"description": "Unknown role"}, 404: {"description": "User not found"}},
)
async def assign_roles(
    user_id: str, roles_in: RoleAssignment, admin: TenantAdminDep, tenant_id: TenantIdDep, service: UserServiceDep
):
    return ok(await service.assign_roles(user_id, roles_in.role_ids, tenant_id), "Roles updated")

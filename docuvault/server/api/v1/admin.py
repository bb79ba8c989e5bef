"""
Master Admin Endpoints.

Cross-tenant administration, restricted to ``SUPER_ADMIN``: tenant review and
lifecycle, pricing, the billing expiry check, the plan catalogue and user
accounts of any tenant.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from docuvault.core.models.domain.enums import TenantStatus, UserStatus
from docuvault.core.models.io.common import ApiResponse, ok
from docuvault.core.models.io.tenants import (
    BillingExpiryReport,
    BillingInfo,
    DashboardStats,
    SubscriptionPlanCreate,
    SubscriptionPlanRead,
    SubscriptionPlanUpdate,
    TenantList,
    TenantPricingUpdate,
    TenantRead,
    TenantReject,
    TenantStatusUpdate,
    TenantUpdate,
)
from docuvault.core.models.io.users import AdminUserCreate, PasswordReset, UserList, UserRead, UserUpdate
from docuvault.server.core.security import PageDep, SuperAdminDep
from docuvault.server.services.deps import PlanServiceDep, TenantServiceDep, UserServiceDep

router = APIRouter()


# ----------------------------------------------------------------------
# Tenants
# ----------------------------------------------------------------------


@router.get(
    "/dashboard",
    response_model=ApiResponse[DashboardStats],
    summary="Dashboard Statistics",
    description="Tenant counts per status, user and document totals and unread system notifications.",
)
async def dashboard(admin: SuperAdminDep, service: TenantServiceDep):
    return ok(await service.get_dashboard_stats())


@router.get(
    "/tenants",
    response_model=ApiResponse[TenantList],
    summary="List Tenants",
    description="List every live tenant, newest first, optionally filtered by status.",
)
async def list_tenants(
    admin: SuperAdminDep,
    service: TenantServiceDep,
    paging: PageDep,
    status_filter: Optional[TenantStatus] = Query(default=None, alias="status"),
):
    return ok(await service.list_tenants(paging.page, paging.limit, status_filter))


@router.get(
    "/tenants/pending",
    response_model=ApiResponse[List[TenantRead]],
    summary="List Pending Tenants",
    description="Registrations waiting for review.",
)
async def list_pending_tenants(admin: SuperAdminDep, service: TenantServiceDep):
    return ok(await service.list_pending_tenants())


@router.get(
    "/tenants/{tenant_id}",
    response_model=ApiResponse[TenantRead],
    summary="Get Tenant",
    responses={404: {"description": "Tenant not found"}},
)
async def get_tenant(tenant_id: str, admin: SuperAdminDep, service: TenantServiceDep):
    return ok(await service.get_tenant(tenant_id))


@router.patch(
    "/tenants/{tenant_id}",
    response_model=ApiResponse[TenantRead],
    summary="Update Tenant",
    description="Partially update a tenant. Name, branding and plan changes are announced to the master admin.",
    responses={404: {"description": "Tenant or plan not found"}},
)
async def update_tenant(tenant_id: str, tenant_in: TenantUpdate, admin: SuperAdminDep, service: TenantServiceDep):
    return ok(await service.update_tenant(tenant_id, tenant_in, admin.user), "Tenant updated")


@router.delete(
    "/tenants/{tenant_id}",
    response_model=ApiResponse[None],
    summary="Delete Tenant",
    description="Soft delete a tenant. Its slug stays reserved.",
    responses={404: {"description": "Tenant not found"}},
)
async def delete_tenant(tenant_id: str, admin: SuperAdminDep, service: TenantServiceDep):
    await service.delete_tenant(tenant_id)
    return ok(message="Tenant deleted")


@router.patch(
    "/tenants/{tenant_id}/status",
    response_model=ApiResponse[TenantRead],
    summary="Set Tenant Status",
    description="Force a tenant into any status, e.g. to suspend or reactivate it.",
)
async def update_tenant_status(
    tenant_id: str, status_in: TenantStatusUpdate, admin: SuperAdminDep, service: TenantServiceDep
):
    return ok(await service.update_tenant_status(tenant_id, status_in.status), "Tenant status updated")


@router.patch(
    "/tenants/{tenant_id}/approve",
    response_model=ApiResponse[TenantRead],
    summary="Approve Tenant",
    description="Activate a pending tenant and notify its admin in-app and by email.",
    responses={404: {"description": "Tenant not found"}, 409: {"description": "Tenant is not pending"}},
)
async def approve_tenant(tenant_id: str, admin: SuperAdminDep, service: TenantServiceDep):
    return ok(await service.approve_tenant(tenant_id, admin.user), "Tenant approved")


@router.patch(
    "/tenants/{tenant_id}/reject",
    response_model=ApiResponse[TenantRead],
    summary="Reject Tenant",
    description="Reject a pending tenant with an optional reason and notify its admin.",
    responses={404: {"description": "Tenant not found"}, 409: {"description": "Tenant is not pending"}},
)
async def reject_tenant(
    tenant_id: str, admin: SuperAdminDep, service: TenantServiceDep, reject_in: Optional[TenantReject] = None
):
    reason = reject_in.reason if reject_in else None
    return ok(await service.reject_tenant(tenant_id, admin.user, reason), "Tenant rejected")


@router.get(
    "/tenants/{tenant_id}/billing",
    response_model=ApiResponse[BillingInfo],
    summary="Get Tenant Billing",
)
async def get_tenant_billing(tenant_id: str, admin: SuperAdminDep, service: TenantServiceDep):
    return ok(await service.get_billing_info(tenant_id))


@router.patch(
    "/tenants/{tenant_id}/pricing",
    response_model=ApiResponse[BillingInfo],
    summary="Update Tenant Pricing",
    description="Set the custom price and discount of a tenant.",
)
async def update_tenant_pricing(
    tenant_id: str, pricing_in: TenantPricingUpdate, admin: SuperAdminDep, service: TenantServiceDep
):
    return ok(await service.update_tenant_pricing(tenant_id, pricing_in), "Pricing updated")


# ----------------------------------------------------------------------
# Billing
# ----------------------------------------------------------------------


@router.post(
    "/billing/expire-check",
    response_model=ApiResponse[BillingExpiryReport],
    summary="Check Expired Billing",
    description="Flag tenants whose billing period has lapsed and alert the master admin once per tenant.",
)
async def check_expired_billing(admin: SuperAdminDep, service: TenantServiceDep):
    """
    Run the billing expiry check.

    Meant to be called by a scheduler. Tenants already flagged are skipped,
    so calling it repeatedly sends each alert once.
    """
    return ok(await service.notify_expired_billing())


@router.get(
    "/billing/plans",
    response_model=ApiResponse[List[SubscriptionPlanRead]],
    summary="List Plans",
)
async def list_plans(admin: SuperAdminDep, service: PlanServiceDep):
    return ok(await service.list_plans())


@router.post(
    "/billing/plans",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[SubscriptionPlanRead],
    summary="Create Plan",
    responses={409: {"description": "Plan name already exists"}},
)
async def create_plan(plan_in: SubscriptionPlanCreate, admin: SuperAdminDep, service: PlanServiceDep):
    return ok(await service.create_plan(plan_in), "Plan created")


@router.put(
    "/billing/plans/{plan_id}",
    response_model=ApiResponse[SubscriptionPlanRead],
    summary="Update Plan",
    responses={404: {"description": "Plan not found"}, 409: {"description": "Plan name already exists"}},
)
async def update_plan(plan_id: str, plan_in: SubscriptionPlanUpdate, admin: SuperAdminDep, service: PlanServiceDep):
    return ok(await service.update_plan(plan_id, plan_in), "Plan updated")


@router.delete(
    "/billing/plans/{plan_id}",
    response_model=ApiResponse[None],
    summary="Delete Plan",
    responses={404: {"description": "Plan not found"}, 409: {"description": "Plan is assigned to tenants"}},
)
async def delete_plan(plan_id: str, admin: SuperAdminDep, service: PlanServiceDep):
    await service.delete_plan(plan_id)
    return ok(message="Plan deleted")


# ----------------------------------------------------------------------
# Users
# ----------------------------------------------------------------------


@router.get(
    "/users",
    response_model=ApiResponse[UserList],
    summary="List Users",
    description="Users across all tenants, or of one tenant when `tenant_id` is given.",
)
async def list_users(
    admin: SuperAdminDep,
    service: UserServiceDep,
    paging: PageDep,
    tenant_id: Optional[str] = Query(default=None),
    status_filter: Optional[UserStatus] = Query(default=None, alias="status"),
):
    return ok(await service.list_users(tenant_id, paging.page, paging.limit, status_filter))


@router.post(
    "/users",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[UserRead],
    summary="Create User",
    description="Create a user in any tenant, or a tenantless master admin when `tenant_id` is null.",
    responses={409: {"description": "Email already exists"}},
)
async def create_user(user_in: AdminUserCreate, admin: SuperAdminDep, service: UserServiceDep):
    return ok(await service.create_user(user_in.tenant_id, user_in), "User created")


@router.patch(
    "/users/{user_id}",
    response_model=ApiResponse[UserRead],
    summary="Update User",
    responses={404: {"description": "User not found"}},
)
async def update_user(user_id: str, user_in: UserUpdate, admin: SuperAdminDep, service: UserServiceDep):
    return ok(await service.update_user(user_id, user_in), "User updated")


@router.delete(
    "/users/{user_id}",
    response_model=ApiResponse[None],
    summary="Delete User",
    responses={400: {"description": "Cannot delete yourself"}, 404: {"description": "User not found"}},
)
async def delete_user(user_id: str, admin: SuperAdminDep, service: UserServiceDep):
    await service.delete_user(user_id, actor_id=admin.id)
    return ok(message="User deleted")


@router.patch(
    "/users/{user_id}/password",
    response_model=ApiResponse[None],
    summary="Reset Password",
    responses={404: {"description": "User not found"}},
)
async def reset_password(user_id: str, password_in: PasswordReset, admin: SuperAdminDep, service: UserServiceDep):
    await service.reset_password(user_id, password_in.new_password)
    return ok(message="Password reset")

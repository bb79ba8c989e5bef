"""
Tenant Endpoints.

Public organization registration and the tenant's own billing view. Review,
pricing and the rest of the tenant lifecycle live under ``/admin``.
"""

from typing import List

from fastapi import APIRouter, status

from docuvault.core.models.io.common import ApiResponse, ok
from docuvault.core.models.io.tenants import BillingInfo, PersonalizedPlan, TenantCreate, TenantPlanUpdate, TenantRead
from docuvault.server.core.security import TenantAdminDep, TenantIdDep
from docuvault.server.services.deps import TenantServiceDep

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[TenantRead],
    summary="Register Tenant",
    description="Register a new organization. The tenant stays PENDING until a master admin approves it.",
    response_description="The pending tenant.",
    responses={404: {"description": "Subscription plan not found"}, 409: {"description": "Slug already taken"}},
)
async def register_tenant(tenant_in: TenantCreate, service: TenantServiceDep):
    """
    Register a tenant.

    Creates the tenant and its admin account, then alerts the master admin
    (system notification and email) that a registration awaits review.
    """
    tenant = await service.create_tenant(tenant_in)
    return ok(tenant, "Registration received; awaiting approval")


@router.get(
    "/me/billing",
    response_model=ApiResponse[BillingInfo],
    summary="Get My Billing",
    description="Billing details of the caller's tenant with overrides and discounts applied.",
)
async def get_my_billing(tenant_id: TenantIdDep, service: TenantServiceDep):
    return ok(await service.get_billing_info(tenant_id))


@router.get(
    "/me/plans",
    response_model=ApiResponse[List[PersonalizedPlan]],
    summary="List My Plans",
    description="Active subscription plans priced for the caller's tenant.",
)
async def list_my_plans(tenant_id: TenantIdDep, service: TenantServiceDep):
    return ok(await service.get_personalized_plans(tenant_id))


@router.patch(
    "/me/plan",
    response_model=ApiResponse[BillingInfo],
    summary="Change My Plan",
    description="Switch the caller's tenant to another subscription plan. Requires TENANT_ADMIN.",
    responses={403: {"description": "Caller is not a tenant admin"}, 404: {"description": "Plan not found"}},
)
async def change_my_plan(
    plan_in: TenantPlanUpdate, current: TenantAdminDep, tenant_id: TenantIdDep, service: TenantServiceDep
):
    """
    Change subscription plan.

    The master admin is notified of the old and new plan names.
    """
    billing = await service.update_tenant_plan(tenant_id, plan_in.plan_id, current.user)
    return ok(billing, "Subscription plan updated")

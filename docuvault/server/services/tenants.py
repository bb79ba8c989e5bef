"""
Tenant Service.

Registration and lifecycle of tenant organizations (review, status changes,
soft deletion), tenant profile updates, and the billing view: effective
price, discounts and the personalized plan catalogue.

Every operation commits before the :class:`NotificationDispatcher` is
called; the dispatcher uses its own session and never fails the request.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from docuvault.core.database.base import utc_now
from docuvault.core.database.entities.tenants import SubscriptionPlan, Tenant
from docuvault.core.database.entities.users import User
from docuvault.core.database.repositories import SqlRepoBundle
from docuvault.core.errors import BadRequestError, ConflictError, NotFoundError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.domain.enums import RoleName, TenantStatus, UserStatus
from docuvault.core.models.io.common import PaginationMeta
from docuvault.core.models.io.tenants import (
    BillingExpiryReport,
    BillingInfo,
    DashboardStats,
    PersonalizedPlan,
    SubscriptionPlanCreate,
    SubscriptionPlanRead,
    SubscriptionPlanUpdate,
    TenantCreate,
    TenantList,
    TenantPricingUpdate,
    TenantRead,
    TenantUpdate,
)

from .dispatcher import NotificationDispatcher
from .email import EmailService
from .notifications import NotificationService
from .users import generate_password, hash_password

logger = get_logger(__name__)

DEFAULT_REJECTION_REASON = "Administrative review"
LOGIN_PAGE = "Login Page"
REGISTRATION_PAGE = "Registration Page"

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Lowercase, dash-separated slug of an organization name."""
    return _NON_SLUG_CHARS.sub("-", name.lower()).strip("-") or "tenant"


@dataclass
class Pricing:
    effective_price: float
    discount_amount: float
    final_price: float

    @property
    def has_active_discount(self) -> bool:
        return self.discount_amount > 0


def calculate_pricing(base_price: float, tenant: Tenant, now: Optional[datetime] = None) -> Pricing:
    """
    Apply a tenant's price override and discount to a base price.

    The custom price replaces the base price when set. The discount is the
    percentage of the effective price plus the fixed amount, and drops to
    zero once ``discount_expiry`` has passed. The final price never goes
    below zero.
    """
    now = now or utc_now()
    effective = tenant.custom_price if tenant.custom_price is not None else base_price
    discount = 0.0
    if tenant.discount_expiry is None or tenant.discount_expiry > now:
        discount = effective * (tenant.discount_percent or 0) / 100 + (tenant.discount_fixed_amount or 0)
    return Pricing(
        effective_price=round(effective, 2),
        discount_amount=round(discount, 2),
        final_price=round(max(0.0, effective - discount), 2),
    )


class TenantService:
    """Tenant lifecycle and billing bound to one database session."""

    def __init__(self, repos: SqlRepoBundle, dispatcher: NotificationDispatcher, email: EmailService) -> None:
        self.repos = repos
        self.dispatcher = dispatcher
        self.email = email

    # ------------------------------------------------------------------
    # Registration and lifecycle
    # ------------------------------------------------------------------

    async def create_tenant(self, data: TenantCreate) -> TenantRead:
        """
        Register a new organization awaiting master admin approval.

        The tenant admin account is created with the tenant so it can sign
        in as soon as the tenant is approved.

        Args:
            data: Registration form

        Returns:
            The pending tenant

        Raises:
            ConflictError: The requested slug is taken
            NotFoundError: The requested subscription plan does not exist
        """
        if data.subscription_plan_id:
            await self._get_plan(data.subscription_plan_id)
        admin_role = await self.repos.roles.get_by_name(RoleName.tenant_admin.value)
        if admin_role is None:
            raise BadRequestError("TENANT_ADMIN role is missing; seed the role catalogue first")

        slug = await self._unique_slug(data.slug, data.name)
        tenant = Tenant(
            name=data.name,
            slug=slug,
            status=TenantStatus.pending.value,
            admin_email=data.admin_email.lower(),
            admin_first_name=data.admin_first_name,
            admin_last_name=data.admin_last_name,
            industry=data.industry,
            subscription_plan_id=data.subscription_plan_id,
        )
        self.repos.session.add(tenant)
        await self.repos.session.flush()

        password = data.admin_password or generate_password()
        admin = await self.repos.users.create_with_roles(
            User(
                tenant_id=tenant.id,
                email=tenant.admin_email,
                password_hash=hash_password(password),
                first_name=data.admin_first_name or "Admin",
                last_name=data.admin_last_name or "",
                status=UserStatus.active.value,
            ),
            [admin_role.id],
        )
        await self.repos.session.refresh(tenant)
        logger.info(f"Tenant registered: {tenant.id} ({tenant.slug})", extra={"tenant_id": tenant.id})

        await self._send_admin_invite(admin, tenant, None if data.admin_password else password)
        await self.dispatcher.tenant_registered(tenant)
        return TenantRead.model_validate(tenant)

    async def get_tenant(self, tenant_id: str) -> TenantRead:
        return TenantRead.model_validate(await self._get(tenant_id))

    async def list_tenants(self, page: int, limit: int, status: Optional[TenantStatus] = None) -> TenantList:
        filters = {"status": status.value if status else None}
        tenants = await self.repos.tenants.list(limit=limit, offset=(page - 1) * limit, filters=filters)
        total = await self.repos.tenants.count(filters)
        return TenantList(
            tenants=[TenantRead.model_validate(tenant) for tenant in tenants],
            pagination=PaginationMeta.build(total, page, limit),
        )

    async def list_pending_tenants(self) -> List[TenantRead]:
        tenants = await self.repos.tenants.list(filters={"status": TenantStatus.pending.value})
        return [TenantRead.model_validate(tenant) for tenant in tenants]

    async def update_tenant(self, tenant_id: str, data: TenantUpdate, actor: User) -> TenantRead:
        """
        Apply a partial update and tell the master admin what changed.

        A name change, a branding change (login page takes precedence over
        the registration page) and a plan change each raise one event.
        """
        tenant = await self._get(tenant_id)
        changes = data.model_dump(exclude_unset=True)

        old_name = tenant.name
        old_plan_id = tenant.subscription_plan_id
        if changes.get("subscription_plan_id"):
            await self._get_plan(changes["subscription_plan_id"])
        if "billing_expires_at" in changes and changes["billing_expires_at"] != tenant.billing_expires_at:
            # a new billing period must be flagged again when it runs out
            tenant.billing_expired_notified_at = None

        for key, value in changes.items():
            if key == "name" and value is None:
                continue
            setattr(tenant, key, value)
        tenant = await self.repos.tenants.update(tenant)
        logger.info(f"Tenant updated: {tenant.id} fields={sorted(changes)}")

        if "name" in changes and tenant.name != old_name:
            await self.dispatcher.tenant_name_changed(tenant, old_name, actor)
        if changes.get("login_page_config") is not None:
            await self.dispatcher.tenant_ui_updated(tenant, LOGIN_PAGE, actor)
        elif changes.get("registration_page_config") is not None:
            await self.dispatcher.tenant_ui_updated(tenant, REGISTRATION_PAGE, actor)
        if "subscription_plan_id" in changes and tenant.subscription_plan_id != old_plan_id:
            await self._announce_plan_change(tenant, old_plan_id, actor)
        return TenantRead.model_validate(tenant)

    async def delete_tenant(self, tenant_id: str) -> None:
        tenant = await self._get(tenant_id)
        await self.repos.tenants.delete(tenant.id)
        logger.info(f"Tenant soft-deleted: {tenant.id}")

    async def approve_tenant(self, tenant_id: str, actor: User) -> TenantRead:
        tenant = await self._get_pending(tenant_id)
        tenant.status = TenantStatus.active.value
        tenant.rejection_reason = None
        tenant = await self.repos.tenants.update(tenant)
        logger.info(f"Tenant approved: {tenant.id} by {actor.id}")
        await self.dispatcher.tenant_approved(tenant, actor)
        return TenantRead.model_validate(tenant)

    async def reject_tenant(self, tenant_id: str, actor: User, reason: Optional[str] = None) -> TenantRead:
        tenant = await self._get_pending(tenant_id)
        tenant.status = TenantStatus.rejected.value
        tenant.rejection_reason = reason or DEFAULT_REJECTION_REASON
        tenant = await self.repos.tenants.update(tenant)
        logger.info(f"Tenant rejected: {tenant.id} by {actor.id}")
        await self.dispatcher.tenant_rejected(tenant, actor, tenant.rejection_reason)
        return TenantRead.model_validate(tenant)

    async def update_tenant_status(self, tenant_id: str, status: TenantStatus) -> TenantRead:
        tenant = await self._get(tenant_id)
        tenant.status = status.value
        tenant = await self.repos.tenants.update(tenant)
        logger.info(f"Tenant {tenant.id} status set to {status.value}")
        return TenantRead.model_validate(tenant)

    # ------------------------------------------------------------------
    # Billing
    # ------------------------------------------------------------------

    async def get_billing_info(self, tenant_id: str) -> BillingInfo:
        tenant = await self._get(tenant_id)
        plan = None
        if tenant.subscription_plan_id:
            plan = await self.repos.plans.get_by_id(tenant.subscription_plan_id)
        base_price = plan.price if plan is not None else 0.0
        pricing = calculate_pricing(base_price, tenant)
        return BillingInfo(
            tenant_id=tenant.id,
            plan=SubscriptionPlanRead.model_validate(plan) if plan is not None else None,
            base_price=base_price,
            custom_price=tenant.custom_price,
            effective_price=pricing.effective_price,
            discount_percent=tenant.discount_percent,
            discount_fixed_amount=tenant.discount_fixed_amount,
            discount_expiry=tenant.discount_expiry,
            discount_amount=pricing.discount_amount,
            final_price=pricing.final_price,
            has_active_discount=pricing.has_active_discount,
            billing_expires_at=tenant.billing_expires_at,
        )

    async def get_personalized_plans(self, tenant_id: str) -> List[PersonalizedPlan]:
        """Active plans priced for this tenant."""
        tenant = await self._get(tenant_id)
        plans = []
        for plan in await self.repos.plans.list_active():
            pricing = calculate_pricing(plan.price, tenant)
            plans.append(
                PersonalizedPlan(
                    **SubscriptionPlanRead.model_validate(plan).model_dump(),
                    base_price=plan.price,
                    effective_price=pricing.effective_price,
                    discount_amount=pricing.discount_amount,
                    final_price=pricing.final_price,
                    has_active_discount=pricing.has_active_discount,
                    is_current=plan.id == tenant.subscription_plan_id,
                )
            )
        return plans

    async def update_tenant_plan(self, tenant_id: str, plan_id: str, actor: User) -> BillingInfo:
        tenant = await self._get(tenant_id)
        await self._get_plan(plan_id)
        old_plan_id = tenant.subscription_plan_id
        tenant.subscription_plan_id = plan_id
        tenant = await self.repos.tenants.update(tenant)
        if old_plan_id != plan_id:
            await self._announce_plan_change(tenant, old_plan_id, actor)
        return await self.get_billing_info(tenant.id)

    async def update_tenant_pricing(self, tenant_id: str, pricing: TenantPricingUpdate) -> BillingInfo:
        tenant = await self._get(tenant_id)
        for key, value in pricing.model_dump(exclude_unset=True).items():
            setattr(tenant, key, value)
        await self.repos.tenants.update(tenant)
        logger.info(f"Pricing updated for tenant {tenant.id}")
        return await self.get_billing_info(tenant.id)

    async def notify_expired_billing(self, now: Optional[datetime] = None) -> BillingExpiryReport:
        """Flag every lapsed tenant once and alert the master admin about it."""
        now = now or utc_now()
        notified = []
        for tenant in await self.repos.tenants.list_billing_expired(now):
            tenant.billing_expired_notified_at = now
            tenant = await self.repos.tenants.update(tenant)
            await self.dispatcher.tenant_billing_expired(tenant)
            notified.append(tenant.id)
        if notified:
            logger.warning(f"Billing expired for {len(notified)} tenant(s)", extra={"tenant_ids": notified})
        return BillingExpiryReport(checked_at=now, notified_tenant_ids=notified)

    async def get_dashboard_stats(self) -> DashboardStats:
        by_status = await self.repos.tenants.count_by_status()
        return DashboardStats(
            tenants_by_status=by_status,
            total_tenants=sum(by_status.values()),
            total_users=await self.repos.users.count(),
            total_documents=await self.repos.documents.count(),
            unread_system_notifications=await NotificationService(self.repos).system_unread_count(),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get(self, tenant_id: str) -> Tenant:
        tenant = await self.repos.tenants.get_by_id(tenant_id)
        if tenant is None:
            raise NotFoundError("Tenant not found")
        return tenant

    async def _get_pending(self, tenant_id: str) -> Tenant:
        tenant = await self._get(tenant_id)
        if tenant.status != TenantStatus.pending.value:
            raise ConflictError(f"Tenant is {tenant.status}, not PENDING", code="INVALID_TENANT_STATUS")
        return tenant

    async def _get_plan(self, plan_id: str) -> SubscriptionPlan:
        plan = await self.repos.plans.get_by_id(plan_id)
        if plan is None:
            raise NotFoundError("Subscription plan not found")
        return plan

    async def _unique_slug(self, requested: Optional[str], name: str) -> str:
        if requested:
            slug = slugify(requested)
            if await self.repos.tenants.get_by_slug(slug) is not None:
                raise ConflictError("This slug is already taken", code="SLUG_TAKEN")
            return slug
        base = slugify(name)
        slug, suffix = base, 1
        while await self.repos.tenants.get_by_slug(slug) is not None:
            suffix += 1
            slug = f"{base}-{suffix}"
        return slug

    async def _announce_plan_change(self, tenant: Tenant, old_plan_id: Optional[str], actor: User) -> None:
        old_plan = await self.repos.plans.get_by_id(old_plan_id) if old_plan_id else None
        new_plan_id = tenant.subscription_plan_id
        new_plan = await self.repos.plans.get_by_id(new_plan_id) if new_plan_id else None
        await self.dispatcher.tenant_plan_updated(
            tenant,
            old_plan.name if old_plan is not None else None,
            new_plan.name if new_plan is not None else "None",
            actor,
        )

    async def _send_admin_invite(self, admin: User, tenant: Tenant, temporary_password: Optional[str]) -> None:
        try:
            result = await self.email.send_user_invite(admin.email, admin.first_name, tenant.name, temporary_password)
        except Exception as e:
            logger.error(f"Failed to send invite email to {admin.email}: {e}", exc_info=True)
            return
        if not result.success:
            logger.warning(f"Invite email to {admin.email} not delivered: {result.error}")


class SubscriptionPlanService:
    """Admin CRUD over the plan catalogue."""

    def __init__(self, repos: SqlRepoBundle) -> None:
        self.repos = repos

    async def list_plans(self) -> List[SubscriptionPlanRead]:
        return [SubscriptionPlanRead.model_validate(plan) for plan in await self.repos.plans.list()]

    async def create_plan(self, data: SubscriptionPlanCreate) -> SubscriptionPlanRead:
        if await self.repos.plans.get_by_name(data.name) is not None:
            raise ConflictError("A plan with this name already exists", code="PLAN_EXISTS")
        plan = await self.repos.plans.create(SubscriptionPlan(**data.model_dump()))
        logger.info(f"Subscription plan created: {plan.id} ({plan.name})")
        return SubscriptionPlanRead.model_validate(plan)

    async def update_plan(self, plan_id: str, data: SubscriptionPlanUpdate) -> SubscriptionPlanRead:
        plan = await self._get(plan_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") and changes["name"] != plan.name:
            if await self.repos.plans.get_by_name(changes["name"]) is not None:
                raise ConflictError("A plan with this name already exists", code="PLAN_EXISTS")
        for key, value in changes.items():
            if value is not None:
                setattr(plan, key, value)
        plan = await self.repos.plans.update(plan)
        return SubscriptionPlanRead.model_validate(plan)

    async def delete_plan(self, plan_id: str) -> None:
        plan = await self._get(plan_id)
        if await self.repos.plans.is_in_use(plan.id):
            raise ConflictError("Plan is assigned to one or more tenants", code="PLAN_IN_USE")
        await self.repos.plans.detach_from_deleted_tenants(plan.id)
        await self.repos.plans.delete(plan.id)
        logger.info(f"Subscription plan deleted: {plan.id}")

    async def _get(self, plan_id: str) -> SubscriptionPlan:
        plan = await self.repos.plans.get_by_id(plan_id)
        if plan is None:
            raise NotFoundError("Subscription plan not found")
        return plan

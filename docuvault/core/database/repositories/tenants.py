"""
Tenant and subscription plan repositories.

This module provides data access operations for tenant organizations and
the billing plan catalogue.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.tenants import SubscriptionPlan, Tenant
from .base import SqlModelRepository


class TenantRepository(SqlModelRepository[Tenant]):
    """Repository for tenant data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Tenant)

    async def get_by_slug(self, slug: str) -> Optional[Tenant]:
        """Get a tenant by its slug, including soft-deleted ones.

        Slugs stay reserved after deletion, so callers checking availability
        must see deleted tenants too.
        """
        stmt = select(Tenant).where(Tenant.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_billing_expired(self, now: datetime) -> List[Tenant]:
        """Tenants whose billing period has lapsed and were not yet flagged.

        Args:
            now: Reference time (naive UTC)

        Returns:
            Tenants to notify, oldest expiry first
        """
        stmt = (
            select(Tenant)
            .where(
                (Tenant.deleted_at.is_(None))
                & (Tenant.billing_expires_at.is_not(None))
                & (Tenant.billing_expires_at <= now)
                & (Tenant.billing_expired_notified_at.is_(None))
            )
            .order_by(Tenant.billing_expires_at)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_status(self) -> Dict[str, int]:
        """Number of live tenants per status, for the admin dashboard."""
        stmt = select(Tenant.status, func.count()).where(Tenant.deleted_at.is_(None)).group_by(Tenant.status)
        result = await self.session.execute(stmt)
        return {status: int(total) for status, total in result.all()}


class SubscriptionPlanRepository(SqlModelRepository[SubscriptionPlan]):
    """Repository for the subscription plan catalogue."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, SubscriptionPlan)

    async def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        stmt = select(SubscriptionPlan).where(SubscriptionPlan.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active(self) -> List[SubscriptionPlan]:
        stmt = select(SubscriptionPlan).where(SubscriptionPlan.is_active == True).order_by(SubscriptionPlan.price)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def is_in_use(self, plan_id: str) -> bool:
        """Whether any live tenant is subscribed to the plan."""
        stmt = (
            select(func.count())
            .select_from(Tenant)
            .where((Tenant.subscription_plan_id == plan_id) & (Tenant.deleted_at.is_(None)))
        )
        result = await self.session.execute(stmt)
        return int(result.scalar_one()) > 0

    async def detach_from_deleted_tenants(self, plan_id: str) -> int:
        """Clear the plan on soft-deleted tenants so the plan row can be removed.

        Not committed; the following delete commits both changes together.
        """
        stmt = (
            update(Tenant)
            .where((Tenant.subscription_plan_id == plan_id) & (Tenant.deleted_at.is_not(None)))
            .values(subscription_plan_id=None)
        )
        result = await self.session.execute(stmt)
        return int(result.rowcount or 0)

    def _default_order(self):
        return [SubscriptionPlan.price, SubscriptionPlan.name]

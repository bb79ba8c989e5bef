"""
Tenant and subscription plan entity models.

A tenant is an organization with its own isolated users, folders and
documents. Billing is derived from the tenant's subscription plan plus any
per-tenant price override and discount.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlmodel import JSON, Field

from docuvault.core.models.domain.enums import TenantStatus

from ..base import Base, generate_id, utc_now


class SubscriptionPlan(Base, table=True):
    """Entity for billing plans offered to tenants.

    Table: subscription_plans
    """

    __tablename__ = "subscription_plans"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    name: str = Field(max_length=128, unique=True)
    description: Optional[str] = Field(default=None)
    price: float = Field(default=0.0, ge=0)
    features: List[str] = Field(default_factory=list, sa_type=JSON)
    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"SubscriptionPlan(id={self.id}, name={self.name}, price={self.price})"


class Tenant(Base, table=True):
    """Entity for tenant organizations.

    Table: tenants
    """

    __tablename__ = "tenants"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    slug: str = Field(max_length=255, unique=True, index=True)
    status: str = Field(default=TenantStatus.pending.value, max_length=32, index=True)

    # Registration contact
    admin_email: str = Field(max_length=255)
    admin_first_name: Optional[str] = Field(default=None, max_length=128)
    admin_last_name: Optional[str] = Field(default=None, max_length=128)
    industry: Optional[str] = Field(default=None, max_length=128)
    rejection_reason: Optional[str] = Field(default=None)

    # Billing
    subscription_plan_id: Optional[str] = Field(default=None, foreign_key="subscription_plans.id", max_length=64)
    custom_price: Optional[float] = Field(default=None, ge=0)
    discount_percent: Optional[float] = Field(default=None, ge=0, le=100)
    discount_fixed_amount: Optional[float] = Field(default=None, ge=0)
    discount_expiry: Optional[datetime] = Field(default=None)
    billing_expires_at: Optional[datetime] = Field(default=None)
    billing_expired_notified_at: Optional[datetime] = Field(default=None)

    # Branding for the hosted login/registration pages
    login_page_config: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)
    registration_page_config: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"Tenant(id={self.id}, slug={self.slug}, status={self.status})"

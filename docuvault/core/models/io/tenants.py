"""
Tenant, billing and subscription plan I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from docuvault.core.models.domain.enums import TenantStatus

from .common import DisplayName, PaginationMeta, ShortName


class TenantCreate(BaseModel):
    """Public registration of a new organization."""

    name: DisplayName = Field(description="Organization name")
    slug: Optional[str] = Field(default=None, max_length=255, description="URL slug; derived from name when absent")
    admin_email: EmailStr = Field(description="Contact address of the organization admin")
    admin_first_name: Optional[str] = Field(default=None, max_length=128)
    admin_last_name: Optional[str] = Field(default=None, max_length=128)
    industry: Optional[str] = Field(default=None, max_length=128)
    subscription_plan_id: Optional[str] = None
    admin_password: Optional[str] = Field(
        default=None, min_length=8, max_length=72, description="Generated and emailed when absent"
    )


class TenantUpdate(BaseModel):
    name: Optional[DisplayName] = None
    industry: Optional[str] = None
    admin_email: Optional[EmailStr] = None
    subscription_plan_id: Optional[str] = None
    billing_expires_at: Optional[datetime] = None
    login_page_config: Optional[Dict[str, Any]] = None
    registration_page_config: Optional[Dict[str, Any]] = None


class TenantStatusUpdate(BaseModel):
    status: TenantStatus


class TenantReject(BaseModel):
    reason: Optional[str] = Field(default=None, description="Shown to the tenant admin")


class TenantPricingUpdate(BaseModel):
    custom_price: Optional[float] = Field(default=None, ge=0)
    discount_percent: Optional[float] = Field(default=None, ge=0, le=100)
    discount_fixed_amount: Optional[float] = Field(default=None, ge=0)
    discount_expiry: Optional[datetime] = None


class TenantPlanUpdate(BaseModel):
    plan_id: str = Field(description="Subscription plan to switch to")


class TenantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    slug: str
    status: TenantStatus
    admin_email: str
    admin_first_name: Optional[str] = None
    admin_last_name: Optional[str] = None
    industry: Optional[str] = None
    rejection_reason: Optional[str] = None
    subscription_plan_id: Optional[str] = None
    custom_price: Optional[float] = None
    discount_percent: Optional[float] = None
    discount_fixed_amount: Optional[float] = None
    discount_expiry: Optional[datetime] = None
    billing_expires_at: Optional[datetime] = None
    login_page_config: Optional[Dict[str, Any]] = None
    registration_page_config: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime


class TenantList(BaseModel):
    tenants: List[TenantRead]
    pagination: PaginationMeta


class SubscriptionPlanCreate(BaseModel):
    name: ShortName
    description: Optional[str] = None
    price: float = Field(default=0.0, ge=0)
    features: List[str] = Field(default_factory=list)
    is_active: bool = True


class SubscriptionPlanUpdate(BaseModel):
    name: Optional[ShortName] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, ge=0)
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None


class SubscriptionPlanRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    price: float
    features: List[str] = Field(default_factory=list)
    is_active: bool
    created_at: datetime
    updated_at: datetime


class BillingInfo(BaseModel):
    """Price a tenant pays once overrides and discounts are applied."""

    tenant_id: str
    plan: Optional[SubscriptionPlanRead] = None
    base_price: float
    custom_price: Optional[float] = None
    effective_price: float
    discount_percent: Optional[float] = None
    discount_fixed_amount: Optional[float] = None
    discount_expiry: Optional[datetime] = None
    discount_amount: float
    final_price: float
    has_active_discount: bool
    billing_expires_at: Optional[datetime] = None


class PersonalizedPlan(SubscriptionPlanRead):
    base_price: float
    effective_price: float
    discount_amount: float
    final_price: float
    has_active_discount: bool
    is_current: bool


class BillingExpiryReport(BaseModel):
    checked_at: datetime
    notified_tenant_ids: List[str]


class DashboardStats(BaseModel):
    tenants_by_status: Dict[str, int]
    total_tenants: int
    total_users: int
    total_documents: int
    unread_system_notifications: int

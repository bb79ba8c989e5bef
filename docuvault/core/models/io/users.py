"""
User and role I/O models.

Password hashes never appear in any read model.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from docuvault.core.models.domain.enums import UserStatus

from .common import PaginationMeta, ShortName


class UserCreate(BaseModel):
    email: EmailStr
    first_name: ShortName
    last_name: ShortName
    password: Optional[str] = Field(
        default=None, min_length=8, max_length=72, description="Generated when omitted"
    )
    phone: Optional[str] = None
    role_ids: List[str] = Field(default_factory=list, description="Defaults to the USER role")
    send_invite: bool = True


class AdminUserCreate(UserCreate):
    """Master admin variant: the tenant is explicit (or none for another master admin)."""

    tenant_id: Optional[str] = None


class UserUpdate(BaseModel):
    first_name: Optional[ShortName] = None
    last_name: Optional[ShortName] = None
    phone: Optional[str] = None
    status: Optional[UserStatus] = None


class RoleAssignment(BaseModel):
    role_ids: List[str] = Field(min_length=1)


class PasswordReset(BaseModel):
    new_password: str = Field(min_length=8, max_length=72)


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: Optional[str] = None
    email: str
    first_name: str
    last_name: str
    phone: Optional[str] = None
    status: UserStatus
    roles: List[str] = Field(default_factory=list)
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class UserList(BaseModel):
    users: List[UserRead]
    pagination: PaginationMeta


class RoleRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None

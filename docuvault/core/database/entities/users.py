"""
User and role entity models.

Users belong to at most one tenant (master admins have none). Roles are a
global catalogue linked to users through the ``user_roles`` table.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from docuvault.core.models.domain.enums import UserStatus

from ..base import Base, generate_id, utc_now


class User(Base, table=True):
    """Entity for staff users and admins.

    Table: users
    """

    __tablename__ = "users"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    tenant_id: Optional[str] = Field(default=None, foreign_key="tenants.id", max_length=64, index=True)
    email: str = Field(max_length=255, index=True)
    password_hash: str = Field(max_length=255)
    first_name: str = Field(max_length=128)
    last_name: str = Field(max_length=128)
    phone: Optional[str] = Field(default=None, max_length=64)
    status: str = Field(default=UserStatus.active.value, max_length=32)
    last_login_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: Optional[datetime] = Field(default=None)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, tenant_id={self.tenant_id})"


class Role(Base, table=True):
    """Entity for the role catalogue.

    Table: roles
    """

    __tablename__ = "roles"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    name: str = Field(max_length=64, unique=True)
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now)


class UserRole(Base, table=True):
    """Link between a user and one of their roles.

    Table: user_roles
    """

    __tablename__ = "user_roles"

    user_id: str = Field(foreign_key="users.id", primary_key=True, max_length=64)
    role_id: str = Field(foreign_key="roles.id", primary_key=True, max_length=64)
    assigned_at: datetime = Field(default_factory=utc_now)

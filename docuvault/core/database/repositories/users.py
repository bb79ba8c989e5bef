"""
User and role repositories.

This module provides data access operations for users, the role catalogue
and the links between them.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from sqlalchemy import delete as sa_delete
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from docuvault.core.models.domain.enums import RoleName, UserStatus

from ..entities.users import Role, User, UserRole
from .base import SqlModelRepository


class UserRepository(SqlModelRepository[User]):
    """Repository for user data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def create_with_roles(self, user: User, role_ids: Sequence[str]) -> User:
        """Persist a user and its role links in one transaction.

        Args:
            user: User instance to persist
            role_ids: Ids of the roles to attach

        Returns:
            The persisted user
        """
        self.session.add(user)
        await self.session.flush()
        for role_id in dict.fromkeys(role_ids):
            self.session.add(UserRole(user_id=user.id, role_id=role_id))
        await self.session.commit()
        await self.session.refresh(user)
        return user

    async def get_in_tenant(self, user_id: str, tenant_id: str) -> Optional[User]:
        """Get a live user only if it belongs to the given tenant."""
        stmt = select(User).where(
            (User.id == user_id) & (User.tenant_id == tenant_id) & (User.deleted_at.is_(None))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str, tenant_id: Optional[str]) -> Optional[User]:
        """Get a live user by email within a tenant (or among tenantless users).

        The comparison is case-insensitive.
        """
        stmt = select(User).where((func.lower(User.email) == email.lower()) & (User.deleted_at.is_(None)))
        if tenant_id is None:
            stmt = stmt.where(User.tenant_id.is_(None))
        else:
            stmt = stmt.where(User.tenant_id == tenant_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def get_role_names(self, user_id: str) -> List[str]:
        stmt = (
            select(Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
            .order_by(Role.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_role_names_for(self, user_ids: Sequence[str]) -> Dict[str, List[str]]:
        """Role names of several users in one query, keyed by user id."""
        roles: Dict[str, List[str]] = {user_id: [] for user_id in user_ids}
        if not user_ids:
            return roles
        stmt = (
            select(UserRole.user_id, Role.name)
            .join(Role, Role.id == UserRole.role_id)
            .where(UserRole.user_id.in_(list(user_ids)))
            .order_by(Role.name)
        )
        result = await self.session.execute(stmt)
        for user_id, role_name in result.all():
            roles[user_id].append(role_name)
        return roles

    async def replace_roles(self, user_id: str, role_ids: Sequence[str]) -> None:
        """Replace every role of a user with the given ones."""
        await self.session.execute(sa_delete(UserRole).where(UserRole.user_id == user_id))
        for role_id in dict.fromkeys(role_ids):
            self.session.add(UserRole(user_id=user_id, role_id=role_id))
        await self.session.commit()

    async def find_tenant_admin(self, tenant_id: str) -> Optional[User]:
        """First live, active user of the tenant holding ``TENANT_ADMIN``."""
        stmt = (
            select(User)
            .join(UserRole, UserRole.user_id == User.id)
            .join(Role, Role.id == UserRole.role_id)
            .where(
                (User.tenant_id == tenant_id)
                & (User.deleted_at.is_(None))
                & (User.status == UserStatus.active.value)
                & (Role.name == RoleName.tenant_admin.value)
            )
            .order_by(User.created_at)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()


class RoleRepository(SqlModelRepository[Role]):
    """Repository for the role catalogue."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Role)

    async def get_by_name(self, name: str) -> Optional[Role]:
        stmt = select(Role).where(Role.name == name)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_many(self, role_ids: Sequence[str]) -> List[Role]:
        if not role_ids:
            return []
        stmt = select(Role).where(Role.id.in_(list(role_ids)))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    def _default_order(self):
        return [Role.name]

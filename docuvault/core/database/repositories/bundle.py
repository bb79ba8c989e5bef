"""
Repository bundle for dependency injection.

This module provides a convenience bundle of all repository instances
for easy dependency injection in services and application components.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .audit_logs import AuditLogRepository
from .documents import DocumentRepository
from .folder_templates import FolderTemplateRepository
from .folders import FolderRepository
from .notifications import NotificationRepository
from .tenants import SubscriptionPlanRepository, TenantRepository
from .users import RoleRepository, UserRepository


@dataclass(frozen=True)
class SqlRepoBundle:
    """Convenience bundle of all SQL repositories sharing one session."""

    session: AsyncSession
    tenants: TenantRepository
    plans: SubscriptionPlanRepository
    users: UserRepository
    roles: RoleRepository
    folders: FolderRepository
    documents: DocumentRepository
    notifications: NotificationRepository
    audit_logs: AuditLogRepository
    folder_templates: FolderTemplateRepository


def build_sql_repos_from_session(*, session: AsyncSession) -> SqlRepoBundle:
    """Build a SqlRepoBundle from an existing session.

    Args:
        session: Existing async session

    Returns:
        Bundle containing all repository instances
    """
    return SqlRepoBundle(
        session=session,
        tenants=TenantRepository(session),
        plans=SubscriptionPlanRepository(session),
        users=UserRepository(session),
        roles=RoleRepository(session),
        folders=FolderRepository(session),
        documents=DocumentRepository(session),
        notifications=NotificationRepository(session),
        audit_logs=AuditLogRepository(session),
        folder_templates=FolderTemplateRepository(session),
    )

"""
Database repositories.

Data access layer organized by table/business logic. Services receive a
:class:`SqlRepoBundle` holding every repository bound to one session.
"""

from .audit_logs import AuditLogRepository
from .base import AsyncBaseRepository, QueryBuilder, SqlModelRepository
from .bundle import SqlRepoBundle, build_sql_repos_from_session
from .documents import ANY_FOLDER, DocumentQuery, DocumentRepository
from .folder_templates import FolderTemplateRepository
from .folders import FolderRepository
from .notifications import NotificationQuery, NotificationRepository
from .tenants import SubscriptionPlanRepository, TenantRepository
from .users import RoleRepository, UserRepository

__all__ = [
    "ANY_FOLDER",
    "AsyncBaseRepository",
    "AuditLogRepository",
    "DocumentQuery",
    "DocumentRepository",
    "FolderRepository",
    "FolderTemplateRepository",
    "NotificationQuery",
    "NotificationRepository",
    "QueryBuilder",
    "RoleRepository",
    "SqlModelRepository",
    "SqlRepoBundle",
    "SubscriptionPlanRepository",
    "TenantRepository",
    "UserRepository",
    "build_sql_repos_from_session",
]

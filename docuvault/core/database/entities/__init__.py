"""
Database entity models.

This package contains all database entity models organized by business domain
and table relationships.

Modules:
- tenants: Tenant organizations and subscription plans
- users: Users, the role catalogue and user/role links
- folders: Per-tenant folder tree
- documents: Document metadata (bytes live in object storage)
- notifications: In-app notifications
- audit_logs: Audit trail of sensitive reads
- folder_templates: Reusable folder structures
"""

from .audit_logs import AuditLog
from .documents import Document
from .folder_templates import FolderTemplate, FolderTemplateNode
from .folders import Folder
from .notifications import Notification
from .tenants import SubscriptionPlan, Tenant
from .users import Role, User, UserRole

__all__ = [
    "AuditLog",
    "Document",
    "Folder",
    "FolderTemplate",
    "FolderTemplateNode",
    "Notification",
    "Role",
    "SubscriptionPlan",
    "Tenant",
    "User",
    "UserRole",
]

"""Domain enums shared by entities, services and I/O models.

Member names follow the project convention (lowercase); the stored values are
the uppercase strings clients and the database see.
"""

from __future__ import annotations

from enum import Enum


class TenantStatus(str, Enum):
    """Lifecycle of a tenant organization."""

    pending = "PENDING"  # Registered, waiting for master admin review.
    active = "ACTIVE"
    suspended = "SUSPENDED"
    rejected = "REJECTED"


class UserStatus(str, Enum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    suspended = "SUSPENDED"


class RoleName(str, Enum):
    """Built-in roles seeded into every installation."""

    super_admin = "SUPER_ADMIN"  # Master admin, not bound to a tenant.
    tenant_admin = "TENANT_ADMIN"
    user = "USER"


class DocumentStatus(str, Enum):
    active = "ACTIVE"
    archived = "ARCHIVED"
    deleted = "DELETED"


class NotificationStatus(str, Enum):
    unread = "UNREAD"
    read = "READ"
    archived = "ARCHIVED"


class NotificationPriority(str, Enum):
    low = "LOW"
    medium = "MEDIUM"
    high = "HIGH"


class NotificationType(str, Enum):
    """Every event the fan-out layer knows how to announce."""

    tenant_registration = "TENANT_REGISTRATION"
    tenant_approved = "TENANT_APPROVED"
    tenant_rejected = "TENANT_REJECTED"
    tenant_organization_name_changed = "TENANT_ORGANIZATION_NAME_CHANGED"
    tenant_login_ui_update = "TENANT_LOGIN_UI_UPDATE"
    tenant_billing_plan_updated = "TENANT_BILLING_PLAN_UPDATED"
    tenant_billing_expired = "TENANT_BILLING_EXPIRED"
    staff_folder_created = "STAFF_FOLDER_CREATED"
    staff_folder_deleted = "STAFF_FOLDER_DELETED"
    staff_folder_renamed = "STAFF_FOLDER_RENAMED"
    staff_folder_moved = "STAFF_FOLDER_MOVED"
    staff_document_uploaded = "STAFF_DOCUMENT_UPLOADED"
    staff_document_deleted = "STAFF_DOCUMENT_DELETED"
    staff_document_renamed = "STAFF_DOCUMENT_RENAMED"
    staff_document_moved = "STAFF_DOCUMENT_MOVED"


class AuditAction(str, Enum):
    download = "DOWNLOAD"


class AuditResource(str, Enum):
    document = "DOCUMENT"


class SortOrder(str, Enum):
    asc = "asc"
    desc = "desc"

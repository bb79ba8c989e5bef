"""
Notification Dispatcher.

Announces domain events through two channels: an in-app notification row
and, for the events that warrant it, an email. Staff activity goes to the
tenant admin; tenant lifecycle events go to the master admin (system inbox
plus the ``MASTER_ADMIN_EMAIL`` mailbox).

Delivery is best-effort. Each event runs in its own database session so a
failure can never poison the session of the request that triggered it, and
every failure is logged and swallowed: the triggering operation has already
been committed and must still succeed.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docuvault.core.database.base import utc_now
from docuvault.core.database.entities.documents import Document
from docuvault.core.database.entities.folders import Folder
from docuvault.core.database.entities.notifications import Notification
from docuvault.core.database.entities.tenants import Tenant
from docuvault.core.database.entities.users import User
from docuvault.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session
from docuvault.core.errors import NotificationError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.domain.enums import NotificationPriority, NotificationType
from docuvault.core.monitoring import log_event

from .email import EmailResult, EmailService
from .notifications import NotificationService

logger = get_logger(__name__)

Handler = Callable[[SqlRepoBundle], Awaitable[Notification]]


def _timestamp() -> str:
    return utc_now().isoformat() + "Z"


class NotificationDispatcher:
    """Best-effort fan-out of domain events to in-app notifications and email."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        email: EmailService,
        master_admin_email: str,
    ) -> None:
        self.session_factory = session_factory
        self.email = email
        self.master_admin_email = master_admin_email

    # ------------------------------------------------------------------
    # Plumbing
    # ------------------------------------------------------------------

    async def _fan_out(self, label: str, handler: Handler) -> Optional[Notification]:
        try:
            async with self.session_factory() as session:
                notification = await handler(build_sql_repos_from_session(session=session))
        except Exception as e:
            logger.error(f"Failed to send {label} notification: {e}", exc_info=True, extra={"event": label})
            return None
        log_event("notification_sent", tenant_id=notification.tenant_id, type=notification.type)
        logger.info(f"{label} notification sent to {notification.user_id or 'system'}")
        return notification

    async def _send_email(self, label: str, send: Awaitable[EmailResult]) -> None:
        try:
            result = await send
        except Exception as e:
            logger.error(f"Failed to send {label} email: {e}", exc_info=True)
            return
        if not result.success:
            logger.warning(f"{label} email not delivered: {result.error}")

    @staticmethod
    async def _tenant_admin(repos: SqlRepoBundle, tenant_id: str) -> User:
        admin = await repos.users.find_tenant_admin(tenant_id)
        if admin is None:
            raise NotificationError(f"Tenant admin not found for tenant {tenant_id}")
        return admin

    async def _notify_tenant_admin(
        self,
        tenant_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: Dict[str, Any],
        priority: NotificationPriority,
        email: Optional[Callable[[User], Awaitable[EmailResult]]] = None,
    ) -> Optional[Notification]:
        """Notify the tenant admin in-app and, when ``email`` is given, by mail."""

        async def handler(repos: SqlRepoBundle) -> Notification:
            admin = await self._tenant_admin(repos, tenant_id)
            notification = await NotificationService(repos).create_notification(
                user_id=admin.id,
                tenant_id=tenant_id,
                type=type,
                title=title,
                message=message,
                data=data,
                priority=priority,
            )
            if email is not None:
                await self._send_email(type.value, email(admin))
            return notification

        return await self._fan_out(type.value, handler)

    async def _notify_system(
        self,
        tenant_id: str,
        type: NotificationType,
        title: str,
        message: str,
        data: Dict[str, Any],
        priority: NotificationPriority,
        is_urgent: bool = False,
        email: Optional[Callable[[], Awaitable[EmailResult]]] = None,
    ) -> Optional[Notification]:
        """Notify the master admin: system inbox plus the master admin mailbox."""

        async def handler(repos: SqlRepoBundle) -> Notification:
            return await NotificationService(repos).create_notification(
                user_id=None,
                tenant_id=tenant_id,
                type=type,
                title=title,
                message=message,
                data=data,
                priority=priority,
                is_urgent=is_urgent,
            )

        notification = await self._fan_out(type.value, handler)
        if email is not None:
            await self._send_email(type.value, email())
        return notification

    # ------------------------------------------------------------------
    # Tenant lifecycle (master admin)
    # ------------------------------------------------------------------

    async def tenant_registered(self, tenant: Tenant) -> Optional[Notification]:
        details = {
            "name": tenant.name,
            "slug": tenant.slug,
            "admin_email": tenant.admin_email,
            "industry": tenant.industry,
            "created_at": tenant.created_at.isoformat(),
        }
        return await self._notify_system(
            tenant.id,
            NotificationType.tenant_registration,
            "New Tenant Registration",
            f'New tenant "{tenant.name}" has registered and requires approval',
            {"tenant_id": tenant.id, "tenant_name": tenant.name, "admin_email": tenant.admin_email},
            NotificationPriority.high,
            is_urgent=True,
            email=lambda: self.email.send_tenant_registration(self.master_admin_email, details),
        )

    async def tenant_name_changed(self, tenant: Tenant, old_name: str, actor: User) -> Optional[Notification]:
        return await self._notify_system(
            tenant.id,
            NotificationType.tenant_organization_name_changed,
            "Tenant Organization Name Changed",
            f'Tenant "{old_name}" has changed their organization name to "{tenant.name}"',
            {
                "tenant_id": tenant.id,
                "old_name": old_name,
                "new_name": tenant.name,
                "changed_by": actor.full_name,
                "changed_at": _timestamp(),
            },
            NotificationPriority.medium,
            email=lambda: self.email.send_tenant_name_changed(
                self.master_admin_email, tenant.id, old_name, tenant.name
            ),
        )

    async def tenant_ui_updated(self, tenant: Tenant, page: str, actor: User) -> Optional[Notification]:
        return await self._notify_system(
            tenant.id,
            NotificationType.tenant_login_ui_update,
            f"Tenant {page} Updated",
            f'Tenant "{tenant.name}" has updated their {page.lower()}',
            {"tenant_id": tenant.id, "page": page, "updated_by": actor.full_name, "updated_at": _timestamp()},
            NotificationPriority.low,
            email=lambda: self.email.send_tenant_ui_updated(self.master_admin_email, tenant.name, page),
        )

    async def tenant_plan_updated(
        self, tenant: Tenant, old_plan: Optional[str], new_plan: str, actor: User
    ) -> Optional[Notification]:
        return await self._notify_system(
            tenant.id,
            NotificationType.tenant_billing_plan_updated,
            "Tenant Billing Plan Updated",
            f'Tenant "{tenant.name}" has updated their billing plan from "{old_plan or "None"}" to "{new_plan}"',
            {
                "tenant_id": tenant.id,
                "old_plan": old_plan,
                "new_plan": new_plan,
                "updated_by": actor.full_name,
                "updated_at": _timestamp(),
            },
            NotificationPriority.medium,
            email=lambda: self.email.send_tenant_plan_updated(self.master_admin_email, tenant.name, old_plan, new_plan),
        )

    async def tenant_billing_expired(self, tenant: Tenant) -> Optional[Notification]:
        expired_at = tenant.billing_expires_at.isoformat() if tenant.billing_expires_at else _timestamp()
        return await self._notify_system(
            tenant.id,
            NotificationType.tenant_billing_expired,
            "Tenant Billing Expired",
            f'Tenant "{tenant.name}" billing has expired and requires attention',
            {"tenant_id": tenant.id, "tenant_name": tenant.name, "expired_at": expired_at},
            NotificationPriority.high,
            is_urgent=True,
            email=lambda: self.email.send_tenant_billing_expired(self.master_admin_email, tenant.name, expired_at),
        )

    # ------------------------------------------------------------------
    # Tenant review outcome (tenant admin)
    # ------------------------------------------------------------------

    async def tenant_approved(self, tenant: Tenant, actor: User) -> Optional[Notification]:
        notification = await self._notify_tenant_admin(
            tenant.id,
            NotificationType.tenant_approved,
            "Account Approved",
            f'Your account "{tenant.name}" has been approved by {actor.full_name}',
            {"tenant_id": tenant.id, "approved_by": actor.full_name, "approved_at": _timestamp()},
            NotificationPriority.high,
        )
        await self._send_email(
            NotificationType.tenant_approved.value,
            self.email.send_tenant_approved(tenant.admin_email, tenant.name, tenant.admin_first_name),
        )
        return notification

    async def tenant_rejected(self, tenant: Tenant, actor: User, reason: str) -> Optional[Notification]:
        notification = await self._notify_tenant_admin(
            tenant.id,
            NotificationType.tenant_rejected,
            "Account Registration Rejected",
            f'Your account registration for "{tenant.name}" has been rejected',
            {
                "tenant_id": tenant.id,
                "reason": reason,
                "rejected_by": actor.full_name,
                "rejected_at": _timestamp(),
            },
            NotificationPriority.medium,
        )
        await self._send_email(
            NotificationType.tenant_rejected.value,
            self.email.send_tenant_rejected(tenant.admin_email, tenant.name, tenant.admin_first_name, reason),
        )
        return notification

    # ------------------------------------------------------------------
    # Staff activity (tenant admin)
    # ------------------------------------------------------------------

    async def folder_created(self, actor: User, folder: Folder, parent_name: str) -> Optional[Notification]:
        details = {
            "actor_name": actor.full_name,
            "folder_name": folder.name,
            "parent_name": parent_name,
            "occurred_at": _timestamp(),
        }
        return await self._notify_tenant_admin(
            folder.tenant_id,
            NotificationType.staff_folder_created,
            "New Folder Created",
            f'Staff member {actor.full_name} created folder "{folder.name}"',
            {
                "folder_id": folder.id,
                "folder_name": folder.name,
                "parent_id": folder.parent_id,
                "created_by": actor.full_name,
                "creator_id": actor.id,
                "created_at": details["occurred_at"],
            },
            NotificationPriority.low,
            email=lambda admin: self.email.send_folder_created(admin.email, details),
        )

    async def folder_deleted(
        self, actor: User, folder: Folder, deleted_folders: int, deleted_documents: int
    ) -> Optional[Notification]:
        details = {
            "actor_name": actor.full_name,
            "folder_name": folder.name,
            "deleted_folders": deleted_folders,
            "deleted_documents": deleted_documents,
            "occurred_at": _timestamp(),
        }
        return await self._notify_tenant_admin(
            folder.tenant_id,
            NotificationType.staff_folder_deleted,
            "Folder Deleted",
            f'Staff member {actor.full_name} deleted folder "{folder.name}"',
            {
                "folder_id": folder.id,
                "folder_name": folder.name,
                "deleted_folders": deleted_folders,
                "deleted_documents": deleted_documents,
                "deleted_by": actor.full_name,
                "deleter_id": actor.id,
                "deleted_at": details["occurred_at"],
            },
            NotificationPriority.medium,
            email=lambda admin: self.email.send_folder_deleted(admin.email, details),
        )

    async def folder_renamed(self, actor: User, folder: Folder, old_name: str) -> Optional[Notification]:
        return await self._notify_tenant_admin(
            folder.tenant_id,
            NotificationType.staff_folder_renamed,
            "Folder Renamed",
            f'Staff member {actor.full_name} renamed folder from "{old_name}" to "{folder.name}"',
            {
                "folder_id": folder.id,
                "old_name": old_name,
                "new_name": folder.name,
                "renamed_by": actor.full_name,
                "renamer_id": actor.id,
                "renamed_at": _timestamp(),
            },
            NotificationPriority.low,
        )

    async def folder_moved(
        self, actor: User, folder: Folder, old_parent_name: str, new_parent_name: str
    ) -> Optional[Notification]:
        return await self._notify_tenant_admin(
            folder.tenant_id,
            NotificationType.staff_folder_moved,
            "Folder Moved",
            f'Staff member {actor.full_name} moved folder "{folder.name}" '
            f'from "{old_parent_name}" to "{new_parent_name}"',
            {
                "folder_id": folder.id,
                "folder_name": folder.name,
                "old_parent_name": old_parent_name,
                "new_parent_name": new_parent_name,
                "moved_by": actor.full_name,
                "mover_id": actor.id,
                "moved_at": _timestamp(),
            },
            NotificationPriority.low,
        )

    async def document_uploaded(self, actor: User, document: Document, folder_name: str) -> Optional[Notification]:
        details = {
            "actor_name": actor.full_name,
            "document_name": document.name,
            "folder_name": folder_name,
            "size": document.size,
            "occurred_at": _timestamp(),
        }
        return await self._notify_tenant_admin(
            document.tenant_id,
            NotificationType.staff_document_uploaded,
            "New Document Uploaded",
            f'Staff member {actor.full_name} uploaded document "{document.name}"',
            {
                "document_id": document.id,
                "document_name": document.name,
                "folder_id": document.folder_id,
                "folder_name": folder_name,
                "file_size": document.size,
                "mime_type": document.mime_type,
                "uploaded_by": actor.full_name,
                "uploader_id": actor.id,
                "uploaded_at": details["occurred_at"],
            },
            NotificationPriority.low,
            email=lambda admin: self.email.send_document_uploaded(admin.email, details),
        )

    async def document_deleted(self, actor: User, document: Document, folder_name: str) -> Optional[Notification]:
        details = {
            "actor_name": actor.full_name,
            "document_name": document.name,
            "folder_name": folder_name,
            "occurred_at": _timestamp(),
        }
        return await self._notify_tenant_admin(
            document.tenant_id,
            NotificationType.staff_document_deleted,
            "Document Deleted",
            f'Staff member {actor.full_name} deleted document "{document.name}"',
            {
                "document_id": document.id,
                "document_name": document.name,
                "folder_id": document.folder_id,
                "deleted_by": actor.full_name,
                "deleter_id": actor.id,
                "deleted_at": details["occurred_at"],
            },
            NotificationPriority.medium,
            email=lambda admin: self.email.send_document_deleted(admin.email, details),
        )

    async def document_renamed(self, actor: User, document: Document, old_name: str) -> Optional[Notification]:
        return await self._notify_tenant_admin(
            document.tenant_id,
            NotificationType.staff_document_renamed,
            "Document Renamed",
            f'Staff member {actor.full_name} renamed document from "{old_name}" to "{document.name}"',
            {
                "document_id": document.id,
                "old_name": old_name,
                "new_name": document.name,
                "renamed_by": actor.full_name,
                "renamer_id": actor.id,
                "renamed_at": _timestamp(),
            },
            NotificationPriority.low,
        )

    async def document_moved(
        self, actor: User, document: Document, old_folder_name: str, new_folder_name: str
    ) -> Optional[Notification]:
        return await self._notify_tenant_admin(
            document.tenant_id,
            NotificationType.staff_document_moved,
            "Document Moved",
            f'Staff member {actor.full_name} moved document "{document.name}" '
            f'from "{old_folder_name}" to "{new_folder_name}"',
            {
                "document_id": document.id,
                "document_name": document.name,
                "old_folder_name": old_folder_name,
                "new_folder_name": new_folder_name,
                "moved_by": actor.full_name,
                "mover_id": actor.id,
                "moved_at": _timestamp(),
            },
            NotificationPriority.low,
        )

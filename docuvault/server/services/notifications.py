"""
Notification Service.

In-app notification inbox operations: listing for a user, a tenant or the
system inbox, counters, and read/archive/delete state changes. Creating the
notifications that announce domain events is the job of
:mod:`docuvault.server.services.dispatcher`.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Optional

from docuvault.core.database.base import utc_now
from docuvault.core.database.entities.notifications import Notification
from docuvault.core.database.repositories import NotificationQuery, SqlRepoBundle
from docuvault.core.errors import NotFoundError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.domain.enums import NotificationPriority, NotificationStatus, NotificationType
from docuvault.core.models.io.notifications import NotificationPage, NotificationRead

logger = get_logger(__name__)


class NotificationService:
    """Inbox operations bound to one database session."""

    def __init__(self, repos: SqlRepoBundle) -> None:
        self.repos = repos

    async def create_notification(
        self,
        *,
        user_id: Optional[str],
        tenant_id: Optional[str],
        type: NotificationType,
        title: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
        priority: NotificationPriority = NotificationPriority.medium,
        is_urgent: bool = False,
    ) -> Notification:
        """Persist a new unread notification; ``user_id=None`` targets the system inbox."""
        notification = await self.repos.notifications.create(
            Notification(
                user_id=user_id,
                tenant_id=tenant_id,
                type=type.value,
                title=title,
                message=message,
                data=data or {},
                priority=priority.value,
                is_urgent=is_urgent,
                status=NotificationStatus.unread.value,
            )
        )
        logger.info(
            f"Notification created: {notification.id} type={type.value}",
            extra={"notification_id": notification.id, "user_id": user_id, "type": type.value},
        )
        return notification

    async def list_notifications(self, query: NotificationQuery, page: int, limit: int) -> NotificationPage:
        items, total = await self.repos.notifications.search(query, limit=limit, offset=(page - 1) * limit)
        return NotificationPage(
            notifications=[NotificationRead.model_validate(item) for item in items],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit) if limit else 0,
        )

    async def unread_count(self, user_id: str) -> int:
        return await self.repos.notifications.count_matching(
            NotificationQuery(user_id=user_id, status=NotificationStatus.unread.value)
        )

    async def urgent_count(self, user_id: str) -> int:
        return await self.repos.notifications.count_matching(
            NotificationQuery(user_id=user_id, status=NotificationStatus.unread.value, is_urgent=True)
        )

    async def system_unread_count(self) -> int:
        return await self.repos.notifications.count_matching(
            NotificationQuery(status=NotificationStatus.unread.value)
        )

    async def mark_as_read(self, notification_id: str, user_id: str) -> Notification:
        notification = await self._get_owned(notification_id, user_id)
        notification.status = NotificationStatus.read.value
        notification.read_at = utc_now()
        return await self.repos.notifications.update(notification)

    async def mark_all_as_read(self, user_id: str) -> int:
        count = await self.repos.notifications.mark_all_read(user_id)
        logger.info(f"Marked {count} notifications as read for user {user_id}")
        return count

    async def archive(self, notification_id: str, user_id: str) -> Notification:
        notification = await self._get_owned(notification_id, user_id)
        notification.status = NotificationStatus.archived.value
        return await self.repos.notifications.update(notification)

    async def delete(self, notification_id: str, user_id: str) -> None:
        notification = await self._get_owned(notification_id, user_id)
        await self.repos.notifications.delete(notification.id)

    async def _get_owned(self, notification_id: str, user_id: str) -> Notification:
        notification = await self.repos.notifications.get_for_user(notification_id, user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

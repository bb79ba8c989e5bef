"""
Notification repository.

Notifications are read through one of three scopes: a single user's inbox,
every notification of a tenant, or the system inbox (rows without a user).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from docuvault.core.models.domain.enums import NotificationStatus

from ..base import utc_now
from ..entities.notifications import Notification
from .base import QueryBuilder, SqlModelRepository

SORTABLE_FIELDS = ("created_at", "priority", "status", "type")


@dataclass
class NotificationQuery:
    """Scope and filters for listing notifications.

    Exactly one scope applies: ``user_id``, else ``tenant_id``, else the
    system inbox when ``system`` is set.
    """

    user_id: Optional[str] = None
    tenant_id: Optional[str] = None
    system: bool = False
    status: Optional[str] = None
    type: Optional[str] = None
    is_urgent: Optional[bool] = None
    sort_by: str = "created_at"
    sort_order: str = "desc"


class NotificationRepository(SqlModelRepository[Notification]):
    """Repository for notification data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Notification)

    async def get_for_user(self, notification_id: str, user_id: str) -> Optional[Notification]:
        stmt = select(Notification).where((Notification.id == notification_id) & (Notification.user_id == user_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self, query: NotificationQuery, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Tuple[List[Notification], int]:
        """Page of notifications in the query scope plus the total count."""
        total = await self.count_matching(query)

        column = getattr(Notification, query.sort_by if query.sort_by in SORTABLE_FIELDS else "created_at")
        ordering = column.asc() if query.sort_order == "asc" else column.desc()
        stmt = self._apply_query(select(Notification), query).order_by(ordering, Notification.id)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def count_matching(self, query: NotificationQuery) -> int:
        stmt = self._apply_query(select(func.count()).select_from(Notification), query)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of the user as read.

        Returns:
            Number of notifications updated
        """
        result = await self.session.execute(
            update(Notification)
            .where((Notification.user_id == user_id) & (Notification.status == NotificationStatus.unread.value))
            .values(status=NotificationStatus.read.value, read_at=utc_now())
        )
        await self.session.commit()
        return int(result.rowcount or 0)

    @staticmethod
    def _apply_query(stmt, query: NotificationQuery):
        if query.user_id is not None:
            stmt = stmt.where(Notification.user_id == query.user_id)
        elif query.tenant_id is not None:
            stmt = stmt.where(Notification.tenant_id == query.tenant_id)
        elif query.system:
            stmt = stmt.where(Notification.user_id.is_(None))

        if query.status:
            stmt = stmt.where(Notification.status == query.status)
        if query.type:
            stmt = stmt.where(Notification.type == query.type)
        if query.is_urgent is not None:
            stmt = stmt.where(Notification.is_urgent == query.is_urgent)
        return stmt

"""
Notification entity model.

In-app notifications. A row without ``user_id`` is a system notification
addressed to the master admin.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from docuvault.core.models.domain.enums import NotificationPriority, NotificationStatus

from ..base import Base, generate_id, utc_now


class Notification(Base, table=True):
    """Entity for in-app notifications.

    Table: notifications
    """

    __tablename__ = "notifications"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64, index=True)
    tenant_id: Optional[str] = Field(default=None, foreign_key="tenants.id", max_length=64, index=True)

    type: str = Field(max_length=64, index=True)
    title: str = Field(max_length=255)
    message: str
    data: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    priority: str = Field(default=NotificationPriority.medium.value, max_length=16)
    is_urgent: bool = Field(default=False)
    status: str = Field(default=NotificationStatus.unread.value, max_length=16, index=True)
    read_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Notification(id={self.id}, type={self.type}, user_id={self.user_id})"

"""
Notification I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from docuvault.core.models.domain.enums import NotificationPriority, NotificationStatus, NotificationType


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: Optional[str] = None
    tenant_id: Optional[str] = None
    type: NotificationType
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority
    is_urgent: bool
    status: NotificationStatus
    read_at: Optional[datetime] = None
    created_at: datetime


class NotificationPage(BaseModel):
    notifications: List[NotificationRead]
    total: int
    page: int
    limit: int
    total_pages: int


class UnreadCount(BaseModel):
    unread_count: int


class UrgentCount(BaseModel):
    urgent_count: int

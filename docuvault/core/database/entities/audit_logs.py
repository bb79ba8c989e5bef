"""
Audit log entity model.

Append-only record of sensitive reads such as document downloads.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Column
from sqlmodel import JSON, Field

from ..base import Base, generate_id, utc_now


class AuditLog(Base, table=True):
    """Entity for audit trail entries.

    Table: audit_logs
    """

    __tablename__ = "audit_logs"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    tenant_id: Optional[str] = Field(default=None, foreign_key="tenants.id", max_length=64, index=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)
    action: str = Field(max_length=64)
    resource: str = Field(max_length=64)
    resource_id: Optional[str] = Field(default=None, max_length=64)
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))

    created_at: datetime = Field(default_factory=utc_now)

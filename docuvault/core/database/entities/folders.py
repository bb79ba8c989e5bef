"""
Folder entity model.

Folders form a per-tenant tree through ``parent_id``; a folder without a
parent sits at the tenant root. Deletion is soft, via ``deleted_at``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, generate_id, utc_now


class Folder(Base, table=True):
    """Entity for tenant folders.

    Table: folders
    """

    __tablename__ = "folders"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    tenant_id: str = Field(foreign_key="tenants.id", max_length=64, index=True)
    parent_id: Optional[str] = Field(default=None, foreign_key="folders.id", max_length=64, index=True)
    owner_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)

    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None)
    color: Optional[str] = Field(default=None, max_length=32)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"Folder(id={self.id}, name={self.name}, parent_id={self.parent_id})"

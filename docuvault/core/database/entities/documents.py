"""
Document entity model.

A document row holds metadata only; the bytes live in object storage under
``storage_key``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import Column
from sqlmodel import JSON, Field

from docuvault.core.models.domain.enums import DocumentStatus

from ..base import Base, generate_id, utc_now


class Document(Base, table=True):
    """Entity for tenant documents.

    ``meta`` is stored in the ``metadata`` column; the attribute name differs
    because ``metadata`` is reserved on declarative classes.

    Table: documents
    """

    __tablename__ = "documents"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    tenant_id: str = Field(foreign_key="tenants.id", max_length=64, index=True)
    folder_id: Optional[str] = Field(default=None, foreign_key="folders.id", max_length=64, index=True)
    owner_id: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)

    name: str = Field(max_length=255)
    original_name: Optional[str] = Field(default=None, max_length=255)
    mime_type: Optional[str] = Field(default=None, max_length=255)
    size: int = Field(default=0, ge=0)
    storage_key: Optional[str] = Field(default=None, max_length=1024)
    tags: List[str] = Field(default_factory=list, sa_type=JSON)
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))
    status: str = Field(default=DocumentStatus.active.value, max_length=32, index=True)
    version: int = Field(default=1)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    deleted_at: Optional[datetime] = Field(default=None)

    def __repr__(self) -> str:
        return f"Document(id={self.id}, name={self.name}, folder_id={self.folder_id})"

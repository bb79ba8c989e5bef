"""
Folder template entity models.

A template is an ordered, flattened folder hierarchy. Each node carries its
depth (``level``) and its place in the sequence (``position``); the tree is
rebuilt from that order when the template is applied to a tenant.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import Column
from sqlmodel import JSON, Field

from ..base import Base, generate_id, utc_now


class FolderTemplate(Base, table=True):
    """Entity for reusable folder structures.

    Table: folder_templates
    """

    __tablename__ = "folder_templates"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255)
    industry: Optional[str] = Field(default=None, max_length=128, index=True)
    description: Optional[str] = Field(default=None)
    is_system: bool = Field(default=False)
    created_by: Optional[str] = Field(default=None, foreign_key="users.id", max_length=64)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class FolderTemplateNode(Base, table=True):
    """One folder of a template.

    Table: folder_template_nodes
    """

    __tablename__ = "folder_template_nodes"

    id: str = Field(default_factory=generate_id, primary_key=True, max_length=64)
    template_id: str = Field(foreign_key="folder_templates.id", max_length=64, index=True)
    name: str = Field(max_length=255)
    level: int = Field(default=0, ge=0)
    position: int = Field(default=0, ge=0)
    is_placeholder: bool = Field(default=False)
    meta: Dict[str, Any] = Field(default_factory=dict, sa_column=Column("metadata", JSON, nullable=False))

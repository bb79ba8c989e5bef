"""
Folder I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .common import DisplayName, PaginationMeta


class FolderCreate(BaseModel):
    name: DisplayName
    parent_id: Optional[str] = Field(default=None, description="Parent folder; the root when omitted")
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=32)


class FolderUpdate(BaseModel):
    name: Optional[DisplayName] = None
    description: Optional[str] = None
    color: Optional[str] = Field(default=None, max_length=32)


class FolderRename(BaseModel):
    name: DisplayName


class FolderMove(BaseModel):
    target_parent_id: Optional[str] = Field(default=None, description="New parent; the root when null")


class FolderPathItem(BaseModel):
    id: str
    name: str


class FolderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    parent_id: Optional[str] = None
    owner_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class FolderDetail(FolderRead):
    path: List[FolderPathItem] = Field(default_factory=list, description="Ancestors from the root, self last")
    child_count: int = 0
    document_count: int = 0


class FolderList(BaseModel):
    folders: List[FolderRead]
    pagination: PaginationMeta


class FolderTreeNode(BaseModel):
    id: str
    name: str
    parent_id: Optional[str] = None
    color: Optional[str] = None
    document_count: int = 0
    children: List["FolderTreeNode"] = Field(default_factory=list)


class FolderDeleteResult(BaseModel):
    id: str
    deleted_folders: int
    deleted_documents: int

"""
Folder template I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .common import DisplayName
from .folders import FolderRead


class TemplateNodeIn(BaseModel):
    name: DisplayName = Field(description="May contain {Placeholder} tokens")
    level: int = Field(default=0, ge=0)
    position: Optional[int] = Field(default=None, ge=0, description="Defaults to the node's index in the list")
    is_placeholder: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)


class FolderTemplateCreate(BaseModel):
    name: DisplayName
    industry: Optional[str] = None
    description: Optional[str] = None
    is_system: bool = False
    nodes: List[TemplateNodeIn] = Field(default_factory=list)


class FolderTemplateUpdate(BaseModel):
    name: Optional[DisplayName] = None
    industry: Optional[str] = None
    description: Optional[str] = None
    nodes: Optional[List[TemplateNodeIn]] = None


class TemplateNodeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    level: int
    position: int
    is_placeholder: bool
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("meta", "metadata"))


class FolderTemplateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    industry: Optional[str] = None
    description: Optional[str] = None
    is_system: bool
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    nodes: List[TemplateNodeRead] = Field(default_factory=list)


class TemplateApply(BaseModel):
    placeholder_values: Dict[str, str] = Field(default_factory=dict)
    parent_id: Optional[str] = Field(default=None, description="Folder to build the structure under; root if null")


class TemplateApplyResult(BaseModel):
    template_id: str
    created_count: int
    reused_count: int
    root_folders: List[FolderRead]

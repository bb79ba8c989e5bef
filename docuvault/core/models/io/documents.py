"""
Document and upload I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from docuvault.core.models.domain.enums import DocumentStatus

from .common import DisplayName, PaginationMeta


class UploadUrlRequest(BaseModel):
    """Request for a pre-signed upload URL.

    Fields are optional at the schema level so a missing one is reported with
    the same 400 error envelope as every other validation failure.
    """

    file_name: Optional[str] = None
    content_type: Optional[str] = None
    file_size: Optional[int] = None
    document_id: Optional[str] = None


class UploadUrlRead(BaseModel):
    upload_url: str
    key: str
    file_name: str
    expires_in: int


class UploadValidateRequest(BaseModel):
    object_key: str = Field(min_length=1)


class UploadValidateRead(BaseModel):
    valid: bool
    key: str
    document_id: Optional[str] = None


class DocumentCreate(BaseModel):
    name: DisplayName
    folder_id: Optional[str] = None
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: int = Field(default=0, ge=0)
    storage_key: Optional[str] = Field(default=None, description="Object key returned by the upload URL endpoint")
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DocumentUpdate(BaseModel):
    name: Optional[DisplayName] = None
    tags: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = Field(default=None, description="Merged into the existing metadata")
    status: Optional[DocumentStatus] = None


class DocumentRename(BaseModel):
    name: DisplayName


class DocumentMove(BaseModel):
    target_folder_id: Optional[str] = Field(default=None, description="Destination folder; the root when null")


class DocumentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    folder_id: Optional[str] = None
    owner_id: Optional[str] = None
    name: str
    original_name: Optional[str] = None
    mime_type: Optional[str] = None
    size: int
    storage_key: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("meta", "metadata"))
    status: DocumentStatus
    version: int
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class DocumentList(BaseModel):
    documents: List[DocumentRead]
    pagination: PaginationMeta


class DownloadUrlRead(BaseModel):
    download_url: str
    file_name: str
    expires_in: int

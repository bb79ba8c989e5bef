"""
Document Service.

Tenant-scoped document metadata plus the object storage handshake: clients
ask for a pre-signed upload URL, PUT the bytes to storage, then register the
document with the returned key. Downloads go through pre-signed GET URLs and
leave an audit trail.
"""

from __future__ import annotations

import secrets
import string
import time
from typing import List, Optional

from docuvault.core.database.base import utc_now
from docuvault.core.database.entities.audit_logs import AuditLog
from docuvault.core.database.entities.documents import Document
from docuvault.core.database.entities.users import User
from docuvault.core.database.repositories import ANY_FOLDER, DocumentQuery, SqlRepoBundle
from docuvault.core.errors import BadRequestError, ForbiddenError, NotFoundError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.domain.enums import AuditAction, AuditResource, DocumentStatus
from docuvault.core.models.io.common import PaginationMeta
from docuvault.core.models.io.documents import (
    DocumentCreate,
    DocumentList,
    DocumentRead,
    DocumentUpdate,
    DownloadUrlRead,
    UploadUrlRead,
    UploadUrlRequest,
    UploadValidateRead,
)
from docuvault.server.core import constant

from .dispatcher import NotificationDispatcher
from .storage import (
    StorageService,
    extract_document_id,
    generate_object_key,
    sanitize_file_name,
    validate_tenant_object_key,
)

logger = get_logger(__name__)

_TEMP_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_temp_document_id() -> str:
    """Placeholder id for an upload that has no document row yet."""
    suffix = "".join(secrets.choice(_TEMP_ID_ALPHABET) for _ in range(9))
    return f"temp_{int(time.time() * 1000)}_{suffix}"


def normalize_tags(tags: List[str]) -> List[str]:
    """Strip blanks and drop duplicates, keeping the first spelling."""
    seen = set()
    result = []
    for tag in tags:
        cleaned = tag.strip()
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            result.append(cleaned)
    return result


class DocumentService:
    """Document operations for one tenant, bound to one database session."""

    def __init__(
        self,
        repos: SqlRepoBundle,
        storage: StorageService,
        dispatcher: NotificationDispatcher,
        max_upload_size: int,
    ) -> None:
        self.repos = repos
        self.storage = storage
        self.dispatcher = dispatcher
        self.max_upload_size = max_upload_size

    # ------------------------------------------------------------------
    # Upload handshake
    # ------------------------------------------------------------------

    def get_upload_url(self, tenant_id: str, request: UploadUrlRequest) -> UploadUrlRead:
        """
        Pre-sign a PUT URL for a new object inside the tenant's prefix.

        Args:
            tenant_id: Caller's tenant
            request: File name, content type and size of the upload

        Returns:
            URL, object key and the sanitized file name

        Raises:
            BadRequestError: A field is missing or the file is too large
        """
        if not request.file_name or not request.content_type or request.file_size is None:
            raise BadRequestError("file_name, content_type and file_size are required")
        if request.file_size <= 0:
            raise BadRequestError("file_size must be positive")
        if request.file_size > self.max_upload_size:
            raise BadRequestError(
                f"File exceeds the maximum upload size of {self.max_upload_size} bytes", code="FILE_TOO_LARGE"
            )

        document_id = request.document_id or generate_temp_document_id()
        key = generate_object_key(tenant_id, request.file_name, document_id)
        url = self.storage.presign_upload(key, request.content_type)
        logger.info(f"Upload URL issued for {key}", extra={"tenant_id": tenant_id})
        return UploadUrlRead(
            upload_url=url,
            key=key,
            file_name=sanitize_file_name(request.file_name),
            expires_in=self.storage.expires_in,
        )

    def validate_upload(self, tenant_id: str, object_key: str) -> UploadValidateRead:
        if not validate_tenant_object_key(object_key, tenant_id):
            raise ForbiddenError("Object key does not belong to this tenant", code="INVALID_OBJECT_KEY")
        return UploadValidateRead(valid=True, key=object_key, document_id=extract_document_id(object_key))

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create_document(self, tenant_id: str, owner: User, data: DocumentCreate) -> DocumentRead:
        folder = await self._get_folder(data.folder_id, tenant_id) if data.folder_id else None
        if data.storage_key and not validate_tenant_object_key(data.storage_key, tenant_id):
            raise ForbiddenError("Object key does not belong to this tenant", code="INVALID_OBJECT_KEY")

        name = data.name.strip()
        document = await self.repos.documents.create(
            Document(
                tenant_id=tenant_id,
                folder_id=data.folder_id,
                owner_id=owner.id,
                name=name,
                original_name=data.original_name or name,
                mime_type=data.mime_type,
                size=data.size,
                storage_key=data.storage_key,
                tags=normalize_tags(data.tags),
                meta=dict(data.metadata),
                status=DocumentStatus.active.value,
            )
        )
        logger.info(f"Document created: {document.id} in tenant {tenant_id}", extra={"document_id": document.id})
        await self.dispatcher.document_uploaded(owner, document, folder.name if folder else constant.ROOT_FOLDER_LABEL)
        return DocumentRead.model_validate(document)

    async def get_document(self, document_id: str, tenant_id: str) -> DocumentRead:
        return DocumentRead.model_validate(await self._get(document_id, tenant_id))

    async def list_documents(
        self,
        tenant_id: str,
        folder_id: Optional[str] = ANY_FOLDER,
        status: Optional[DocumentStatus] = None,
        tags: Optional[List[str]] = None,
        page: int = 1,
        limit: int = 20,
    ) -> DocumentList:
        """Documents of a folder (``None`` for the root, ``ANY_FOLDER`` for all)."""
        return await self.search_documents(tenant_id, None, folder_id, status, tags, page, limit)

    async def search_documents(
        self,
        tenant_id: str,
        text: Optional[str],
        folder_id: Optional[str] = ANY_FOLDER,
        status: Optional[DocumentStatus] = None,
        tags: Optional[List[str]] = None,
        page: int = 1,
        limit: int = 20,
    ) -> DocumentList:
        query = DocumentQuery(
            tenant_id=tenant_id,
            folder_id=folder_id,
            status=status.value if status else None,
            tags=normalize_tags(tags or []),
            text=text.strip() if text and text.strip() else None,
        )
        documents, total = await self.repos.documents.search(query, limit=limit, offset=(page - 1) * limit)
        return DocumentList(
            documents=[DocumentRead.model_validate(document) for document in documents],
            pagination=PaginationMeta.build(total, page, limit),
        )

    async def update_document(self, document_id: str, tenant_id: str, data: DocumentUpdate) -> DocumentRead:
        """Update name, tags, status; metadata keys are merged into the existing ones."""
        document = await self._get(document_id, tenant_id)
        changes = data.model_dump(exclude_unset=True)

        if changes.get("name"):
            document.name = changes["name"].strip()
        if changes.get("tags") is not None:
            document.tags = normalize_tags(changes["tags"])
        if changes.get("metadata"):
            document.meta = {**(document.meta or {}), **changes["metadata"]}
        if changes.get("status") is not None:
            status = DocumentStatus(changes["status"])
            if status == DocumentStatus.deleted:
                raise BadRequestError("Use the delete operation to delete a document")
            document.status = status.value

        document = await self.repos.documents.update(document)
        return DocumentRead.model_validate(document)

    async def rename_document(self, document_id: str, tenant_id: str, name: str, actor: User) -> DocumentRead:
        document = await self._get(document_id, tenant_id)
        old_name = document.name
        document.name = name.strip()
        document = await self.repos.documents.update(document)
        logger.info(f"Document renamed: {document.id} '{old_name}' -> '{document.name}'")
        await self.dispatcher.document_renamed(actor, document, old_name)
        return DocumentRead.model_validate(document)

    async def move_document(
        self, document_id: str, tenant_id: str, target_folder_id: Optional[str], actor: User
    ) -> DocumentRead:
        document = await self._get(document_id, tenant_id)
        target = await self._get_folder(target_folder_id, tenant_id) if target_folder_id else None
        if document.folder_id == target_folder_id:
            return DocumentRead.model_validate(document)

        old_folder_name = await self._folder_name(document.folder_id, tenant_id)
        document.folder_id = target_folder_id
        document = await self.repos.documents.update(document)
        logger.info(f"Document moved: {document.id} -> {target_folder_id or 'root'}")
        await self.dispatcher.document_moved(
            actor, document, old_folder_name, target.name if target else constant.ROOT_FOLDER_LABEL
        )
        return DocumentRead.model_validate(document)

    async def delete_document(self, document_id: str, tenant_id: str, actor: User) -> None:
        """Soft delete, notify, then remove the stored object if possible."""
        document = await self._get(document_id, tenant_id)
        folder_name = await self._folder_name(document.folder_id, tenant_id)
        document.status = DocumentStatus.deleted.value
        document.deleted_at = utc_now()
        document = await self.repos.documents.update(document)
        logger.info(f"Document soft-deleted: {document.id}", extra={"document_id": document.id})

        await self.dispatcher.document_deleted(actor, document, folder_name)

        if document.storage_key:
            try:
                await self.storage.delete_object(document.storage_key)
            except Exception as e:
                logger.error(f"Failed to delete storage object {document.storage_key}: {e}", exc_info=True)

    async def restore_document(self, document_id: str, tenant_id: str) -> DocumentRead:
        """Bring a deleted document back; it lands at the root if its folder is gone."""
        document = await self.repos.documents.get_in_tenant(document_id, tenant_id, include_deleted=True)
        if document is None:
            raise NotFoundError("Document not found")
        if document.status != DocumentStatus.deleted.value and document.deleted_at is None:
            raise BadRequestError("Document is not deleted")

        if document.folder_id and await self.repos.folders.get_in_tenant(document.folder_id, tenant_id) is None:
            document.folder_id = None
        document.status = DocumentStatus.active.value
        document.deleted_at = None
        document = await self.repos.documents.update(document)
        logger.info(f"Document restored: {document.id} into {document.folder_id or 'root'}")
        return DocumentRead.model_validate(document)

    async def get_download_url(self, document_id: str, tenant_id: str, actor: User) -> DownloadUrlRead:
        """
        Pre-sign a GET URL for the stored file.

        The audit entry and the ``last_downloaded_*`` metadata are recorded
        on a best-effort basis; failing to record them does not block the
        download.
        """
        document = await self._get(document_id, tenant_id)
        if not document.storage_key:
            raise BadRequestError("Document has no stored file", code="NO_STORED_FILE")

        file_name = document.original_name or document.name
        result = DownloadUrlRead(
            download_url=self.storage.presign_download(document.storage_key, file_name),
            file_name=file_name,
            expires_in=self.storage.expires_in,
        )

        now = utc_now()
        try:
            document.meta = {
                **(document.meta or {}),
                "last_downloaded_at": now.isoformat(),
                "last_downloaded_by": actor.id,
            }
            self.repos.session.add(document)
            await self.repos.audit_logs.create(
                AuditLog(
                    tenant_id=tenant_id,
                    user_id=actor.id,
                    action=AuditAction.download.value,
                    resource=AuditResource.document.value,
                    resource_id=document.id,
                    meta={"file_name": file_name},
                )
            )
        except Exception as e:
            await self.repos.session.rollback()
            logger.error(f"Failed to record download of document {document.id}: {e}", exc_info=True)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get(self, document_id: str, tenant_id: str) -> Document:
        document = await self.repos.documents.get_in_tenant(document_id, tenant_id)
        if document is None:
            raise NotFoundError("Document not found")
        return document

    async def _get_folder(self, folder_id: str, tenant_id: str):
        folder = await self.repos.folders.get_in_tenant(folder_id, tenant_id)
        if folder is None:
            raise NotFoundError("Folder not found")
        return folder

    async def _folder_name(self, folder_id: Optional[str], tenant_id: str) -> str:
        if not folder_id:
            return constant.ROOT_FOLDER_LABEL
        folder = await self.repos.folders.get_in_tenant(folder_id, tenant_id)
        return folder.name if folder is not None else constant.ROOT_FOLDER_LABEL

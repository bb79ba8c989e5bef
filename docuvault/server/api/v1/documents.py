"""
Document Endpoints.

Document metadata of the caller's tenant, the upload URL handshake, search,
soft delete and restore, and pre-signed downloads.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docuvault.core.database.repositories import ANY_FOLDER
from docuvault.core.models.domain.enums import DocumentStatus
from docuvault.core.models.io.common import ApiResponse, PageParams, ok
from docuvault.core.models.io.documents import (
    DocumentCreate,
    DocumentList,
    DocumentMove,
    DocumentRead,
    DocumentRename,
    DocumentUpdate,
    DownloadUrlRead,
    UploadUrlRead,
    UploadUrlRequest,
)
from docuvault.server.core.security import CurrentUserDep, TenantIdDep, page_params
from docuvault.server.services.deps import DocumentServiceDep

router = APIRouter()

ROOT_FOLDER_PARAM = "root"


def folder_filter(
    folder_id: Optional[str] = Query(
        default=None, description="Folder to list; `root` for the tenant root, omitted for every folder"
    ),
) -> Optional[str]:
    if folder_id is None:
        return ANY_FOLDER
    if folder_id == ROOT_FOLDER_PARAM:
        return None
    return folder_id


def tag_filter(tags: Optional[List[str]] = Query(default=None, description="Repeat or comma-separate")) -> List[str]:
    return [tag for value in tags or [] for tag in value.split(",") if tag.strip()]


@router.post(
    "/upload-url",
    response_model=ApiResponse[UploadUrlRead],
    summary="Get Upload URL",
    description="Pre-signed PUT URL for uploading a file into the tenant's storage prefix.",
    responses={400: {"description": "Missing field or file too large"}},
)
async def get_upload_url(request_in: UploadUrlRequest, tenant_id: TenantIdDep, service: DocumentServiceDep):
    return ok(service.get_upload_url(tenant_id, request_in))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[DocumentRead],
    summary="Create Document",
    description="Register an uploaded file as a document.",
    responses={
        403: {"description": "Storage key belongs to another tenant"},
        404: {"description": "Folder not found"},
    },
)
async def create_document(
    document_in: DocumentCreate, current: CurrentUserDep, tenant_id: TenantIdDep, service: DocumentServiceDep
):
    return ok(await service.create_document(tenant_id, current.user, document_in), "Document created")


@router.get(
    "",
    response_model=ApiResponse[DocumentList],
    summary="List Documents",
    description="Documents newest first. Deleted documents only appear when `status=DELETED`.",
)
async def list_documents(
    tenant_id: TenantIdDep,
    service: DocumentServiceDep,
    paging: PageParams = Depends(page_params()),
    folder_id: Optional[str] = Depends(folder_filter),
    tags: List[str] = Depends(tag_filter),
    status_filter: Optional[DocumentStatus] = Query(default=None, alias="status"),
):
    return ok(await service.list_documents(tenant_id, folder_id, status_filter, tags, paging.page, paging.limit))


@router.get(
    "/search",
    response_model=ApiResponse[DocumentList],
    summary="Search Documents",
    description="Case-insensitive substring search on document names, combined with the list filters.",
)
async def search_documents(
    tenant_id: TenantIdDep,
    service: DocumentServiceDep,
    paging: PageParams = Depends(page_params()),
    folder_id: Optional[str] = Depends(folder_filter),
    tags: List[str] = Depends(tag_filter),
    q: Optional[str] = Query(default=None, description="Text to look for"),
    status_filter: Optional[DocumentStatus] = Query(default=None, alias="status"),
):
    return ok(
        await service.search_documents(tenant_id, q, folder_id, status_filter, tags, paging.page, paging.limit)
    )


@router.get(
    "/{document_id}",
    response_model=ApiResponse[DocumentRead],
    summary="Get Document",
    responses={404: {"description": "Document not found"}},
)
async def get_document(document_id: str, tenant_id: TenantIdDep, service: DocumentServiceDep):
    return ok(await service.get_document(document_id, tenant_id))


@router.patch(
    "/{document_id}",
    response_model=ApiResponse[DocumentRead],
    summary="Update Document",
    description="Update name, tags or status; metadata keys are merged into the existing metadata.",
    responses={404: {"description": "Document not found"}},
)
async def update_document(
    document_id: str, document_in: DocumentUpdate, tenant_id: TenantIdDep, service: DocumentServiceDep
):
    return ok(await service.update_document(document_id, tenant_id, document_in), "Document updated")


@router.patch(
    "/{document_id}/rename",
    response_model=ApiResponse[DocumentRead],
    summary="Rename Document",
    responses={404: {"description": "Document not found"}},
)
async def rename_document(
    document_id: str,
    rename_in: DocumentRename,
    current: CurrentUserDep,
    tenant_id: TenantIdDep,
    service: DocumentServiceDep,
):
    return ok(
        await service.rename_document(document_id, tenant_id, rename_in.name, current.user), "Document renamed"
    )


@router.post(
    "/{document_id}/move",
    response_model=ApiResponse[DocumentRead],
    summary="Move Document",
    description="Move a document to another folder, or to the root when `target_folder_id` is null.",
    responses={404: {"description": "Document or folder not found"}},
)
async def move_document(
    document_id: str,
    move_in: DocumentMove,
    current: CurrentUserDep,
    tenant_id: TenantIdDep,
    service: DocumentServiceDep,
):
    return ok(
        await service.move_document(document_id, tenant_id, move_in.target_folder_id, current.user), "Document moved"
    )


@router.delete(
    "/{document_id}",
    response_model=ApiResponse[None],
    summary="Delete Document",
    description="Soft delete a document and remove its stored file.",
    responses={404: {"description": "Document not found"}},
)
async def delete_document(
    document_id: str, current: CurrentUserDep, tenant_id: TenantIdDep, service: DocumentServiceDep
):
    await service.delete_document(document_id, tenant_id, current.user)
    return ok(message="Document deleted")


@router.post(
    "/{document_id}/restore",
    response_model=ApiResponse[DocumentRead],
    summary="Restore Document",
    description="Restore a deleted document; it returns to the root if its folder was deleted meanwhile.",
    responses={400: {"description": "Document is not deleted"}, 404: {"description": "Document not found"}},
)
async def restore_document(document_id: str, tenant_id: TenantIdDep, service: DocumentServiceDep):
    return ok(await service.restore_document(document_id, tenant_id), "Document restored")


@router.get(
    "/{document_id}/download",
    response_model=ApiResponse[DownloadUrlRead],
    summary="Get Download URL",
    description="Pre-signed GET URL for the stored file. The download is recorded in the audit log.",
    responses={400: {"description": "Document has no stored file"}, 404: {"description": "Document not found"}},
)
async def get_download_url(
    document_id: str, current: CurrentUserDep, tenant_id: TenantIdDep, service: DocumentServiceDep
):
    return ok(await service.get_download_url(document_id, tenant_id, current.user))

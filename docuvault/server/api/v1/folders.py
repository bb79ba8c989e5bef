"""
Folder Endpoints.

Folder hierarchy of the caller's tenant: CRUD, rename, move, cascading
delete and the full tree. Staff changes are announced to the tenant admin.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from docuvault.core.models.io.common import ApiResponse, PageParams, ok
from docuvault.core.models.io.folders import (
    FolderCreate,
    FolderDeleteResult,
    FolderDetail,
    FolderList,
    FolderMove,
    FolderRead,
    FolderRename,
    FolderTreeNode,
    FolderUpdate,
)
from docuvault.server.core.security import CurrentUserDep, TenantIdDep, page_params
from docuvault.server.services.deps import FolderServiceDep

router = APIRouter()


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[FolderRead],
    summary="Create Folder",
    description="Create a folder at the root or under `parent_id`.",
    responses={404: {"description": "Parent folder not found"}, 409: {"description": "Name already used"}},
)
async def create_folder(
    folder_in: FolderCreate, current: CurrentUserDep, tenant_id: TenantIdDep, service: FolderServiceDep
):
    return ok(await service.create_folder(tenant_id, current.user, folder_in), "Folder created")


@router.get(
    "",
    response_model=ApiResponse[FolderList],
    summary="List Folders",
    description="Direct subfolders of `parent_id` (the root when omitted), ordered by name.",
)
async def list_folders(
    tenant_id: TenantIdDep,
    service: FolderServiceDep,
    paging: PageParams = Depends(page_params(default_limit=50)),
    parent_id: Optional[str] = Query(default=None),
):
    return ok(await service.list_folders(tenant_id, parent_id, paging.page, paging.limit))


@router.get(
    "/tree",
    response_model=ApiResponse[List[FolderTreeNode]],
    summary="Folder Tree",
    description="Every live folder of the tenant nested under its parent, with document counts.",
)
async def get_folder_tree(tenant_id: TenantIdDep, service: FolderServiceDep):
    return ok(await service.get_folder_tree(tenant_id))


@router.get(
    "/{folder_id}",
    response_model=ApiResponse[FolderDetail],
    summary="Get Folder",
    description="Folder with its breadcrumb path and content counts.",
    responses={404: {"description": "Folder not found"}},
)
async def get_folder(folder_id: str, tenant_id: TenantIdDep, service: FolderServiceDep):
    return ok(await service.get_folder(folder_id, tenant_id))


@router.patch(
    "/{folder_id}",
    response_model=ApiResponse[FolderRead],
    summary="Update Folder",
    responses={404: {"description": "Folder not found"}, 409: {"description": "Name already used"}},
)
async def update_folder(folder_id: str, folder_in: FolderUpdate, tenant_id: TenantIdDep, service: FolderServiceDep):
    return ok(await service.update_folder(folder_id, tenant_id, folder_in), "Folder updated")


@router.patch(
    "/{folder_id}/rename",
    response_model=ApiResponse[FolderRead],
    summary="Rename Folder",
    responses={404: {"description": "Folder not found"}, 409: {"description": "Name already used"}},
)
async def rename_folder(
    folder_id: str, rename_in: FolderRename, current: CurrentUserDep, tenant_id: TenantIdDep, service: FolderServiceDep
):
    return ok(await service.rename_folder(folder_id, tenant_id, rename_in.name, current.user), "Folder renamed")


@router.post(
    "/{folder_id}/move",
    response_model=ApiResponse[FolderRead],
    summary="Move Folder",
    description="Move a folder under another folder, or to the root when `target_parent_id` is null.",
    responses={
        400: {"description": "Target is the folder itself or one of its descendants"},
        404: {"description": "Folder or target not found"},
        409: {"description": "Name already used in the target"},
    },
)
async def move_folder(
    folder_id: str, move_in: FolderMove, current: CurrentUserDep, tenant_id: TenantIdDep, service: FolderServiceDep
):
    return ok(
        await service.move_folder(folder_id, tenant_id, move_in.target_parent_id, current.user), "Folder moved"
    )


@router.delete(
    "/{folder_id}",
    response_model=ApiResponse[FolderDeleteResult],
    summary="Delete Folder",
    description="Soft delete the folder, every subfolder and every document inside them.",
    responses={404: {"description": "Folder not found"}},
)
async def delete_folder(folder_id: str, current: CurrentUserDep, tenant_id: TenantIdDep, service: FolderServiceDep):
    return ok(await service.delete_folder(folder_id, tenant_id, current.user), "Folder deleted")

"""
Folder Template Endpoints.

Reusable folder structures. Anyone signed in can browse and apply them to
their own tenant; only the master admin can create, change or delete them.
"""

from typing import List, Optional

from fastapi import APIRouter, Query, status

from docuvault.core.models.io.common import ApiResponse, ok
from docuvault.core.models.io.folder_templates import (
    FolderTemplateCreate,
    FolderTemplateRead,
    FolderTemplateUpdate,
    TemplateApply,
    TemplateApplyResult,
)
from docuvault.server.core.security import CurrentUserDep, SuperAdminDep, TenantIdDep
from docuvault.server.services.deps import FolderTemplateServiceDep

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[List[FolderTemplateRead]],
    summary="List Templates",
    description="System templates first, then by name; optionally restricted to one industry.",
)
async def list_templates(
    current: CurrentUserDep, service: FolderTemplateServiceDep, industry: Optional[str] = Query(default=None)
):
    return ok(await service.list_templates(industry))


@router.get(
    "/industry/{industry}",
    response_model=ApiResponse[List[FolderTemplateRead]],
    summary="List Templates By Industry",
)
async def list_templates_by_industry(industry: str, current: CurrentUserDep, service: FolderTemplateServiceDep):
    return ok(await service.list_templates(industry))


@router.get(
    "/{template_id}",
    response_model=ApiResponse[FolderTemplateRead],
    summary="Get Template",
    responses={404: {"description": "Template not found"}},
)
async def get_template(template_id: str, current: CurrentUserDep, service: FolderTemplateServiceDep):
    return ok(await service.get_template(template_id))


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[FolderTemplateRead],
    summary="Create Template",
    responses={400: {"description": "Node levels do not form a tree"}},
)
async def create_template(template_in: FolderTemplateCreate, admin: SuperAdminDep, service: FolderTemplateServiceDep):
    return ok(await service.create_template(template_in, admin.user), "Template created")


@router.put(
    "/{template_id}",
    response_model=ApiResponse[FolderTemplateRead],
    summary="Update Template",
    description="Update template fields; a `nodes` list replaces every node.",
    responses={400: {"description": "Node levels do not form a tree"}, 404: {"description": "Template not found"}},
)
async def update_template(
    template_id: str, template_in: FolderTemplateUpdate, admin: SuperAdminDep, service: FolderTemplateServiceDep
):
    return ok(await service.update_template(template_id, template_in), "Template updated")


@router.delete(
    "/{template_id}",
    response_model=ApiResponse[None],
    summary="Delete Template",
    responses={404: {"description": "Template not found"}},
)
async def delete_template(template_id: str, admin: SuperAdminDep, service: FolderTemplateServiceDep):
    await service.delete_template(template_id)
    return ok(message="Template deleted")


@router.post(
    "/{template_id}/apply",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[TemplateApplyResult],
    summary="Apply Template",
    description="Create the template's folders in the caller's tenant, filling `{Placeholder}` names.",
    responses={400: {"description": "Invalid template"}, 404: {"description": "Template or parent not found"}},
)
async def apply_template(
    template_id: str,
    apply_in: TemplateApply,
    current: CurrentUserDep,
    tenant_id: TenantIdDep,
    service: FolderTemplateServiceDep,
):
    """
    Apply a template.

    Folders that already exist at the same place are reused, so applying a
    template twice is harmless.
    """
    return ok(await service.apply_template(template_id, tenant_id, current.user, apply_in), "Template applied")

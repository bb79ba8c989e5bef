"""
Document Upload Endpoints.

Stand-alone upload handshake used by clients that upload before choosing
where to file the document: get a pre-signed URL, then check the returned key.
"""

from fastapi import APIRouter

from docuvault.core.models.io.common import ApiResponse, ok
from docuvault.core.models.io.documents import (
    UploadUrlRead,
    UploadUrlRequest,
    UploadValidateRead,
    UploadValidateRequest,
)
from docuvault.server.core.security import TenantIdDep
from docuvault.server.services.deps import DocumentServiceDep

router = APIRouter()


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
    "/validate",
    response_model=ApiResponse[UploadValidateRead],
    summary="Validate Upload Key",
    description="Check that an object key lies inside the caller's tenant prefix.",
    responses={403: {"description": "Key belongs to another tenant"}},
)
async def validate_upload(request_in: UploadValidateRequest, tenant_id: TenantIdDep, service: DocumentServiceDep):
    return ok(service.validate_upload(tenant_id, request_in.object_key))

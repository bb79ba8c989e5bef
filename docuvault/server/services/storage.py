"""
Object Storage Service.

Wraps an S3-compatible bucket (AWS S3, MinIO, R2) through boto3. Clients
upload and download document bytes directly with pre-signed URLs; the server
only signs URLs, validates keys and deletes objects.

Object keys follow ``tenants/{tenant_id}/documents/raw/{document_id}/{file_name}``
so the owning tenant can be checked from the key alone.
"""

from __future__ import annotations

import asyncio
import posixpath
import re
from functools import lru_cache
from typing import Any, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from docuvault.core.errors import ServiceUnavailableError
from docuvault.core.logging_config import get_logger
from docuvault.server.core.config import StorageConfig, settings

logger = get_logger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_file_name(file_name: str) -> str:
    """Reduce a client-supplied name to a safe key segment."""
    base = posixpath.basename(file_name.replace("\\", "/")).strip()
    cleaned = _UNSAFE_CHARS.sub("_", base).lstrip(".")
    return cleaned or "file"


def generate_object_key(tenant_id: str, file_name: str, document_id: str) -> str:
    return f"tenants/{tenant_id}/documents/raw/{document_id}/{sanitize_file_name(file_name)}"


def validate_tenant_object_key(object_key: str, tenant_id: str) -> bool:
    """Whether ``object_key`` lies inside the tenant's prefix."""
    if not object_key or not tenant_id:
        return False
    segments = object_key.split("/")
    if any(segment in ("", ".", "..") for segment in segments):
        return False
    return object_key.startswith(f"tenants/{tenant_id}/")


def extract_document_id(object_key: str) -> Optional[str]:
    """Document id embedded in a raw document key, if the key has that shape."""
    segments = object_key.split("/")
    if len(segments) >= 6 and segments[0] == "tenants" and segments[2] == "documents" and segments[3] == "raw":
        return segments[4]
    return None


class StorageService:
    """Pre-signs URLs for, and deletes objects in, the documents bucket."""

    def __init__(self, config: StorageConfig, client: Any = None) -> None:
        self.config = config
        self._client = client

    @property
    def bucket(self) -> str:
        if not self.config.bucket:
            raise ServiceUnavailableError("Object storage is not configured", code="STORAGE_NOT_CONFIGURED")
        return self.config.bucket

    @property
    def client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                "s3",
                region_name=self.config.region,
                endpoint_url=self.config.endpoint_url,
                aws_access_key_id=self.config.access_key_id,
                aws_secret_access_key=self.config.secret_access_key,
                config=Config(signature_version="s3v4"),
            )
        return self._client

    @property
    def expires_in(self) -> int:
        return self.config.presigned_expires

    def presign_upload(self, object_key: str, content_type: str) -> str:
        """Pre-signed PUT URL; the client must send the same Content-Type."""
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={"Bucket": self.bucket, "Key": object_key, "ContentType": content_type},
                ExpiresIn=self.expires_in,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to pre-sign upload for {object_key}: {e}")
            raise ServiceUnavailableError("Could not create upload URL") from e

    def presign_download(self, object_key: str, file_name: Optional[str] = None) -> str:
        params = {"Bucket": self.bucket, "Key": object_key}
        if file_name:
            params["ResponseContentDisposition"] = f'attachment; filename="{sanitize_file_name(file_name)}"'
        try:
            return self.client.generate_presigned_url("get_object", Params=params, ExpiresIn=self.expires_in)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to pre-sign download for {object_key}: {e}")
            raise ServiceUnavailableError("Could not create download URL") from e

    async def delete_object(self, object_key: str) -> None:
        """Delete an object; boto3 is blocking, so the call runs in a worker thread."""
        await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=object_key)
        logger.info(f"Deleted storage object {object_key}")


@lru_cache
def get_storage_service() -> StorageService:
    """Process-wide storage service built from settings."""
    return StorageService(settings.storage)

"""
Folder repository.

Every query here is scoped by ``tenant_id`` so a folder of another tenant is
indistinguishable from a missing one.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from docuvault.core.models.domain.enums import DocumentStatus

from ..entities.documents import Document
from ..entities.folders import Folder
from .base import QueryBuilder, SqlModelRepository


class FolderRepository(SqlModelRepository[Folder]):
    """Repository for folder data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Folder)

    async def get_in_tenant(self, folder_id: str, tenant_id: str) -> Optional[Folder]:
        """Get a live folder only if it belongs to the tenant."""
        stmt = select(Folder).where(
            (Folder.id == folder_id) & (Folder.tenant_id == tenant_id) & (Folder.deleted_at.is_(None))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_children(
        self, tenant_id: str, parent_id: Optional[str], limit: Optional[int] = None, offset: Optional[int] = None
    ) -> List[Folder]:
        """Live folders directly under ``parent_id`` (the root when None), by name."""
        stmt = self._children_stmt(select(Folder), tenant_id, parent_id).order_by(Folder.name)
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_children(self, tenant_id: str, parent_id: Optional[str]) -> int:
        stmt = self._children_stmt(select(func.count()).select_from(Folder), tenant_id, parent_id)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    async def list_all(self, tenant_id: str) -> List[Folder]:
        """Every live folder of the tenant, for building the tree."""
        stmt = (
            select(Folder)
            .where((Folder.tenant_id == tenant_id) & (Folder.deleted_at.is_(None)))
            .order_by(Folder.name)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_sibling_by_name(
        self, tenant_id: str, parent_id: Optional[str], name: str, exclude_id: Optional[str] = None
    ) -> Optional[Folder]:
        """Live folder with the same name (case-insensitive) under the same parent."""
        stmt = self._children_stmt(select(Folder), tenant_id, parent_id).where(
            func.lower(Folder.name) == name.strip().lower()
        )
        if exclude_id is not None:
            stmt = stmt.where(Folder.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def document_counts(self, tenant_id: str) -> Dict[Optional[str], int]:
        """Number of live documents per folder id (``None`` for the root)."""
        stmt = (
            select(Document.folder_id, func.count())
            .where(
                (Document.tenant_id == tenant_id)
                & (Document.deleted_at.is_(None))
                & (Document.status != DocumentStatus.deleted.value)
            )
            .group_by(Document.folder_id)
        )
        result = await self.session.execute(stmt)
        return {folder_id: int(total) for folder_id, total in result.all()}

    async def soft_delete_many(self, tenant_id: str, folder_ids: Sequence[str], now: datetime) -> int:
        """Soft delete folders and every live document filed in them.

        Both updates are committed together.

        Returns:
            Number of documents that were deleted along with the folders
        """
        ids = list(folder_ids)
        await self.session.execute(
            update(Folder)
            .where((Folder.tenant_id == tenant_id) & (Folder.id.in_(ids)) & (Folder.deleted_at.is_(None)))
            .values(deleted_at=now, updated_at=now)
        )
        documents = await self.session.execute(
            update(Document)
            .where((Document.tenant_id == tenant_id) & (Document.folder_id.in_(ids)) & (Document.deleted_at.is_(None)))
            .values(deleted_at=now, updated_at=now, status=DocumentStatus.deleted.value)
        )
        await self.session.commit()
        return int(documents.rowcount or 0)

    @staticmethod
    def _children_stmt(stmt, tenant_id: str, parent_id: Optional[str]):
        stmt = stmt.where((Folder.tenant_id == tenant_id) & (Folder.deleted_at.is_(None)))
        if parent_id is None:
            return stmt.where(Folder.parent_id.is_(None))
        return stmt.where(Folder.parent_id == parent_id)

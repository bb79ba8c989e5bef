"""
Document repository.

Listing and search share one filter builder. Tag filtering happens in Python
after the SQL filters, because JSON array containment is not portable between
SQLite and Postgres.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from docuvault.core.models.domain.enums import DocumentStatus

from ..entities.documents import Document
from .base import QueryBuilder, SqlModelRepository

# Sentinel for "any folder"; ``None`` means the tenant root
ANY_FOLDER = "*"


@dataclass
class DocumentQuery:
    """Filters accepted by :meth:`DocumentRepository.search`."""

    tenant_id: str
    folder_id: Optional[str] = ANY_FOLDER
    status: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    text: Optional[str] = None


class DocumentRepository(SqlModelRepository[Document]):
    """Repository for document data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, Document)

    async def get_in_tenant(
        self, document_id: str, tenant_id: str, include_deleted: bool = False
    ) -> Optional[Document]:
        """Get a document only if it belongs to the tenant.

        Args:
            document_id: Document id
            tenant_id: Tenant the caller is scoped to
            include_deleted: Also return soft-deleted documents (for restore)
        """
        stmt = select(Document).where((Document.id == document_id) & (Document.tenant_id == tenant_id))
        if not include_deleted:
            stmt = stmt.where(Document.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def search(
        self, query: DocumentQuery, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Tuple[List[Document], int]:
        """Filter documents, newest first.

        Returns:
            The requested page and the total number of matches
        """
        stmt = self._apply_query(select(Document), query).order_by(Document.created_at.desc(), Document.id)

        if not query.tags:
            total_stmt = self._apply_query(select(func.count()).select_from(Document), query)
            total = int((await self.session.execute(total_stmt)).scalar_one())
            stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
            result = await self.session.execute(stmt)
            return list(result.scalars().all()), total

        wanted = {tag.lower() for tag in query.tags}
        result = await self.session.execute(stmt)
        matches = [doc for doc in result.scalars().all() if wanted <= {tag.lower() for tag in doc.tags or []}]
        start = offset or 0
        end = start + limit if limit is not None else None
        return matches[start:end], len(matches)

    @staticmethod
    def _apply_query(stmt, query: DocumentQuery):
        stmt = stmt.where(Document.tenant_id == query.tenant_id)

        if query.status:
            stmt = stmt.where(Document.status == query.status)
        if query.status != DocumentStatus.deleted.value:
            stmt = stmt.where(Document.deleted_at.is_(None))

        if query.folder_id is None:
            stmt = stmt.where(Document.folder_id.is_(None))
        elif query.folder_id != ANY_FOLDER:
            stmt = stmt.where(Document.folder_id == query.folder_id)

        if query.text:
            # literal substring match: % and _ in the search text are escaped
            needle = query.text.strip().lower()
            stmt = stmt.where(
                or_(
                    func.lower(Document.name).contains(needle, autoescape=True),
                    func.lower(Document.original_name).contains(needle, autoescape=True),
                )
            )
        return stmt

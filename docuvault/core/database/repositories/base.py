"""
Repository contract and the SQLModel implementation every DocuVault table uses.

Repositories commit their own writes. Tenant scoping is not applied here;
the tenant-aware repositories add a ``tenant_id`` clause to their queries.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

from ..base import utc_now

EntityType = TypeVar("EntityType", bound=SQLModel)


class AsyncBaseRepository(ABC, Generic[EntityType]):
    """CRUD operations over one entity class, keyed by its string ``id``."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        self.session = session
        self.model = model

    @abstractmethod
    async def create(self, entity: EntityType) -> EntityType:
        """Insert ``entity`` and return it with defaults loaded."""

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> Optional[EntityType]:
        """Return the live row with this id, or None."""

    @abstractmethod
    async def update(self, entity: EntityType) -> EntityType:
        """Persist changes already applied to ``entity``."""

    @abstractmethod
    async def delete(self, entity_id: str) -> bool:
        """Remove the row; False when there was nothing to remove."""

    @abstractmethod
    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        """Rows matching the equality ``filters``, newest first where rows carry ``created_at``."""


class SqlModelRepository(AsyncBaseRepository[EntityType]):
    """Default implementations of the CRUD contract for single-table entities.

    Entities carrying ``updated_at`` get it refreshed on update; entities
    carrying ``deleted_at`` are soft deleted and hidden from ``get_by_id``,
    ``list`` and ``count``.
    """

    async def create(self, entity: EntityType) -> EntityType:
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def get_by_id(self, entity_id: str) -> Optional[EntityType]:
        stmt = select(self.model).where(self.model.id == entity_id)
        if self._soft_deletes:
            stmt = stmt.where(self.model.deleted_at.is_(None))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, entity: EntityType) -> EntityType:
        if hasattr(entity, "updated_at"):
            entity.updated_at = utc_now()
        self.session.add(entity)
        await self.session.commit()
        await self.session.refresh(entity)
        return entity

    async def delete(self, entity_id: str) -> bool:
        entity = await self.get_by_id(entity_id)
        if entity is None:
            return False
        if self._soft_deletes:
            entity.deleted_at = utc_now()
            self.session.add(entity)
        else:
            await self.session.delete(entity)
        await self.session.commit()
        return True

    async def list(
        self, limit: Optional[int] = None, offset: Optional[int] = None, filters: Optional[Dict[str, Any]] = None
    ) -> List[EntityType]:
        stmt = self._filtered(select(self.model), filters or {})
        stmt = stmt.order_by(*self._default_order())
        stmt = QueryBuilder.apply_pagination(stmt, limit, offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        """Count the rows ``list`` would return without pagination."""
        stmt = self._filtered(select(func.count()).select_from(self.model), filters or {})
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    @property
    def _soft_deletes(self) -> bool:
        return hasattr(self.model, "deleted_at")

    def _filtered(self, stmt, filters: Dict[str, Any]):
        if self._soft_deletes:
            stmt = stmt.where(self.model.deleted_at.is_(None))
        return QueryBuilder.apply_filters(stmt, self.model, filters)

    def _default_order(self):
        return [self.model.created_at.desc()] if hasattr(self.model, "created_at") else []


class QueryBuilder:
    """Statement helpers shared by the generic and the hand-written queries."""

    @staticmethod
    def apply_filters(stmt, model: Type[EntityType], filters: Dict[str, Any]):
        """AND one ``column == value`` clause per filter.

        Keys the model does not have and ``None`` values are ignored, so
        optional query parameters can be passed straight through.
        """
        for key, value in filters.items():
            if value is not None and hasattr(model, key):
                stmt = stmt.where(getattr(model, key) == value)
        return stmt

    @staticmethod
    def apply_pagination(stmt, limit: Optional[int], offset: Optional[int]):
        if limit is not None:
            stmt = stmt.limit(limit)
        if offset is not None:
            stmt = stmt.offset(offset)
        return stmt

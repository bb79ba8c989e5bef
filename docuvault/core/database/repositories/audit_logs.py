"""Audit log repository."""

from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..entities.audit_logs import AuditLog
from .base import SqlModelRepository


class AuditLogRepository(SqlModelRepository[AuditLog]):
    """Repository for the append-only audit trail."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AuditLog)

    async def list_for_resource(self, resource: str, resource_id: str) -> List[AuditLog]:
        stmt = (
            select(AuditLog)
            .where((AuditLog.resource == resource) & (AuditLog.resource_id == resource_id))
            .order_by(AuditLog.created_at.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

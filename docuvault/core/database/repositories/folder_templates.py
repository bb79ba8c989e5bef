"""
Folder template repository.

Templates and their nodes are always written together so a template is
never visible with a partial node list.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from sqlalchemy import delete as sa_delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..base import utc_now
from ..entities.folder_templates import FolderTemplate, FolderTemplateNode
from .base import SqlModelRepository


class FolderTemplateRepository(SqlModelRepository[FolderTemplate]):
    """Repository for folder templates and their nodes."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, FolderTemplate)

    async def create_with_nodes(
        self, template: FolderTemplate, nodes: Sequence[FolderTemplateNode]
    ) -> FolderTemplate:
        self.session.add(template)
        await self.session.flush()
        for node in nodes:
            node.template_id = template.id
            self.session.add(node)
        await self.session.commit()
        await self.session.refresh(template)
        return template

    async def replace_nodes(self, template: FolderTemplate, nodes: Sequence[FolderTemplateNode]) -> FolderTemplate:
        """Save template changes and swap its node list in one transaction."""
        template.updated_at = utc_now()
        self.session.add(template)
        await self.session.execute(sa_delete(FolderTemplateNode).where(FolderTemplateNode.template_id == template.id))
        for node in nodes:
            node.template_id = template.id
            self.session.add(node)
        await self.session.commit()
        await self.session.refresh(template)
        return template

    async def get_nodes(self, template_id: str) -> List[FolderTemplateNode]:
        stmt = (
            select(FolderTemplateNode)
            .where(FolderTemplateNode.template_id == template_id)
            .order_by(FolderTemplateNode.position)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_templates(self, industry: Optional[str] = None) -> List[FolderTemplate]:
        stmt = select(FolderTemplate).order_by(FolderTemplate.is_system.desc(), FolderTemplate.name)
        if industry:
            stmt = stmt.where(FolderTemplate.industry == industry)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def delete(self, entity_id: str) -> bool:
        template = await self.get_by_id(entity_id)
        if template is None:
            return False
        await self.session.execute(sa_delete(FolderTemplateNode).where(FolderTemplateNode.template_id == entity_id))
        await self.session.delete(template)
        await self.session.commit()
        return True

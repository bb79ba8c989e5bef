"""
Folder Template Service.

Reusable folder structures (per industry or system-wide) and applying them
to a tenant's folder tree.
"""

from __future__ import annotations

import re
from typing import Dict, List, Optional, Sequence

from docuvault.core.database.entities.folder_templates import FolderTemplate, FolderTemplateNode
from docuvault.core.database.entities.folders import Folder
from docuvault.core.database.entities.users import User
from docuvault.core.database.repositories import SqlRepoBundle
from docuvault.core.errors import BadRequestError, NotFoundError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.io.folder_templates import (
    FolderTemplateCreate,
    FolderTemplateRead,
    FolderTemplateUpdate,
    TemplateApply,
    TemplateApplyResult,
    TemplateNodeIn,
    TemplateNodeRead,
)
from docuvault.core.models.io.folders import FolderRead

logger = get_logger(__name__)

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


def fill_placeholders(name: str, values: Dict[str, str]) -> str:
    """Substitute ``{Key}`` tokens; unknown keys are left untouched."""
    return _PLACEHOLDER.sub(lambda match: values.get(match.group(1).strip(), match.group(0)), name)


def check_levels(nodes: Sequence[FolderTemplateNode]) -> None:
    """Each node may go at most one level deeper than the node before it."""
    depth = 0
    for node in nodes:
        if node.level > depth:
            raise BadRequestError(
                f'Template node "{node.name}" at level {node.level} has no parent at level {node.level - 1}',
                code="INVALID_TEMPLATE",
            )
        depth = node.level + 1


def _to_nodes(nodes: List[TemplateNodeIn]) -> List[FolderTemplateNode]:
    built = [
        FolderTemplateNode(
            name=node.name.strip(),
            level=node.level,
            position=node.position if node.position is not None else index,
            is_placeholder=node.is_placeholder or bool(_PLACEHOLDER.search(node.name)),
            meta=dict(node.metadata),
        )
        for index, node in enumerate(nodes)
    ]
    check_levels(sorted(built, key=lambda node: node.position))
    return built


class FolderTemplateService:
    def __init__(self, repos: SqlRepoBundle) -> None:
        self.repos = repos

    async def list_templates(self, industry: Optional[str] = None) -> List[FolderTemplateRead]:
        return [await self._read(template) for template in await self.repos.folder_templates.list_templates(industry)]

    async def get_template(self, template_id: str) -> FolderTemplateRead:
        return await self._read(await self._get(template_id))

    async def create_template(self, data: FolderTemplateCreate, actor: User) -> FolderTemplateRead:
        template = await self.repos.folder_templates.create_with_nodes(
            FolderTemplate(
                name=data.name.strip(),
                industry=data.industry,
                description=data.description,
                is_system=data.is_system,
                created_by=actor.id,
            ),
            _to_nodes(data.nodes),
        )
        logger.info(f"Folder template created: {template.id} ({template.name})")
        return await self._read(template)

    async def update_template(self, template_id: str, data: FolderTemplateUpdate) -> FolderTemplateRead:
        template = await self._get(template_id)
        changes = data.model_dump(exclude_unset=True, exclude={"nodes"})
        for key, value in changes.items():
            if key == "name" and not value:
                continue
            setattr(template, key, value)
        if data.nodes is not None:
            template = await self.repos.folder_templates.replace_nodes(template, _to_nodes(data.nodes))
        else:
            template = await self.repos.folder_templates.update(template)
        return await self._read(template)

    async def delete_template(self, template_id: str) -> None:
        template = await self._get(template_id)
        await self.repos.folder_templates.delete(template.id)
        logger.info(f"Folder template deleted: {template.id}")

    async def apply_template(
        self, template_id: str, tenant_id: str, owner: User, request: TemplateApply
    ) -> TemplateApplyResult:
        """
        Materialize a template inside the tenant's folder tree.

        Nodes are walked in position order; a node at level L goes under the
        nearest preceding node at level L-1, level 0 under ``parent_id``
        (the root when None). A folder that already exists at the target
        place with the same name is reused, so applying a template twice
        creates nothing new.

        Raises:
            NotFoundError: The template or the parent folder does not exist
            BadRequestError: The node levels do not form a tree
        """
        template = await self._get(template_id)
        nodes = await self.repos.folder_templates.get_nodes(template.id)
        check_levels(nodes)
        if request.parent_id and await self.repos.folders.get_in_tenant(request.parent_id, tenant_id) is None:
            raise NotFoundError("Folder not found")

        created = reused = 0
        chain: List[str] = []
        roots: List[Folder] = []
        for node in nodes:
            chain = chain[: node.level]
            parent_id = chain[-1] if chain else request.parent_id
            name = fill_placeholders(node.name, request.placeholder_values)

            folder = await self.repos.folders.find_sibling_by_name(tenant_id, parent_id, name)
            if folder is None:
                folder = Folder(tenant_id=tenant_id, parent_id=parent_id, owner_id=owner.id, name=name)
                self.repos.session.add(folder)
                await self.repos.session.flush()
                created += 1
            else:
                reused += 1
            chain.append(folder.id)
            if node.level == 0:
                roots.append(folder)

        await self.repos.session.commit()
        logger.info(
            f"Template {template.id} applied to tenant {tenant_id}: {created} created, {reused} reused",
            extra={"tenant_id": tenant_id, "template_id": template.id},
        )
        return TemplateApplyResult(
            template_id=template.id,
            created_count=created,
            reused_count=reused,
            root_folders=[FolderRead.model_validate(folder) for folder in roots],
        )

    async def _get(self, template_id: str) -> FolderTemplate:
        template = await self.repos.folder_templates.get_by_id(template_id)
        if template is None:
            raise NotFoundError("Folder template not found")
        return template

    async def _read(self, template: FolderTemplate) -> FolderTemplateRead:
        nodes = await self.repos.folder_templates.get_nodes(template.id)
        return FolderTemplateRead.model_validate(template).model_copy(
            update={"nodes": [TemplateNodeRead.model_validate(node) for node in nodes]}
        )

"""
Folder Service.

Tenant-scoped folder hierarchy: creation, breadcrumbs, listing, renaming,
moving with cycle protection, cascading soft deletion and the full tree.
Folders of another tenant are reported as missing.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Set

from docuvault.core.database.base import utc_now
from docuvault.core.database.entities.folders import Folder
from docuvault.core.database.entities.users import User
from docuvault.core.database.repositories import SqlRepoBundle
from docuvault.core.errors import BadRequestError, ConflictError, NotFoundError
from docuvault.core.logging_config import get_logger
from docuvault.core.models.io.common import PaginationMeta
from docuvault.core.models.io.folders import (
    FolderCreate,
    FolderDeleteResult,
    FolderDetail,
    FolderList,
    FolderPathItem,
    FolderRead,
    FolderTreeNode,
    FolderUpdate,
)
from docuvault.server.core import constant

from .dispatcher import NotificationDispatcher

logger = get_logger(__name__)


def collect_descendants(folder_id: str, folders: List[Folder]) -> Set[str]:
    """Ids of every folder below ``folder_id`` (the folder itself excluded)."""
    children: Dict[Optional[str], List[str]] = defaultdict(list)
    for folder in folders:
        children[folder.parent_id].append(folder.id)
    found: Set[str] = set()
    stack = list(children.get(folder_id, []))
    while stack:
        current = stack.pop()
        if current in found:
            continue
        found.add(current)
        stack.extend(children.get(current, []))
    return found


def build_tree(folders: List[Folder], document_counts: Dict[Optional[str], int]) -> List[FolderTreeNode]:
    """Nest a flat folder list; folders whose parent is gone become roots."""
    nodes = {
        folder.id: FolderTreeNode(
            id=folder.id,
            name=folder.name,
            parent_id=folder.parent_id,
            color=folder.color,
            document_count=document_counts.get(folder.id, 0),
        )
        for folder in folders
    }
    roots: List[FolderTreeNode] = []
    for folder in folders:
        node = nodes[folder.id]
        parent = nodes.get(folder.parent_id) if folder.parent_id else None
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
    return roots


class FolderService:
    """Folder operations for one tenant, bound to one database session."""

    def __init__(self, repos: SqlRepoBundle, dispatcher: NotificationDispatcher) -> None:
        self.repos = repos
        self.dispatcher = dispatcher

    async def create_folder(self, tenant_id: str, owner: User, data: FolderCreate) -> FolderRead:
        """
        Create a folder under ``data.parent_id`` (the root when omitted).

        Raises:
            NotFoundError: The parent does not exist in the tenant
            ConflictError: A sibling already uses the name
        """
        parent = await self._get(data.parent_id, tenant_id) if data.parent_id else None
        name = data.name.strip()
        await self._ensure_name_free(tenant_id, data.parent_id, name)

        folder = await self.repos.folders.create(
            Folder(
                tenant_id=tenant_id,
                parent_id=data.parent_id,
                owner_id=owner.id,
                name=name,
                description=data.description,
                color=data.color,
            )
        )
        logger.info(f"Folder created: {folder.id} in tenant {tenant_id}", extra={"folder_id": folder.id})
        await self.dispatcher.folder_created(owner, folder, parent.name if parent else constant.ROOT_FOLDER_LABEL)
        return FolderRead.model_validate(folder)

    async def get_folder(self, folder_id: str, tenant_id: str) -> FolderDetail:
        """Folder with its breadcrumb path and direct contents counts."""
        folder = await self._get(folder_id, tenant_id)
        by_id = {item.id: item for item in await self.repos.folders.list_all(tenant_id)}

        path: List[FolderPathItem] = []
        current: Optional[Folder] = folder
        seen: Set[str] = set()
        while current is not None and current.id not in seen:
            seen.add(current.id)
            path.append(FolderPathItem(id=current.id, name=current.name))
            current = by_id.get(current.parent_id) if current.parent_id else None
        path.reverse()

        document_counts = await self.repos.folders.document_counts(tenant_id)
        return FolderDetail(
            **FolderRead.model_validate(folder).model_dump(),
            path=path,
            child_count=await self.repos.folders.count_children(tenant_id, folder.id),
            document_count=document_counts.get(folder.id, 0),
        )

    async def list_folders(
        self, tenant_id: str, parent_id: Optional[str] = None, page: int = 1, limit: int = 50
    ) -> FolderList:
        if parent_id:
            await self._get(parent_id, tenant_id)
        folders = await self.repos.folders.list_children(tenant_id, parent_id, limit=limit, offset=(page - 1) * limit)
        total = await self.repos.folders.count_children(tenant_id, parent_id)
        return FolderList(
            folders=[FolderRead.model_validate(folder) for folder in folders],
            pagination=PaginationMeta.build(total, page, limit),
        )

    async def update_folder(self, folder_id: str, tenant_id: str, data: FolderUpdate) -> FolderRead:
        folder = await self._get(folder_id, tenant_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("name"):
            changes["name"] = changes["name"].strip()
            await self._ensure_name_free(tenant_id, folder.parent_id, changes["name"], exclude_id=folder.id)
        for key, value in changes.items():
            if key == "name" and not value:
                continue
            setattr(folder, key, value)
        folder = await self.repos.folders.update(folder)
        return FolderRead.model_validate(folder)

    async def rename_folder(self, folder_id: str, tenant_id: str, name: str, actor: User) -> FolderRead:
        folder = await self._get(folder_id, tenant_id)
        name = name.strip()
        old_name = folder.name
        if name == old_name:
            return FolderRead.model_validate(folder)
        await self._ensure_name_free(tenant_id, folder.parent_id, name, exclude_id=folder.id)
        folder.name = name
        folder = await self.repos.folders.update(folder)
        logger.info(f"Folder renamed: {folder.id} '{old_name}' -> '{name}'")
        await self.dispatcher.folder_renamed(actor, folder, old_name)
        return FolderRead.model_validate(folder)

    async def move_folder(
        self, folder_id: str, tenant_id: str, target_parent_id: Optional[str], actor: User
    ) -> FolderRead:
        """
        Re-parent a folder.

        Raises:
            NotFoundError: The folder or the target does not exist in the tenant
            BadRequestError: The target is the folder itself or one of its descendants
            ConflictError: The target already holds a folder with the same name
        """
        folder = await self._get(folder_id, tenant_id)
        target = await self._get(target_parent_id, tenant_id) if target_parent_id else None
        if target_parent_id == folder.id:
            raise BadRequestError("A folder cannot be moved into itself")
        if target_parent_id and target_parent_id in collect_descendants(
            folder.id, await self.repos.folders.list_all(tenant_id)
        ):
            raise BadRequestError("A folder cannot be moved into one of its subfolders")
        if target_parent_id == folder.parent_id:
            return FolderRead.model_validate(folder)
        await self._ensure_name_free(tenant_id, target_parent_id, folder.name, exclude_id=folder.id)

        old_parent = await self.repos.folders.get_in_tenant(folder.parent_id, tenant_id) if folder.parent_id else None
        folder.parent_id = target_parent_id
        folder = await self.repos.folders.update(folder)
        logger.info(f"Folder moved: {folder.id} -> {target_parent_id or 'root'}")
        await self.dispatcher.folder_moved(
            actor,
            folder,
            old_parent.name if old_parent else constant.ROOT_FOLDER_LABEL,
            target.name if target else constant.ROOT_FOLDER_LABEL,
        )
        return FolderRead.model_validate(folder)

    async def delete_folder(self, folder_id: str, tenant_id: str, actor: User) -> FolderDeleteResult:
        """Soft delete a folder, its subfolders and every document in them."""
        folder = await self._get(folder_id, tenant_id)
        ids = {folder.id} | collect_descendants(folder.id, await self.repos.folders.list_all(tenant_id))
        deleted_documents = await self.repos.folders.soft_delete_many(tenant_id, ids, utc_now())
        logger.info(
            f"Folder deleted: {folder.id} ({len(ids)} folders, {deleted_documents} documents)",
            extra={"folder_id": folder.id, "tenant_id": tenant_id},
        )
        await self.dispatcher.folder_deleted(actor, folder, len(ids), deleted_documents)
        return FolderDeleteResult(id=folder.id, deleted_folders=len(ids), deleted_documents=deleted_documents)

    async def get_folder_tree(self, tenant_id: str) -> List[FolderTreeNode]:
        folders = await self.repos.folders.list_all(tenant_id)
        return build_tree(folders, await self.repos.folders.document_counts(tenant_id))

    async def _get(self, folder_id: str, tenant_id: str) -> Folder:
        folder = await self.repos.folders.get_in_tenant(folder_id, tenant_id)
        if folder is None:
            raise NotFoundError("Folder not found")
        return folder

    async def _ensure_name_free(
        self, tenant_id: str, parent_id: Optional[str], name: str, exclude_id: Optional[str] = None
    ) -> None:
        if await self.repos.folders.find_sibling_by_name(tenant_id, parent_id, name, exclude_id) is not None:
            raise ConflictError(f'A folder named "{name}" already exists here', code="FOLDER_EXISTS")

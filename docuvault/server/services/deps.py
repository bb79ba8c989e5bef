"""
Service Dependencies.

FastAPI dependency providers and ``Annotated`` aliases for the repository
bundle and every application service. Tests replace the leaf providers
(session, session factory, storage, email) through ``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from docuvault.core.database.repositories import SqlRepoBundle, build_sql_repos_from_session
from docuvault.core.database.session import async_session_maker, get_session
from docuvault.server.core.config import settings

from .dispatcher import NotificationDispatcher
from .documents import DocumentService
from .email import EmailService, get_email_service
from .folder_templates import FolderTemplateService
from .folders import FolderService
from .notifications import NotificationService
from .storage import StorageService, get_storage_service
from .tenants import SubscriptionPlanService, TenantService
from .users import UserService


async def get_repos(session: AsyncSession = Depends(get_session)) -> SqlRepoBundle:
    return build_sql_repos_from_session(session=session)


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Factory the dispatcher opens its own sessions from."""
    return async_session_maker


ReposDep = Annotated[SqlRepoBundle, Depends(get_repos)]
EmailDep = Annotated[EmailService, Depends(get_email_service)]
StorageDep = Annotated[StorageService, Depends(get_storage_service)]


def get_dispatcher(
    email: EmailDep,
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> NotificationDispatcher:
    return NotificationDispatcher(session_factory, email, settings.master_admin_email)


DispatcherDep = Annotated[NotificationDispatcher, Depends(get_dispatcher)]


def get_tenant_service(repos: ReposDep, dispatcher: DispatcherDep, email: EmailDep) -> TenantService:
    return TenantService(repos, dispatcher, email)


def get_plan_service(repos: ReposDep) -> SubscriptionPlanService:
    return SubscriptionPlanService(repos)


def get_user_service(repos: ReposDep, email: EmailDep) -> UserService:
    return UserService(repos, email)


def get_folder_service(repos: ReposDep, dispatcher: DispatcherDep) -> FolderService:
    return FolderService(repos, dispatcher)


def get_document_service(repos: ReposDep, storage: StorageDep, dispatcher: DispatcherDep) -> DocumentService:
    return DocumentService(repos, storage, dispatcher, settings.max_upload_size)


def get_notification_service(repos: ReposDep) -> NotificationService:
    return NotificationService(repos)


def get_folder_template_service(repos: ReposDep) -> FolderTemplateService:
    return FolderTemplateService(repos)


TenantServiceDep = Annotated[TenantService, Depends(get_tenant_service)]
PlanServiceDep = Annotated[SubscriptionPlanService, Depends(get_plan_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
FolderServiceDep = Annotated[FolderService, Depends(get_folder_service)]
DocumentServiceDep = Annotated[DocumentService, Depends(get_document_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
FolderTemplateServiceDep = Annotated[FolderTemplateService, Depends(get_folder_template_service)]

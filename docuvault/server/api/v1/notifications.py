"""
Notification Endpoints.

The caller's in-app inbox, the tenant-wide feed for tenant admins and the
system inbox of the master admin.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query

from docuvault.core.database.repositories import NotificationQuery
from docuvault.core.models.domain.enums import NotificationStatus, NotificationType, SortOrder
from docuvault.core.models.io.common import ApiResponse, CountRead, PageParams, ok
from docuvault.core.models.io.notifications import NotificationPage, NotificationRead, UnreadCount, UrgentCount
from docuvault.server.core.security import CurrentUserDep, SuperAdminDep, TenantAdminDep, TenantIdDep, page_params
from docuvault.server.services.deps import NotificationServiceDep

router = APIRouter()

SortField = Literal["created_at", "priority", "status", "type"]


class NotificationFilters:
    """Query parameters shared by every listing endpoint."""

    def __init__(
        self,
        status: Optional[NotificationStatus] = Query(default=None),
        type: Optional[NotificationType] = Query(default=None),
        sort_by: SortField = Query(default="created_at"),
        sort_order: SortOrder = Query(default=SortOrder.desc),
    ) -> None:
        self.status = status
        self.type = type
        self.sort_by = sort_by
        self.sort_order = sort_order

    def query(self, **scope) -> NotificationQuery:
        return NotificationQuery(
            status=self.status.value if self.status else None,
            type=self.type.value if self.type else None,
            sort_by=self.sort_by,
            sort_order=self.sort_order.value,
            **scope,
        )


NotificationPageParams = Depends(page_params(default_limit=10))


@router.get(
    "",
    response_model=ApiResponse[NotificationPage],
    summary="List My Notifications",
    description="Notifications addressed to the caller.",
)
async def list_notifications(
    current: CurrentUserDep,
    service: NotificationServiceDep,
    filters: NotificationFilters = Depends(),
    paging: PageParams = NotificationPageParams,
):
    return ok(await service.list_notifications(filters.query(user_id=current.id), paging.page, paging.limit))


@router.get(
    "/unread-count",
    response_model=ApiResponse[UnreadCount],
    summary="Unread Count",
)
async def unread_count(current: CurrentUserDep, service: NotificationServiceDep):
    return ok(UnreadCount(unread_count=await service.unread_count(current.id)))


@router.get(
    "/urgent-count",
    response_model=ApiResponse[UrgentCount],
    summary="Urgent Count",
    description="Unread notifications flagged urgent.",
)
async def urgent_count(current: CurrentUserDep, service: NotificationServiceDep):
    return ok(UrgentCount(urgent_count=await service.urgent_count(current.id)))


@router.patch(
    "/read-all",
    response_model=ApiResponse[CountRead],
    summary="Mark All Read",
)
async def mark_all_read(current: CurrentUserDep, service: NotificationServiceDep):
    count = await service.mark_all_as_read(current.id)
    return ok(CountRead(count=count), f"{count} notifications marked as read")


@router.get(
    "/tenant",
    response_model=ApiResponse[NotificationPage],
    summary="List Tenant Notifications",
    description="Every notification of the caller's tenant. Requires TENANT_ADMIN.",
)
async def list_tenant_notifications(
    admin: TenantAdminDep,
    tenant_id: TenantIdDep,
    service: NotificationServiceDep,
    filters: NotificationFilters = Depends(),
    paging: PageParams = NotificationPageParams,
):
    return ok(await service.list_notifications(filters.query(tenant_id=tenant_id), paging.page, paging.limit))


@router.get(
    "/system",
    response_model=ApiResponse[NotificationPage],
    summary="List System Notifications",
    description=(
        "Every notification across all tenants, or only those without a recipient user "
        "when `system_only=true`. Requires SUPER_ADMIN."
    ),
)
async def list_system_notifications(
    admin: SuperAdminDep,
    service: NotificationServiceDep,
    filters: NotificationFilters = Depends(),
    paging: PageParams = NotificationPageParams,
    system_only: bool = Query(default=False),
):
    return ok(await service.list_notifications(filters.query(system=system_only), paging.page, paging.limit))


@router.get(
    "/system/unread-count",
    response_model=ApiResponse[UnreadCount],
    summary="System Unread Count",
    description="Unread notifications across all tenants. Requires SUPER_ADMIN.",
)
async def system_unread_count(admin: SuperAdminDep, service: NotificationServiceDep):
    return ok(UnreadCount(unread_count=await service.system_unread_count()))


@router.patch(
    "/{notification_id}/read",
    response_model=ApiResponse[NotificationRead],
    summary="Mark Read",
    responses={404: {"description": "Notification not found"}},
)
async def mark_read(notification_id: str, current: CurrentUserDep, service: NotificationServiceDep):
    notification = await service.mark_as_read(notification_id, current.id)
    return ok(NotificationRead.model_validate(notification))


@router.patch(
    "/{notification_id}/archive",
    response_model=ApiResponse[NotificationRead],
    summary="Archive",
    responses={404: {"description": "Notification not found"}},
)
async def archive(notification_id: str, current: CurrentUserDep, service: NotificationServiceDep):
    notification = await service.archive(notification_id, current.id)
    return ok(NotificationRead.model_validate(notification))


@router.delete(
    "/{notification_id}",
    response_model=ApiResponse[None],
    summary="Delete Notification",
    responses={404: {"description": "Notification not found"}},
)
async def delete_notification(notification_id: str, current: CurrentUserDep, service: NotificationServiceDep):
    await service.delete(notification_id, current.id)
    return ok(message="Notification deleted")

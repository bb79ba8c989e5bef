"""Unit tests for the notification dispatcher fan-out."""

from typing import List

import pytest

from docuvault.core.database.entities.documents import Document
from docuvault.core.database.entities.folders import Folder
from docuvault.core.database.entities.notifications import Notification
from docuvault.core.database.repositories import NotificationQuery
from docuvault.core.models.domain.enums import NotificationPriority, NotificationType
from docuvault.server.services.dispatcher import NotificationDispatcher


async def _all_notifications(repos) -> List[Notification]:
    items, _ = await repos.notifications.search(NotificationQuery(), limit=100, offset=0)
    return items


@pytest.fixture
async def folder(repos, world) -> Folder:
    return await repos.folders.create(Folder(tenant_id=world.tenant.id, name="Invoices", owner_id=world.staff.id))


class TestTenantLifecycleEvents:
    async def test_registration_goes_to_the_system_inbox_and_master_mailbox(self, dispatcher, email, world, repos):
        notification = await dispatcher.tenant_registered(world.tenant)

        assert notification is not None
        assert notification.user_id is None
        assert notification.tenant_id == world.tenant.id
        assert notification.type == NotificationType.tenant_registration.value
        assert notification.priority == NotificationPriority.high.value
        assert notification.is_urgent is True
        assert notification.data["tenant_name"] == "Acme Corp"
        assert [(sent.to, sent.template_name) for sent in email.sent] == [
            ("master@docuvault.example.com", "tenant_registration")
        ]
        assert [n.id for n in await _all_notifications(repos)] == [notification.id]

    async def test_name_change_mentions_both_names(self, dispatcher, email, world):
        world.tenant.name = "Acme Holdings"

        notification = await dispatcher.tenant_name_changed(world.tenant, "Acme Corp", world.admin)

        assert notification.message == 'Tenant "Acme Corp" has changed their organization name to "Acme Holdings"'
        assert notification.data["changed_by"] == "Ada Admin"
        assert email.sent[0].template_vars == {
            "tenant_id": world.tenant.id,
            "old_name": "Acme Corp",
            "new_name": "Acme Holdings",
        }

    async def test_billing_expired_is_urgent(self, dispatcher, email, world):
        notification = await dispatcher.tenant_billing_expired(world.tenant)

        assert notification.is_urgent is True
        assert email.templates() == ["tenant_billing_expired"]

    async def test_approval_notifies_the_tenant_admin(self, dispatcher, email, world):
        notification = await dispatcher.tenant_approved(world.tenant, world.master)

        assert notification.user_id == world.admin.id
        assert notification.type == NotificationType.tenant_approved.value
        assert notification.data["approved_by"] == "Mia Master"
        assert [(sent.to, sent.template_name) for sent in email.sent] == [
            (world.tenant.admin_email, "tenant_approved")
        ]

    async def test_rejection_carries_the_reason(self, dispatcher, email, world):
        notification = await dispatcher.tenant_rejected(world.tenant, world.master, "Incomplete details")

        assert notification.data["reason"] == "Incomplete details"
        assert email.sent[0].template_vars["reason"] == "Incomplete details"


class TestStaffActivityEvents:
    async def test_folder_created_notifies_admin_in_app_and_by_email(self, dispatcher, email, world, folder):
        notification = await dispatcher.folder_created(world.staff, folder, "Root")

        assert notification.user_id == world.admin.id
        assert notification.tenant_id == world.tenant.id
        assert notification.title == "New Folder Created"
        assert notification.message == 'Staff member Sam Staff created folder "Invoices"'
        assert notification.data["creator_id"] == world.staff.id
        assert email.sent[0].to == world.admin.email
        assert email.sent[0].template_vars["parent_name"] == "Root"

    async def test_rename_and_move_are_in_app_only(self, dispatcher, email, world, folder):
        await dispatcher.folder_renamed(world.staff, folder, "Old invoices")
        await dispatcher.folder_moved(world.staff, folder, "Root", "Finance")

        assert email.sent == []

    async def test_document_events(self, dispatcher, email, world, repos, folder):
        document = await repos.documents.create(
            Document(
                tenant_id=world.tenant.id,
                folder_id=folder.id,
                name="invoice.pdf",
                original_name="invoice.pdf",
                storage_key=f"tenants/{world.tenant.id}/documents/raw/d1/invoice.pdf",
                mime_type="application/pdf",
                size=2048,
                owner_id=world.staff.id,
            )
        )

        uploaded = await dispatcher.document_uploaded(world.staff, document, "Invoices")
        await dispatcher.document_renamed(world.staff, document, "scan.pdf")
        await dispatcher.document_moved(world.staff, document, "Root", "Invoices")
        deleted = await dispatcher.document_deleted(world.staff, document, "Invoices")

        assert uploaded.data["file_size"] == 2048
        assert deleted.priority == NotificationPriority.medium.value
        assert email.templates() == ["document_uploaded", "document_deleted"]
        types = {n.type for n in await _all_notifications(repos)}
        assert types == {
            NotificationType.staff_document_uploaded.value,
            NotificationType.staff_document_renamed.value,
            NotificationType.staff_document_moved.value,
            NotificationType.staff_document_deleted.value,
        }


class TestBestEffortDelivery:
    async def test_tenant_without_admin_is_logged_and_skipped(self, dispatcher, email, make_tenant, make_user, repos):
        tenant = await make_tenant("Lonely Ltd")
        staff = await make_user(tenant)
        folder = await repos.folders.create(Folder(tenant_id=tenant.id, name="Docs", owner_id=staff.id))

        assert await dispatcher.folder_created(staff, folder, "Root") is None
        assert email.sent == []
        assert await _all_notifications(repos) == []

    async def test_email_failure_keeps_the_notification(self, dispatcher, email, world, folder):
        email.fail = True

        notification = await dispatcher.folder_deleted(world.staff, folder, 1, 3)

        assert notification is not None
        assert notification.data["deleted_documents"] == 3

    async def test_system_email_failure_keeps_the_notification(self, dispatcher, email, world):
        email.fail = True

        assert await dispatcher.tenant_registered(world.tenant) is not None

    async def test_database_failure_is_swallowed(self, email, world):
        def broken_factory():
            raise RuntimeError("database is gone")

        dispatcher = NotificationDispatcher(broken_factory, email, "master@docuvault.example.com")

        assert await dispatcher.tenant_registered(world.tenant) is None
        assert email.templates() == ["tenant_registration"]

"""Repository tests against a real SQLite database.

Covers tenant scoping, soft deletion, the document filters (folder, status,
tags, text) and the notification scopes.
"""

from datetime import timedelta

import pytest

from docuvault.core.database.base import utc_now
from docuvault.core.database.entities.documents import Document
from docuvault.core.database.entities.folders import Folder
from docuvault.core.database.entities.notifications import Notification
from docuvault.core.database.entities.tenants import SubscriptionPlan
from docuvault.core.database.repositories import ANY_FOLDER, DocumentQuery, NotificationQuery
from docuvault.core.models.domain.enums import DocumentStatus, NotificationStatus, RoleName, TenantStatus, UserStatus


async def _folder(repos, tenant, name, parent=None):
    return await repos.folders.create(
        Folder(tenant_id=tenant.id, parent_id=parent.id if parent else None, name=name)
    )


async def _document(repos, tenant, name, folder=None, tags=None, **fields):
    return await repos.documents.create(
        Document(
            tenant_id=tenant.id,
            folder_id=folder.id if folder else None,
            name=name,
            original_name=fields.pop("original_name", name),
            tags=tags or [],
            **fields,
        )
    )


class TestSqlModelRepository:
    async def test_soft_deleted_rows_are_hidden(self, repos, make_tenant):
        tenant = await make_tenant()
        folder = await _folder(repos, tenant, "Invoices")

        assert await repos.folders.delete(folder.id) is True

        assert await repos.folders.get_by_id(folder.id) is None
        assert await repos.folders.count({"tenant_id": tenant.id}) == 0
        assert await repos.folders.delete(folder.id) is False

    async def test_update_refreshes_updated_at(self, repos, make_tenant):
        tenant = await make_tenant()
        before = tenant.updated_at
        tenant.name = "Acme Renamed"

        updated = await repos.tenants.update(tenant)

        assert updated.updated_at >= before
        assert (await repos.tenants.get_by_id(tenant.id)).name == "Acme Renamed"

    async def test_list_filters_and_paginates(self, repos, make_tenant):
        for index in range(5):
            await make_tenant(f"Tenant {index}", status=TenantStatus.pending if index % 2 else TenantStatus.active)

        pending = await repos.tenants.list(filters={"status": TenantStatus.pending.value})
        page = await repos.tenants.list(limit=2, offset=0)

        assert len(pending) == 2
        assert len(page) == 2
        assert await repos.tenants.count() == 5


class TestTenantRepository:
    async def test_slug_lookup_includes_deleted_tenants(self, repos, make_tenant):
        tenant = await make_tenant("Acme Corp")
        await repos.tenants.delete(tenant.id)

        assert (await repos.tenants.get_by_slug("acme-corp")).id == tenant.id

    async def test_billing_expired_skips_notified_and_future(self, repos, make_tenant):
        now = utc_now()
        lapsed = await make_tenant("Lapsed", billing_expires_at=now - timedelta(days=1))
        await make_tenant("Flagged", billing_expires_at=now - timedelta(days=2), billing_expired_notified_at=now)
        await make_tenant("Current", billing_expires_at=now + timedelta(days=30))
        await make_tenant("Unbilled")

        expired = await repos.tenants.list_billing_expired(now)

        assert [tenant.id for tenant in expired] == [lapsed.id]

    async def test_count_by_status(self, repos, make_tenant):
        await make_tenant("A")
        await make_tenant("B", status=TenantStatus.pending)
        deleted = await make_tenant("C", status=TenantStatus.pending)
        await repos.tenants.delete(deleted.id)

        assert await repos.tenants.count_by_status() == {"ACTIVE": 1, "PENDING": 1}

    async def test_plan_in_use(self, repos, make_tenant):
        plan = await repos.plans.create(SubscriptionPlan(name="Pro", price=49.0))
        unused = await repos.plans.create(SubscriptionPlan(name="Basic", price=9.0))
        await make_tenant("Acme", subscription_plan_id=plan.id)

        assert await repos.plans.is_in_use(plan.id) is True
        assert await repos.plans.is_in_use(unused.id) is False
        assert [p.name for p in await repos.plans.list_active()] == ["Basic", "Pro"]


class TestUserRepository:
    async def test_email_lookup_is_case_insensitive_and_tenant_scoped(self, repos, make_tenant, make_user):
        tenant = await make_tenant()
        other = await make_tenant("Other")
        user = await make_user(tenant, email="sam@acme.example.com")

        assert (await repos.users.get_by_email("SAM@Acme.example.com", tenant.id)).id == user.id
        assert await repos.users.get_by_email("sam@acme.example.com", other.id) is None
        assert await repos.users.get_by_email("sam@acme.example.com", None) is None

    async def test_replace_roles(self, repos, roles, make_tenant, make_user):
        tenant = await make_tenant()
        user = await make_user(tenant, RoleName.user)

        await repos.users.replace_roles(user.id, [roles["TENANT_ADMIN"].id, roles["USER"].id])

        assert await repos.users.get_role_names(user.id) == ["TENANT_ADMIN", "USER"]
        assert (await repos.users.get_role_names_for([user.id, "missing"])) == {
            user.id: ["TENANT_ADMIN", "USER"],
            "missing": [],
        }

    async def test_find_tenant_admin_ignores_inactive_and_staff(self, repos, make_tenant, make_user):
        tenant = await make_tenant()
        await make_user(tenant, RoleName.user)
        await make_user(tenant, RoleName.tenant_admin, first_name="Old", status=UserStatus.inactive)
        admin = await make_user(tenant, RoleName.tenant_admin, first_name="Ada")

        assert (await repos.users.find_tenant_admin(tenant.id)).id == admin.id

    async def test_find_tenant_admin_none(self, repos, make_tenant, make_user):
        tenant = await make_tenant()
        await make_user(tenant, RoleName.user)

        assert await repos.users.find_tenant_admin(tenant.id) is None


class TestFolderRepository:
    async def test_get_in_tenant_hides_other_tenants(self, repos, make_tenant):
        tenant = await make_tenant()
        other = await make_tenant("Other")
        folder = await _folder(repos, tenant, "Contracts")

        assert (await repos.folders.get_in_tenant(folder.id, tenant.id)).id == folder.id
        assert await repos.folders.get_in_tenant(folder.id, other.id) is None

    async def test_children_and_sibling_lookup(self, repos, make_tenant):
        tenant = await make_tenant()
        parent = await _folder(repos, tenant, "Clients")
        await _folder(repos, tenant, "Beta", parent)
        alpha = await _folder(repos, tenant, "Alpha", parent)
        await _folder(repos, tenant, "Top")

        children = await repos.folders.list_children(tenant.id, parent.id)

        assert [folder.name for folder in children] == ["Alpha", "Beta"]
        assert await repos.folders.count_children(tenant.id, None) == 2
        assert (await repos.folders.find_sibling_by_name(tenant.id, parent.id, " alpha ")).id == alpha.id
        assert await repos.folders.find_sibling_by_name(tenant.id, parent.id, "alpha", exclude_id=alpha.id) is None

    async def test_soft_delete_many_cascades_to_documents(self, repos, make_tenant):
        tenant = await make_tenant()
        parent = await _folder(repos, tenant, "Clients")
        child = await _folder(repos, tenant, "Acme", parent)
        await _document(repos, tenant, "a.pdf", parent)
        await _document(repos, tenant, "b.pdf", child)
        kept = await _document(repos, tenant, "c.pdf")

        deleted = await repos.folders.soft_delete_many(tenant.id, [parent.id, child.id], utc_now())

        assert deleted == 2
        assert await repos.folders.list_all(tenant.id) == []
        remaining, total = await repos.documents.search(DocumentQuery(tenant_id=tenant.id))
        assert total == 1 and remaining[0].id == kept.id

    async def test_document_counts(self, repos, make_tenant):
        tenant = await make_tenant()
        folder = await _folder(repos, tenant, "Clients")
        await _document(repos, tenant, "a.pdf", folder)
        await _document(repos, tenant, "b.pdf", folder)
        await _document(repos, tenant, "c.pdf")
        await _document(repos, tenant, "gone.pdf", folder, status=DocumentStatus.deleted.value, deleted_at=utc_now())

        assert await repos.folders.document_counts(tenant.id) == {folder.id: 2, None: 1}


@pytest.fixture
async def library(repos, make_tenant):
    tenant = await make_tenant()
    folder = await _folder(repos, tenant, "Finance")
    docs = {
        "invoice": await _document(repos, tenant, "Invoice March.pdf", folder, tags=["Finance", "2024"]),
        "report": await _document(repos, tenant, "Annual report.docx", folder, tags=["finance"]),
        "photo": await _document(repos, tenant, "team.png", tags=["people"]),
        "archived": await _document(
            repos, tenant, "old invoice.pdf", status=DocumentStatus.archived.value, tags=["2024"]
        ),
        "deleted": await _document(
            repos, tenant, "deleted invoice.pdf", folder, status=DocumentStatus.deleted.value, deleted_at=utc_now()
        ),
    }
    return tenant, folder, docs


class TestDocumentRepository:
    async def test_folder_scopes(self, repos, library):
        tenant, folder, docs = library

        _, everywhere = await repos.documents.search(DocumentQuery(tenant_id=tenant.id, folder_id=ANY_FOLDER))
        in_folder, _ = await repos.documents.search(DocumentQuery(tenant_id=tenant.id, folder_id=folder.id))
        at_root, _ = await repos.documents.search(DocumentQuery(tenant_id=tenant.id, folder_id=None))

        assert everywhere == 4
        assert {doc.id for doc in in_folder} == {docs["invoice"].id, docs["report"].id}
        assert {doc.id for doc in at_root} == {docs["photo"].id, docs["archived"].id}

    async def test_deleted_only_with_deleted_status(self, repos, library):
        tenant, _, docs = library

        deleted, total = await repos.documents.search(
            DocumentQuery(tenant_id=tenant.id, status=DocumentStatus.deleted.value)
        )

        assert total == 1 and deleted[0].id == docs["deleted"].id

    async def test_tags_match_all_case_insensitively(self, repos, library):
        tenant, _, docs = library

        finance, total = await repos.documents.search(DocumentQuery(tenant_id=tenant.id, tags=["FINANCE"]))
        both, _ = await repos.documents.search(DocumentQuery(tenant_id=tenant.id, tags=["finance", "2024"]))

        assert total == 2
        assert {doc.id for doc in finance} == {docs["invoice"].id, docs["report"].id}
        assert [doc.id for doc in both] == [docs["invoice"].id]

    async def test_tag_filter_paginates_after_filtering(self, repos, library):
        tenant, _, _ = library

        page, total = await repos.documents.search(
            DocumentQuery(tenant_id=tenant.id, tags=["finance"]), limit=1, offset=1
        )

        assert total == 2
        assert len(page) == 1

    async def test_text_search(self, repos, library):
        tenant, _, docs = library

        found, _ = await repos.documents.search(DocumentQuery(tenant_id=tenant.id, text="INVOICE"))

        assert {doc.id for doc in found} == {docs["invoice"].id, docs["archived"].id}

    async def test_get_in_tenant_include_deleted(self, repos, library):
        tenant, _, docs = library

        assert await repos.documents.get_in_tenant(docs["deleted"].id, tenant.id) is None
        assert (await repos.documents.get_in_tenant(docs["deleted"].id, tenant.id, include_deleted=True)) is not None


@pytest.fixture
async def inbox(repos, make_tenant, make_user):
    tenant = await make_tenant()
    admin = await make_user(tenant, RoleName.tenant_admin)
    other = await make_user(tenant, RoleName.user)

    async def add(user, **fields):
        return await repos.notifications.create(
            Notification(
                user_id=user.id if user else None,
                tenant_id=tenant.id,
                type=fields.pop("type", "STAFF_FOLDER_CREATED"),
                title="t",
                message="m",
                **fields,
            )
        )

    await add(admin, priority="LOW")
    await add(admin, priority="HIGH", is_urgent=True)
    await add(admin, status=NotificationStatus.read.value, type="STAFF_DOCUMENT_DELETED")
    await add(other)
    await add(None, type="TENANT_REGISTRATION")
    return tenant, admin, other


class TestNotificationRepository:
    async def test_scopes(self, repos, inbox):
        tenant, admin, _ = inbox

        _, mine = await repos.notifications.search(NotificationQuery(user_id=admin.id))
        _, tenant_wide = await repos.notifications.search(NotificationQuery(tenant_id=tenant.id))
        system, system_total = await repos.notifications.search(NotificationQuery(system=True))

        assert mine == 3
        assert tenant_wide == 5
        assert system_total == 1 and system[0].user_id is None

    async def test_filters_and_sorting(self, repos, inbox):
        _, admin, _ = inbox

        unread, _ = await repos.notifications.search(
            NotificationQuery(user_id=admin.id, status="UNREAD", sort_by="priority", sort_order="asc")
        )
        urgent = await repos.notifications.count_matching(NotificationQuery(user_id=admin.id, is_urgent=True))
        by_type = await repos.notifications.count_matching(
            NotificationQuery(user_id=admin.id, type="STAFF_DOCUMENT_DELETED")
        )

        assert [item.priority for item in unread] == ["HIGH", "LOW"]
        assert urgent == 1
        assert by_type == 1

    async def test_unknown_sort_field_falls_back_to_created_at(self, repos, inbox):
        _, admin, _ = inbox

        items, total = await repos.notifications.search(NotificationQuery(user_id=admin.id, sort_by="title; drop"))

        assert total == 3 and len(items) == 3

    async def test_mark_all_read_only_touches_own_unread(self, repos, inbox):
        _, admin, other = inbox

        assert await repos.notifications.mark_all_read(admin.id) == 2
        assert await repos.notifications.count_matching(NotificationQuery(user_id=other.id, status="UNREAD")) == 1
        assert await repos.notifications.get_for_user((await repos.notifications.list())[0].id, "nobody") is None

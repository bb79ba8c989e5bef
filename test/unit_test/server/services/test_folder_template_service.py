"""Unit tests for folder templates and applying them to a tenant."""

import pytest

from docuvault.core.database.entities.folder_templates import FolderTemplateNode
from docuvault.core.database.entities.folders import Folder
from docuvault.core.errors import BadRequestError, NotFoundError
from docuvault.core.models.io.folder_templates import (
    FolderTemplateCreate,
    FolderTemplateUpdate,
    TemplateApply,
    TemplateNodeIn,
)
from docuvault.server.services.folder_templates import FolderTemplateService, check_levels, fill_placeholders


@pytest.mark.parametrize(
    "name,values,expected",
    [
        ("{Year} Taxes", {"Year": "2026"}, "2026 Taxes"),
        ("{ Client } - {Year}", {"Client": "Acme", "Year": "2026"}, "Acme - 2026"),
        ("{Unknown} stays", {}, "{Unknown} stays"),
        ("Plain", {"Year": "2026"}, "Plain"),
    ],
)
def test_fill_placeholders(name, values, expected):
    assert fill_placeholders(name, values) == expected


def _levels(*levels):
    return [FolderTemplateNode(name=f"n{index}", level=level, position=index) for index, level in enumerate(levels)]


def test_check_levels_accepts_trees():
    check_levels(_levels(0, 1, 2, 1, 0, 1))


@pytest.mark.parametrize("levels", [(1,), (0, 2), (0, 1, 3)])
def test_check_levels_rejects_skipped_levels(levels):
    with pytest.raises(BadRequestError) as exc_info:
        check_levels(_levels(*levels))

    assert exc_info.value.code == "INVALID_TEMPLATE"


@pytest.fixture
def service(repos) -> FolderTemplateService:
    return FolderTemplateService(repos)


@pytest.fixture
async def accounting(service, world):
    return await service.create_template(
        FolderTemplateCreate(
            name="Accounting Firm",
            industry="accounting",
            nodes=[
                TemplateNodeIn(name="Clients"),
                TemplateNodeIn(name="{Client}", level=1),
                TemplateNodeIn(name="{Year} Returns", level=2),
                TemplateNodeIn(name="Correspondence", level=2),
                TemplateNodeIn(name="Internal"),
            ],
        ),
        world.master,
    )


class TestTemplateCrud:
    async def test_create_keeps_node_order_and_flags_placeholders(self, accounting, world):
        assert accounting.created_by == world.master.id
        assert [(node.name, node.level, node.position) for node in accounting.nodes] == [
            ("Clients", 0, 0),
            ("{Client}", 1, 1),
            ("{Year} Returns", 2, 2),
            ("Correspondence", 2, 3),
            ("Internal", 0, 4),
        ]
        assert [node.is_placeholder for node in accounting.nodes] == [False, True, True, False, False]

    async def test_invalid_levels_are_rejected(self, service, world):
        with pytest.raises(BadRequestError):
            await service.create_template(
                FolderTemplateCreate(name="Broken", nodes=[TemplateNodeIn(name="Deep", level=1)]), world.master
            )

    async def test_list_puts_system_templates_first(self, service, world, accounting):
        await service.create_template(FolderTemplateCreate(name="Basics", is_system=True), world.master)
        await service.create_template(FolderTemplateCreate(name="Agency", industry="marketing"), world.master)

        assert [template.name for template in await service.list_templates()] == [
            "Basics",
            "Accounting Firm",
            "Agency",
        ]
        assert [template.name for template in await service.list_templates("accounting")] == ["Accounting Firm"]

    async def test_update_replaces_nodes(self, service, accounting):
        updated = await service.update_template(
            accounting.id,
            FolderTemplateUpdate(description="Small firms", nodes=[TemplateNodeIn(name="Inbox")]),
        )

        assert updated.name == "Accounting Firm"
        assert updated.description == "Small firms"
        assert [node.name for node in updated.nodes] == ["Inbox"]

    async def test_delete(self, service, accounting):
        await service.delete_template(accounting.id)

        with pytest.raises(NotFoundError):
            await service.get_template(accounting.id)


class TestApply:
    async def test_builds_the_tree_with_placeholders(self, service, world, repos, accounting):
        result = await service.apply_template(
            accounting.id,
            world.tenant.id,
            world.staff,
            TemplateApply(placeholder_values={"Client": "Acme", "Year": "2026"}),
        )

        assert (result.created_count, result.reused_count) == (5, 0)
        assert [folder.name for folder in result.root_folders] == ["Clients", "Internal"]
        clients = result.root_folders[0]
        (acme,) = await repos.folders.list_children(world.tenant.id, clients.id)
        assert acme.name == "Acme"
        assert [folder.name for folder in await repos.folders.list_children(world.tenant.id, acme.id)] == [
            "2026 Returns",
            "Correspondence",
        ]

    async def test_applying_twice_reuses_folders(self, service, world, repos, accounting):
        values = TemplateApply(placeholder_values={"Client": "Acme", "Year": "2026"})
        await service.apply_template(accounting.id, world.tenant.id, world.staff, values)

        again = await service.apply_template(accounting.id, world.tenant.id, world.staff, values)
        next_year = await service.apply_template(
            accounting.id,
            world.tenant.id,
            world.staff,
            TemplateApply(placeholder_values={"Client": "Acme", "Year": "2027"}),
        )

        assert (again.created_count, again.reused_count) == (0, 5)
        assert (next_year.created_count, next_year.reused_count) == (1, 4)
        assert len(await repos.folders.list_all(world.tenant.id)) == 6

    async def test_apply_under_a_parent_folder(self, service, world, repos, accounting):
        parent = await repos.folders.create(
            Folder(tenant_id=world.tenant.id, name="Templates", owner_id=world.staff.id)
        )

        result = await service.apply_template(
            accounting.id, world.tenant.id, world.staff, TemplateApply(parent_id=parent.id)
        )

        assert all(folder.parent_id == parent.id for folder in result.root_folders)
        assert await repos.folders.list_children(world.tenant.id, None) == [parent]

    async def test_parent_of_another_tenant_is_missing(self, service, world, repos, accounting):
        foreign = await repos.folders.create(Folder(tenant_id=world.other_tenant.id, name="Theirs"))

        with pytest.raises(NotFoundError):
            await service.apply_template(
                accounting.id, world.tenant.id, world.staff, TemplateApply(parent_id=foreign.id)
            )

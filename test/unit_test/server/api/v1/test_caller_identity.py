"""Identity header resolution, tenant guards and the error envelope."""

import pytest
from httpx import AsyncClient

from docuvault.core.models.domain.enums import TenantStatus, UserStatus


async def test_missing_header_is_unauthorized(client: AsyncClient):
    response = await client.get("/api/v1/users/me")

    assert response.status_code == 401
    assert response.json() == {"success": False, "message": "Authentication required", "code": "UNAUTHORIZED"}


async def test_unknown_user_is_unauthorized(client: AsyncClient):
    response = await client.get("/api/v1/users/me", headers={"X-User-Id": "nobody"})

    assert response.status_code == 401


async def test_inactive_user_is_unauthorized(client: AsyncClient, make_tenant, make_user, auth):
    tenant = await make_tenant("Acme Corp")
    user = await make_user(tenant, status=UserStatus.suspended)

    response = await client.get("/api/v1/users/me", headers=auth(user))

    assert response.status_code == 401


@pytest.mark.parametrize("status", [TenantStatus.pending, TenantStatus.suspended, TenantStatus.rejected])
async def test_inactive_tenant_is_forbidden(client: AsyncClient, make_tenant, make_user, auth, status):
    tenant = await make_tenant("Acme Corp", status=status)
    user = await make_user(tenant)

    response = await client.get("/api/v1/folders", headers=auth(user))

    assert response.status_code == 403
    assert response.json()["code"] == "TENANT_NOT_ACTIVE"


async def test_me_returns_profile_and_roles(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/users/me", headers=auth(world.admin))

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["email"] == world.admin.email
    assert body["data"]["roles"] == ["TENANT_ADMIN"]
    assert "password_hash" not in body["data"]


async def test_tenant_endpoints_need_a_tenant(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/folders", headers=auth(world.master))

    assert response.status_code == 403
    assert response.json()["code"] == "TENANT_REQUIRED"


async def test_staff_cannot_use_admin_endpoints(client: AsyncClient, world, auth):
    responses = [
        await client.get("/api/v1/admin/tenants", headers=auth(world.staff)),
        await client.get("/api/v1/admin/tenants", headers=auth(world.admin)),
        await client.get("/api/v1/users", headers=auth(world.staff)),
        await client.get("/api/v1/notifications/tenant", headers=auth(world.staff)),
    ]

    assert [response.status_code for response in responses] == [403, 403, 403, 403]
    assert {response.json()["code"] for response in responses} == {"INSUFFICIENT_PERMISSIONS"}


async def test_super_admin_passes_role_checks(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/users/roles", headers=auth(world.master))

    assert response.status_code == 200
    assert sorted(role["name"] for role in response.json()["data"]) == ["SUPER_ADMIN", "TENANT_ADMIN", "USER"]


async def test_validation_errors_use_the_envelope(client: AsyncClient, world, auth):
    response = await client.post("/api/v1/folders", json={"name": ""}, headers=auth(world.staff))

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "VALIDATION_ERROR"
    assert body["message"].startswith("name:")


async def test_bad_query_parameters_are_validation_errors(client: AsyncClient, world, auth):
    response = await client.get("/api/v1/folders?limit=1000", headers=auth(world.staff))

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_unknown_route_uses_the_envelope(client: AsyncClient):
    response = await client.get("/api/v1/nothing-here")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Not Found", "code": "HTTP_ERROR"}


async def test_header_and_user_id_path_parameter_stay_separate(client: AsyncClient, world, auth):
    by_tenant_admin = await client.patch(
        f"/api/v1/users/{world.staff.id}", json={"phone": "+1 555 0101"}, headers=auth(world.admin)
    )
    by_master = await client.patch(
        f"/api/v1/admin/users/{world.staff.id}", json={"phone": "+1 555 0102"}, headers=auth(world.master)
    )

    assert by_tenant_admin.status_code == 200
    assert by_tenant_admin.json()["data"]["id"] == world.staff.id
    assert by_master.status_code == 200
    assert by_master.json()["data"]["id"] == world.staff.id
    assert by_master.json()["data"]["phone"] == "+1 555 0102"

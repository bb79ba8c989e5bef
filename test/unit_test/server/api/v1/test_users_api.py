"""Tenant admin user management endpoints."""

from httpx import AsyncClient


async def test_create_and_list_staff(client: AsyncClient, world, auth, email):
    admin = auth(world.admin)

    created = await client.post(
        "/api/v1/users", json={"email": "new@acme.example.com", "first_name": "New", "last_name": "Hire"}, headers=admin
    )
    duplicate = await client.post(
        "/api/v1/users",
        json={"email": "NEW@acme.example.com", "first_name": "New", "last_name": "Again"},
        headers=admin,
    )
    listing = await client.get("/api/v1/users?limit=2", headers=admin)

    assert created.status_code == 201
    assert created.json()["data"]["tenant_id"] == world.tenant.id
    assert email.templates() == ["user_invite"]
    assert duplicate.status_code == 409
    assert listing.json()["data"]["pagination"] == {
        "total": 3,
        "page": 1,
        "limit": 2,
        "total_pages": 2,
        "has_next": True,
        "has_prev": False,
    }


async def test_manage_a_staff_member(client: AsyncClient, world, auth, roles):
    admin = auth(world.admin)
    user_url = f"/api/v1/users/{world.staff.id}"

    fetched = await client.get(user_url, headers=admin)
    updated = await client.patch(user_url, json={"phone": "+1 555 0100"}, headers=admin)
    promoted = await client.post(
        f"{user_url}/roles", json={"role_ids": [roles["TENANT_ADMIN"].id]}, headers=admin
    )
    escalated = await client.post(f"{user_url}/roles", json={"role_ids": [roles["SUPER_ADMIN"].id]}, headers=admin)
    deleted = await client.delete(user_url, headers=admin)

    assert fetched.json()["data"]["email"] == world.staff.email
    assert updated.json()["data"]["phone"] == "+1 555 0100"
    assert promoted.json()["data"]["roles"] == ["TENANT_ADMIN"]
    assert escalated.status_code == 400
    assert deleted.status_code == 200
    assert (await client.get("/api/v1/users/me", headers=auth(world.staff))).status_code == 401


async def test_other_tenants_users_are_invisible(client: AsyncClient, world, auth):
    response = await client.get(f"/api/v1/users/{world.staff.id}", headers=auth(world.other_admin))

    assert response.status_code == 404


async def test_admin_cannot_delete_themselves(client: AsyncClient, world, auth):
    response = await client.delete(f"/api/v1/users/{world.admin.id}", headers=auth(world.admin))

    assert response.status_code == 400

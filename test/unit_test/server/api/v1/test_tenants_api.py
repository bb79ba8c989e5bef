"""Tenant registration, review and the tenant billing endpoints."""

from httpx import AsyncClient

from docuvault.server.core.config import settings

REGISTRATION = {
    "name": "Initech",
    "admin_email": "bill@initech.example.com",
    "admin_first_name": "Bill",
    "admin_last_name": "Lumbergh",
    "admin_password": "tps-reports",
    "industry": "Software",
}


async def _register(client: AsyncClient) -> dict:
    response = await client.post("/api/v1/tenants", json=REGISTRATION)
    assert response.status_code == 201, response.text
    return response.json()["data"]


async def test_registration_needs_no_identity(client: AsyncClient, world, email):
    tenant = await _register(client)

    assert tenant["status"] == "PENDING"
    assert tenant["slug"] == "initech"
    assert email.templates() == ["user_invite", "tenant_registration"]
    assert email.sent[-1].to == settings.master_admin_email


async def test_registration_validates_input(client: AsyncClient, world):
    response = await client.post("/api/v1/tenants", json={**REGISTRATION, "admin_email": "not-an-email"})

    assert response.status_code == 400
    assert response.json()["code"] == "VALIDATION_ERROR"


async def test_taken_slug_is_a_conflict(client: AsyncClient, world):
    response = await client.post("/api/v1/tenants", json={**REGISTRATION, "slug": "acme-corp"})

    assert response.status_code == 409
    assert response.json()["code"] == "SLUG_TAKEN"


async def test_registration_review_flow(client: AsyncClient, world, auth, repos, email):
    tenant = await _register(client)
    admin = await repos.users.get_by_email("bill@initech.example.com", tenant["id"])

    pending = await client.get("/api/v1/admin/tenants/pending", headers=auth(world.master))
    assert [item["id"] for item in pending.json()["data"]] == [tenant["id"]]

    blocked = await client.get("/api/v1/users/me", headers=auth(admin))
    assert blocked.status_code == 403
    assert blocked.json()["code"] == "TENANT_NOT_ACTIVE"

    approved = await client.patch(f"/api/v1/admin/tenants/{tenant['id']}/approve", headers=auth(world.master))
    assert approved.status_code == 200
    assert approved.json()["data"]["status"] == "ACTIVE"
    assert email.sent[-1].to == "bill@initech.example.com"

    me = await client.get("/api/v1/users/me", headers=auth(admin))
    assert me.status_code == 200
    inbox = await client.get("/api/v1/notifications", headers=auth(admin))
    assert [item["type"] for item in inbox.json()["data"]["notifications"]] == ["TENANT_APPROVED"]

    again = await client.patch(f"/api/v1/admin/tenants/{tenant['id']}/approve", headers=auth(world.master))
    assert again.status_code == 409


async def test_rejection_with_reason(client: AsyncClient, world, auth):
    tenant = await _register(client)

    response = await client.patch(
        f"/api/v1/admin/tenants/{tenant['id']}/reject", json={"reason": "Duplicate"}, headers=auth(world.master)
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "REJECTED"
    assert response.json()["data"]["rejection_reason"] == "Duplicate"


async def test_rejection_without_body(client: AsyncClient, world, auth):
    tenant = await _register(client)

    response = await client.patch(f"/api/v1/admin/tenants/{tenant['id']}/reject", headers=auth(world.master))

    assert response.json()["data"]["rejection_reason"] == "Administrative review"


async def test_tenant_billing_and_plan_change(client: AsyncClient, world, auth, email):
    master = auth(world.master)
    basic = await client.post("/api/v1/admin/billing/plans", json={"name": "Basic", "price": 50}, headers=master)
    pro = await client.post("/api/v1/admin/billing/plans", json={"name": "Pro", "price": 120}, headers=master)
    assert basic.status_code == pro.status_code == 201
    await client.patch(
        f"/api/v1/admin/tenants/{world.tenant.id}/pricing", json={"discount_percent": 50}, headers=master
    )

    plans = await client.get("/api/v1/tenants/me/plans", headers=auth(world.staff))
    assert [(plan["name"], plan["final_price"]) for plan in plans.json()["data"]] == [("Basic", 25.0), ("Pro", 60.0)]

    forbidden = await client.patch(
        "/api/v1/tenants/me/plan", json={"plan_id": pro.json()["data"]["id"]}, headers=auth(world.staff)
    )
    assert forbidden.status_code == 403

    changed = await client.patch(
        "/api/v1/tenants/me/plan", json={"plan_id": pro.json()["data"]["id"]}, headers=auth(world.admin)
    )
    assert changed.status_code == 200
    billing = changed.json()["data"]
    assert billing["plan"]["name"] == "Pro"
    assert billing["final_price"] == 60.0
    assert email.sent[-1].template_name == "tenant_plan_updated"

    mine = await client.get("/api/v1/tenants/me/billing", headers=auth(world.staff))
    assert mine.json()["data"]["has_active_discount"] is True


async def test_unknown_plan(client: AsyncClient, world, auth):
    response = await client.patch("/api/v1/tenants/me/plan", json={"plan_id": "missing"}, headers=auth(world.admin))

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"

from tests.conftest import CUSTOMER_ID, OTHER_CUSTOMER_ID

async def test_sync_creates_then_updates_customer(client, clerk):
    created = await client.post("/api/v1/customers/sync")

    assert created.status_code == 200
    assert created.json()["clerk_id"] == CUSTOMER_ID
    assert created.json()["email"] == f"{CUSTOMER_ID}@example.com"

    clerk.add_user(CUSTOMER_ID, first_name="Augusta", email="augusta@example.com")
    updated = await client.post("/api/v1/customers/sync")

    assert updated.json()["id"] == created.json()["id"]
    assert updated.json()["first_name"] == "Augusta"
    assert updated.json()["email"] == "augusta@example.com"

async def test_sync_of_unknown_identity_is_not_found(other_client):
    response = await other_client.post("/api/v1/customers/sync")

    assert response.status_code == 404

async def test_admin_lists_customers(client, admin_client):
    await client.post("/api/v1/customers/sync")

    response = await admin_client.get("/api/v1/customers/admin/all")

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert response.json()["customers"][0]["clerk_id"] == CUSTOMER_ID

async def test_admin_lookup_by_local_or_clerk_id(client, admin_client):
    created = await client.post("/api/v1/customers/sync")

    by_uuid = await admin_client.get(f"/api/v1/customers/admin/{created.json()['id']}")
    by_clerk_id = await admin_client.get(f"/api/v1/customers/admin/{CUSTOMER_ID}")

    assert by_uuid.json()["clerk_id"] == CUSTOMER_ID
    assert by_clerk_id.json()["id"] == created.json()["id"]

async def test_admin_lookup_syncs_unseen_user(admin_client, clerk):
    clerk.add_user(OTHER_CUSTOMER_ID, first_name="Alan")

    response = await admin_client.get(f"/api/v1/customers/admin/{OTHER_CUSTOMER_ID}")

    assert response.status_code == 200
    assert response.json()["first_name"] == "Alan"

async def test_admin_lookup_of_unknown_customer(admin_client):
    missing_clerk = await admin_client.get("/api/v1/customers/admin/user_nobody")
    missing_uuid = await admin_client.get("/api/v1/customers/admin/00000000-0000-0000-0000-000000000004")

    assert missing_clerk.status_code == 404
    assert missing_uuid.status_code == 404

async def test_customer_listing_is_admin_only(client):
    response = await client.get("/api/v1/customers/admin/all")

    assert response.status_code == 403

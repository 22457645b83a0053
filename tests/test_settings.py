STORE = {
    "name": "Mebius Colombo",
    "description": "Clothing for the coast",
    "email": "hello@mebius.lk",
    "phone": "+94 11 234 5678",
    "address": "1 Galle Road",
    "city": "Colombo",
    "state": "WP",
    "zip_code": "00300",
    "open_time": "10:00",
    "close_time": "20:30",
    "is_open": True,
    "logo": "https://res.cloudinary.com/demo/logo.png",
}

PAYMENT = {
    "stripe": {"enabled": True, "public_key": "pk_test_123"},
    "cash_on_delivery": {"enabled": False},
    "currency": {"code": "LKR", "symbol": "Rs"},
    "tax": {"enabled": True, "rate": 8, "name": "VAT"},
}

async def test_public_store_profile_has_defaults(anon_client):
    response = await anon_client.get("/api/v1/settings/store")

    assert response.status_code == 200
    assert response.json()["name"] == "Mebius"
    assert response.json()["open_time"] == "09:00"

async def test_full_settings_are_admin_only(client, admin_client):
    assert (await client.get("/api/v1/settings")).status_code == 403

    response = await admin_client.get("/api/v1/settings")

    assert response.status_code == 200
    assert response.json()["payment"]["currency"]["code"] == "USD"

async def test_store_update_is_visible_publicly(admin_client, anon_client):
    # Prime the cache so the update has something to invalidate
    await anon_client.get("/api/v1/settings/store")

    updated = await admin_client.put("/api/v1/settings/store", json={"store": STORE})
    assert updated.status_code == 200
    assert updated.json()["name"] == "Mebius Colombo"

    public = await anon_client.get("/api/v1/settings/store")
    assert public.json()["city"] == "Colombo"
    assert public.json()["close_time"] == "20:30"

async def test_payment_update_leaves_store_alone(admin_client):
    response = await admin_client.put("/api/v1/settings/payment", json={"payment": PAYMENT})

    assert response.status_code == 200
    assert response.json()["cash_on_delivery"] == {"enabled": False}

    document = (await admin_client.get("/api/v1/settings")).json()
    assert document["payment"]["tax"]["name"] == "VAT"
    assert document["store"]["name"] == "Mebius"

async def test_combined_update_needs_a_section(admin_client):
    response = await admin_client.put("/api/v1/settings", json={})

    assert response.status_code == 400

async def test_combined_update(admin_client):
    response = await admin_client.put("/api/v1/settings", json={"store": STORE, "payment": PAYMENT})

    assert response.status_code == 200
    assert response.json()["store"]["email"] == "hello@mebius.lk"
    assert response.json()["payment"]["stripe"]["public_key"] == "pk_test_123"
    assert response.json()["updated_at"] is not None

async def test_invalid_store_fields_are_rejected(admin_client):
    bad_time = await admin_client.put("/api/v1/settings/store", json={"store": {**STORE, "open_time": "25:00"}})
    assert bad_time.status_code == 400

    short_phone = await admin_client.put("/api/v1/settings/store", json={"store": {**STORE, "phone": "12345"}})
    assert short_phone.status_code == 400

    blank_name = await admin_client.put("/api/v1/settings/store", json={"store": {**STORE, "name": "   "}})
    assert blank_name.status_code == 400

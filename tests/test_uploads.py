import cloudinary.utils

async def test_admin_gets_signed_upload_parameters(admin_client):
    response = await admin_client.post("/api/v1/uploads/sign", json={"folder": "products", "public_id": "linen-shirt"})

    assert response.status_code == 200
    body = response.json()
    assert body["folder"] == "mebius-test/products"
    assert body["cloud_name"] == "demo-cloud"
    assert body["api_key"] == "1234567890"
    assert body["upload_url"] == "https://api.cloudinary.com/v1_1/demo-cloud/image/upload"

    expected = cloudinary.utils.api_sign_request(
        {"timestamp": body["timestamp"], "folder": body["folder"], "public_id": "linen-shirt"},
        "cloudinary-secret"
    )
    assert body["signature"] == expected

async def test_unknown_folder_is_rejected(admin_client):
    response = await admin_client.post("/api/v1/uploads/sign", json={"folder": "../secrets"})

    assert response.status_code == 400

async def test_signing_is_admin_only(client):
    response = await client.post("/api/v1/uploads/sign", json={"folder": "products"})

    assert response.status_code == 403

async def test_unconfigured_storage_fails_cleanly(app, admin_client):
    app.state.storage.api_secret = None

    response = await admin_client.post("/api/v1/uploads/sign", json={"folder": "store"})

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"

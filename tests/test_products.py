from decimal import Decimal

def product_body(category, **overrides):
    body = {
        "name": "Denim Jacket",
        "description": "<p>Heavy denim</p><script>alert(1)</script>",
        "category_id": str(category.id),
        "image": "https://res.cloudinary.com/demo/jacket.jpg",
        "price": "80.00",
        "discount": "25",
        "stock": 4,
        "sizes": ["M", "L"],
        "colors": ["Blue"],
        "gender": "men",
    }
    body.update(overrides)
    return body

async def test_admin_creates_product_with_final_price(admin_client, category):
    response = await admin_client.post("/api/v1/products", json=product_body(category))

    assert response.status_code == 201
    body = response.json()
    assert Decimal(body["final_price"]) == Decimal("60.00")
    assert body["in_stock"] is True
    assert "<script>" not in body["description"]
    assert body["sales_count"] == 0

async def test_final_price_follows_price_and_discount_updates(admin_client, make_product):
    product = await make_product(price=Decimal("50.00"))

    discounted = await admin_client.put(f"/api/v1/products/{product.id}", json={"discount": "10"})
    assert Decimal(discounted.json()["final_price"]) == Decimal("45.00")

    repriced = await admin_client.put(f"/api/v1/products/{product.id}", json={"price": "20.00"})
    assert Decimal(repriced.json()["final_price"]) == Decimal("18.00")

async def test_customer_cannot_manage_products(client, category, make_product):
    product = await make_product()

    assert (await client.post("/api/v1/products", json=product_body(category))).status_code == 403
    assert (await client.put(f"/api/v1/products/{product.id}", json={"stock": 99})).status_code == 403
    assert (await client.delete(f"/api/v1/products/{product.id}")).status_code == 403

async def test_create_product_in_unknown_category(admin_client, category):
    body = product_body(category, category_id="00000000-0000-0000-0000-000000000009")

    response = await admin_client.post("/api/v1/products", json=body)

    assert response.status_code == 404

async def test_listing_hides_inactive_and_filters(anon_client, make_product):
    await make_product(name="Linen Shirt", price=Decimal("40.00"))
    await make_product(name="Silk Dress", price=Decimal("120.00"), gender="women", is_featured=True)
    await make_product(name="Retired Hat", is_active=False)

    everything = await anon_client.get("/api/v1/products")
    assert everything.json()["total"] == 2

    women = await anon_client.get("/api/v1/products", params={"gender": "women"})
    assert [item["name"] for item in women.json()["items"]] == ["Silk Dress"]

    cheap = await anon_client.get("/api/v1/products", params={"max_price": "50"})
    assert [item["name"] for item in cheap.json()["items"]] == ["Linen Shirt"]

    search = await anon_client.get("/api/v1/products", params={"q": "silk"})
    assert search.json()["total"] == 1

    featured = await anon_client.get("/api/v1/products/featured")
    assert [item["name"] for item in featured.json()["items"]] == ["Silk Dress"]

async def test_listing_sorts_by_price(anon_client, make_product):
    await make_product(name="Mid", price=Decimal("60.00"))
    await make_product(name="Cheap", price=Decimal("10.00"))
    await make_product(name="Dear", price=Decimal("90.00"))

    response = await anon_client.get("/api/v1/products", params={"sort": "price_asc"})

    assert [item["name"] for item in response.json()["items"]] == ["Cheap", "Mid", "Dear"]

async def test_listing_paginates(anon_client, make_product):
    for index in range(3):
        await make_product(name=f"Tee {index}")

    response = await anon_client.get("/api/v1/products", params={"page": 2, "size": 2})

    body = response.json()
    assert body["total"] == 3
    assert body["pages"] == 2
    assert len(body["items"]) == 1

async def test_product_detail_includes_reviews(client, anon_client, make_product):
    product = await make_product()
    await client.post("/api/v1/reviews", json={
        "product_id": str(product.id), "title": "Great", "comment": "Fits well", "rating": 5, "user_name": "Ada"
    })

    response = await anon_client.get(f"/api/v1/products/{product.id}")

    assert response.status_code == 200
    assert [review["title"] for review in response.json()["reviews"]] == ["Great"]

async def test_unknown_product_is_not_found(anon_client):
    response = await anon_client.get("/api/v1/products/00000000-0000-0000-0000-000000000001")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"

async def test_admin_deletes_product(admin_client, anon_client, make_product):
    product = await make_product()

    response = await admin_client.delete(f"/api/v1/products/{product.id}")

    assert response.status_code == 204
    assert (await anon_client.get(f"/api/v1/products/{product.id}")).status_code == 404

async def test_category_crud(admin_client, anon_client):
    created = await admin_client.post("/api/v1/categories", json={"name": "Knitwear"})
    assert created.status_code == 201
    category_id = created.json()["id"]

    duplicate = await admin_client.post("/api/v1/categories", json={"name": "knitwear"})
    assert duplicate.status_code == 409

    renamed = await admin_client.put(f"/api/v1/categories/{category_id}", json={"is_active": False})
    assert renamed.json()["is_active"] is False

    active = await anon_client.get("/api/v1/categories", params={"active": True})
    assert category_id not in [category["id"] for category in active.json()]

    deleted = await admin_client.delete(f"/api/v1/categories/{category_id}")
    assert deleted.status_code == 204

async def test_category_with_products_cannot_be_deleted(admin_client, category, make_product):
    await make_product()

    response = await admin_client.delete(f"/api/v1/categories/{category.id}")

    assert response.status_code == 409

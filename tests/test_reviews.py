from decimal import Decimal

from tests.conftest import CUSTOMER_ID

def review_body(product, rating, title="Nice fit"):
    return {
        "product_id": str(product.id),
        "title": title,
        "comment": "Soft fabric and true to size",
        "rating": rating,
        "user_name": "Ada",
    }

async def test_reviews_update_product_rating(client, make_product, read_product):
    product = await make_product()

    first = await client.post("/api/v1/reviews", json=review_body(product, 5))
    await client.post("/api/v1/reviews", json=review_body(product, 4))

    assert first.status_code == 201
    assert first.json()["user_id"] == CUSTOMER_ID
    assert first.json()["verified"] is False

    stored = await read_product(product.id)
    assert stored.review_count == 2
    assert stored.average_rating == Decimal("4.5")

async def test_review_text_is_stripped_of_markup(client, make_product):
    product = await make_product()

    response = await client.post(
        "/api/v1/reviews",
        json=review_body(product, 3, title="<b>Okay</b><script>x</script>")
    )

    assert "<" not in response.json()["title"]
    assert response.json()["title"].startswith("Okay")

async def test_rating_must_be_between_one_and_five(client, make_product):
    product = await make_product()

    response = await client.post("/api/v1/reviews", json=review_body(product, 6))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"

async def test_review_needs_sign_in(anon_client, make_product):
    product = await make_product()

    response = await anon_client.post("/api/v1/reviews", json=review_body(product, 4))

    assert response.status_code == 401

async def test_admin_deletes_review_and_stats_follow(client, admin_client, anon_client, make_product, read_product):
    product = await make_product()
    low = await client.post("/api/v1/reviews", json=review_body(product, 1, title="Shrank"))
    await client.post("/api/v1/reviews", json=review_body(product, 5))

    listing = await admin_client.get("/api/v1/reviews")
    assert listing.json()["total"] == 2

    response = await admin_client.delete(f"/api/v1/reviews/{low.json()['id']}")
    assert response.status_code == 204

    stored = await read_product(product.id)
    assert stored.review_count == 1
    assert stored.average_rating == Decimal("5")

    public = await anon_client.get(f"/api/v1/reviews/products/{product.id}")
    assert [review["title"] for review in public.json()] == ["Nice fit"]

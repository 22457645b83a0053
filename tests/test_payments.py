import uuid
from decimal import Decimal

from sqlalchemy import update

from storefront.models import Order, OrderItem, Product
from tests.conftest import (
    checkout_event,
    load_order,
    order_payload,
    place_card_order,
    sign_payload,
    start_checkout,
)

async def deliver(client, payload: bytes, signature: str = None):
    return await client.post(
        "/api/v1/payments/webhook",
        content=payload,
        headers={
            "Stripe-Signature": signature if signature is not None else sign_payload(payload),
            "Content-Type": "application/json",
        }
    )

async def test_checkout_session_for_consistent_order(client, gateway, make_product):
    product = await make_product(price=Decimal("25.00"))
    order_id = await place_card_order(client, product, quantity=2)

    response = await client.post("/api/v1/payments/checkout-session", json={"order_id": order_id})

    assert response.status_code == 200
    body = response.json()
    assert body["client_secret"] == f"{body['session_id']}_secret"
    assert gateway.sessions[body["session_id"]]["metadata"] == {"order_id": order_id}
    assert "session_id={CHECKOUT_SESSION_ID}" in gateway.sessions[body["session_id"]]["return_url"]

async def test_checkout_rejects_total_that_does_not_match_items(client, gateway, database, make_product):
    product = await make_product(price=Decimal("25.00"))
    order_id = await place_card_order(client, product, quantity=2)

    async with database.session() as db:
        await db.execute(
            update(OrderItem)
            .where(OrderItem.order_id == uuid.UUID(order_id))
            .values(price=Decimal("20.00"))
        )

    response = await client.post("/api/v1/payments/checkout-session", json={"order_id": order_id})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "PRICE_MISMATCH"
    assert gateway.created_for == []

async def test_checkout_tolerates_a_cent_of_rounding(client, database, make_product):
    product = await make_product(price=Decimal("25.00"))
    order_id = await place_card_order(client, product, quantity=2)

    async with database.session() as db:
        await db.execute(
            update(Order).where(Order.id == uuid.UUID(order_id)).values(total_amount=Decimal("50.01"))
        )

    response = await client.post("/api/v1/payments/checkout-session", json={"order_id": order_id})

    assert response.status_code == 200

async def test_checkout_checks_live_stock(client, gateway, database, make_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product, quantity=3)

    # Someone else bought most of it meanwhile
    async with database.session() as db:
        await db.execute(update(Product).where(Product.id == product.id).values(stock=2))

    response = await client.post("/api/v1/payments/checkout-session", json={"order_id": order_id})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"
    assert gateway.created_for == []

async def test_checkout_for_someone_elses_order_is_not_found(client, other_client, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)

    response = await other_client.post("/api/v1/payments/checkout-session", json={"order_id": order_id})

    assert response.status_code == 404

async def test_checkout_rejects_cod_order(client, make_product):
    product = await make_product()
    created = await client.post("/api/v1/orders", json=order_payload((product, 1, {})))

    response = await client.post("/api/v1/payments/checkout-session", json={"order_id": created.json()["id"]})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"

async def test_duplicate_success_notification_takes_stock_once(client, anon_client, gateway, database, make_product, read_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product, quantity=2)
    session_id = await start_checkout(client, order_id)
    gateway.complete(session_id)

    payload = checkout_event("checkout.session.completed", session_id, order_id)
    first = await deliver(anon_client, payload)
    second = await deliver(anon_client, payload)

    assert first.status_code == 200
    assert second.status_code == 200
    assert second.json() == {"received": True}

    stored = await read_product(product.id)
    assert stored.stock == 3
    assert stored.sales_count == 2

    order = await load_order(database, order_id)
    assert order.payment_status.value == "PAID"
    assert order.order_status.value == "CONFIRMED"
    assert order.paid_at is not None

async def test_completed_but_unpaid_session_does_not_fulfill(client, anon_client, gateway, database, make_product, read_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.complete(session_id, payment_status="unpaid")

    response = await deliver(anon_client, checkout_event("checkout.session.completed", session_id, order_id, "unpaid"))

    assert response.status_code == 200
    assert (await load_order(database, order_id)).payment_status.value == "PENDING"
    assert (await read_product(product.id)).stock == 5

async def test_async_payment_success_fulfills(client, anon_client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.complete(session_id)

    await deliver(anon_client, checkout_event("checkout.session.async_payment_succeeded", session_id, order_id))

    assert (await load_order(database, order_id)).payment_status.value == "PAID"

async def test_expired_session_cancels_order(client, anon_client, gateway, database, make_product, read_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.expire(session_id)

    response = await deliver(anon_client, checkout_event("checkout.session.expired", session_id, order_id, "unpaid"))

    assert response.status_code == 200
    order = await load_order(database, order_id)
    assert order.order_status.value == "CANCELLED"
    assert order.payment_status.value == "FAILED"
    assert order.cancellation_reason == "Checkout session expired"
    assert (await read_product(product.id)).stock == 5

async def test_success_after_failure_is_ignored(client, anon_client, gateway, database, make_product, read_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)

    await deliver(anon_client, checkout_event("checkout.session.async_payment_failed", session_id, order_id, "unpaid"))
    gateway.complete(session_id)
    await deliver(anon_client, checkout_event("checkout.session.completed", session_id, order_id))

    order = await load_order(database, order_id)
    assert order.order_status.value == "CANCELLED"
    assert order.payment_status.value == "FAILED"
    assert (await read_product(product.id)).stock == 5

async def test_failure_after_success_is_ignored(client, anon_client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.complete(session_id)

    await deliver(anon_client, checkout_event("checkout.session.completed", session_id, order_id))
    await deliver(anon_client, checkout_event("checkout.session.expired", session_id, order_id))

    order = await load_order(database, order_id)
    assert order.payment_status.value == "PAID"
    assert order.order_status.value == "CONFIRMED"

async def test_success_after_customer_cancel_is_ignored(client, anon_client, gateway, database, make_product, read_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    await client.put(f"/api/v1/orders/{order_id}/cancel")

    gateway.complete(session_id)
    response = await deliver(anon_client, checkout_event("checkout.session.completed", session_id, order_id))

    assert response.status_code == 200
    assert (await load_order(database, order_id)).order_status.value == "CANCELLED"
    assert (await read_product(product.id)).stock == 5

async def test_fulfillment_without_stock_cancels_order(client, anon_client, gateway, database, make_product, read_product):
    product = await make_product(name="Wool Coat", stock=2)
    order_id = await place_card_order(client, product, quantity=2)
    session_id = await start_checkout(client, order_id)

    async with database.session() as db:
        await db.execute(update(Product).where(Product.id == product.id).values(stock=1))

    gateway.complete(session_id)
    response = await deliver(anon_client, checkout_event("checkout.session.completed", session_id, order_id))

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "FULFILLMENT_FAILED"

    order = await load_order(database, order_id)
    assert order.order_status.value == "CANCELLED"
    assert order.payment_status.value == "FAILED"
    assert order.paid_at is None
    assert (await read_product(product.id)).stock == 1

    # Gateway retry of the same delivery is now a no-op
    retry = await deliver(anon_client, checkout_event("checkout.session.completed", session_id, order_id))
    assert retry.status_code == 200

async def test_invalid_signature_is_rejected_without_changes(client, anon_client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.complete(session_id)

    payload = checkout_event("checkout.session.completed", session_id, order_id)
    response = await deliver(anon_client, payload, signature=sign_payload(payload, secret="whsec_wrong"))

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_WEBHOOK"
    assert (await load_order(database, order_id)).payment_status.value == "PENDING"

async def test_missing_signature_is_rejected(anon_client):
    response = await deliver(anon_client, b"{}", signature="")

    assert response.status_code == 400

async def test_event_without_order_id_is_acknowledged(client, anon_client, gateway, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.sessions[session_id]["metadata"] = {"order_id": "not-a-uuid"}
    gateway.complete(session_id)

    response = await deliver(anon_client, checkout_event("checkout.session.completed", session_id))

    assert response.status_code == 200

async def test_unknown_event_is_acknowledged(anon_client):
    payload = checkout_event("customer.created", "cus_123")

    response = await deliver(anon_client, payload)

    assert response.status_code == 200

async def test_session_status_reports_order_state(client, other_client, gateway, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)

    response = await client.get("/api/v1/payments/session-status", params={"session_id": session_id})

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "open"
    assert body["order_id"] == order_id
    assert body["order_status"] == "PENDING"

    hidden = await other_client.get("/api/v1/payments/session-status", params={"session_id": session_id})
    assert hidden.status_code == 404

async def test_expiry_of_replaced_session_keeps_order_payable(client, anon_client, gateway, database, make_product, read_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product, quantity=2)
    first_session = await start_checkout(client, order_id)
    second_session = await start_checkout(client, order_id)

    gateway.expire(first_session)
    expired = await deliver(anon_client, checkout_event("checkout.session.expired", first_session, order_id, "unpaid"))
    assert expired.status_code == 200
    assert (await load_order(database, order_id)).order_status.value == "PENDING"

    gateway.complete(second_session)
    await deliver(anon_client, checkout_event("checkout.session.completed", second_session, order_id))

    order = await load_order(database, order_id)
    assert order.payment_status.value == "PAID"
    assert order.order_status.value == "CONFIRMED"
    assert order.checkout_session_id == second_session
    assert (await read_product(product.id)).stock == 3

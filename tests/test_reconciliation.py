import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import update

from storefront.core.config import settings
from storefront.models import Order
from storefront.models.base import utcnow
from storefront.tasks.reconciliation_tasks import run_reconciliation, stale_cutoff
from tests.conftest import load_order, place_card_order, start_checkout

async def backdate(database, order_id, hours=2):
    async with database.session() as db:
        await db.execute(
            update(Order)
            .where(Order.id == uuid.UUID(order_id))
            .values(created_at=utcnow() - timedelta(hours=hours))
        )

def test_stale_cutoff_covers_session_lifetime_and_grace():
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

    cutoff = stale_cutoff(now)

    expected = settings.CHECKOUT_SESSION_TTL_MINUTES + settings.RECONCILIATION_GRACE_MINUTES
    assert now - cutoff == timedelta(minutes=expected)

async def test_paid_session_without_notification_is_fulfilled(client, gateway, database, make_product, read_product):
    product = await make_product(stock=5)
    order_id = await place_card_order(client, product, quantity=2)
    session_id = await start_checkout(client, order_id)
    gateway.complete(session_id)
    await backdate(database, order_id)

    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["checked"] == 1
    assert summary["fulfilled"] == 1
    order = await load_order(database, order_id)
    assert order.payment_status.value == "PAID"
    assert order.order_status.value == "CONFIRMED"
    assert (await read_product(product.id)).stock == 3

async def test_abandoned_checkout_is_cancelled(client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.expire(session_id)
    await backdate(database, order_id)

    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["cancelled"] == 1
    order = await load_order(database, order_id)
    assert order.order_status.value == "CANCELLED"
    assert order.payment_status.value == "FAILED"

async def test_order_that_never_reached_checkout_is_cancelled(client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    await backdate(database, order_id)

    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["cancelled"] == 1
    assert (await load_order(database, order_id)).cancellation_reason == "Payment not completed"

async def test_async_payment_in_flight_is_left_alone(client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    session_id = await start_checkout(client, order_id)
    gateway.complete(session_id, payment_status="unpaid")
    await backdate(database, order_id)

    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["skipped"] == 1
    assert (await load_order(database, order_id)).order_status.value == "PENDING"

async def test_recent_orders_are_not_touched(client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    await start_checkout(client, order_id)

    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["checked"] == 0
    assert (await load_order(database, order_id)).order_status.value == "PENDING"

async def test_gateway_errors_are_counted_and_sweep_continues(client, gateway, database, make_product):
    product = await make_product()
    broken_id = await place_card_order(client, product)
    broken_session = await start_checkout(client, broken_id)
    del gateway.sessions[broken_session]
    await backdate(database, broken_id, hours=3)

    abandoned_id = await place_card_order(client, product)
    await backdate(database, abandoned_id)

    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["errors"] == 1
    assert summary["cancelled"] == 1
    assert (await load_order(database, broken_id)).order_status.value == "PENDING"
    assert (await load_order(database, abandoned_id)).order_status.value == "CANCELLED"

async def test_restarted_checkout_on_old_order_stays_payable(client, gateway, database, make_product):
    product = await make_product()
    order_id = await place_card_order(client, product)
    await backdate(database, order_id)
    session_id = await start_checkout(client, order_id)

    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["checked"] == 1
    assert summary["skipped"] == 1
    assert summary["cancelled"] == 0
    assert (await load_order(database, order_id)).order_status.value == "PENDING"

    # Once the session lapses the next sweep cancels the order
    gateway.expire(session_id)
    summary = await run_reconciliation(database, gateway, limit=10)

    assert summary["cancelled"] == 1
    assert (await load_order(database, order_id)).order_status.value == "CANCELLED"

"""
Payment service layer
Bridges orders to Stripe Checkout and routes gateway notifications to the
fulfillment guard
"""

from typing import Dict, Any, Optional
from datetime import datetime
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
import uuid
import logging

from storefront.models import Order, OrderStatus, PaymentStatus, PaymentMethod
from storefront.core.config import settings
from storefront.core.exceptions import (
    NotFoundException,
    ValidationException,
    InsufficientStockException
)
from storefront.api.v1.products.crud import ProductCRUD
from .fulfillment import FulfillmentGuard

logger = logging.getLogger(__name__)

SUCCESS_EVENTS = {
    "checkout.session.completed",
    "checkout.session.async_payment_succeeded",
}

FAILURE_EVENTS = {
    "checkout.session.async_payment_failed": "Payment failed",
    "checkout.session.expired": "Checkout session expired",
}

class PaymentService:
    """Payment service"""

    def __init__(self, db: AsyncSession, gateway):
        self.db = db
        self.gateway = gateway
        self.guard = FulfillmentGuard(db)
        self.price_tolerance = Decimal(settings.PRICE_TOLERANCE)

    async def create_checkout_session(self, user_id: str, order_id: uuid.UUID) -> Dict[str, str]:
        """
        Start card payment for a pending order

        Nothing is sent to the gateway unless the order is still payable,
        every line is covered by live stock and the stored total matches its
        items.

        Returns:
            Session id and client secret

        Raises:
            NotFoundException: If the order is not the user's
            ValidationException: If the order cannot be paid by card now
            InsufficientStockException: If a line exceeds live stock
        """
        result = await self.db.execute(select(Order).where(Order.id == order_id))
        order = result.scalar_one_or_none()
        if not order or order.user_id != user_id:
            raise NotFoundException("Order not found")

        if order.payment_method != PaymentMethod.CREDIT_CARD:
            raise ValidationException("Order is not payable by card")
        if order.order_status != OrderStatus.PENDING or order.payment_status != PaymentStatus.PENDING:
            raise ValidationException("Order is no longer awaiting payment")

        required: Dict[uuid.UUID, int] = {}
        names: Dict[uuid.UUID, str] = {}
        for item in order.items:
            if item.product_id is None:
                raise ValidationException(f"{item.name} is no longer available")
            required[item.product_id] = required.get(item.product_id, 0) + item.quantity
            names[item.product_id] = item.name

        for product_id, quantity in required.items():
            stock = await ProductCRUD.read_stock(self.db, product_id)
            if stock is None:
                raise ValidationException(f"{names[product_id]} is no longer available")
            if quantity > stock:
                raise InsufficientStockException(names[product_id], stock)

        items_total = order.items_total()
        if abs(items_total - Decimal(order.total_amount)) > self.price_tolerance:
            logger.warning(
                f"Order {order.id} total {order.total_amount} does not match items {items_total}"
            )
            raise ValidationException(
                "Order total does not match its items",
                error_code="PRICE_MISMATCH"
            )

        session = await self.gateway.create_checkout_session(order, settings.checkout_return_url)

        order.checkout_session_id = session["id"]
        await self.db.commit()

        return {"session_id": session["id"], "client_secret": session["client_secret"]}

    async def retrieve_session_status(
        self,
        session_id: str,
        user_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """Session state from the gateway plus the correlated order's statuses"""
        session = await self.gateway.retrieve_session(session_id)
        order_id = self._parse_order_id(session.get("metadata"))

        order = None
        if order_id:
            result = await self.db.execute(
                select(Order)
                .where(Order.id == order_id)
                .execution_options(populate_existing=True)
            )
            order = result.scalar_one_or_none()

        if user_id is not None and (order is None or order.user_id != user_id):
            raise NotFoundException("Checkout session not found")

        return {
            "session_id": session["id"],
            "status": session.get("status"),
            "payment_status": session.get("payment_status"),
            "order_id": order.id if order else None,
            "order_status": order.order_status if order else None,
            "order_payment_status": order.payment_status if order else None
        }

    async def handle_webhook(self, payload: bytes, signature: Optional[str]) -> None:
        """
        Process a gateway notification

        The signature is verified before anything else. Success events are
        confirmed against a fresh read of the session; every transition is
        delegated to the fulfillment guard, so redeliveries are harmless.

        Raises:
            InvalidWebhookException: If the signature is rejected
            FulfillmentError: If a paid order could not be fulfilled
        """
        event = self.gateway.construct_event(payload, signature)
        event_type = event.get("type")
        logger.info(f"Webhook {event.get('id')} received: {event_type}")

        if event_type in SUCCESS_EVENTS:
            session = await self.gateway.retrieve_session(event["session_id"])
            order_id = self._parse_order_id(session.get("metadata"))
            if order_id is None:
                logger.warning(f"Session {session['id']} has no usable order_id, ignoring")
                return
            if session.get("payment_status") != "paid":
                logger.info(f"Session {session['id']} not paid yet ({session.get('payment_status')})")
                return

            await self.guard.fulfill(order_id)

        elif event_type in FAILURE_EVENTS:
            order_id = self._parse_order_id(event.get("metadata"))
            if order_id is None:
                logger.warning(f"Event {event.get('id')} has no usable order_id, ignoring")
                return

            await self.guard.mark_failed(
                order_id,
                FAILURE_EVENTS[event_type],
                session_id=event.get("session_id")
            )

        else:
            logger.info(f"Unhandled webhook event type: {event_type}")

    async def reconcile_stale_orders(self, older_than: datetime, limit: int = 100) -> Dict[str, int]:
        """
        Settle card orders whose gateway notification never arrived

        Each order still PENDING/PENDING and created before `older_than` is
        checked against its current session: paid sessions are fulfilled,
        expired or missing ones are cancelled. Sessions still open (the
        customer restarted checkout on an old order) or completed with an
        asynchronous payment in flight are left for a later sweep.
        """
        result = await self.db.execute(
            select(Order.id, Order.checkout_session_id)
            .where(
                and_(
                    Order.payment_method == PaymentMethod.CREDIT_CARD,
                    Order.payment_status == PaymentStatus.PENDING,
                    Order.order_status == OrderStatus.PENDING,
                    Order.created_at < older_than
                )
            )
            .order_by(Order.created_at)
            .limit(limit)
        )
        rows = result.all()

        summary = {"checked": len(rows), "fulfilled": 0, "cancelled": 0, "skipped": 0, "errors": 0}
        for order_id, session_id in rows:
            try:
                session = await self.gateway.retrieve_session(session_id) if session_id else None

                if session and session.get("payment_status") == "paid":
                    if await self.guard.fulfill(order_id):
                        summary["fulfilled"] += 1
                elif session and session.get("status") in ("open", "complete"):
                    summary["skipped"] += 1
                elif await self.guard.mark_failed(order_id, "Payment not completed", session_id=session_id):
                    summary["cancelled"] += 1

            except Exception as e:
                summary["errors"] += 1
                logger.error(f"Reconciliation of order {order_id} failed: {e}")

        if rows:
            logger.info(f"Reconciliation sweep: {summary}")
        return summary

    @staticmethod
    def _parse_order_id(metadata: Optional[Dict[str, Any]]) -> Optional[uuid.UUID]:
        raw = (metadata or {}).get("order_id")
        if not raw:
            return None
        try:
            return uuid.UUID(str(raw))
        except ValueError:
            logger.warning(f"Malformed order_id in payment metadata: {raw!r}")
            return None

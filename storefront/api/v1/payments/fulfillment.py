"""
Fulfillment guard

Every settlement of a pending order goes through one conditional UPDATE on
`orders`, gated on both statuses still being PENDING. Stock decrements run in
the same transaction, so a repeated or late notification can never decrement
stock twice or revive a cancelled order.
"""

from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
import uuid
import logging

from storefront.models import Order, OrderItem, OrderStatus, PaymentStatus
from storefront.models.base import utcnow
from storefront.core.exceptions import FulfillmentError
from storefront.api.v1.products.crud import ProductCRUD

logger = logging.getLogger(__name__)

# mark_failed default: cancel whichever session the order currently has
ANY_SESSION = object()

class FulfillmentGuard:
    """Idempotent payment success/failure transitions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _pending(order_id: uuid.UUID):
        return and_(
            Order.id == order_id,
            Order.payment_status == PaymentStatus.PENDING,
            Order.order_status == OrderStatus.PENDING
        )

    async def fulfill(self, order_id: uuid.UUID) -> bool:
        """
        Mark a pending order paid and take its items out of stock

        Returns:
            True if this call settled the order, False if it was already
            settled (duplicate or late delivery)

        Raises:
            FulfillmentError: If a line cannot be covered by stock. The order
                is rolled back and then marked CANCELLED/FAILED.
        """
        try:
            result = await self.db.execute(
                update(Order)
                .where(self._pending(order_id))
                .values(
                    payment_status=PaymentStatus.PAID,
                    order_status=OrderStatus.CONFIRMED,
                    paid_at=utcnow()
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.db.rollback()
                logger.info(f"Order {order_id} already settled, ignoring payment success")
                return False

            items = (await self.db.execute(
                select(OrderItem).where(OrderItem.order_id == order_id)
            )).scalars().all()

            for item in items:
                if item.product_id is None:
                    raise FulfillmentError(f"Product for {item.name} no longer exists")
                if not await ProductCRUD.decrement_stock(self.db, item.product_id, item.quantity):
                    raise FulfillmentError(f"Insufficient stock for {item.name}")

            await self.db.commit()
            logger.info(f"Order {order_id} paid and confirmed")
            return True

        except Exception as e:
            await self.db.rollback()
            logger.error(f"Fulfillment of order {order_id} failed: {e}")
            await self._compensate(order_id, f"Fulfillment failed: {e}")
            raise

    async def mark_failed(
        self,
        order_id: uuid.UUID,
        reason: str,
        user_id: Optional[str] = None,
        session_id: Any = ANY_SESSION
    ) -> bool:
        """
        Cancel a pending order whose payment did not go through

        Gated on payment PENDING, so an order that has been paid is never
        cancelled by a late failure or expiry notification.

        Args:
            session_id: When given, the order is only cancelled while this is
                still its current checkout session (None: no session started).
                A superseded session failing leaves the newer one payable.

        Returns:
            True if the order moved to CANCELLED/FAILED
        """
        condition = self._pending(order_id)
        if user_id is not None:
            condition = and_(condition, Order.user_id == user_id)
        if session_id is None:
            condition = and_(condition, Order.checkout_session_id.is_(None))
        elif session_id is not ANY_SESSION:
            condition = and_(condition, Order.checkout_session_id == session_id)

        now = utcnow()
        result = await self.db.execute(
            update(Order)
            .where(condition)
            .values(
                order_status=OrderStatus.CANCELLED,
                payment_status=PaymentStatus.FAILED,
                cancelled_at=now,
                cancellation_reason=reason[:500]
            )
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        cancelled = result.rowcount == 1
        if cancelled:
            logger.info(f"Order {order_id} cancelled: {reason}")
        return cancelled

    async def _compensate(self, order_id: uuid.UUID, reason: str) -> None:
        try:
            await self.mark_failed(order_id, reason)
        except Exception:
            await self.db.rollback()
            logger.exception(f"Could not cancel order {order_id} after failed fulfillment")

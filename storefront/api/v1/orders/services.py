"""
Order service layer
Handles order placement, cancellation and admin status changes
"""

from typing import List, Optional, Dict, Any
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_
import uuid
import logging

from storefront.models import (
    Order, OrderItem, OrderStatus, PaymentStatus, PaymentMethod, Address, Product
)
from storefront.models.base import utcnow
from storefront.models.product import CENT
from storefront.core.exceptions import (
    NotFoundException,
    BadRequestException,
    ValidationException,
    ConflictException,
    InsufficientStockException,
    OrderNotCancellableException
)
from storefront.api.v1.cart.services import CartService
from storefront.api.v1.payments.fulfillment import FulfillmentGuard
from storefront.api.v1.products.crud import ProductCRUD
from storefront.utils.pagination import paginate
from .schemas import OrderCreate
from .state_machine import OrderStateMachine, PaymentStateMachine

logger = logging.getLogger(__name__)

class OrderService:
    """Order service for business logic"""

    def __init__(self, db: AsyncSession, clerk=None):
        self.db = db
        self.clerk = clerk
        self.cart_service = CartService(db)
        self.guard = FulfillmentGuard(db)
        self.state_machine = OrderStateMachine()
        self.payment_state_machine = PaymentStateMachine()

    async def _load(self, order_id: uuid.UUID) -> Optional[Order]:
        # Conditional updates bypass the identity map
        result = await self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _get_or_404(self, order_id: uuid.UUID) -> Order:
        order = await self._load(order_id)
        if not order:
            raise NotFoundException("Order not found")
        return order

    async def create_order(self, user_id: str, data: OrderCreate) -> Order:
        """
        Create a new order from the submitted lines

        Prices are re-read from the catalog; the client's prices are never
        trusted. Cash-on-delivery orders take stock immediately and are
        confirmed; card orders wait for payment with stock untouched.

        Args:
            user_id: Identity provider user ID
            data: Order creation data

        Returns:
            Created order

        Raises:
            NotFoundException: If a product does not exist
            ValidationException: If a product is inactive
            InsufficientStockException: If stock not available
        """
        # Lines for the same product in different variants share its stock
        requested: Dict[uuid.UUID, int] = {}
        for line in data.items:
            requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity

        products: Dict[uuid.UUID, Product] = {}
        for product_id, quantity in requested.items():
            product = await ProductCRUD.get_by_id(self.db, product_id)
            if not product:
                raise NotFoundException(f"Product {product_id} not found")
            if not product.is_active:
                raise ValidationException(f"{product.name} is no longer available")
            if quantity > product.stock:
                raise InsufficientStockException(product.name, product.stock)
            products[product_id] = product

        order_items = []
        total_amount = Decimal("0.00")
        for line in data.items:
            product = products[line.product_id]
            price = Decimal(product.final_price)
            total_amount += price * line.quantity
            order_items.append(OrderItem(
                product_id=product.id,
                name=product.name,
                image=product.image,
                quantity=line.quantity,
                price=price,
                size=line.size,
                color=line.color
            ))

        is_cod = data.payment_method == PaymentMethod.COD
        order = Order(
            user_id=user_id,
            address=Address(**data.shipping_address.model_dump()),
            payment_method=data.payment_method,
            order_status=OrderStatus.CONFIRMED if is_cod else OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            total_amount=total_amount.quantize(CENT),
            items=order_items
        )
        self.db.add(order)

        if is_cod:
            for product_id, quantity in requested.items():
                name = products[product_id].name
                if not await ProductCRUD.decrement_stock(self.db, product_id, quantity):
                    await self.db.rollback()
                    available = await ProductCRUD.read_stock(self.db, product_id) or 0
                    raise InsufficientStockException(name, available)

        await self.cart_service.empty_after_checkout(user_id)
        await self.db.commit()

        logger.info(
            f"Order {order.id} created for {user_id}: "
            f"{data.payment_method.value} {order.total_amount}"
        )
        return await self._load(order.id)

    async def list_orders(self, user_id: str) -> List[Order]:
        result = await self.db.execute(
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_order(self, user_id: str, order_id: uuid.UUID) -> Order:
        """Get an order owned by the user; other users' orders are reported as missing"""
        order = await self._load(order_id)
        if not order or order.user_id != user_id:
            raise NotFoundException("Order not found")
        return order

    async def list_all_orders(
        self,
        page: int = 1,
        size: int = 20,
        order_status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None
    ) -> Dict[str, Any]:
        query = select(Order)
        if order_status:
            query = query.where(Order.order_status == order_status)
        if payment_status:
            query = query.where(Order.payment_status == payment_status)
        query = query.order_by(Order.created_at.desc())

        return await paginate(self.db, query, page, size)

    async def get_order_by_id(self, order_id: uuid.UUID) -> Dict[str, Any]:
        """
        Admin view of an order, with the customer's profile

        A failing identity provider lookup leaves `user` empty instead of
        failing the request.
        """
        order = await self._get_or_404(order_id)

        user = None
        if self.clerk is not None:
            try:
                user = await self.clerk.get_user(order.user_id)
            except Exception as e:
                logger.warning(f"Could not load user {order.user_id} for order {order_id}: {e}")

        return {"order": order, "user": user}

    async def cancel_order(
        self,
        user_id: str,
        order_id: uuid.UUID,
        reason: Optional[str] = None
    ) -> Order:
        """
        Cancel an unpaid order

        Allowed only while order and payment are both PENDING; the order
        ends CANCELLED/FAILED so a payment confirmation arriving later is
        ignored.

        Raises:
            NotFoundException: If the order is not the user's
            OrderNotCancellableException: If the order has moved on
        """
        order = await self.get_order(user_id, order_id)
        if order.order_status != OrderStatus.PENDING or order.payment_status != PaymentStatus.PENDING:
            raise OrderNotCancellableException()

        cancelled = await self.guard.mark_failed(
            order_id,
            reason or "Cancelled by customer",
            user_id=user_id
        )
        if not cancelled:
            # Settled between the read and the update
            raise OrderNotCancellableException()

        return await self._load(order_id)

    async def update_order_status(self, order_id: uuid.UUID, new_status: OrderStatus) -> Order:
        """
        Move an order along its lifecycle

        Raises:
            NotFoundException: If order not found
            BadRequestException: If the transition is not allowed
            ConflictException: If the order changed concurrently
        """
        order = await self._get_or_404(order_id)
        current_status = order.order_status

        if not self.state_machine.can_transition(current_status, new_status):
            raise BadRequestException(
                f"Cannot change order status from {current_status.value} to {new_status.value}",
                error_code="INVALID_STATUS_TRANSITION"
            )

        if current_status == OrderStatus.PENDING:
            # Unpaid order; cancel through the same gate as payment failures
            updated = await self.guard.mark_failed(order_id, "Cancelled by admin")
        else:
            values: Dict[str, Any] = {"order_status": new_status}
            if new_status == OrderStatus.CANCELLED:
                values["cancelled_at"] = utcnow()
                values["cancellation_reason"] = "Cancelled by admin"

            result = await self.db.execute(
                update(Order)
                .where(and_(Order.id == order_id, Order.order_status == current_status))
                .values(**values)
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
            updated = result.rowcount == 1

        if not updated:
            raise ConflictException("Order was modified concurrently, reload and retry")

        logger.info(f"Order {order_id} status {current_status.value} -> {new_status.value}")
        return await self._load(order_id)

    async def update_payment_status(self, order_id: uuid.UUID, new_status: PaymentStatus) -> Order:
        """
        Record a manual payment change: cash collected for COD, or a refund

        Raises:
            NotFoundException: If order not found
            BadRequestException: If the change is not allowed
            ConflictException: If the order changed concurrently
        """
        order = await self._get_or_404(order_id)
        current_status = order.payment_status

        if not self.payment_state_machine.can_transition(order.payment_method, current_status, new_status):
            raise BadRequestException(
                f"Cannot change payment status from {current_status.value} to {new_status.value} "
                f"for {order.payment_method.value} orders",
                error_code="INVALID_STATUS_TRANSITION"
            )

        values: Dict[str, Any] = {"payment_status": new_status}
        if new_status == PaymentStatus.PAID:
            values["paid_at"] = utcnow()

        result = await self.db.execute(
            update(Order)
            .where(and_(Order.id == order_id, Order.payment_status == current_status))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        if result.rowcount != 1:
            raise ConflictException("Order was modified concurrently, reload and retry")

        logger.info(f"Order {order_id} payment {current_status.value} -> {new_status.value}")
        return await self._load(order_id)

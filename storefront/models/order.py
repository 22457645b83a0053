"""Order model with independent order and payment status axes"""

from sqlalchemy import Column, String, Numeric, Integer, Enum, ForeignKey, Index, DateTime, Uuid
from sqlalchemy.orm import relationship
from decimal import Decimal
import enum

from .base import Base, TimestampedModel, UUIDModel
from .product import CENT

class OrderStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    FULFILLED = "FULFILLED"
    CANCELLED = "CANCELLED"

class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

class PaymentMethod(str, enum.Enum):
    COD = "COD"
    CREDIT_CARD = "CREDIT_CARD"

class Order(Base, TimestampedModel, UUIDModel):
    """Placed order; items are frozen, only status fields change"""

    __tablename__ = "orders"

    user_id = Column(String(255), nullable=False, index=True)
    address_id = Column(Uuid(as_uuid=True), ForeignKey("addresses.id"), nullable=False)

    # Status
    order_status = Column(Enum(OrderStatus), default=OrderStatus.PENDING, nullable=False, index=True)
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)

    # Amounts
    total_amount = Column(Numeric(10, 2), nullable=False)

    # Payment
    checkout_session_id = Column(String(255), nullable=True, unique=True)

    # Timestamps
    paid_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(String(500), nullable=True)

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    address = relationship("Address", lazy="selectin")

    __table_args__ = (
        Index("idx_orders_user_created", "user_id", "created_at"),
        Index("idx_orders_status_pair", "order_status", "payment_status"),
    )

    def items_total(self) -> Decimal:
        """Sum of frozen item price * quantity"""
        return sum(
            (Decimal(item.price) * item.quantity for item in self.items),
            Decimal("0.00")
        ).quantize(CENT)

class OrderItem(Base, TimestampedModel, UUIDModel):
    """Order line, snapshotted at checkout"""

    __tablename__ = "order_items"

    order_id = Column(Uuid(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="SET NULL"), nullable=True)

    name = Column(String(255), nullable=False)
    image = Column(String(500), nullable=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    size = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)

    order = relationship("Order", back_populates="items")

"""
Shopping cart model
One cart per user, with snapshot line items and derived totals
"""

from sqlalchemy import Column, String, Integer, Numeric, ForeignKey, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from decimal import Decimal

from .base import Base, TimestampedModel, UUIDModel
from .product import CENT

class Cart(Base, TimestampedModel, UUIDModel):
    """Per-user shopping cart"""

    __tablename__ = "carts"

    user_id = Column(String(255), nullable=False, unique=True, index=True)

    # Derived from items; recalculated after every mutation
    total_items = Column(Integer, nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.position",
        lazy="selectin",
    )

    def find_item(self, product_id, size=None, color=None):
        """Exact match on (product, size, color); a missing variant matches only a missing variant"""
        for item in self.items:
            if item.product_id == product_id and item.size == size and item.color == color:
                return item
        return None

    def next_position(self) -> int:
        return max((item.position for item in self.items), default=-1) + 1

    def recalculate_totals(self) -> None:
        self.total_items = sum(item.quantity for item in self.items)
        self.total_amount = sum(
            (Decimal(item.final_price) * item.quantity for item in self.items),
            Decimal("0.00")
        ).quantize(CENT)

class CartItem(Base, TimestampedModel, UUIDModel):
    """Shopping cart line with product snapshot"""

    __tablename__ = "cart_items"

    cart_id = Column(Uuid(as_uuid=True), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    # Snapshot, refreshed on update
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    final_price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=True)
    stock = Column(Integer, nullable=False, default=0)

    quantity = Column(Integer, nullable=False, default=1)
    size = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    position = Column(Integer, nullable=False, default=0)

    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", "size", "color", name="uq_cart_product_variant"),
        CheckConstraint("quantity > 0", name="check_positive_cart_quantity"),
    )

    @property
    def subtotal(self) -> Decimal:
        return (Decimal(self.final_price) * self.quantity).quantize(CENT)

    def snapshot(self, product) -> None:
        """Copy current product pricing and stock onto the line"""
        self.name = product.name
        self.price = product.price
        self.final_price = product.final_price
        self.image = product.image
        self.stock = product.stock

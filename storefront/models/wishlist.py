"""
Wishlist model for saved products
Set semantics: one line per product, no variants or quantities
"""

from sqlalchemy import Column, String, Integer, Numeric, Boolean, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel, utcnow

class Wishlist(Base, TimestampedModel, UUIDModel):
    """Per-user wishlist"""

    __tablename__ = "wishlists"

    user_id = Column(String(255), nullable=False, unique=True, index=True)
    total_items = Column(Integer, nullable=False, default=0)

    items = relationship(
        "WishlistItem",
        back_populates="wishlist",
        cascade="all, delete-orphan",
        order_by="WishlistItem.added_at",
        lazy="selectin",
    )

    def find_item(self, product_id):
        for item in self.items:
            if item.product_id == product_id:
                return item
        return None

class WishlistItem(Base, TimestampedModel, UUIDModel):
    """Saved product with snapshot"""

    __tablename__ = "wishlist_items"

    wishlist_id = Column(Uuid(as_uuid=True), ForeignKey("wishlists.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    final_price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(500), nullable=True)
    in_stock = Column(Boolean, nullable=False, default=True)
    added_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    wishlist = relationship("Wishlist", back_populates="items")

    __table_args__ = (
        UniqueConstraint("wishlist_id", "product_id", name="uq_wishlist_product"),
    )

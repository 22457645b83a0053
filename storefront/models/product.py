"""Product model with derived final price"""

from sqlalchemy import Column, String, Text, Numeric, Integer, Boolean, JSON, ForeignKey, Index, CheckConstraint, Uuid, event
from sqlalchemy.orm import relationship
from decimal import Decimal, ROUND_HALF_UP

from .base import Base, TimestampedModel, UUIDModel

CENT = Decimal("0.01")

class Product(Base, TimestampedModel, UUIDModel):
    """Catalog product; stock is the only field mutated outside admin CRUD"""

    __tablename__ = "products"

    # Basic info
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=False)

    # Categorization
    category_id = Column(Uuid(as_uuid=True), ForeignKey("categories.id"), nullable=False)
    brand = Column(String(100), nullable=True, index=True)
    material = Column(String(100), nullable=True)
    gender = Column(String(20), nullable=False, default="unisex")

    # Variants
    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)

    # Pricing
    price = Column(Numeric(10, 2), nullable=False, index=True)
    discount = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    final_price = Column(Numeric(10, 2), nullable=False)

    # Inventory
    stock = Column(Integer, nullable=False, default=0)
    sales_count = Column(Integer, nullable=False, default=0)

    # Flags
    is_featured = Column(Boolean, nullable=False, default=False, index=True)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    # Review stats
    average_rating = Column(Numeric(3, 2), nullable=False, default=Decimal("0"))
    review_count = Column(Integer, nullable=False, default=0)

    # Relationships
    category = relationship("Category", back_populates="products")

    # Constraints
    __table_args__ = (
        CheckConstraint("price > 0", name="check_positive_price"),
        CheckConstraint("stock >= 0", name="check_non_negative_stock"),
        CheckConstraint("discount >= 0 AND discount <= 100", name="check_discount_range"),
        Index("idx_products_category_active", "category_id", "is_active"),
    )

    @staticmethod
    def compute_final_price(price, discount) -> Decimal:
        """final_price = price * (1 - discount/100), rounded to cents"""
        price = Decimal(str(price))
        discount = Decimal(str(discount or 0))
        return (price * (1 - discount / 100)).quantize(CENT, rounding=ROUND_HALF_UP)

    @property
    def in_stock(self) -> bool:
        return self.stock > 0

@event.listens_for(Product, "before_insert")
@event.listens_for(Product, "before_update")
def _refresh_final_price(mapper, connection, target: Product) -> None:
    target.final_price = Product.compute_final_price(target.price, target.discount)

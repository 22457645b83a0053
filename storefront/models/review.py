"""Product review model"""

from sqlalchemy import Column, String, Text, Integer, Boolean, ForeignKey, CheckConstraint, Index, Uuid

from .base import Base, TimestampedModel, UUIDModel

class Review(Base, TimestampedModel, UUIDModel):
    __tablename__ = "reviews"

    product_id = Column(Uuid(as_uuid=True), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(255), nullable=True, index=True)
    user_name = Column(String(100), nullable=False)
    title = Column(String(200), nullable=False)
    comment = Column(Text, nullable=False)
    rating = Column(Integer, nullable=False)
    verified = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="check_rating_range"),
        Index("idx_reviews_product_created", "product_id", "created_at"),
    )

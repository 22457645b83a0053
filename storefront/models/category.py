"""
Category model for product categorization
"""

from sqlalchemy import Column, String, Boolean, Text
from sqlalchemy.orm import relationship

from .base import Base, TimestampedModel, UUIDModel

class Category(Base, TimestampedModel, UUIDModel):
    """Product category"""

    __tablename__ = "categories"

    name = Column(String(100), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    # Relationships
    products = relationship("Product", back_populates="category")

"""Local mirror of identity provider users"""

from sqlalchemy import Column, String, Boolean, DateTime

from .base import Base, TimestampedModel, UUIDModel, utcnow

class Customer(Base, TimestampedModel, UUIDModel):
    __tablename__ = "customers"

    clerk_id = Column(String(255), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=False, default="")
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=False, index=True)
    image_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

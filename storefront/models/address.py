"""Shipping address captured at checkout"""

from sqlalchemy import Column, String

from .base import Base, TimestampedModel, UUIDModel

class Address(Base, TimestampedModel, UUIDModel):
    __tablename__ = "addresses"

    line1 = Column(String(255), nullable=False)
    line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=False)

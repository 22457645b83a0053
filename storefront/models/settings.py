"""Singleton store settings document"""

from sqlalchemy import Column, String, JSON

from .base import Base, TimestampedModel

SETTINGS_ID = "store_settings"

DEFAULT_STORE_SETTINGS = {
    "name": "Mebius",
    "description": "Your premier destination for fashion-forward clothing and accessories.",
    "email": "support@mebius.com",
    "phone": "+1 (234) 567-8900",
    "address": "123 Fashion Street",
    "city": "Style City",
    "state": "SC",
    "zip_code": "12345",
    "open_time": "09:00",
    "close_time": "18:00",
    "is_open": True,
    "logo": "",
}

DEFAULT_PAYMENT_SETTINGS = {
    "stripe": {"enabled": True},
    "cash_on_delivery": {"enabled": True},
    "currency": {"code": "USD", "symbol": "$"},
    "tax": {"enabled": False, "rate": 0, "name": "Tax"},
}

class StoreSettings(Base, TimestampedModel):
    __tablename__ = "store_settings"

    id = Column(String(50), primary_key=True, default=SETTINGS_ID)
    store = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_STORE_SETTINGS))
    payment = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_PAYMENT_SETTINGS))

"""
Payment schemas
"""

from pydantic import BaseModel
from typing import Optional
import uuid

from storefront.models.order import OrderStatus, PaymentStatus

class CheckoutSessionCreate(BaseModel):
    order_id: uuid.UUID

class CheckoutSessionResponse(BaseModel):
    """Embedded checkout bootstrap data"""
    session_id: str
    client_secret: str

class SessionStatusResponse(BaseModel):
    session_id: str
    status: Optional[str]
    payment_status: Optional[str]
    order_id: Optional[uuid.UUID] = None
    order_status: Optional[OrderStatus] = None
    order_payment_status: Optional[PaymentStatus] = None

class WebhookAck(BaseModel):
    received: bool = True

"""
Order schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime
from decimal import Decimal
import uuid

from storefront.models.order import OrderStatus, PaymentStatus, PaymentMethod
from storefront.api.v1.cart.schemas import VariantSelector

class OrderItemCreate(VariantSelector):
    """Order line submitted at checkout"""
    product_id: uuid.UUID
    quantity: int = Field(..., ge=1, le=100)

class ShippingAddress(BaseModel):
    """Shipping address"""
    line1: str = Field(..., min_length=1, max_length=255)
    line2: Optional[str] = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=7, max_length=30)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        digits = v.replace(" ", "").replace("-", "").replace("+", "")
        if not digits.isdigit():
            raise ValueError("Phone number must contain only digits, spaces, dashes or a leading +")
        return v

class OrderCreate(BaseModel):
    """Schema for creating order"""
    items: List[OrderItemCreate] = Field(..., min_length=1)
    shipping_address: ShippingAddress
    payment_method: PaymentMethod

class OrderStatusUpdate(BaseModel):
    order_status: OrderStatus

class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus

class OrderCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)

class OrderItemResponse(BaseModel):
    """Order item response"""
    id: uuid.UUID
    product_id: Optional[uuid.UUID]
    name: str
    image: Optional[str]
    quantity: int
    price: Decimal
    size: Optional[str]
    color: Optional[str]

    class Config:
        from_attributes = True

class AddressResponse(BaseModel):
    line1: str
    line2: Optional[str]
    city: str
    phone: str

    class Config:
        from_attributes = True

class OrderResponse(BaseModel):
    """Order response"""
    id: uuid.UUID
    user_id: str
    order_status: OrderStatus
    payment_status: PaymentStatus
    payment_method: PaymentMethod
    total_amount: Decimal
    checkout_session_id: Optional[str]
    paid_at: Optional[datetime]
    cancelled_at: Optional[datetime]
    cancellation_reason: Optional[str]
    items: List[OrderItemResponse]
    address: AddressResponse
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class AdminOrderResponse(OrderResponse):
    """Order with the customer's identity provider profile attached"""
    user: Optional[Dict[str, Any]] = None

"""
Cart schemas for request/response validation
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import uuid

# Clients send these when a variant was never chosen
EMPTY_VARIANT_VALUES = {"", "undefined", "null", "none"}

def normalize_variant(value: Optional[str]) -> Optional[str]:
    """Collapse empty/placeholder variant values to None so they match only unset variants"""
    if value is None:
        return None
    value = value.strip()
    if value.lower() in EMPTY_VARIANT_VALUES:
        return None
    return value

class VariantSelector(BaseModel):
    """Optional size/color pair identifying a cart line"""
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)

    @field_validator("size", "color", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_variant(value) if isinstance(value, str) else value

class CartItemCreate(VariantSelector):
    """Schema for adding item to cart"""
    product_id: uuid.UUID
    quantity: int = Field(1, ge=1, le=100)

class CartItemUpdate(VariantSelector):
    """Schema for updating cart item; quantity 0 removes the line"""
    quantity: int = Field(..., ge=0, le=100)

class CartSyncLine(VariantSelector):
    """One locally applied line pushed by the client"""
    product_id: uuid.UUID
    quantity: int = Field(..., ge=0, le=100)

class CartSyncRequest(BaseModel):
    items: List[CartSyncLine] = Field(default_factory=list, max_length=100)

class CartItemResponse(BaseModel):
    """Schema for cart item response"""
    id: uuid.UUID
    product_id: uuid.UUID
    name: str
    price: Decimal
    final_price: Decimal
    image: Optional[str]
    stock: int
    quantity: int
    size: Optional[str]
    color: Optional[str]
    subtotal: Decimal

    class Config:
        from_attributes = True

class CartResponse(BaseModel):
    """Schema for complete cart response"""
    id: uuid.UUID
    user_id: str
    items: List[CartItemResponse]
    total_items: int
    total_amount: Decimal
    updated_at: datetime

    class Config:
        from_attributes = True

class CartCountResponse(BaseModel):
    count: int

class UnsyncedLine(BaseModel):
    """A pushed line the server refused, with the reason"""
    product_id: uuid.UUID
    size: Optional[str]
    color: Optional[str]
    quantity: int
    reason: str
    error_code: Optional[str] = None

class CartSyncResponse(BaseModel):
    cart: CartResponse
    unsynced: List[UnsyncedLine]
    synced: bool

"""Wishlist schemas"""

from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime
from decimal import Decimal
import uuid

class WishlistItemCreate(BaseModel):
    product_id: uuid.UUID

class WishlistItemResponse(BaseModel):
    product_id: uuid.UUID
    name: str
    price: Decimal
    final_price: Decimal
    image: Optional[str]
    in_stock: bool
    added_at: datetime

    class Config:
        from_attributes = True

class WishlistResponse(BaseModel):
    id: uuid.UUID
    user_id: str
    items: List[WishlistItemResponse]
    total_items: int

    class Config:
        from_attributes = True

class WishlistCountResponse(BaseModel):
    count: int

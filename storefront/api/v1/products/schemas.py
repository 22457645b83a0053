"""
Product schemas for request/response validation
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime
from decimal import Decimal
import uuid

from storefront.api.v1.reviews.schemas import ReviewResponse

Gender = Literal["men", "women", "unisex", "kids"]

class ProductBase(BaseModel):
    """Base schema for products"""
    name: str = Field(..., min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    category_id: uuid.UUID
    image: str = Field(..., min_length=1, max_length=500)
    price: Decimal = Field(..., gt=0, decimal_places=2)
    discount: Decimal = Field(Decimal("0"), ge=0, le=100)
    stock: int = Field(0, ge=0)
    sizes: List[str] = Field(default_factory=list)
    colors: List[str] = Field(default_factory=list)
    material: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    gender: Gender = "unisex"
    is_featured: bool = False
    is_active: bool = True

class ProductCreate(ProductBase):
    """Schema for creating product"""
    pass

class ProductUpdate(BaseModel):
    """Schema for updating product; omitted fields are left alone"""
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    category_id: Optional[uuid.UUID] = None
    image: Optional[str] = Field(None, min_length=1, max_length=500)
    price: Optional[Decimal] = Field(None, gt=0, decimal_places=2)
    discount: Optional[Decimal] = Field(None, ge=0, le=100)
    stock: Optional[int] = Field(None, ge=0)
    sizes: Optional[List[str]] = None
    colors: Optional[List[str]] = None
    material: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    gender: Optional[Gender] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None

class ProductResponse(ProductBase):
    """Schema for product response"""
    id: uuid.UUID
    final_price: Decimal
    sales_count: int
    average_rating: Decimal
    review_count: int
    in_stock: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class ProductListResponse(BaseModel):
    """Schema for paginated product list"""
    items: List[ProductResponse]
    total: int
    page: int
    size: int
    pages: int

class ProductDetailResponse(ProductResponse):
    """Single product with its reviews, newest first"""
    reviews: List[ReviewResponse] = []

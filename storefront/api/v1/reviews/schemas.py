"""
Review schemas
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid

class ReviewCreate(BaseModel):
    """Schema for creating a review"""
    product_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=200)
    comment: str = Field(..., min_length=1, max_length=2000)
    rating: int = Field(..., ge=1, le=5)
    user_name: str = Field(..., min_length=1, max_length=100)

class ReviewResponse(BaseModel):
    id: uuid.UUID
    product_id: uuid.UUID
    user_id: Optional[str]
    user_name: str
    title: str
    comment: str
    rating: int
    verified: bool
    created_at: datetime

    class Config:
        from_attributes = True

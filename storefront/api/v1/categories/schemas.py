"""Category schemas"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
import uuid

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = Field(None, max_length=500)
    is_active: bool = True

class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

class CategoryResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str]
    image: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True

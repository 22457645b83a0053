"""Customer schemas"""

from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
import uuid

class CustomerResponse(BaseModel):
    id: uuid.UUID
    clerk_id: str
    first_name: str
    last_name: str
    email: str
    image_url: Optional[str]
    is_active: bool
    last_login_at: datetime
    created_at: datetime

    class Config:
        from_attributes = True

class CustomerListResponse(BaseModel):
    customers: List[CustomerResponse]
    count: int

"""Upload signing schemas"""

from pydantic import BaseModel, Field
from typing import Literal, Optional

class UploadSignRequest(BaseModel):
    folder: Literal["products", "categories", "store"] = "products"
    public_id: Optional[str] = Field(None, max_length=200, pattern=r"^[A-Za-z0-9_\-/]+$")

class UploadSignResponse(BaseModel):
    """Fields the browser posts alongside the file"""
    signature: str
    timestamp: int
    folder: str
    public_id: Optional[str] = None
    api_key: str
    cloud_name: str
    upload_url: str

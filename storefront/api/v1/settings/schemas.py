"""
Store settings schemas
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, Union, Literal
from datetime import datetime

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"

class StoreInfo(BaseModel):
    """Public store profile; optional text fields default to empty strings"""
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    email: Union[EmailStr, Literal[""]] = ""
    phone: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    open_time: str = Field(..., pattern=TIME_PATTERN)
    close_time: str = Field(..., pattern=TIME_PATTERN)
    is_open: bool
    logo: str = ""

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Store name is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        if v and len(v) < 10:
            raise ValueError("Phone must be at least 10 characters")
        return v

    @field_validator("logo")
    @classmethod
    def validate_logo(cls, v):
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Logo must be an absolute URL")
        return v

class ToggleSetting(BaseModel):
    enabled: bool

class StripeSetting(ToggleSetting):
    public_key: Optional[str] = None

class CurrencySetting(BaseModel):
    code: str = Field(..., min_length=3, max_length=3)
    symbol: str = Field(..., min_length=1, max_length=5)

class TaxSetting(BaseModel):
    enabled: bool = False
    rate: float = Field(0, ge=0, le=100)
    name: str = Field("Tax", min_length=1)

class PaymentSettings(BaseModel):
    stripe: StripeSetting
    cash_on_delivery: ToggleSetting
    currency: CurrencySetting
    tax: TaxSetting = TaxSetting()

class StoreSettingsUpdate(BaseModel):
    store: StoreInfo

class PaymentSettingsUpdate(BaseModel):
    payment: PaymentSettings

class SettingsUpdate(BaseModel):
    store: Optional[StoreInfo] = None
    payment: Optional[PaymentSettings] = None

class SettingsResponse(BaseModel):
    store: StoreInfo
    payment: PaymentSettings
    updated_at: Optional[datetime] = None

"""
Store settings API routes
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.cache import get_cache
from storefront.core.database import get_db
from storefront.core.security import require_admin
from storefront.core.exceptions import ValidationException
from .schemas import (
    StoreInfo,
    PaymentSettings,
    SettingsResponse,
    SettingsUpdate,
    StoreSettingsUpdate,
    PaymentSettingsUpdate
)
from .services import SettingsService

router = APIRouter()

@router.get("/store", response_model=StoreInfo, summary="Public store profile")
async def get_store_settings(
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache)
):
    return await SettingsService(db, cache).get_store_info()

@router.get("", response_model=SettingsResponse, summary="Get all settings")
async def get_settings(
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache)
):
    return await SettingsService(db, cache).get_settings()

@router.put("", response_model=SettingsResponse, summary="Update settings")
async def update_settings(
    data: SettingsUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache)
):
    if data.store is None and data.payment is None:
        raise ValidationException("Nothing to update")
    return await SettingsService(db, cache).update_settings(store=data.store, payment=data.payment)

@router.put("/store", response_model=StoreInfo, summary="Update store profile")
async def update_store_settings(
    data: StoreSettingsUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache)
):
    document = await SettingsService(db, cache).update_settings(store=data.store)
    return document["store"]

@router.put("/payment", response_model=PaymentSettings, summary="Update payment settings")
async def update_payment_settings(
    data: PaymentSettingsUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    cache=Depends(get_cache)
):
    document = await SettingsService(db, cache).update_settings(payment=data.payment)
    return document["payment"]

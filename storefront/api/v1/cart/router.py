"""Cart router; every route acts on the authenticated user's cart"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import uuid

from storefront.core.database import get_db
from storefront.core.security import get_current_user
from .services import CartService
from .schemas import (
    CartItemCreate,
    CartItemUpdate,
    CartResponse,
    CartCountResponse,
    CartSyncRequest,
    CartSyncResponse,
    normalize_variant
)

router = APIRouter()

@router.get("", response_model=CartResponse)
async def get_cart(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get cart, creating it on first access"""
    return await CartService(db).get_cart(current_user["id"])

@router.get("/count", response_model=CartCountResponse)
async def get_cart_count(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    count = await CartService(db).item_count(current_user["id"])
    return CartCountResponse(count=count)

@router.post("/add", response_model=CartResponse)
async def add_to_cart(
    item_data: CartItemCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Add item to cart"""
    return await CartService(db).add_item(current_user["id"], item_data)

@router.put("/update/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: uuid.UUID,
    update_data: CartItemUpdate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Update cart item quantity"""
    return await CartService(db).update_item(current_user["id"], product_id, update_data)

@router.delete("/remove/{product_id}", response_model=CartResponse)
async def remove_from_cart(
    product_id: uuid.UUID,
    size: Optional[str] = Query(None, max_length=50),
    color: Optional[str] = Query(None, max_length=50),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Remove the line matching the exact variant"""
    return await CartService(db).remove_item(
        current_user["id"],
        product_id,
        size=normalize_variant(size),
        color=normalize_variant(color)
    )

@router.delete("/clear", response_model=CartResponse)
async def clear_cart(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await CartService(db).clear(current_user["id"])

@router.put("/sync", response_model=CartSyncResponse)
async def sync_cart(
    sync_data: CartSyncRequest,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Push locally applied lines; rejected lines come back in `unsynced`"""
    cart, unsynced = await CartService(db).sync(current_user["id"], sync_data.items)
    return CartSyncResponse(
        cart=CartResponse.model_validate(cart),
        unsynced=unsynced,
        synced=not unsynced
    )

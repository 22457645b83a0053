"""Wishlist router"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from storefront.core.database import get_db
from storefront.core.security import get_current_user
from .services import WishlistService
from .schemas import WishlistItemCreate, WishlistResponse, WishlistCountResponse

router = APIRouter()

@router.get("", response_model=WishlistResponse)
async def get_wishlist(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await WishlistService(db).get_wishlist(current_user["id"])

@router.get("/count", response_model=WishlistCountResponse)
async def get_wishlist_count(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return WishlistCountResponse(count=await WishlistService(db).item_count(current_user["id"]))

@router.post("/add", response_model=WishlistResponse)
async def add_to_wishlist(
    data: WishlistItemCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await WishlistService(db).add_item(current_user["id"], data.product_id)

@router.delete("/remove/{product_id}", response_model=WishlistResponse)
async def remove_from_wishlist(
    product_id: uuid.UUID,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await WishlistService(db).remove_item(current_user["id"], product_id)

@router.delete("/clear", response_model=WishlistResponse)
async def clear_wishlist(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await WishlistService(db).clear(current_user["id"])

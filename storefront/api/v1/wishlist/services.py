"""
Wishlist service layer
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
import uuid

from storefront.models import Wishlist, WishlistItem
from storefront.core.exceptions import NotFoundException, ValidationException
from storefront.api.v1.products.crud import ProductCRUD

class WishlistService:
    """Per-user wishlist with set semantics on product id"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_wishlist(self, user_id: str) -> Optional[Wishlist]:
        result = await self.db.execute(
            select(Wishlist).where(Wishlist.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def get_wishlist(self, user_id: str) -> Wishlist:
        """Get the wishlist, creating an empty one on first access"""
        wishlist = await self._find_wishlist(user_id)
        if wishlist is not None:
            return wishlist

        wishlist = Wishlist(user_id=user_id, total_items=0, items=[])
        self.db.add(wishlist)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            wishlist = await self._find_wishlist(user_id)
        return wishlist

    async def add_item(self, user_id: str, product_id: uuid.UUID) -> Wishlist:
        """
        Add product to wishlist

        Raises:
            NotFoundException: If product not found
            ValidationException: If the product is already saved
        """
        product = await ProductCRUD.get_by_id(self.db, product_id)
        if not product:
            raise NotFoundException("Product not found")

        wishlist = await self.get_wishlist(user_id)
        if wishlist.find_item(product_id):
            raise ValidationException("Item already in wishlist", error_code="DUPLICATE_WISHLIST_ITEM")

        wishlist.items.append(WishlistItem(
            product_id=product.id,
            name=product.name,
            price=product.price,
            final_price=product.final_price,
            image=product.image,
            in_stock=product.in_stock
        ))
        wishlist.total_items = len(wishlist.items)
        await self.db.commit()
        return wishlist

    async def remove_item(self, user_id: str, product_id: uuid.UUID) -> Wishlist:
        wishlist = await self._find_wishlist(user_id)
        if not wishlist:
            raise NotFoundException("Wishlist not found")

        item = wishlist.find_item(product_id)
        if not item:
            raise NotFoundException("Item not found in wishlist")

        wishlist.items.remove(item)
        wishlist.total_items = len(wishlist.items)
        await self.db.commit()
        return wishlist

    async def clear(self, user_id: str) -> Wishlist:
        wishlist = await self._find_wishlist(user_id)
        if not wishlist:
            raise NotFoundException("Wishlist not found")

        wishlist.items.clear()
        wishlist.total_items = 0
        await self.db.commit()
        return wishlist

    async def item_count(self, user_id: str) -> int:
        wishlist = await self._find_wishlist(user_id)
        return wishlist.total_items if wishlist else 0

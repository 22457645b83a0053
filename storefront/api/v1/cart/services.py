"""
Cart service layer
Handles shopping cart business logic
"""

from typing import List, Optional, Tuple
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
import uuid
import logging

from storefront.models import Cart, CartItem, Product
from storefront.core.exceptions import (
    StorefrontException,
    NotFoundException,
    ValidationException,
    InsufficientStockException
)
from storefront.api.v1.products.crud import ProductCRUD
from .schemas import CartItemCreate, CartItemUpdate, CartSyncLine, UnsyncedLine

logger = logging.getLogger(__name__)

class CartService:
    """Shopping cart service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find_cart(self, user_id: str) -> Optional[Cart]:
        result = await self.db.execute(
            select(Cart).where(Cart.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def _get_available_product(self, product_id: uuid.UUID) -> Product:
        product = await ProductCRUD.get_by_id(self.db, product_id)
        if not product:
            raise NotFoundException("Product not found")
        if not product.is_active:
            raise ValidationException(f"{product.name} is no longer available")
        return product

    async def get_cart(self, user_id: str) -> Cart:
        """
        Get the user's cart, creating an empty one on first access

        Args:
            user_id: Identity provider user ID

        Returns:
            Cart with its items loaded
        """
        cart = await self._find_cart(user_id)
        if cart is not None:
            return cart

        cart = Cart(user_id=user_id, total_items=0, total_amount=Decimal("0.00"), items=[])
        self.db.add(cart)
        try:
            await self.db.commit()
        except IntegrityError:
            # Another request created it first
            await self.db.rollback()
            cart = await self._find_cart(user_id)
        return cart

    async def add_item(self, user_id: str, item_data: CartItemCreate) -> Cart:
        """
        Add item to cart

        A line with the same (product, size, color) has its quantity summed
        instead of a second line being created.

        Args:
            user_id: User ID
            item_data: Item to add

        Returns:
            Updated cart

        Raises:
            NotFoundException: If product not found
            ValidationException: If product inactive
            InsufficientStockException: If the resulting quantity exceeds stock
        """
        product = await self._get_available_product(item_data.product_id)
        if item_data.quantity > product.stock:
            raise InsufficientStockException(product.name, product.stock)

        cart = await self.get_cart(user_id)
        existing_item = cart.find_item(product.id, item_data.size, item_data.color)

        if existing_item:
            new_quantity = existing_item.quantity + item_data.quantity
            if new_quantity > product.stock:
                raise InsufficientStockException(product.name, product.stock)

            existing_item.quantity = new_quantity
            existing_item.snapshot(product)
        else:
            cart_item = CartItem(
                product_id=product.id,
                quantity=item_data.quantity,
                size=item_data.size,
                color=item_data.color,
                position=cart.next_position()
            )
            cart_item.snapshot(product)
            cart.items.append(cart_item)

        cart.recalculate_totals()
        await self.db.commit()
        return cart

    async def update_item(
        self,
        user_id: str,
        product_id: uuid.UUID,
        update_data: CartItemUpdate
    ) -> Cart:
        """
        Set a line's quantity; 0 removes it

        The line's price and stock snapshot are refreshed from the live product.

        Raises:
            NotFoundException: If cart, line or product not found
            InsufficientStockException: If not enough stock
        """
        cart = await self._find_cart(user_id)
        if not cart:
            raise NotFoundException("Cart not found")

        cart_item = cart.find_item(product_id, update_data.size, update_data.color)
        if not cart_item:
            raise NotFoundException("Item not found in cart")

        if update_data.quantity == 0:
            cart.items.remove(cart_item)
        else:
            product = await self._get_available_product(product_id)
            if update_data.quantity > product.stock:
                raise InsufficientStockException(product.name, product.stock)

            cart_item.quantity = update_data.quantity
            cart_item.snapshot(product)

        cart.recalculate_totals()
        await self.db.commit()
        return cart

    async def remove_item(
        self,
        user_id: str,
        product_id: uuid.UUID,
        size: Optional[str] = None,
        color: Optional[str] = None
    ) -> Cart:
        """
        Remove item from cart

        Raises:
            NotFoundException: If cart or exact variant line not found
        """
        cart = await self._find_cart(user_id)
        if not cart:
            raise NotFoundException("Cart not found")

        cart_item = cart.find_item(product_id, size, color)
        if not cart_item:
            raise NotFoundException("Item not found in cart")

        cart.items.remove(cart_item)
        cart.recalculate_totals()
        await self.db.commit()
        return cart

    async def clear(self, user_id: str) -> Cart:
        """
        Clear all items from cart, keeping the cart itself

        Raises:
            NotFoundException: If the user has no cart
        """
        cart = await self._find_cart(user_id)
        if not cart:
            raise NotFoundException("Cart not found")

        cart.items.clear()
        cart.recalculate_totals()
        await self.db.commit()
        return cart

    async def empty_after_checkout(self, user_id: str) -> None:
        """Empty the cart inside the caller's transaction; no-op without a cart"""
        cart = await self._find_cart(user_id)
        if cart:
            cart.items.clear()
            cart.recalculate_totals()

    async def item_count(self, user_id: str) -> int:
        cart = await self._find_cart(user_id)
        return cart.total_items if cart else 0

    async def sync(self, user_id: str, lines: List[CartSyncLine]) -> Tuple[Cart, List[UnsyncedLine]]:
        """
        Apply lines the client already applied locally

        Each line sets an absolute quantity (0 removes). Lines that fail
        validation are left untouched on the server and reported back so the
        client can reconcile its local copy.

        Returns:
            Authoritative cart and the lines that could not be applied
        """
        cart = await self.get_cart(user_id)
        unsynced: List[UnsyncedLine] = []

        # Last write wins for repeated lines
        latest = {(line.product_id, line.size, line.color): line for line in lines}

        for line in latest.values():
            try:
                await self._apply_line(cart, line)
            except (NotFoundException, ValidationException) as e:
                unsynced.append(self._unsynced(line, e))

        cart.recalculate_totals()
        await self.db.commit()

        if unsynced:
            logger.info(f"Cart sync for {user_id}: {len(unsynced)} of {len(lines)} lines rejected")
        return cart, unsynced

    async def _apply_line(self, cart: Cart, line: CartSyncLine) -> None:
        cart_item = cart.find_item(line.product_id, line.size, line.color)

        if line.quantity == 0:
            if cart_item:
                cart.items.remove(cart_item)
            return

        product = await self._get_available_product(line.product_id)
        if line.quantity > product.stock:
            raise InsufficientStockException(product.name, product.stock)

        if cart_item:
            cart_item.quantity = line.quantity
            cart_item.snapshot(product)
        else:
            cart_item = CartItem(
                product_id=product.id,
                quantity=line.quantity,
                size=line.size,
                color=line.color,
                position=cart.next_position()
            )
            cart_item.snapshot(product)
            cart.items.append(cart_item)

    @staticmethod
    def _unsynced(line: CartSyncLine, error: StorefrontException) -> UnsyncedLine:
        return UnsyncedLine(
            product_id=line.product_id,
            size=line.size,
            color=line.color,
            quantity=line.quantity,
            reason=error.detail,
            error_code=error.error_code
        )

"""
Product CRUD operations
Database operations for products, including the stock primitives used by checkout
"""

from typing import Optional, Dict, Any
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, and_, or_
import uuid

from storefront.models import Product
from storefront.utils.pagination import paginate

class ProductCRUD:
    """Product CRUD operations"""

    @staticmethod
    async def get_by_id(
        db: AsyncSession,
        product_id: uuid.UUID
    ) -> Optional[Product]:
        """Get product by ID"""
        result = await db.execute(
            select(Product).where(Product.id == product_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_multi(
        db: AsyncSession,
        page: int = 1,
        size: int = 20,
        filters: Optional[Dict[str, Any]] = None
    ) -> dict:
        """Get a page of active products with filters"""
        filters = filters or {}
        conditions = [Product.is_active.is_(True)]

        if filters.get("category_id"):
            conditions.append(Product.category_id == filters["category_id"])
        if filters.get("is_featured") is not None:
            conditions.append(Product.is_featured.is_(filters["is_featured"]))
        if filters.get("gender"):
            conditions.append(Product.gender == filters["gender"])
        if filters.get("min_price") is not None:
            conditions.append(Product.final_price >= filters["min_price"])
        if filters.get("max_price") is not None:
            conditions.append(Product.final_price <= filters["max_price"])
        if filters.get("search"):
            term = f"%{filters['search']}%"
            conditions.append(or_(Product.name.ilike(term), Product.description.ilike(term)))

        sort = filters.get("sort") or "newest"
        order_by = {
            "newest": Product.created_at.desc(),
            "price_asc": Product.final_price.asc(),
            "price_desc": Product.final_price.desc(),
            "popular": Product.sales_count.desc(),
            "rating": Product.average_rating.desc(),
        }.get(sort, Product.created_at.desc())

        query = select(Product).where(and_(*conditions)).order_by(order_by)
        return await paginate(db, query, page, size)

    @staticmethod
    async def create(
        db: AsyncSession,
        **kwargs
    ) -> Product:
        """Create new product"""
        product = Product(**kwargs)
        product.final_price = Product.compute_final_price(product.price, product.discount)
        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def update(
        db: AsyncSession,
        product: Product,
        **kwargs
    ) -> Product:
        """Update product; final price follows price and discount"""
        for key, value in kwargs.items():
            if hasattr(product, key):
                setattr(product, key, value)
        product.final_price = Product.compute_final_price(product.price, product.discount)

        db.add(product)
        await db.commit()
        await db.refresh(product)
        return product

    @staticmethod
    async def delete(
        db: AsyncSession,
        product: Product
    ) -> None:
        """Delete product"""
        await db.delete(product)
        await db.commit()

    @staticmethod
    async def read_stock(
        db: AsyncSession,
        product_id: uuid.UUID
    ) -> Optional[int]:
        """Current stock straight from the database, bypassing the identity map"""
        return await db.scalar(
            select(Product.stock).where(Product.id == product_id)
        )

    @staticmethod
    async def decrement_stock(
        db: AsyncSession,
        product_id: uuid.UUID,
        quantity: int
    ) -> bool:
        """
        Atomically take `quantity` units out of stock

        Runs as a single conditional UPDATE so concurrent checkouts cannot
        oversell. Does not commit; the caller owns the transaction.

        Returns:
            False if the product is missing or has fewer than `quantity` units
        """
        result = await db.execute(
            update(Product)
            .where(and_(Product.id == product_id, Product.stock >= quantity))
            .values(
                stock=Product.stock - quantity,
                sales_count=Product.sales_count + quantity
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    async def update_review_stats(
        db: AsyncSession,
        product_id: uuid.UUID,
        average_rating: Decimal,
        review_count: int
    ) -> None:
        await db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(average_rating=average_rating, review_count=review_count)
            .execution_options(synchronize_session=False)
        )

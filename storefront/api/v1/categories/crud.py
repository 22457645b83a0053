"""
Category CRUD operations
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from typing import Optional, List
import uuid

from storefront.models import Category, Product
from storefront.core.exceptions import NotFoundException, DuplicateResourceException, ConflictException
from .schemas import CategoryCreate, CategoryUpdate


async def get_category_by_id(db: AsyncSession, category_id: uuid.UUID) -> Optional[Category]:
    """Get category by ID"""
    result = await db.execute(select(Category).where(Category.id == category_id))
    return result.scalar_one_or_none()


async def get_category_by_name(db: AsyncSession, name: str) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(func.lower(Category.name) == name.lower())
    )
    return result.scalar_one_or_none()


async def get_categories(
    db: AsyncSession,
    is_active: Optional[bool] = None
) -> List[Category]:
    """Get categories ordered by name"""
    stmt = select(Category)
    if is_active is not None:
        stmt = stmt.where(Category.is_active.is_(is_active))

    result = await db.execute(stmt.order_by(Category.name))
    return list(result.scalars().all())


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    if await get_category_by_name(db, data.name):
        raise DuplicateResourceException("Category", "name", data.name)

    category = Category(**data.model_dump())
    db.add(category)
    await db.commit()
    await db.refresh(category)
    return category


async def update_category(db: AsyncSession, category_id: uuid.UUID, data: CategoryUpdate) -> Category:
    category = await get_category_by_id(db, category_id)
    if not category:
        raise NotFoundException("Category not found")

    update_data = data.model_dump(exclude_unset=True)
    if "name" in update_data:
        existing = await get_category_by_name(db, update_data["name"])
        if existing and existing.id != category.id:
            raise DuplicateResourceException("Category", "name", update_data["name"])

    for field, value in update_data.items():
        setattr(category, field, value)

    await db.commit()
    await db.refresh(category)
    return category


async def delete_category(db: AsyncSession, category_id: uuid.UUID) -> None:
    category = await get_category_by_id(db, category_id)
    if not category:
        raise NotFoundException("Category not found")

    product_count = await db.scalar(
        select(func.count()).select_from(Product).where(Product.category_id == category_id)
    )
    if product_count:
        raise ConflictException(f"Category still has {product_count} products")

    await db.delete(category)
    await db.commit()

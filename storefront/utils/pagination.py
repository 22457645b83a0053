"""
Pagination utilities
"""

from typing import TypeVar, Generic, List
from pydantic import BaseModel
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

T = TypeVar('T')

class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response"""
    items: List[T]
    total: int
    page: int
    size: int
    pages: int

async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    size: int = 20
) -> dict:
    """
    Paginate query results

    Args:
        db: Database session
        query: SQLAlchemy query
        page: Page number
        size: Page size

    Returns:
        Dictionary with pagination data
    """
    count_query = select(func.count()).select_from(query.order_by(None).subquery())
    total = await db.scalar(count_query) or 0

    pages = (total + size - 1) // size

    offset = (page - 1) * size
    result = await db.execute(query.offset(offset).limit(size))
    items = result.scalars().all()

    return {
        "items": list(items),
        "total": total,
        "page": page,
        "size": size,
        "pages": pages
    }

"""
Review service layer
Keeps the product's rating summary in step with its reviews
"""

from typing import List, Optional
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
import uuid
import logging

from storefront.models import Review
from storefront.core.exceptions import NotFoundException
from storefront.middleware.security import InputSanitizer
from storefront.utils.pagination import paginate
from storefront.api.v1.products.crud import ProductCRUD
from .schemas import ReviewCreate

logger = logging.getLogger(__name__)

class ReviewService:
    """Product review service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_for_product(self, product_id: uuid.UUID) -> List[Review]:
        result = await self.db.execute(
            select(Review)
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all(self, page: int = 1, size: int = 20) -> dict:
        query = select(Review).order_by(Review.created_at.desc())
        return await paginate(self.db, query, page, size)

    async def create_review(self, user_id: Optional[str], data: ReviewCreate) -> Review:
        """
        Create a review and refresh the product's rating summary

        Raises:
            NotFoundException: If product not found
        """
        product = await ProductCRUD.get_by_id(self.db, data.product_id)
        if not product:
            raise NotFoundException("Product not found")

        fields = InputSanitizer.sanitize_review(data.model_dump())
        review = Review(user_id=user_id, verified=False, **fields)
        self.db.add(review)
        await self.db.flush()

        await self._refresh_product_stats(data.product_id)
        await self.db.commit()

        logger.info(f"Review {review.id} created for product {data.product_id}")
        return review

    async def delete_review(self, review_id: uuid.UUID) -> None:
        review = await self.db.get(Review, review_id)
        if not review:
            raise NotFoundException("Review not found")

        product_id = review.product_id
        await self.db.delete(review)
        await self.db.flush()

        await self._refresh_product_stats(product_id)
        await self.db.commit()

    async def _refresh_product_stats(self, product_id: uuid.UUID) -> None:
        row = (await self.db.execute(
            select(func.avg(Review.rating), func.count(Review.id))
            .where(Review.product_id == product_id)
        )).one()

        average, count = row
        average = Decimal(str(round(float(average), 1))) if average is not None else Decimal("0")
        await ProductCRUD.update_review_stats(self.db, product_id, average, count)

"""Reviews API router"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from storefront.core.database import get_db
from storefront.core.security import get_current_user, require_admin
from storefront.middleware.rate_limit import write_limit
from storefront.utils.pagination import PaginatedResponse
from .schemas import ReviewCreate, ReviewResponse
from .services import ReviewService

router = APIRouter()


@router.get("/products/{product_id}", response_model=List[ReviewResponse])
async def get_product_reviews(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Reviews for one product, newest first"""
    return await ReviewService(db).list_for_product(product_id)


@router.post("", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
@write_limit
async def create_review(
    request: Request,
    data: ReviewCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ReviewService(db).create_review(current_user["id"], data)


@router.get("", response_model=PaginatedResponse[ReviewResponse])
async def list_reviews(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await ReviewService(db).list_all(page, size)


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: uuid.UUID,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    await ReviewService(db).delete_review(review_id)

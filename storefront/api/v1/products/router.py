"""Products API router"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from decimal import Decimal
import uuid

from storefront.core.database import get_db
from storefront.core.exceptions import NotFoundException
from storefront.core.security import require_admin
from storefront.middleware.security import InputSanitizer
from storefront.api.v1.categories.crud import get_category_by_id
from storefront.api.v1.reviews.services import ReviewService
from storefront.api.v1.reviews.schemas import ReviewResponse
from .crud import ProductCRUD
from .schemas import ProductCreate, ProductUpdate, ProductResponse, ProductListResponse, ProductDetailResponse

router = APIRouter()

# Fields an admin may clear by sending null
NULLABLE_FIELDS = {"description", "material", "brand"}


@router.get("", response_model=ProductListResponse)
async def get_products(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    category_id: Optional[uuid.UUID] = None,
    featured: Optional[bool] = None,
    gender: Optional[str] = None,
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    q: Optional[str] = Query(None, max_length=100, description="Search in name and description"),
    sort: Optional[str] = Query(None, pattern="^(newest|price_asc|price_desc|popular|rating)$"),
    db: AsyncSession = Depends(get_db)
):
    """Get active products with filters and pagination"""
    filters = {
        "category_id": category_id,
        "is_featured": featured,
        "gender": gender,
        "min_price": min_price,
        "max_price": max_price,
        "search": q,
        "sort": sort,
    }
    return await ProductCRUD.get_multi(db, page=page, size=size, filters=filters)


@router.get("/featured", response_model=ProductListResponse)
async def get_featured_products(
    size: int = Query(8, ge=1, le=50),
    db: AsyncSession = Depends(get_db)
):
    return await ProductCRUD.get_multi(db, page=1, size=size, filters={"is_featured": True})


@router.get("/{product_id}", response_model=ProductDetailResponse)
async def get_product_by_id(
    product_id: uuid.UUID,
    db: AsyncSession = Depends(get_db)
):
    """Get product by ID with its reviews"""
    product = await ProductCRUD.get_by_id(db, product_id)
    if not product:
        raise NotFoundException("Product not found")

    detail = ProductDetailResponse.model_validate(product)
    reviews = await ReviewService(db).list_for_product(product_id)
    detail.reviews = [ReviewResponse.model_validate(review) for review in reviews]
    return detail


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def create_product(
    data: ProductCreate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    if not await get_category_by_id(db, data.category_id):
        raise NotFoundException("Category not found")

    fields = InputSanitizer.sanitize_product_data(data.model_dump())
    return await ProductCRUD.create(db, **fields)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: uuid.UUID,
    data: ProductUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductCRUD.get_by_id(db, product_id)
    if not product:
        raise NotFoundException("Product not found")

    fields = {
        key: value
        for key, value in data.model_dump(exclude_unset=True).items()
        if value is not None or key in NULLABLE_FIELDS
    }
    fields = InputSanitizer.sanitize_product_data(fields)
    if fields.get("category_id") and not await get_category_by_id(db, fields["category_id"]):
        raise NotFoundException("Category not found")

    return await ProductCRUD.update(db, product, **fields)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: uuid.UUID,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    product = await ProductCRUD.get_by_id(db, product_id)
    if not product:
        raise NotFoundException("Product not found")

    await ProductCRUD.delete(db, product)

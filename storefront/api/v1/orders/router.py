"""
Order API routes
"""

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, List
import uuid

from storefront.core.database import get_db
from storefront.core.dependencies import get_clerk
from storefront.core.security import get_current_user, require_admin
from storefront.middleware.rate_limit import checkout_limit
from storefront.models.order import OrderStatus, PaymentStatus
from storefront.utils.pagination import PaginatedResponse
from .schemas import (
    OrderCreate,
    OrderResponse,
    AdminOrderResponse,
    OrderCancelRequest,
    OrderStatusUpdate,
    PaymentStatusUpdate
)
from .services import OrderService

router = APIRouter()

@router.post(
    "",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Place an order; cash on delivery is confirmed immediately, card orders await payment"
)
@checkout_limit
async def create_order(
    request: Request,
    order_data: OrderCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await OrderService(db).create_order(current_user["id"], order_data)

@router.get("", response_model=List[OrderResponse], summary="List my orders")
async def list_orders(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await OrderService(db).list_orders(current_user["id"])

# Admin routes are declared before /{order_id} so "admin" is not parsed as an id
@router.get("/admin/all", response_model=PaginatedResponse[OrderResponse], summary="List all orders")
async def list_all_orders(
    page: int = Query(1, ge=1),
    size: int = Query(20, ge=1, le=100),
    order_status: Optional[OrderStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await OrderService(db).list_all_orders(
        page=page,
        size=size,
        order_status=order_status,
        payment_status=payment_status
    )

@router.get("/admin/{order_id}", response_model=AdminOrderResponse, summary="Get order with customer")
async def get_order_admin(
    order_id: uuid.UUID,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    clerk=Depends(get_clerk)
):
    result = await OrderService(db, clerk=clerk).get_order_by_id(order_id)
    response = AdminOrderResponse.model_validate(result["order"])
    response.user = result["user"]
    return response

@router.put("/admin/{order_id}/status", response_model=OrderResponse, summary="Update order status")
async def update_order_status(
    order_id: uuid.UUID,
    update_data: OrderStatusUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await OrderService(db).update_order_status(order_id, update_data.order_status)

@router.put("/admin/{order_id}/payment", response_model=OrderResponse, summary="Update payment status")
async def update_payment_status(
    order_id: uuid.UUID,
    update_data: PaymentStatusUpdate,
    current_user: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return await OrderService(db).update_payment_status(order_id, update_data.payment_status)

@router.get("/{order_id}", response_model=OrderResponse, summary="Get order details")
async def get_order(
    order_id: uuid.UUID,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await OrderService(db).get_order(current_user["id"], order_id)

@router.put("/{order_id}/cancel", response_model=OrderResponse, summary="Cancel unpaid order")
async def cancel_order(
    order_id: uuid.UUID,
    cancel_data: Optional[OrderCancelRequest] = None,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await OrderService(db).cancel_order(
        current_user["id"],
        order_id,
        reason=cancel_data.reason if cancel_data else None
    )

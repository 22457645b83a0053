"""
Payment API routes
"""

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from storefront.core.database import get_db
from storefront.core.dependencies import get_payment_gateway
from storefront.core.security import get_current_user
from storefront.middleware.rate_limit import checkout_limit
from .schemas import (
    CheckoutSessionCreate,
    CheckoutSessionResponse,
    SessionStatusResponse,
    WebhookAck
)
from .services import PaymentService

router = APIRouter()

@router.post(
    "/checkout-session",
    response_model=CheckoutSessionResponse,
    summary="Create checkout session",
    description="Start embedded card checkout for a pending order"
)
@checkout_limit
async def create_checkout_session(
    request: Request,
    data: CheckoutSessionCreate,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway=Depends(get_payment_gateway)
):
    service = PaymentService(db, gateway)
    return await service.create_checkout_session(current_user["id"], data.order_id)

@router.get("/session-status", response_model=SessionStatusResponse, summary="Get checkout session status")
async def get_session_status(
    session_id: str = Query(..., min_length=1),
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    gateway=Depends(get_payment_gateway)
):
    service = PaymentService(db, gateway)
    return await service.retrieve_session_status(session_id, user_id=current_user["id"])

@router.post("/webhook", response_model=WebhookAck, summary="Stripe webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None, alias="Stripe-Signature"),
    db: AsyncSession = Depends(get_db),
    gateway=Depends(get_payment_gateway)
):
    """Signature is checked against the raw body, so it is read unparsed"""
    payload = await request.body()
    await PaymentService(db, gateway).handle_webhook(payload, stripe_signature)
    return WebhookAck()

"""
Stripe payment gateway integration
"""

import stripe
from typing import Dict, Any, Optional
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
import asyncio
import functools
import json
import logging

from storefront.core.config import Settings
from storefront.core.exceptions import PaymentGatewayException, InvalidWebhookException
from storefront.models import Order

logger = logging.getLogger(__name__)

def to_minor_units(amount: Decimal) -> int:
    """Decimal amount to integer cents"""
    return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

class StripeGateway:
    """Stripe Checkout wrapper; blocking SDK calls run in the default executor"""

    def __init__(
        self,
        secret_key: Optional[str],
        webhook_secret: Optional[str],
        currency: str = "usd",
        session_ttl_minutes: int = 30
    ):
        self.secret_key = secret_key
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.session_ttl_minutes = session_ttl_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeGateway":
        return cls(
            secret_key=settings.STRIPE_SECRET_KEY,
            webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
            currency=settings.STRIPE_CURRENCY,
            session_ttl_minutes=settings.CHECKOUT_SESSION_TTL_MINUTES
        )

    async def _call(self, func, **kwargs):
        if not self.secret_key:
            raise PaymentGatewayException("Payment provider is not configured")

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                None,
                functools.partial(func, api_key=self.secret_key, **kwargs)
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe request failed: {e}")
            raise PaymentGatewayException(f"Payment provider error: {e.user_message or 'request failed'}")

    async def create_checkout_session(self, order: Order, return_url: str) -> Dict[str, Any]:
        """
        Create an embedded Checkout session for an order

        Args:
            order: Order with its frozen items
            return_url: Frontend URL Stripe returns to after payment

        Returns:
            Session id and client secret for the embedded form
        """
        line_items = []
        for item in order.items:
            product_data: Dict[str, Any] = {"name": item.name}
            if item.image:
                product_data["images"] = [item.image]

            line_items.append({
                "price_data": {
                    "currency": self.currency,
                    "unit_amount": to_minor_units(item.price),
                    "product_data": product_data
                },
                "quantity": item.quantity
            })

        expires_at = datetime.now(timezone.utc) + timedelta(minutes=self.session_ttl_minutes)

        session = await self._call(
            stripe.checkout.Session.create,
            ui_mode="embedded",
            mode="payment",
            line_items=line_items,
            return_url=return_url,
            expires_at=int(expires_at.timestamp()),
            client_reference_id=str(order.id),
            metadata={"order_id": str(order.id)}
        )

        logger.info(f"Checkout session {session['id']} created for order {order.id}")
        return {"id": session["id"], "client_secret": session["client_secret"]}

    async def retrieve_session(self, session_id: str) -> Dict[str, Any]:
        """Fetch a Checkout session's current state"""
        session = await self._call(stripe.checkout.Session.retrieve, id=session_id)

        order_id = getattr(session["metadata"], "order_id", None) if session["metadata"] else None
        return {
            "id": session["id"],
            "status": session["status"],
            "payment_status": session["payment_status"],
            "metadata": {"order_id": order_id} if order_id else {}
        }

    def construct_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """
        Verify a webhook delivery and return it as plain data

        Raises:
            InvalidWebhookException: If the signature or payload is rejected
        """
        if not signature or not self.webhook_secret:
            raise InvalidWebhookException()

        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature rejected: {e}")
            raise InvalidWebhookException()
        except ValueError as e:
            logger.warning(f"Webhook payload rejected: {e}")
            raise InvalidWebhookException("Invalid webhook payload")

        # Verified; read the raw JSON rather than the SDK object
        event = json.loads(payload)
        session = event.get("data", {}).get("object", {})
        return {
            "id": event.get("id"),
            "type": event.get("type"),
            "session_id": session.get("id"),
            "payment_status": session.get("payment_status"),
            "metadata": session.get("metadata") or {}
        }

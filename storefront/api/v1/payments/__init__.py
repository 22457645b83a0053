"""Payments module exports"""

from . import router, schemas, services, stripe_client, fulfillment

__all__ = ["router", "schemas", "services", "stripe_client", "fulfillment"]

"""
Application lifecycle events
Handles startup and shutdown tasks
"""

from fastapi import FastAPI
import logging
from contextlib import asynccontextmanager

from .cache import RedisCache
from .config import settings
from .database import Database
from .logging import setup_logging
from .security import ClerkTokenVerifier

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager

    Builds the database, cache and external clients and keeps them on
    `app.state`, where request dependencies look them up.
    """
    from storefront.api.v1.payments.stripe_client import StripeGateway
    from storefront.services.clerk import ClerkClient
    from storefront.services.storage import StorageService

    setup_logging(settings)
    logger.info(f"Starting {settings.APP_NAME}...")

    database = Database.from_settings(settings)
    cache = RedisCache(
        settings.REDIS_URL,
        decode_responses=settings.REDIS_DECODE_RESPONSES,
        max_connections=settings.REDIS_MAX_CONNECTIONS
    )

    try:
        await database.create_all()
        logger.info("Database initialized")

        await cache.connect()

        app.state.db = database
        app.state.cache = cache
        app.state.token_verifier = ClerkTokenVerifier.from_settings(settings)
        app.state.payment_gateway = StripeGateway.from_settings(settings)
        app.state.clerk = ClerkClient.from_settings(settings)
        app.state.storage = StorageService.from_settings(settings)

        if not settings.STRIPE_WEBHOOK_SECRET:
            logger.warning("STRIPE_WEBHOOK_SECRET not set; webhooks will be rejected")

        logger.info(f"{settings.APP_NAME} started successfully")

        yield

    finally:
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await database.dispose()
        await cache.disconnect()
        logger.info(f"{settings.APP_NAME} shutdown complete")

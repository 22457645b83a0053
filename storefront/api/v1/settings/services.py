"""
Store settings service

Settings live in a single row and are read on every storefront page, so the
serialized document is cached and dropped on each write.
"""

from typing import Dict, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import logging

from storefront.models import StoreSettings
from storefront.models.settings import SETTINGS_ID, DEFAULT_STORE_SETTINGS, DEFAULT_PAYMENT_SETTINGS
from storefront.core.cache import RedisCache
from storefront.core.config import settings as app_settings
from .schemas import StoreInfo, PaymentSettings

logger = logging.getLogger(__name__)

CACHE_KEY = "settings:store"

class SettingsService:
    """Singleton settings document"""

    def __init__(self, db: AsyncSession, cache: Optional[RedisCache] = None):
        self.db = db
        self.cache = cache

    async def _ensure_settings(self) -> StoreSettings:
        row = await self.db.get(StoreSettings, SETTINGS_ID)
        if row is not None:
            return row

        logger.info("Creating default store settings")
        row = StoreSettings(
            id=SETTINGS_ID,
            store=dict(DEFAULT_STORE_SETTINGS),
            payment=dict(DEFAULT_PAYMENT_SETTINGS)
        )
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            row = await self.db.get(StoreSettings, SETTINGS_ID)
        return row

    @staticmethod
    def _serialize(row: StoreSettings) -> Dict[str, Any]:
        return {
            "store": {**DEFAULT_STORE_SETTINGS, **(row.store or {})},
            "payment": {**DEFAULT_PAYMENT_SETTINGS, **(row.payment or {})},
            "updated_at": row.updated_at.isoformat() if row.updated_at else None
        }

    async def get_settings(self) -> Dict[str, Any]:
        if self.cache:
            cached = await self.cache.get(CACHE_KEY)
            if cached:
                return cached

        document = self._serialize(await self._ensure_settings())
        if self.cache:
            await self.cache.set(CACHE_KEY, document, expire=app_settings.SETTINGS_CACHE_TTL_SECONDS)
        return document

    async def get_store_info(self) -> Dict[str, Any]:
        return (await self.get_settings())["store"]

    async def update_settings(
        self,
        store: Optional[StoreInfo] = None,
        payment: Optional[PaymentSettings] = None
    ) -> Dict[str, Any]:
        """
        Replace the store and/or payment sections

        Sections left out are unchanged. Last write wins.
        """
        row = await self._ensure_settings()

        # JSON columns are replaced, not mutated, so the change is tracked
        if store is not None:
            row.store = store.model_dump()
        if payment is not None:
            row.payment = payment.model_dump()

        await self.db.commit()
        await self.db.refresh(row)

        if self.cache:
            await self.cache.delete(CACHE_KEY)

        logger.info(
            "Store settings updated: "
            + ", ".join(name for name, value in (("store", store), ("payment", payment)) if value is not None)
        )
        return self._serialize(row)

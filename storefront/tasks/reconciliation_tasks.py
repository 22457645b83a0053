"""Payment reconciliation background tasks"""

from datetime import timedelta
import asyncio

from celery.utils.log import get_task_logger

from storefront.core.celery_app import celery_app
from storefront.core.config import settings
from storefront.core.database import Database
from storefront.models.base import utcnow
from storefront.api.v1.payments.services import PaymentService
from storefront.api.v1.payments.stripe_client import StripeGateway

logger = get_task_logger(__name__)

def stale_cutoff(now=None):
    """Orders created before this have outlived their checkout session"""
    now = now or utcnow()
    return now - timedelta(
        minutes=settings.CHECKOUT_SESSION_TTL_MINUTES + settings.RECONCILIATION_GRACE_MINUTES
    )

async def run_reconciliation(database: Database, gateway, limit: int) -> dict:
    async with database.session() as db:
        service = PaymentService(db, gateway)
        return await service.reconcile_stale_orders(stale_cutoff(), limit=limit)

@celery_app.task(name="storefront.tasks.reconciliation_tasks.reconcile_pending_payments")
def reconcile_pending_payments():
    """Settle or cancel card orders whose payment notification never arrived"""
    database = Database.from_settings(settings)
    gateway = StripeGateway.from_settings(settings)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        summary = loop.run_until_complete(
            run_reconciliation(database, gateway, settings.RECONCILIATION_BATCH_SIZE)
        )
        logger.info(f"Reconciled pending payments: {summary}")
        return summary
    except Exception as e:
        logger.error(f"Error reconciling pending payments: {str(e)}")
        raise
    finally:
        loop.run_until_complete(database.dispose())
        loop.close()

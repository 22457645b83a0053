"""
Customer service layer
Keeps a local copy of identity provider users for the admin dashboard
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
from sqlalchemy import select
import uuid
import logging

from storefront.models import Customer
from storefront.models.base import utcnow
from storefront.core.exceptions import NotFoundException

logger = logging.getLogger(__name__)

class CustomerService:
    """Customer sync and lookup"""

    def __init__(self, db: AsyncSession, clerk=None):
        self.db = db
        self.clerk = clerk

    async def _find_by_clerk_id(self, clerk_id: str) -> Optional[Customer]:
        result = await self.db.execute(
            select(Customer).where(Customer.clerk_id == clerk_id)
        )
        return result.scalar_one_or_none()

    async def sync(self, clerk_id: str) -> Customer:
        """
        Upsert the customer from the identity provider's current profile

        Raises:
            NotFoundException: If the identity provider has no such user
        """
        profile = await self.clerk.get_user(clerk_id)
        if not profile:
            raise NotFoundException("Failed to sync user data")

        customer = await self._find_by_clerk_id(clerk_id)
        if customer is None:
            customer = Customer(clerk_id=clerk_id)
            self.db.add(customer)

        customer.first_name = profile.get("first_name") or ""
        customer.last_name = profile.get("last_name") or ""
        customer.email = profile.get("email") or ""
        customer.image_url = profile.get("image_url")
        customer.is_active = True
        customer.last_login_at = utcnow()

        try:
            await self.db.commit()
        except IntegrityError:
            # Concurrent first sync inserted the row
            await self.db.rollback()
            return await self.sync(clerk_id)

        logger.info(f"Customer {clerk_id} synced")
        return customer

    async def list_customers(self) -> List[Customer]:
        result = await self.db.execute(
            select(Customer).order_by(Customer.last_login_at.desc())
        )
        return list(result.scalars().all())

    async def get_customer(self, identifier: str) -> Customer:
        """
        Find a customer by local UUID or Clerk user id

        An unknown Clerk id is synced from the identity provider before
        giving up.
        """
        customer = None
        try:
            customer = await self.db.get(Customer, uuid.UUID(identifier))
        except ValueError:
            customer = await self._find_by_clerk_id(identifier)
            if customer is None and self.clerk is not None:
                try:
                    customer = await self.sync(identifier)
                except NotFoundException:
                    customer = None

        if customer is None:
            raise NotFoundException(f"Customer not found with ID: {identifier}")
        return customer

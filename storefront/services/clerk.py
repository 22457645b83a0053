"""
Clerk Backend API client
"""

from typing import Dict, Any, Optional
import httpx
import logging

from storefront.core.config import Settings
from storefront.core.exceptions import InternalServerException

logger = logging.getLogger(__name__)

class ClerkClient:
    """Looks up identity provider users for customer sync and admin views"""

    def __init__(
        self,
        secret_key: Optional[str],
        api_url: str = "https://api.clerk.com/v1",
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.secret_key = secret_key
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClerkClient":
        return cls(secret_key=settings.CLERK_SECRET_KEY, api_url=settings.CLERK_API_URL)

    async def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a user by Clerk id

        Returns:
            Normalized user dict, or None if Clerk has no such user
        """
        if not self.secret_key:
            raise InternalServerException("Identity provider is not configured")

        async with httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self.timeout,
            transport=self.transport,
            headers={"Authorization": f"Bearer {self.secret_key}"}
        ) as client:
            response = await client.get(f"/users/{user_id}")

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            logger.error(f"Clerk user lookup failed for {user_id}: {response.status_code}")
            raise InternalServerException("Identity provider request failed")

        return self.normalize_user(response.json())

    @staticmethod
    def normalize_user(data: Dict[str, Any]) -> Dict[str, Any]:
        primary_email = None
        primary_id = data.get("primary_email_address_id")
        for address in data.get("email_addresses") or []:
            if address.get("id") == primary_id or primary_email is None:
                primary_email = address.get("email_address")
                if address.get("id") == primary_id:
                    break

        return {
            "id": data.get("id"),
            "first_name": data.get("first_name"),
            "last_name": data.get("last_name"),
            "email": primary_email,
            "image_url": data.get("image_url"),
            "role": (data.get("public_metadata") or {}).get("role")
        }

"""
File storage service using Cloudinary

Images are uploaded by the browser straight to Cloudinary; the API only
signs the upload parameters.
"""

import cloudinary
import cloudinary.utils
from typing import Optional, Dict, Any
import asyncio
import time
import logging

from storefront.core.config import Settings
from storefront.core.exceptions import InternalServerException

logger = logging.getLogger(__name__)

class StorageService:
    """Signs direct uploads for product and category images"""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        base_folder: str = "mebius"
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.base_folder = base_folder

        if self.configured:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "StorageService":
        return cls(
            cloud_name=settings.CLOUDINARY_CLOUD_NAME,
            api_key=settings.CLOUDINARY_API_KEY,
            api_secret=settings.CLOUDINARY_API_SECRET,
            base_folder=settings.CLOUDINARY_UPLOAD_FOLDER
        )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    async def sign_upload(self, folder: str, public_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Build signed parameters for a direct browser upload

        Args:
            folder: Sub-folder under the store's base folder
            public_id: Optional fixed public id

        Returns:
            Parameters the client posts to the Cloudinary upload endpoint
        """
        if not self.configured:
            raise InternalServerException("Image storage is not configured")

        params = {
            "timestamp": int(time.time()),
            "folder": f"{self.base_folder}/{folder}"
        }
        if public_id:
            params["public_id"] = public_id

        loop = asyncio.get_running_loop()
        signature = await loop.run_in_executor(
            None,
            cloudinary.utils.api_sign_request,
            params,
            self.api_secret
        )

        return {
            **params,
            "signature": signature,
            "api_key": self.api_key,
            "cloud_name": self.cloud_name,
            "upload_url": f"https://api.cloudinary.com/v1_1/{self.cloud_name}/image/upload"
        }

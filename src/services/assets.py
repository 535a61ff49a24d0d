"""Image hosting service for Cloudinary uploads."""

import logging
import time
from typing import Any

import httpx
from cloudinary.utils import api_sign_request

from src.config import get_settings
from src.exceptions import UpstreamError

logger = logging.getLogger(__name__)

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"


class AssetService:
    """Uploads images to Cloudinary and returns their hosted URL."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.cloud_name = self.settings.cloudinary_cloud_name
        self.api_key = self.settings.cloudinary_api_key
        self.api_secret = self.settings.cloudinary_api_secret
        self.folder = self.settings.cloudinary_folder
        self.timeout = self.settings.asset_upload_timeout_seconds

    @property
    def is_configured(self) -> bool:
        """Check if Cloudinary credentials are set."""
        return bool(self.cloud_name and self.api_key and self.api_secret)

    @property
    def upload_url(self) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.cloud_name}/image/upload"

    def sign(self, params: dict[str, Any]) -> str:
        """Sign upload parameters with the account secret. Empty values are skipped."""
        return api_sign_request(params, self.api_secret)

    async def upload_image(self, image: str) -> str:
        """Upload an image and return its secure URL.

        Args:
            image: Base64 data URI (``data:image/png;base64,...``) or a remote URL

        Returns:
            The HTTPS URL of the stored image

        Raises:
            UpstreamError: If the host is not configured or the upload fails
        """
        if not self.is_configured:
            raise UpstreamError("Cloudinary is not configured")

        params: dict[str, Any] = {"folder": self.folder, "timestamp": int(time.time())}
        form = {
            **params,
            "file": image,
            "api_key": self.api_key,
            "signature": self.sign(params),
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.upload_url, data=form)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"HTTP error uploading image to Cloudinary: {e}")
            raise UpstreamError(f"Image upload failed: {e}") from e
        except ValueError as e:
            logger.error(f"Invalid JSON from Cloudinary: {e}")
            raise UpstreamError("Image upload returned an invalid response") from e

        url = data.get("secure_url")
        if not url:
            logger.error(f"Cloudinary response missing secure_url: {data}")
            raise UpstreamError("Image upload returned no URL")

        logger.info(f"Uploaded image {data.get('public_id')}")
        return url

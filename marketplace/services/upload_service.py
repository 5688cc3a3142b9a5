"""
marketplace/services/upload_service.py

Purpose: Cloudinary image storage

- Signed uploads through the Cloudinary REST API
- Destroys replaced or removed images
- Enforces image-only, size and count limits before uploading
"""

import hashlib
import time
from typing import Any, Dict, List, Optional

import httpx
from fastapi import UploadFile

from marketplace.core.config import settings
from marketplace.core.exceptions import BadRequestError, ExternalServiceError
from marketplace.core.logging import get_logger

logger = get_logger(__name__)

PRODUCT_TRANSFORMATION = "c_fill,h_800,w_800/q_auto/f_auto"
AVATAR_TRANSFORMATION = "c_fill,g_face,h_300,w_300/q_auto"


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """
    Cloudinary signature: sha1 of the sorted `key=value` pairs joined by `&`, followed by the secret.
    """
    to_sign = "&".join(f"{k}={v}" for k, v in sorted(params.items()) if v not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class CloudinaryService:
    """
    Thin async client for Cloudinary's upload API.

    Usage:
        service = get_upload_service()
        image = await service.upload_image(file, folder="products")
    """

    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cloud_name = cloud_name or settings.CLOUDINARY_CLOUD_NAME
        self.api_key = api_key or settings.CLOUDINARY_API_KEY
        self.api_secret = api_secret or settings.CLOUDINARY_API_SECRET
        self._transport = transport
        self._timeout = float(settings.CLOUDINARY_TIMEOUT)
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{settings.CLOUDINARY_BASE_URL}/{self.cloud_name}",
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    def _signed(self, params: Dict[str, Any]) -> Dict[str, Any]:
        params = {k: v for k, v in params.items() if v is not None}
        params["timestamp"] = int(time.time())
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key
        return params

    @staticmethod
    def check_files(files: List[UploadFile]):
        """
        Raises:
            BadRequestError: On non-image files, oversized files or too many files
        """
        if len(files) > settings.MAX_UPLOAD_FILES:
            raise BadRequestError(f"Too many files. Maximum is {settings.MAX_UPLOAD_FILES} files.")
        for file in files:
            if not (file.content_type or "").startswith("image/"):
                raise BadRequestError("Only image files are allowed.")
            if file.size is not None and file.size > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
                raise BadRequestError(f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB.")

    async def upload_image(self, file: UploadFile, folder: str, transformation: Optional[str] = None) -> Dict[str, Any]:
        """
        Uploads one image.

        Returns:
            {"public_id", "url", "alt"}

        Raises:
            ExternalServiceError: If Cloudinary is not configured or rejects the upload
        """
        if not self.configured:
            raise ExternalServiceError("Image uploads are not configured")

        content = await file.read()
        if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
            raise BadRequestError(f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE_MB}MB.")

        data = self._signed({
            "folder": f"{settings.CLOUDINARY_FOLDER}/{folder}",
            "transformation": transformation,
        })
        try:
            response = await self._get_client().post(
                "/image/upload",
                data=data,
                files={"file": (file.filename or "upload", content, file.content_type)},
            )
        except httpx.HTTPError as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise ExternalServiceError("Image upload failed") from e

        if response.status_code != 200:
            logger.error(f"Cloudinary upload rejected: {response.status_code} {response.text[:200]}")
            raise ExternalServiceError("Image upload failed", details={"status": response.status_code})

        result = response.json()
        logger.info(f"Uploaded image {result.get('public_id')}")
        return {
            "public_id": result["public_id"],
            "url": result["secure_url"],
            "alt": file.filename or "",
        }

    async def upload_images(self, files: List[UploadFile], folder: str, transformation: Optional[str] = None) -> List[Dict[str, Any]]:
        self.check_files(files)
        images = []
        for index, file in enumerate(files):
            image = await self.upload_image(file, folder, transformation)
            image["is_primary"] = index == 0
            images.append(image)
        return images

    async def destroy(self, public_id: Optional[str]) -> bool:
        """
        Deletes an image. Failures are logged and reported as False,
        a missing remote image must not block the local delete.
        """
        if not public_id or not self.configured:
            return False
        try:
            response = await self._get_client().post("/image/destroy", data=self._signed({"public_id": public_id}))
        except httpx.HTTPError as e:
            logger.warning(f"Cloudinary destroy failed for {public_id}: {e}")
            return False
        ok = response.status_code == 200 and response.json().get("result") == "ok"
        if not ok:
            logger.warning(f"Cloudinary destroy returned {response.status_code} for {public_id}")
        return ok

    async def destroy_many(self, images: List[Dict[str, Any]]):
        for image in images or []:
            await self.destroy(image.get("public_id"))

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Global upload service instance
_upload_service: Optional[CloudinaryService] = None


def get_upload_service() -> CloudinaryService:
    """Get or create the global Cloudinary service instance."""
    global _upload_service
    if _upload_service is None:
        _upload_service = CloudinaryService()
    return _upload_service


async def close_upload_service():
    """Close the HTTP client held by the upload service."""
    global _upload_service
    if _upload_service:
        await _upload_service.close()
        _upload_service = None

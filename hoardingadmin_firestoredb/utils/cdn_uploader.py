import asyncio
import hashlib
import re
import time
from functools import partial
from typing import Optional

import requests

from .config import CLOUDINARY_API_KEY, CLOUDINARY_API_SECRET, CLOUDINARY_CLOUD_NAME, CLOUDINARY_FOLDER, CLOUDINARY_UPLOAD_PRESET
from .error_codes import ErrorCodes
from .logger import logger
from .standard_response import StandardResponse

CLOUDINARY_API_BASE = "https://api.cloudinary.com/v1_1"
MAX_IMAGE_SIZE_BYTES = 5 * 1024 * 1024
REQUEST_TIMEOUT_SECONDS = 60

_VERSION_SEGMENT = re.compile(r"^v\d+$")


def extract_public_id(url: Optional[str]) -> Optional[str]:
    """
    Public id of a Cloudinary asset from its delivery URL, None for other URLs.

    https://res.cloudinary.com/<cloud>/image/upload/v1234/hoardings/board.jpg -> hoardings/board
    """
    if not url or "cloudinary.com" not in url:
        return None
    parts = url.split("/upload/", 1)
    if len(parts) < 2:
        return None

    path_parts = [part for part in parts[1].split("/") if part and not _VERSION_SEGMENT.match(part)]
    if not path_parts:
        return None
    return re.sub(r"\.[^/.]+$", "", "/".join(path_parts))


class CloudinaryUploader:
    """Unsigned uploads with an upload preset; deletes need the API key and secret."""

    def __init__(
        self,
        cloud_name: str = CLOUDINARY_CLOUD_NAME,
        upload_preset: str = CLOUDINARY_UPLOAD_PRESET,
        folder: str = CLOUDINARY_FOLDER,
        api_key: str = CLOUDINARY_API_KEY,
        api_secret: str = CLOUDINARY_API_SECRET,
        session: Optional[requests.Session] = None,
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.folder = folder
        self.api_key = api_key
        self.api_secret = api_secret
        self.session = session or requests.Session()

    def _endpoint(self, resource_type: str, action: str) -> str:
        return f"{CLOUDINARY_API_BASE}/{self.cloud_name}/{resource_type}/{action}"

    @staticmethod
    def resource_type_for(content_type: Optional[str]) -> str:
        return "video" if (content_type or "").startswith("video/") else "image"

    def _sign(self, params: dict) -> str:
        to_sign = "&".join(f"{key}={params[key]}" for key in sorted(params))
        return hashlib.sha1(f"{to_sign}{self.api_secret}".encode("utf-8")).hexdigest()

    def _post(self, url: str, **kwargs) -> dict:
        response = self.session.post(url, timeout=REQUEST_TIMEOUT_SECONDS, **kwargs)
        payload = response.json() if response.content else {}
        if not response.ok:
            message = (payload.get("error") or {}).get("message") or f"Upload failed with status {response.status_code}"
            raise RuntimeError(message)
        return payload

    async def upload(self, content: bytes, filename: str, content_type: Optional[str] = None, folder: Optional[str] = None) -> StandardResponse:
        """Upload a file. Videos go to /video/upload, everything else to /image/upload. Data: {url, public_id}."""
        try:
            if not self.cloud_name:
                return StandardResponse.failure(ErrorCodes.SERVICE_UNAVAILABLE, "Cloudinary is not configured")
            if not content:
                return StandardResponse.bad_request("File is empty")

            resource_type = self.resource_type_for(content_type)
            if resource_type == "image" and len(content) > MAX_IMAGE_SIZE_BYTES:
                return StandardResponse.bad_request("Image size should be less than 5MB")

            url = self._endpoint(resource_type, "upload")
            data = {"upload_preset": self.upload_preset, "folder": folder or self.folder}
            files = {"file": (filename, content, content_type or "application/octet-stream")}

            loop = asyncio.get_running_loop()
            payload = await loop.run_in_executor(None, partial(self._post, url, data=data, files=files))

            logger.info(f"✅ Uploaded {filename} to Cloudinary as {payload.get('public_id')}")
            return StandardResponse.success(
                data={"url": payload.get("secure_url"), "public_id": payload.get("public_id"), "resource_type": resource_type},
                message="File uploaded successfully",
            )
        except Exception as e:
            logger.error(f"❌ Cloudinary upload error for {filename}: {str(e)}")
            return StandardResponse.internal_error(str(e))

    async def destroy(self, public_id: str, resource_type: str = "image") -> StandardResponse:
        """Delete an asset. Without API credentials the asset stays on the CDN and only the reference goes away."""
        try:
            if not public_id:
                return StandardResponse.bad_request("Public ID is required")
            if not (self.api_key and self.api_secret):
                logger.warning(f"⚠️ Cloudinary credentials missing, leaving {public_id} in place")
                return StandardResponse.success(data={"public_id": public_id, "deleted": False}, message="Asset reference removed")

            params = {"public_id": public_id, "timestamp": int(time.time())}
            data = {**params, "api_key": self.api_key, "signature": self._sign(params)}

            loop = asyncio.get_running_loop()
            payload = await loop.run_in_executor(None, partial(self._post, self._endpoint(resource_type, "destroy"), data=data))

            deleted = payload.get("result") == "ok"
            return StandardResponse.success(data={"public_id": public_id, "deleted": deleted}, message="Asset deleted" if deleted else "Asset not found")
        except Exception as e:
            logger.error(f"❌ Cloudinary destroy error for {public_id}: {str(e)}")
            return StandardResponse.internal_error(str(e))

    async def destroy_by_url(self, url: Optional[str]) -> StandardResponse:
        public_id = extract_public_id(url)
        if public_id is None:
            return StandardResponse.success(data={"public_id": None, "deleted": False}, message="Not a Cloudinary asset")
        resource_type = "video" if "/video/upload/" in (url or "") else "image"
        return await self.destroy(public_id, resource_type)

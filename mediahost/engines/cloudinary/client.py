"""
Cloudinary REST client.

Signed upload and destroy calls over httpx. The client performs exactly one
HTTP request per call and never retries; timeouts come from Settings.
"""

import time
from typing import Any, Dict, Optional

import httpx
from cloudinary.utils import api_sign_request

from mediahost.core.config import Settings
from mediahost.core.logging import get_logger
from mediahost.core.metrics import record_media_host_call

logger = get_logger(__name__)

# Parameters Cloudinary excludes from the request signature
UNSIGNED_PARAMS = {"file", "api_key", "resource_type", "cloud_name"}


class MediaHostAPIError(Exception):
    """Raised when the media host answers with an error or cannot be reached."""

    def __init__(self, message: str, http_status: Optional[int] = None):
        self.message = message
        self.http_status = http_status
        super().__init__(message)


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    """
    Compute the Cloudinary request signature.

    Parameters the host does not sign and empty values are dropped; the
    SDK sorts the rest, joins them as k=v with '&', appends the API secret
    and SHA-1 hashes the result.
    """
    to_sign = {
        key: value
        for key, value in params.items()
        if key not in UNSIGNED_PARAMS and value not in (None, "")
    }
    return api_sign_request(to_sign, api_secret)


class CloudinaryClient:
    """Thin async wrapper around the Cloudinary image upload API."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.settings = settings
        self._transport = transport

    def _endpoint(self, action: str, resource_type: str = "image") -> str:
        base = self.settings.CLOUDINARY_API_BASE_URL.rstrip("/")
        cloud_name = self.settings.CLOUDINARY_CLOUD_NAME or ""
        return f"{base}/{cloud_name}/{resource_type}/{action}"

    def _signed(self, params: Dict[str, Any]) -> Dict[str, str]:
        payload = {key: str(value) for key, value in params.items() if value not in (None, "")}
        payload["timestamp"] = str(int(time.time()))
        payload["signature"] = sign_params(payload, self.settings.CLOUDINARY_API_SECRET or "")
        payload["api_key"] = self.settings.CLOUDINARY_API_KEY or ""
        return payload

    async def _post(
        self,
        operation: str,
        url: str,
        data: Dict[str, str],
        files: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                timeout=self.settings.CLOUDINARY_TIMEOUT_SECONDS,
                transport=self._transport
            ) as client:
                response = await client.post(url, data=data, files=files)
        except httpx.HTTPError as e:
            record_media_host_call(operation, status="error", http_status=0)
            raise MediaHostAPIError(f"Media host unreachable: {e}") from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code != 200 or not isinstance(body, dict) or "error" in body:
            record_media_host_call(operation, status="error", http_status=response.status_code)
            error = body.get("error") if isinstance(body, dict) else None
            message = error.get("message") if isinstance(error, dict) else error
            if not message:
                message = (
                    f"Media host returned HTTP {response.status_code}"
                    if response.status_code != 200
                    else "Unexpected media host response"
                )
            raise MediaHostAPIError(str(message), http_status=response.status_code)

        record_media_host_call(operation, status="success", http_status=response.status_code)
        return body

    async def upload(
        self,
        file_data: bytes,
        filename: str = "upload",
        resource_type: str = "image",
        **options: Any
    ) -> Dict[str, Any]:
        """
        Upload raw bytes with the given upload options.

        Options are Cloudinary upload parameters (folder, public_id,
        transformation, format, ...). Returns the decoded JSON response.
        """
        logger.debug("cloudinary_upload_request", size_bytes=len(file_data), options=options)
        return await self._post(
            "upload",
            self._endpoint("upload", resource_type),
            data=self._signed(options),
            files={"file": (filename, file_data)}
        )

    async def destroy(self, public_id: str, resource_type: str = "image") -> Dict[str, Any]:
        """Delete an asset by public id. Returns the host's acknowledgement."""
        logger.debug("cloudinary_destroy_request", public_id=public_id)
        return await self._post(
            "destroy",
            self._endpoint("destroy", resource_type),
            data=self._signed({"public_id": public_id})
        )

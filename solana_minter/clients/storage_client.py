"""Metadata storage client for Solana Minter.

Uploads images and metadata documents to an HTTP storage gateway and
returns the URI under which the content is served.

The gateway contract is a single endpoint: ``POST {endpoint}/upload`` with
a multipart ``file`` field. The JSON response carries either a ``uri`` or
an ``id``; an ``id`` is resolved against the configured gateway URL.
"""

# Standard library imports
import json
import mimetypes
from typing import Any, Dict, Optional

# Third-party library imports
import httpx

# Internal imports
from solana_minter.config import StorageConfig, get_storage_config
from solana_minter.constants import METADATA_CONTENT_TYPE
from solana_minter.logging_config import get_logger
from solana_minter.utils.errors import StorageUploadError

# Get logger
logger = get_logger(__name__)

METADATA_FILENAME = "metadata.json"


class StorageClient:
    """Client for uploading files to the storage provider."""

    def __init__(self, config: Optional[StorageConfig] = None,
                 http_client: Optional[httpx.AsyncClient] = None):
        """Initialize the storage client.

        Args:
            config: Storage configuration. Defaults to environment-based config.
            http_client: Pre-built httpx client. Defaults to one built from config.
        """
        self.config = config or get_storage_config()
        self.headers = {}
        if self.config.has_auth:
            self.headers["Authorization"] = f"Bearer {self.config.api_key}"

        self._http_client = http_client or httpx.AsyncClient(timeout=self.config.timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the client and release resources."""
        await self._http_client.aclose()

    def _resolve_uri(self, payload: Dict[str, Any], filename: str) -> str:
        uri = payload.get("uri") or payload.get("url")
        if uri:
            return uri

        content_id = payload.get("id")
        if content_id:
            return f"{self.config.gateway_url}/{content_id}"

        raise StorageUploadError(
            "Storage response did not include a uri or id",
            filename=filename
        )

    async def upload(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Upload raw bytes.

        Args:
            data: File content
            filename: Name reported to the storage provider
            content_type: MIME type; guessed from filename when omitted

        Returns:
            URI of the uploaded content

        Raises:
            StorageUploadError: If the upload fails or the response has no URI
            ConfigurationError: If no storage endpoint is configured
        """
        if content_type is None:
            content_type = mimetypes.guess_type(filename)[0] or "application/octet-stream"

        logger.debug(f"Uploading {filename} ({len(data)} bytes, {content_type})")
        try:
            response = await self._http_client.post(
                f"{self.config.require_endpoint()}/upload",
                headers=self.headers,
                files={"file": (filename, data, content_type)}
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as e:
            raise StorageUploadError(
                f"Upload of {filename} rejected with HTTP {e.response.status_code}",
                filename=filename,
                status_code=e.response.status_code
            ) from e
        except httpx.HTTPError as e:
            raise StorageUploadError(
                f"Upload of {filename} failed: {e}",
                filename=filename
            ) from e
        except json.JSONDecodeError as e:
            raise StorageUploadError(
                f"Storage returned a non-JSON response for {filename}",
                filename=filename
            ) from e

        if not isinstance(payload, dict):
            raise StorageUploadError(
                f"Storage returned an unexpected response for {filename}",
                filename=filename
            )

        return self._resolve_uri(payload, filename)

    async def upload_metadata_json(self, document: Dict[str, Any]) -> str:
        """Upload a metadata JSON document and return its URI."""
        data = json.dumps(document).encode("utf-8")
        return await self.upload(data, METADATA_FILENAME, METADATA_CONTENT_TYPE)

"""
Editor image uploads.

Images picked in the editor are uploaded out of band to the file endpoint,
which answers with ``{"data": {"link": "..."}}``. The link is what the editor
inlines into the document.
"""

import logging
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..api import ApiClient
from ..config import config
from ..exceptions import TransportError, UploadError


class UploadResult(BaseModel):
    """The outcome of a successful upload."""

    url: str = Field(..., description="Remote URL of the uploaded resource")


class ResourceReference(BaseModel):
    """
    Pairs the local id an upload was started under with its remote URL.

    Created when an upload completes and consumed once, when the image is
    inserted into the document.
    """

    model_config = ConfigDict(frozen=True)

    local_id: str = Field(..., description="Id assigned when the upload started")
    url: str = Field(..., description="Remote URL returned by the upload endpoint")


class ResourceUploader:
    """
    Uploads editor images through the administrative client.
    """

    def __init__(self, client: ApiClient, endpoint: Optional[str] = None,
                 field: Optional[str] = None, accepted_types: Optional[Iterable[str]] = None):
        """
        Initialize the uploader.

        Args:
            client: Client used for the upload request
            endpoint: Upload path (defaults to config value)
            field: Multipart field name (defaults to config value)
            accepted_types: Allowed MIME types (defaults to config value)
        """
        self.client = client
        self.endpoint = endpoint or config.upload_endpoint
        self.field = field or config.upload_field
        self.accepted_types = set(accepted_types or config.accepted_types)

    async def upload(self, data: bytes, filename: str, content_type: str) -> UploadResult:
        """
        Upload one image.

        Args:
            data: Image bytes
            filename: Original file name
            content_type: MIME type of the image

        Returns:
            UploadResult with the remote URL

        Raises:
            UploadError: If the type is not accepted, the request fails, or the
                response carries no link
        """
        if content_type not in self.accepted_types:
            raise UploadError(f"Unsupported image type: {content_type}")

        try:
            payload = await self.client.post_file(self.endpoint, self.field, filename, data, content_type)
        except TransportError as e:
            logging.error(f"Image upload failed for {filename}: {e}")
            raise UploadError(f"Image upload failed: {e}", status_code=e.status_code,
                              original=e.original or e) from e

        link = None
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            link = payload["data"].get("link")
        if not isinstance(link, str) or not link:
            logging.error(f"Image upload for {filename} returned no link: {payload!r}")
            raise UploadError("Upload response did not contain a link")

        logging.info(f"Uploaded editor image {filename}: {link}")
        return UploadResult(url=link)

"""
Content API client for Bulletin.

Every request to the persistence API goes through an ApiClient bound to one
identity context. Screens receive clients explicitly: a ContentReader for
fetching and a ContentModerator for administrative deletes, so each can be
replaced independently in tests.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

import httpx

from ..config import config
from ..exceptions import TransportError


class IdentityContext(str, Enum):
    """The credential set a client acts under."""

    USER = "user"
    ADMIN = "admin"


class ContentReader(ABC):
    """Capability to read resources from the content API."""

    @abstractmethod
    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Fetch a JSON resource.

        Args:
            path: API path, e.g. "/api/boards"
            params: Optional query parameters

        Returns:
            The decoded response body, or None for an empty body

        Raises:
            TransportError: If the request fails or returns a non-2xx status
        """
        pass


class ContentModerator(ABC):
    """Capability to delete resources through the content API."""

    @abstractmethod
    async def delete(self, path: str) -> Any:
        """
        Delete a resource.

        Raises:
            TransportError: If the request fails or returns a non-2xx status
        """
        pass


class ApiClient(ContentReader, ContentModerator):
    """
    Async HTTP client for the content API, bound to one identity context.
    """

    def __init__(self, base_url: Optional[str] = None, token: Optional[str] = None,
                 context: IdentityContext = IdentityContext.USER,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.

        Args:
            base_url: API host (defaults to config value)
            token: Bearer token of the identity context, if any
            context: Which identity context the token belongs to
            timeout: Request timeout in seconds (defaults to config value)
            transport: Optional httpx transport, used by tests
        """
        self.base_url = (base_url or config.api_base_url).rstrip("/")
        self.context = context
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout or config.api_timeout,
            transport=transport
        )

    @classmethod
    def for_context(cls, context: IdentityContext, **kwargs) -> "ApiClient":
        """Build a client for a context using the token configured for it."""
        token = config.admin_token if context == IdentityContext.ADMIN else config.user_token
        return cls(token=token, context=context, **kwargs)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.aclose()

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self._request("GET", path, params=params)

    async def delete(self, path: str) -> Any:
        return await self._request("DELETE", path)

    async def post_file(self, path: str, field: str, filename: str, data: bytes,
                        content_type: str) -> Any:
        """
        Upload a single file as a multipart form body.

        Args:
            path: API path of the upload endpoint
            field: Multipart field name
            filename: File name sent with the part
            data: File contents
            content_type: MIME type of the file

        Returns:
            The decoded response body
        """
        return await self._request("POST", path, files={field: (filename, data, content_type)})

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logging.error(f"[{self.context.value}] {method} {path} failed with status {status}")
            raise TransportError(f"{method} {path} failed with status {status}",
                                 status_code=status, original=e) from e
        except httpx.RequestError as e:
            logging.error(f"[{self.context.value}] {method} {path} could not reach the content API: {e}")
            raise TransportError(f"Failed to reach content API: {e}", original=e) from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logging.warning(f"[{self.context.value}] {method} {path} returned a non-JSON body")
            return None

"""Content API access."""

from .client import ApiClient, ContentModerator, ContentReader, IdentityContext
from .envelope import extract_item, extract_list, extract_page

__all__ = [
    "ApiClient",
    "ContentModerator",
    "ContentReader",
    "IdentityContext",
    "extract_item",
    "extract_list",
    "extract_page"
]

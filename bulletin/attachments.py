"""
Attachment reference resolution.

Posts and pages store attachment locations as paths relative to the file
host, some of them still carrying the legacy ``posts/`` segment from the old
upload layout. Both the administrative and the end-user detail views turn
those paths into download URLs through resolve_download_url, so the two
surfaces always link to the same place.
"""

import re
from typing import Optional

from .config import config
from .models import AttachmentLink

DEFAULT_LEGACY_PREFIX = "posts"
DEFAULT_IMAGE_PREFIX = "/images"

# Value the API stores when an image path was never filled in
PLACEHOLDER_IMAGE_PATH = "string"


def normalize_attachment_path(stored_path: str, legacy_prefix: str = DEFAULT_LEGACY_PREFIX) -> str:
    """
    Normalize a stored attachment path.

    Strips a leading legacy prefix segment (with or without a leading
    separator) and makes the result start with exactly one separator.

    Examples:
        normalize_attachment_path("posts/2024/img.png")  # "/2024/img.png"
        normalize_attachment_path("//files/a.pdf")        # "/files/a.pdf"
    """
    path = stored_path
    if legacy_prefix:
        path = re.sub(rf"^/?{re.escape(legacy_prefix.strip('/'))}/", "", path, count=1)
    return "/" + path.lstrip("/")


def resolve_download_url(stored_path: str, base_url: str,
                         legacy_prefix: str = DEFAULT_LEGACY_PREFIX) -> str:
    """
    Turn a stored attachment path into a fully qualified download URL.

    Paths that are already fully qualified under ``base_url`` are returned
    unchanged, so resolving a resolved URL again is a no-op.

    Args:
        stored_path: Path as stored on the post or page
        base_url: Attachment host, e.g. "http://localhost:8181"
        legacy_prefix: Leading path segment to strip

    Returns:
        The download URL
    """
    base = base_url.rstrip("/")
    if base and stored_path.startswith(base + "/"):
        return stored_path
    return base + normalize_attachment_path(stored_path, legacy_prefix)


def resolve_image_url(image_path: Optional[str], base_url: str, default_image: str,
                      image_prefix: str = DEFAULT_IMAGE_PREFIX) -> str:
    """
    Turn a stored image path into a displayable image URL.

    Paths already under ``image_prefix`` go under the host as they are; bare
    names are placed under ``image_prefix``. Empty paths and the API's
    ``"string"`` placeholder give ``default_image``.

    Examples:
        resolve_image_url("/images/gym.png", "http://host", "d.png")  # "http://host/images/gym.png"
        resolve_image_url("gym.png", "http://host", "d.png")          # "http://host/images/gym.png"
        resolve_image_url("string", "http://host", "d.png")           # "d.png"
    """
    if not image_path or image_path == PLACEHOLDER_IMAGE_PATH:
        return default_image
    base = base_url.rstrip("/")
    prefix = "/" + image_prefix.strip("/")
    if image_path.startswith(prefix):
        return base + image_path
    return f"{base}{prefix}/{image_path}"


def attachment_file_name(stored_path: str) -> str:
    """Return the last segment of a stored path, used as the link label."""
    return stored_path.rstrip("/").split("/")[-1]


def build_attachment_link(stored_path: Optional[str], base_url: Optional[str] = None,
                          legacy_prefix: Optional[str] = None) -> Optional[AttachmentLink]:
    """
    Build the download link shown under a post or page body.

    Returns None when the record has no attachment.
    """
    if not stored_path:
        return None
    return AttachmentLink(
        url=resolve_download_url(
            stored_path,
            base_url if base_url is not None else config.attachment_base_url,
            legacy_prefix if legacy_prefix is not None else config.legacy_prefix
        ),
        file_name=attachment_file_name(stored_path)
    )

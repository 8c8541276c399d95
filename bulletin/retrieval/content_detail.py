"""
Informational page retrieval.

End users open pages by category and ordinal (``/api/contents/{type}/{num}``);
the CMS opens them by id and may delete them. Both views build the attachment
link with the same resolver.
"""

import logging
from typing import Any, Callable, List, Optional

from pydantic import ValidationError

from ..api import ContentModerator, ContentReader, extract_item
from ..attachments import build_attachment_link
from ..exceptions import TransportError
from ..models import AttachmentLink, ContentPage

USER_CONTENT_PATH = "/api/contents/{content_type}/{content_num}"
CMS_CONTENT_PATH = "/api/cms/contents/{content_id}"


def _to_content(record: Any) -> Optional[ContentPage]:
    if not isinstance(record, dict):
        return None
    try:
        return ContentPage.model_validate(record)
    except ValidationError as e:
        logging.warning(f"Content record has an unexpected shape: {e}")
        return None


class ContentDetailService:
    """Reads informational pages and deletes them from the CMS."""

    def __init__(self, reader: ContentReader, moderator: Optional[ContentModerator] = None):
        self.reader = reader
        self.moderator = moderator

    async def fetch_user_content(self, content_type: str, content_num: int) -> Optional[ContentPage]:
        """
        Fetch a page as an end user. The record sits under ``data.content``.

        Raises:
            TransportError: If the request fails
        """
        payload = await self.reader.get_json(
            USER_CONTENT_PATH.format(content_type=content_type, content_num=content_num)
        )
        record = extract_item(payload)
        if isinstance(record, dict) and "content" in record:
            record = record["content"]
        return _to_content(record)

    async def fetch_cms_content(self, content_id: int) -> Optional[ContentPage]:
        """
        Fetch a page from the CMS.

        Raises:
            TransportError: If the request fails
        """
        payload = await self.reader.get_json(CMS_CONTENT_PATH.format(content_id=content_id))
        return _to_content(extract_item(payload))

    async def delete_content(self, content: ContentPage, confirm: Callable[[str], bool]) -> bool:
        """
        Delete a page after the user confirms.

        Returns:
            True if the page was deleted, False if the user declined

        Raises:
            TransportError: If the delete request fails
        """
        if self.moderator is None:
            raise RuntimeError("Deleting content requires a moderator client")
        if not confirm(f"Are you sure you want to delete '{content.content_title}'?"):
            return False
        await self.moderator.delete(CMS_CONTENT_PATH.format(content_id=content.content_id))
        logging.info(f"Deleted content {content.content_id}")
        return True


class ContentDetailPage:
    """
    State of one informational page screen, for either surface.

    Pass ``content_id`` for the CMS view or ``content_type`` and
    ``content_num`` for the end-user view.
    """

    LOAD_ERROR = "Failed to load the content."
    DELETE_ERROR = "Failed to delete the content."

    def __init__(self, service: ContentDetailService, content_id: Optional[int] = None,
                 content_type: Optional[str] = None, content_num: Optional[int] = None):
        self.service = service
        self.content_id = content_id
        self.content_type = content_type
        self.content_num = content_num

        self.content: Optional[ContentPage] = None
        self.attachment: Optional[AttachmentLink] = None
        self.loading = False
        self.error: Optional[str] = None
        self.alerts: List[str] = []
        self.deleted = False

    @property
    def not_found(self) -> bool:
        return not self.loading and self.error is None and self.content is None

    async def load(self) -> None:
        self.loading = True
        self.error = None
        try:
            if self.content_id is not None:
                content = await self.service.fetch_cms_content(self.content_id)
            else:
                content = await self.service.fetch_user_content(self.content_type, self.content_num)
        except TransportError as e:
            logging.error(f"Failed to load content: {e}")
            self.content, self.attachment, self.error = None, None, self.LOAD_ERROR
        else:
            self.content = content
            self.attachment = build_attachment_link(content.content_file_path) if content else None
        finally:
            self.loading = False

    async def delete(self, confirm: Callable[[str], bool]) -> bool:
        if self.content is None:
            return False
        try:
            self.deleted = await self.service.delete_content(self.content, confirm)
        except TransportError as e:
            logging.error(f"Failed to delete content {self.content.content_id}: {e}")
            self.alerts.append(self.DELETE_ERROR)
            return False
        return self.deleted

"""
Post detail retrieval and comment moderation.

A post detail screen shows one post with its comments. The post and the
comment list are fetched concurrently and independently; comment deletion is
an administrative action issued through a separate moderator client, and is
always followed by a full re-fetch of the comment list.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from pydantic import ValidationError

from ..api import ContentModerator, ContentReader, extract_item, extract_list
from ..attachments import build_attachment_link
from ..exceptions import TransportError
from ..models import AttachmentLink, Comment, Post

COMMENTS_PATH = "/api/boards/{board_id}/posts/{post_id}/comments"
COMMENT_PATH = COMMENTS_PATH + "/{comment_id}"

Confirm = Callable[[str], bool]


class Surface(str, Enum):
    """Which API surface a post is read from."""

    CMS = "/api/cms/boards/{board_id}/posts/{post_id}"
    USER = "/api/boards/{board_id}/posts/{post_id}"


class PostDetailService:
    """
    Fetches posts and comments and deletes comments.

    Reads go through ``reader`` (the post itself may go through a separate
    ``item_reader``, e.g. the CMS client on the administrative surface);
    deletes go through ``moderator``.
    """

    def __init__(self, reader: ContentReader, moderator: ContentModerator,
                 surface: Surface = Surface.USER,
                 item_reader: Optional[ContentReader] = None):
        self.reader = reader
        self.moderator = moderator
        self.surface = surface
        self.item_reader = item_reader or reader

    async def fetch_item(self, board_id: int, post_id: int) -> Optional[Post]:
        """
        Fetch one post.

        Returns:
            The post, or None when the response carries no usable record

        Raises:
            TransportError: If the request fails
        """
        payload = await self.item_reader.get_json(
            self.surface.value.format(board_id=board_id, post_id=post_id)
        )
        record = extract_item(payload)
        if record is None:
            return None
        try:
            return Post.model_validate(record)
        except ValidationError as e:
            logging.warning(f"Post {board_id}/{post_id} has an unexpected shape: {e}")
            return None

    async def fetch_comments(self, board_id: int, post_id: int) -> List[Comment]:
        """
        Fetch the comments of a post. Malformed records are skipped.

        Raises:
            TransportError: If the request fails
        """
        payload = await self.reader.get_json(COMMENTS_PATH.format(board_id=board_id, post_id=post_id))
        comments = []
        for row in extract_list(payload):
            try:
                comments.append(Comment.model_validate(row))
            except ValidationError as e:
                logging.warning(f"Skipping malformed comment on post {post_id}: {e}")
        return comments

    async def delete_comment(self, board_id: int, post_id: int, comment_id: int,
                             confirm: Confirm) -> bool:
        """
        Delete a comment after the user confirms.

        Args:
            confirm: Asked with a prompt; the request is only sent if it returns True

        Returns:
            True if the comment was deleted, False if the user declined

        Raises:
            TransportError: If the delete request fails
        """
        if not confirm("Are you sure you want to delete this comment?"):
            logging.info(f"Deletion of comment {comment_id} cancelled")
            return False
        await self.moderator.delete(
            COMMENT_PATH.format(board_id=board_id, post_id=post_id, comment_id=comment_id)
        )
        logging.info(f"Deleted comment {comment_id} on post {board_id}/{post_id}")
        return True


class PostDetailPage:
    """
    State of one post detail screen.

    Results that arrive after ``close`` are dropped. Every state update is a
    wholesale replacement, so late or repeated loads cannot leave the screen
    half-updated.
    """

    POST_ERROR = "An error occurred while loading the post."
    COMMENTS_ERROR = "Failed to load comments."
    DELETE_ERROR = "An error occurred while deleting the comment."

    def __init__(self, service: PostDetailService, board_id: Optional[int], post_id: Optional[int],
                 confirm: Confirm):
        self.service = service
        self.board_id = board_id
        self.post_id = post_id
        self.confirm = confirm

        self.post: Optional[Post] = None
        self.attachment: Optional[AttachmentLink] = None
        self.comments: List[Comment] = []
        self.loading = False
        self.error: Optional[str] = None
        self.comments_error: Optional[str] = None
        self.alerts: List[str] = []
        self._open = True

    @property
    def not_found(self) -> bool:
        return not self.loading and self.error is None and self.post is None

    @property
    def addressable(self) -> bool:
        """False while the route has not supplied both ids; no request is sent then."""
        return self.board_id is not None and self.post_id is not None

    def close(self) -> None:
        """Stop applying results of requests still in flight."""
        self._open = False

    async def load(self) -> None:
        """Fetch the post and its comments concurrently."""
        if not self.addressable:
            return
        self.loading = True
        self.error = None
        await asyncio.gather(self._load_post(), self.reload_comments())
        if self._open:
            self.loading = False

    async def _load_post(self) -> None:
        try:
            post = await self.service.fetch_item(self.board_id, self.post_id)
        except TransportError as e:
            logging.error(f"Failed to load post {self.board_id}/{self.post_id}: {e}")
            if self._open:
                self.post, self.attachment, self.error = None, None, self.POST_ERROR
            return
        if not self._open:
            logging.debug(f"Discarding post {self.post_id} loaded after close")
            return
        self.post = post
        self.attachment = build_attachment_link(post.post_file_path) if post else None

    async def reload_comments(self) -> None:
        """Replace the comment list with the server's current one."""
        if not self.addressable:
            return
        try:
            comments = await self.service.fetch_comments(self.board_id, self.post_id)
        except TransportError as e:
            logging.error(f"Failed to load comments of post {self.post_id}: {e}")
            if self._open:
                self.comments, self.comments_error = [], self.COMMENTS_ERROR
            return
        if not self._open:
            logging.debug(f"Discarding comments of post {self.post_id} loaded after close")
            return
        self.comments, self.comments_error = comments, None

    async def remove_comment(self, comment_id: int) -> bool:
        """
        Delete a comment and re-fetch the list.

        Returns:
            True if the comment was deleted
        """
        if not self.addressable:
            logging.warning(f"Cannot delete comment {comment_id} without a board and post id")
            return False
        try:
            deleted = await self.service.delete_comment(self.board_id, self.post_id, comment_id,
                                                        self.confirm)
        except TransportError as e:
            logging.error(f"Failed to delete comment {comment_id}: {e}")
            self.alerts.append(self.DELETE_ERROR)
            return False
        if deleted:
            await self.reload_comments()
        return deleted

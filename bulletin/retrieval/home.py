"""
Home page listings.

The home page shows a strip of facilities and the latest posts of the
notice board ("01") and the content board ("02"). Boards are found by code
in a freshly fetched board list; a code with no active board leaves its
section empty and no post request is made for it. The facility strip loads
on its own, so its failure never holds back the board sections.
"""

import asyncio
import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from ..api import ContentReader, extract_page
from ..attachments import resolve_image_url
from ..boards import BoardDirectory, find_active_board
from ..config import config
from ..exceptions import TransportError
from ..models import Board, Facility, PostSummary

BOARD_POSTS_PATH = "/api/boards/{board_id}/posts"


class BoardSection(BaseModel):
    """One board listing on the home page."""

    code: str = Field(..., description="Board code the section is configured for")
    title: str = Field(..., description="Board title, or the configured default")
    board_id: Optional[int] = Field(default=None, description="Resolved board id, None when unavailable")
    posts: List[PostSummary] = Field(default_factory=list)
    error: Optional[str] = Field(default=None)

    @property
    def available(self) -> bool:
        return self.board_id is not None

    def post_link(self, post_id: int) -> Optional[str]:
        """Route of a post's detail screen, None when the board is unavailable."""
        if self.board_id is None:
            return None
        return f"/board/{self.board_id}/posts/{post_id}"


class FacilityCard(BaseModel):
    """One facility tile on the home page."""

    facility_id: int
    name: str
    image_url: str = Field(..., description="Displayable image URL, or the default image")

    @property
    def reservation_link(self) -> str:
        return f"/facilities/{self.facility_id}"


def format_date_only(value: Optional[str]) -> str:
    """Cut a timestamp down to YYYY-MM-DD."""
    if not value:
        return ""
    return value[:10]


def summarize_posts(rows: Iterable[Any]) -> List[PostSummary]:
    """Turn raw post rows into list entries, skipping rows without an id."""
    summaries = []
    for row in rows:
        if not isinstance(row, dict) or row.get("postId") is None:
            logging.warning(f"Skipping post row without an id: {row!r}")
            continue
        summaries.append(PostSummary(
            post_id=row["postId"],
            post_title=row.get("postTitle") or "",
            member_name=row.get("memberName"),
            post_view_count=row.get("postViewCount"),
            date=format_date_only(row.get("postRegDate"))
        ))
    return summaries


def facility_cards(rows: Iterable[Any]) -> List[FacilityCard]:
    """Turn raw facility rows into tiles, skipping malformed rows."""
    cards = []
    for row in rows:
        try:
            facility = Facility.model_validate(row)
        except ValidationError as e:
            logging.warning(f"Skipping malformed facility record: {e}")
            continue
        cards.append(FacilityCard(
            facility_id=facility.facility_id,
            name=facility.facility_name,
            image_url=resolve_image_url(facility.facility_image_path, config.attachment_base_url,
                                        config.default_image, config.image_prefix)
        ))
    return cards


class HomePage:
    """
    State of the home screen's listings.
    """

    LOAD_ERROR = "Failed to load the board list."
    POSTS_ERROR = "Failed to load posts."

    def __init__(self, reader: ContentReader, sections: Optional[Dict[str, str]] = None,
                 page_size: Optional[int] = None, directory: Optional[BoardDirectory] = None,
                 facility_page_size: Optional[int] = None):
        """
        Initialize the page.

        Args:
            reader: Client used for the board list, post lists and facilities
            sections: Board code to default title (defaults to config value)
            page_size: Posts per section (defaults to config value)
            directory: Board directory (one is created over ``reader`` if omitted)
            facility_page_size: Facilities shown (defaults to config value)
        """
        self.reader = reader
        self.section_titles = sections if sections is not None else config.home_sections
        self.page_size = page_size or config.board_page_size
        self.facility_page_size = facility_page_size or config.facility_page_size
        self.directory = directory or BoardDirectory(reader)
        self.sections: List[BoardSection] = self._default_sections()
        self.facilities: List[FacilityCard] = []
        self.error: Optional[str] = None

    def _default_sections(self) -> List[BoardSection]:
        return [BoardSection(code=code, title=title) for code, title in self.section_titles.items()]

    async def load(self) -> List[BoardSection]:
        """Load the facility strip and the board sections concurrently."""
        await asyncio.gather(self.load_facilities(), self.load_sections())
        return self.sections

    async def load_facilities(self) -> List[FacilityCard]:
        """Fetch the first page of facilities. A failure is logged and leaves the strip empty."""
        try:
            payload = await self.reader.get_json(
                config.facilities_endpoint,
                params={"page": 0, "size": self.facility_page_size}
            )
        except TransportError as e:
            logging.error(f"Failed to load facilities: {e}")
            self.facilities = []
            return self.facilities

        self.facilities = facility_cards(extract_page(payload))
        return self.facilities

    async def load_sections(self) -> List[BoardSection]:
        """Resolve every configured board, then fetch their posts concurrently."""
        self.error = None
        try:
            boards = await self.directory.list_boards()
        except TransportError as e:
            logging.error(f"Home page data loading failed: {e}")
            self.error = self.LOAD_ERROR
            self.sections = self._default_sections()
            return self.sections

        self.sections = list(await asyncio.gather(*(
            self._load_section(code, title, find_active_board(code, boards))
            for code, title in self.section_titles.items()
        )))
        return self.sections

    async def _load_section(self, code: str, default_title: str, board: Optional[Board]) -> BoardSection:
        if board is None:
            return BoardSection(code=code, title=default_title)

        section = BoardSection(code=code, title=board.board_title or default_title,
                               board_id=board.board_id)
        try:
            payload = await self.reader.get_json(
                BOARD_POSTS_PATH.format(board_id=board.board_id),
                params={"page": 1, "size": self.page_size}
            )
        except TransportError as e:
            logging.error(f"Failed to load posts of board {board.board_id}: {e}")
            section.error = self.POSTS_ERROR
            return section

        section.posts = summarize_posts(extract_page(payload))
        return section

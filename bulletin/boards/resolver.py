"""
Board identifier resolution.

Screens address boards by their stable code ("01" for notices, "02" for
contents) while the API addresses them by a numeric id that changes whenever
a board is recreated. The code is resolved against the board list fetched on
the current page load.
"""

import logging
import time
from typing import Iterable, List, Optional

from pydantic import ValidationError

from ..api import ContentReader, extract_list
from ..config import config
from ..models import Board


def find_active_board(category_code: str, boards: Iterable[Board]) -> Optional[Board]:
    """Return the first active board whose code equals ``category_code``."""
    for board in boards:
        if board.board_num == category_code and board.active:
            return board
    return None


def resolve_container_id(category_code: str, boards: Iterable[Board]) -> Optional[int]:
    """
    Map a board code to the currently valid board id.

    Args:
        category_code: Stable board code
        boards: The board list of the current page load

    Returns:
        The id of the first active board with that code, or None
    """
    board = find_active_board(category_code, boards)
    return board.board_id if board else None


class BoardDirectory:
    """
    Fetches the board list for a page load and resolves board codes against it.

    By default every call to ``list_boards`` refetches, so activating or
    deactivating a board shows up on the very next page load. ``cache_ttl``
    allows reusing a fetched list for that many seconds; keep it below the
    time between page loads if that guarantee matters.
    """

    def __init__(self, reader: ContentReader, cache_ttl: Optional[float] = None,
                 path: str = "/api/boards"):
        self.reader = reader
        self.cache_ttl = config.board_cache_ttl if cache_ttl is None else cache_ttl
        self.path = path
        self._boards: Optional[List[Board]] = None
        self._fetched_at = 0.0

    async def list_boards(self) -> List[Board]:
        """
        Fetch all boards.

        Raises:
            TransportError: If the board list cannot be fetched
        """
        if self._boards is not None and self.cache_ttl > 0 \
                and time.monotonic() - self._fetched_at < self.cache_ttl:
            return self._boards

        payload = await self.reader.get_json(self.path)
        boards = []
        for row in extract_list(payload):
            try:
                boards.append(Board.model_validate(row))
            except ValidationError as e:
                logging.warning(f"Skipping malformed board record: {e}")

        self._boards = boards
        self._fetched_at = time.monotonic()
        logging.info(f"Fetched {len(boards)} boards")
        return boards

    async def resolve(self, category_code: str) -> Optional[Board]:
        """Return the active board for a code, or None when it is unavailable."""
        board = find_active_board(category_code, await self.list_boards())
        if board is None:
            logging.info(f"No active board for code {category_code}")
        return board

    async def resolve_id(self, category_code: str) -> Optional[int]:
        """Return the current board id for a code, or None when it is unavailable."""
        return resolve_container_id(category_code, await self.list_boards())

    def invalidate(self) -> None:
        """Drop any reused board list."""
        self._boards = None

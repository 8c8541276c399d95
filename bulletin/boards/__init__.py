"""Board lookup."""

from .resolver import BoardDirectory, find_active_board, resolve_container_id

__all__ = ["BoardDirectory", "find_active_board", "resolve_container_id"]

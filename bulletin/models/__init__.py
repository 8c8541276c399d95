"""Data models for Bulletin."""

from .document import (
    Block,
    BlockType,
    Document,
    InlineRun,
    Position,
    RunKind,
    STYLE_ORDER,
)
from .content import AttachmentLink, Board, Comment, ContentPage, Facility, Post, PostSummary

__all__ = [
    "Block",
    "BlockType",
    "Document",
    "InlineRun",
    "Position",
    "RunKind",
    "STYLE_ORDER",
    "AttachmentLink",
    "Board",
    "Comment",
    "ContentPage",
    "Facility",
    "Post",
    "PostSummary"
]
